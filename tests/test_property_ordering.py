from collections import Counter
from dataclasses import dataclass
from datetime import datetime

from hypothesis import given, strategies as st

from dispatch_backend.models import AmbulancePriority
from dispatch_backend.services.lifecycle import priority_rank, sort_for_dispatch


@dataclass(frozen=True)
class Row:
    id: int
    priority: AmbulancePriority
    created_at: datetime


rows_strategy = st.lists(
    st.builds(
        Row,
        id=st.integers(min_value=1, max_value=10_000),
        priority=st.sampled_from(list(AmbulancePriority)),
        created_at=st.datetimes(min_value=datetime(2020, 1, 1), max_value=datetime(2030, 12, 31)),
    ),
    max_size=40,
)


@given(rows=rows_strategy)
def test_dispatch_order_is_rank_then_newest(rows):
    ordered = sort_for_dispatch(rows)

    assert Counter(ordered) == Counter(rows)
    for earlier, later in zip(ordered, ordered[1:]):
        earlier_rank = priority_rank(earlier.priority)
        later_rank = priority_rank(later.priority)
        assert earlier_rank <= later_rank
        if earlier_rank == later_rank:
            assert earlier.created_at >= later.created_at
