"""Ambulance request lifecycle.

Holds the status sets each actor-facing operation applies, and how requests
are ranked for dispatch.

    assign to self:    pending (unassigned) -> assigned
    update status:     any -> assigned | on_the_way | completed | cancelled
    forward:           any -> forwarded_to_hospital
    hospital respond:  forwarded_to_hospital -> hospital_accepted | hospital_rejected

Only the self-assign guard looks at the current status. The status endpoint
checks the target alone, and the admin override
(``AmbulanceService.update_request``) accepts any known status.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, TypeVar

from ..models.ambulance import AmbulancePriority, AmbulanceStatus, HospitalResponse

# Statuses staff (or an admin) may set through the status endpoint.
STATUS_UPDATE_TARGETS = frozenset(
    {
        AmbulanceStatus.ASSIGNED,
        AmbulanceStatus.ON_THE_WAY,
        AmbulanceStatus.COMPLETED,
        AmbulanceStatus.CANCELLED,
    }
)

HOSPITAL_DECISIONS = frozenset({HospitalResponse.ACCEPTED, HospitalResponse.REJECTED})

_RESPONSE_STATUS = {
    HospitalResponse.ACCEPTED: AmbulanceStatus.HOSPITAL_ACCEPTED,
    HospitalResponse.REJECTED: AmbulanceStatus.HOSPITAL_REJECTED,
}

PRIORITY_RANK = {
    AmbulancePriority.CRITICAL: 1,
    AmbulancePriority.HIGH: 2,
    AmbulancePriority.NORMAL: 3,
    AmbulancePriority.LOW: 4,
}
DEFAULT_PRIORITY_RANK = PRIORITY_RANK[AmbulancePriority.NORMAL]


class _Assignable(Protocol):
    status: AmbulanceStatus
    assigned_staff_id: int | None


class _Ranked(Protocol):
    priority: str | None
    created_at: datetime | None


_R = TypeVar("_R", bound=_Ranked)


def parse_status(value: str | None) -> AmbulanceStatus | None:
    if value is None:
        return None
    try:
        return AmbulanceStatus(value)
    except ValueError:
        return None


def parse_priority(value: str | None) -> AmbulancePriority | None:
    if value is None:
        return None
    try:
        return AmbulancePriority(value)
    except ValueError:
        return None


def parse_hospital_decision(value: str | None) -> HospitalResponse | None:
    if value is None:
        return None
    try:
        decision = HospitalResponse(value)
    except ValueError:
        return None
    return decision if decision in HOSPITAL_DECISIONS else None


def can_self_assign(request: _Assignable) -> bool:
    return (
        request.status == AmbulanceStatus.PENDING
        and request.assigned_staff_id is None
    )


def is_status_update_target(status: AmbulanceStatus) -> bool:
    return status in STATUS_UPDATE_TARGETS


def status_for_decision(decision: HospitalResponse) -> AmbulanceStatus:
    return _RESPONSE_STATUS[decision]


def priority_rank(priority: str | AmbulancePriority | None) -> int:
    parsed = priority if isinstance(priority, AmbulancePriority) else parse_priority(priority)
    if parsed is None:
        return DEFAULT_PRIORITY_RANK
    return PRIORITY_RANK[parsed]


def sort_for_dispatch(rows: list[_R]) -> list[_R]:
    """Priority rank ascending, newest first within the same rank."""
    by_newest = sorted(
        rows,
        key=lambda row: row.created_at or datetime.min,
        reverse=True,
    )
    return sorted(by_newest, key=lambda row: priority_rank(row.priority))
