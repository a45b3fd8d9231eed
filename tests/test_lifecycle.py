from types import SimpleNamespace

from dispatch_backend.models import AmbulancePriority, AmbulanceStatus, HospitalResponse
from dispatch_backend.services import lifecycle


def test_status_update_targets():
    assert lifecycle.STATUS_UPDATE_TARGETS == {
        AmbulanceStatus.ASSIGNED,
        AmbulanceStatus.ON_THE_WAY,
        AmbulanceStatus.COMPLETED,
        AmbulanceStatus.CANCELLED,
    }
    assert not lifecycle.is_status_update_target(AmbulanceStatus.FORWARDED_TO_HOSPITAL)
    assert lifecycle.parse_status("teleported") is None


def test_can_self_assign():
    assert lifecycle.can_self_assign(SimpleNamespace(status=AmbulanceStatus.PENDING, assigned_staff_id=None))
    assert not lifecycle.can_self_assign(SimpleNamespace(status=AmbulanceStatus.PENDING, assigned_staff_id=7))
    assert not lifecycle.can_self_assign(SimpleNamespace(status=AmbulanceStatus.ASSIGNED, assigned_staff_id=None))


def test_hospital_decisions_map_to_statuses():
    assert lifecycle.status_for_decision(HospitalResponse.ACCEPTED) == AmbulanceStatus.HOSPITAL_ACCEPTED
    assert lifecycle.status_for_decision(HospitalResponse.REJECTED) == AmbulanceStatus.HOSPITAL_REJECTED
    assert lifecycle.parse_hospital_decision("pending") is None


def test_priority_rank_defaults_to_normal():
    assert lifecycle.priority_rank("critical") == 1
    assert lifecycle.priority_rank(AmbulancePriority.LOW) == 4
    assert lifecycle.priority_rank("unheard-of") == lifecycle.priority_rank(AmbulancePriority.NORMAL)
    assert lifecycle.priority_rank(None) == 3
