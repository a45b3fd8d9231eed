import logging

import pytest

from dispatch_backend.errors import BadRequest, Forbidden, NotFound
from dispatch_backend.models import (
    AMBULANCE_NOTIFICATION_TYPE,
    AmbulanceRequest,
    AmbulanceStatus,
    HospitalResponse,
    HospitalStatus,
    Notification,
)


@pytest.fixture
def forwarding_setup(make_user, make_request):
    customer = make_user("customer", state="Kerala")
    admin = make_user("admin")
    hospital = make_user("hospital", state="Kerala", hospital_name="Amrita")
    request = make_request(customer, is_read=True)
    return customer, admin, hospital, request


def test_forward_sets_fields_and_notifies(service, forwarding_setup, actor_for, db_session):
    customer, admin, hospital, request = forwarding_setup

    service.forward_to_hospital(actor_for(admin), request.id, hospital.id)

    refreshed = db_session.get(AmbulanceRequest, request.id)
    assert refreshed.forwarded_to_hospital_id == hospital.id
    assert refreshed.forwarded_by_admin_id == admin.id
    assert refreshed.status == AmbulanceStatus.FORWARDED_TO_HOSPITAL
    assert refreshed.is_read is False
    assert refreshed.hospital_response == HospitalResponse.PENDING

    notifications = db_session.query(Notification).order_by(Notification.id).all()
    assert len(notifications) == 2
    assert {n.user_id for n in notifications} == {hospital.id, customer.id}
    assert all(n.type == AMBULANCE_NOTIFICATION_TYPE for n in notifications)
    assert all(n.related_id == request.id for n in notifications)


def test_forward_to_unknown_hospital(service, forwarding_setup, actor_for, db_session):
    _, admin, _, request = forwarding_setup

    with pytest.raises(NotFound):
        service.forward_to_hospital(actor_for(admin), request.id, 9999)

    assert db_session.query(Notification).count() == 0
    refreshed = db_session.get(AmbulanceRequest, request.id)
    assert refreshed.status == AmbulanceStatus.PENDING
    assert refreshed.forwarded_to_hospital_id is None


def test_forward_to_non_hospital_user(service, forwarding_setup, make_user, actor_for, db_session):
    _, admin, _, request = forwarding_setup
    staff = make_user("staff")
    with pytest.raises(NotFound):
        service.forward_to_hospital(actor_for(admin), request.id, staff.id)
    assert db_session.query(Notification).count() == 0


def test_forward_requires_hospital_id(service, forwarding_setup, actor_for):
    _, admin, _, request = forwarding_setup
    with pytest.raises(BadRequest):
        service.forward_to_hospital(actor_for(admin), request.id, None)


def test_forward_unknown_request(service, forwarding_setup, actor_for):
    _, admin, hospital, _ = forwarding_setup
    with pytest.raises(NotFound):
        service.forward_to_hospital(actor_for(admin), 777, hospital.id)


@pytest.mark.parametrize("role", ["customer", "staff", "hospital"])
def test_forward_is_admin_only(service, forwarding_setup, make_user, actor_for, db_session, role):
    _, _, hospital, request = forwarding_setup
    user = make_user(role)
    with pytest.raises(Forbidden):
        service.forward_to_hospital(actor_for(user), request.id, hospital.id)
    assert db_session.query(Notification).count() == 0


def test_hospital_accepts(service, forwarding_setup, actor_for, db_session):
    customer, admin, hospital, request = forwarding_setup
    service.forward_to_hospital(actor_for(admin), request.id, hospital.id)

    decision = service.hospital_respond(
        actor_for(hospital), request.id, response="accepted", notes="Bed 4 ready"
    )

    assert decision == HospitalResponse.ACCEPTED
    refreshed = db_session.get(AmbulanceRequest, request.id)
    assert refreshed.status == AmbulanceStatus.HOSPITAL_ACCEPTED
    assert refreshed.hospital_response == HospitalResponse.ACCEPTED
    assert refreshed.hospital_response_notes == "Bed 4 ready"
    assert refreshed.hospital_response_date is not None

    responses = db_session.query(Notification).filter(Notification.title == "Hospital Response").all()
    assert len(responses) == 2
    assert {n.user_id for n in responses} == {customer.id, admin.id}


def test_hospital_rejects(service, forwarding_setup, actor_for, db_session):
    _, admin, hospital, request = forwarding_setup
    service.forward_to_hospital(actor_for(admin), request.id, hospital.id)

    service.hospital_respond(actor_for(hospital), request.id, response="rejected")

    refreshed = db_session.get(AmbulanceRequest, request.id)
    assert refreshed.status == AmbulanceStatus.HOSPITAL_REJECTED
    customer_note = (
        db_session.query(Notification)
        .filter(Notification.user_id == request.customer_user_id, Notification.title == "Hospital Response")
        .one()
    )
    assert "rejected" in customer_note.message


def test_response_from_other_hospital(service, forwarding_setup, make_user, actor_for, db_session):
    _, admin, hospital, request = forwarding_setup
    other = make_user("hospital", state="Kerala")
    service.forward_to_hospital(actor_for(admin), request.id, hospital.id)

    with pytest.raises(NotFound):
        service.hospital_respond(actor_for(other), request.id, response="accepted")

    refreshed = db_session.get(AmbulanceRequest, request.id)
    assert refreshed.status == AmbulanceStatus.FORWARDED_TO_HOSPITAL
    assert db_session.query(Notification).count() == 2


@pytest.mark.parametrize("response", ["pending", "maybe", None])
def test_response_must_be_a_decision(service, forwarding_setup, actor_for, response):
    _, admin, hospital, request = forwarding_setup
    service.forward_to_hospital(actor_for(admin), request.id, hospital.id)
    with pytest.raises(BadRequest):
        service.hospital_respond(actor_for(hospital), request.id, response=response)


def test_legacy_forward_notifies_all_admins(service, forwarding_setup, make_user, actor_for, db_session):
    customer, admin, hospital, request = forwarding_setup
    second_admin = make_user("admin")
    request.forwarded_to_hospital_id = hospital.id
    request.status = AmbulanceStatus.FORWARDED_TO_HOSPITAL
    db_session.commit()

    service.hospital_respond(actor_for(hospital), request.id, response="accepted")

    recipients = {n.user_id for n in db_session.query(Notification).all()}
    assert recipients == {customer.id, admin.id, second_admin.id}


def test_mark_as_read(service, make_user, make_request, actor_for, db_session):
    customer = make_user("customer")
    admin = make_user("admin")
    request = make_request(customer)

    service.mark_as_read(actor_for(admin), request.id)

    assert db_session.get(AmbulanceRequest, request.id).is_read is True


def test_mark_as_read_is_logged(service, make_user, make_request, actor_for, caplog):
    customer = make_user("customer")
    admin = make_user("admin")
    request = make_request(customer)

    with caplog.at_level(logging.INFO, logger="dispatch_backend.services.ambulance_service"):
        service.mark_as_read(actor_for(admin), request.id)

    assert f"Ambulance request {request.id} marked as read by admin {admin.id}" in caplog.messages


def test_mark_as_read_admin_only(service, make_user, make_request, actor_for):
    customer = make_user("customer")
    staff = make_user("staff")
    request = make_request(customer)
    with pytest.raises(Forbidden):
        service.mark_as_read(actor_for(staff), request.id)


def test_mark_unknown_request_as_read(service, make_user, actor_for):
    admin = make_user("admin")
    with pytest.raises(NotFound):
        service.mark_as_read(actor_for(admin), 31337)


def test_hospitals_by_region(service, make_user, actor_for):
    admin = make_user("admin")
    make_user("hospital", state="Kerala", district="Kochi", hospital_name="Zion Care")
    make_user("hospital", state="Kerala", district="Thrissur", hospital_name="Aster")
    make_user("hospital", state="Kerala", hospital_name="Closed Clinic", hospital_status=HospitalStatus.INACTIVE)
    make_user("hospital", state="Goa", hospital_name="Beach Medical")

    hospitals = service.list_hospitals_by_region(actor_for(admin), "Kerala")
    assert [h.name for h in hospitals] == ["Aster", "Zion Care"]

    in_district = service.list_hospitals_by_region(actor_for(admin), "Kerala", "Kochi")
    assert [h.name for h in in_district] == ["Zion Care"]


def test_hospitals_by_region_requires_state(service, make_user, actor_for):
    admin = make_user("admin")
    with pytest.raises(BadRequest):
        service.list_hospitals_by_region(actor_for(admin), "  ")


def test_hospitals_by_region_admin_only(service, make_user, actor_for):
    staff = make_user("staff")
    with pytest.raises(Forbidden):
        service.list_hospitals_by_region(actor_for(staff), "Kerala")


def test_forward_without_in_app_notifications(service, forwarding_setup, actor_for, db_session, monkeypatch):
    from dispatch_backend.config import get_settings

    _, admin, hospital, request = forwarding_setup
    monkeypatch.setenv("IN_APP_NOTIFICATIONS_ENABLED", "false")
    get_settings.cache_clear()
    try:
        service.forward_to_hospital(actor_for(admin), request.id, hospital.id)
    finally:
        get_settings.cache_clear()

    assert db_session.get(AmbulanceRequest, request.id).status == AmbulanceStatus.FORWARDED_TO_HOSPITAL
    assert db_session.query(Notification).count() == 0


def test_forward_from_any_status(service, make_user, make_request, actor_for, db_session):
    customer = make_user("customer")
    admin = make_user("admin")
    hospital = make_user("hospital")
    request = make_request(customer, status=AmbulanceStatus.ON_THE_WAY)

    service.forward_to_hospital(actor_for(admin), request.id, hospital.id)

    refreshed = db_session.get(AmbulanceRequest, request.id)
    assert refreshed.status == AmbulanceStatus.FORWARDED_TO_HOSPITAL
    assert refreshed.forwarded_to_hospital_id == hospital.id
