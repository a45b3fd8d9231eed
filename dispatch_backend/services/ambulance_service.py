from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import Request
from sqlalchemy.orm import Session

from ..auth import Actor, require_role
from ..errors import BadRequest, Forbidden, NotFound
from ..models.ambulance import AmbulancePriority, AmbulanceRequest, AmbulanceStatus, HospitalResponse
from ..models.audit import AuditAction
from ..models.user import CustomerProfile, Hospital, UserRole
from . import ambulance_queries as queries
from . import lifecycle
from .audit_logger import create_audit_event
from .notification_engine import NotificationEngine

logger = logging.getLogger(__name__)

ENTITY_TYPE = "AmbulanceRequest"


def _blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


class AmbulanceService:
    """Lifecycle manager for ambulance requests.

    Every public method gates on the actor's role first, then validates input,
    then touches the store. A failed check raises before anything is written.
    """

    def __init__(self, db: Session, request: Request | None = None):
        self.db = db
        self.request = request

    # -- customer ---------------------------------------------------------

    def create_request(
        self,
        actor: Actor,
        *,
        pickup_address: str | None,
        destination_address: str | None,
        emergency_type: str | None,
        contact_number: str | None,
        customer_condition: str | None = None,
        priority: str | None = None,
    ) -> int:
        require_role(actor, UserRole.CUSTOMER, detail="Only customers can request ambulance services")

        required = (pickup_address, destination_address, emergency_type, contact_number)
        if any(_blank(value) for value in required):
            raise BadRequest("Missing required fields")

        if _blank(priority):
            parsed_priority = AmbulancePriority.NORMAL
        else:
            parsed_priority = lifecycle.parse_priority(priority)
            if parsed_priority is None:
                raise BadRequest("Invalid priority provided")

        profile = self.db.get(CustomerProfile, actor.user_id)
        ambulance = AmbulanceRequest(
            customer_user_id=actor.user_id,
            pickup_address=pickup_address,
            destination_address=destination_address,
            emergency_type=emergency_type,
            customer_condition=customer_condition or None,
            contact_number=contact_number,
            priority=parsed_priority,
            status=AmbulanceStatus.PENDING,
            is_read=False,
            customer_state=getattr(profile, "state", None),
            customer_district=getattr(profile, "district", None),
        )
        self.db.add(ambulance)
        self.db.flush()

        self._audit(actor, AuditAction.CREATE, ambulance, {"priority": parsed_priority.value})
        self.db.commit()

        logger.info("Ambulance request %s created for user %s", ambulance.id, actor.user_id)
        return ambulance.id

    def list_customer_requests(self, actor: Actor) -> list[queries.CustomerRequestView]:
        require_role(actor, UserRole.CUSTOMER, detail="Only customers can view their own requests")
        requests = queries.fetch_customer_requests(self.db, actor.user_id)
        logger.info("Found %s ambulance requests for user %s", len(requests), actor.user_id)
        return requests

    # -- staff / admin ----------------------------------------------------

    def list_requests(self, actor: Actor, unread_only: bool = False) -> queries.StaffListing:
        require_role(
            actor,
            UserRole.STAFF,
            UserRole.ADMIN,
            detail="Only staff and admin can view ambulance requests",
        )
        return queries.fetch_staff_listing(self.db, unread_only=unread_only)

    def update_request(
        self,
        actor: Actor,
        request_id: int,
        *,
        status: str | None,
        assigned_staff_id: int | None = None,
        notes: str | None = None,
    ) -> None:
        """Administrative override: writes status, assignee and notes as given.

        No transition guard and no assignee check apply here, unlike
        :meth:`update_status`.
        """
        require_role(
            actor,
            UserRole.STAFF,
            UserRole.ADMIN,
            detail="Only staff and admin can update ambulance requests",
        )
        new_status = lifecycle.parse_status(status)
        if new_status is None:
            raise BadRequest("Invalid status provided")

        ambulance = self._get_request(request_id)
        ambulance.status = new_status
        ambulance.assigned_staff_id = assigned_staff_id or None
        ambulance.notes = notes or None

        self._audit(
            actor,
            AuditAction.UPDATE,
            ambulance,
            {"status": new_status.value, "assigned_staff_id": ambulance.assigned_staff_id},
        )
        self.db.commit()
        logger.info("Ambulance request %s updated by user %s", request_id, actor.user_id)

    def assign_to_self(self, actor: Actor, request_id: int) -> None:
        require_role(
            actor,
            UserRole.STAFF,
            detail="Only staff can assign ambulance requests to themselves",
        )
        ambulance = self._get_request(request_id)
        if not lifecycle.can_self_assign(ambulance):
            if ambulance.status != AmbulanceStatus.PENDING:
                raise BadRequest("Request is not in pending status")
            raise BadRequest("Request is already assigned to another staff member")

        ambulance.status = AmbulanceStatus.ASSIGNED
        ambulance.assigned_staff_id = actor.user_id

        self._audit(actor, AuditAction.ASSIGN, ambulance, {"assigned_staff_id": actor.user_id})
        self.db.commit()
        logger.info("Ambulance request %s assigned to staff %s", request_id, actor.user_id)

    def update_status(
        self,
        actor: Actor,
        request_id: int,
        *,
        status: str | None,
        notes: str | None = None,
    ) -> None:
        require_role(
            actor,
            UserRole.STAFF,
            UserRole.ADMIN,
            detail="Only staff and admin can update ambulance request status",
        )
        new_status = lifecycle.parse_status(status)
        if new_status is None or not lifecycle.is_status_update_target(new_status):
            raise BadRequest("Invalid status provided")

        ambulance = self._get_request(request_id)
        if actor.role == UserRole.STAFF and ambulance.assigned_staff_id != actor.user_id:
            raise Forbidden("You can only update requests assigned to you")

        previous = ambulance.status
        ambulance.status = new_status
        if notes is not None:
            ambulance.notes = notes

        self._audit(
            actor,
            AuditAction.STATUS_CHANGE,
            ambulance,
            {"from": AmbulanceStatus(previous).value, "to": new_status.value},
        )
        self.db.commit()
        logger.info(
            "Ambulance request %s status updated to %s by user %s",
            request_id,
            new_status.value,
            actor.user_id,
        )

    # -- admin ------------------------------------------------------------

    def forward_to_hospital(self, actor: Actor, request_id: int, hospital_user_id: int | None) -> None:
        require_role(actor, UserRole.ADMIN, detail="Only admins can forward ambulance requests")
        if not hospital_user_id:
            raise BadRequest("Hospital user ID is required")

        ambulance = self._get_request(request_id)
        hospital = self.db.get(Hospital, hospital_user_id)
        if hospital is None:
            raise NotFound("Hospital not found")

        ambulance.forwarded_to_hospital_id = hospital.user_id
        ambulance.forwarded_by_admin_id = actor.user_id
        ambulance.status = AmbulanceStatus.FORWARDED_TO_HOSPITAL
        ambulance.is_read = False
        ambulance.hospital_response = HospitalResponse.PENDING
        self.db.flush()

        NotificationEngine(self.db).notify_forwarded(ambulance, hospital.user_id)
        self._audit(actor, AuditAction.FORWARD, ambulance, {"hospital_user_id": hospital.user_id})
        self.db.commit()
        logger.info(
            "Ambulance request %s forwarded to hospital %s by admin %s",
            request_id,
            hospital.user_id,
            actor.user_id,
        )

    def mark_as_read(self, actor: Actor, request_id: int) -> None:
        require_role(actor, UserRole.ADMIN, detail="Only admins can mark requests")
        ambulance = self._get_request(request_id)
        ambulance.is_read = True
        self._audit(actor, AuditAction.MARK_READ, ambulance, None)
        self.db.commit()
        logger.info("Ambulance request %s marked as read by admin %s", request_id, actor.user_id)

    def list_hospitals_by_region(
        self, actor: Actor, state: str | None, district: str | None = None
    ) -> list[queries.HospitalSummary]:
        require_role(actor, UserRole.ADMIN, detail="Only admins can view hospitals")
        if _blank(state):
            raise BadRequest("State is required")
        return queries.fetch_hospitals_in_region(
            self.db, state.strip(), district.strip() if district else None
        )

    # -- hospital ---------------------------------------------------------

    def hospital_respond(
        self,
        actor: Actor,
        request_id: int,
        *,
        response: str | None,
        notes: str | None = None,
    ) -> HospitalResponse:
        require_role(actor, UserRole.HOSPITAL, detail="Only hospitals can respond to requests")
        decision = lifecycle.parse_hospital_decision(response)
        if decision is None:
            raise BadRequest("Response must be accepted or rejected")

        ambulance = self.db.get(AmbulanceRequest, request_id)
        if ambulance is None or ambulance.forwarded_to_hospital_id != actor.user_id:
            raise NotFound("Request not found or not forwarded to your hospital")

        ambulance.hospital_response = decision
        ambulance.hospital_response_notes = notes or None
        ambulance.hospital_response_date = datetime.now(timezone.utc)
        ambulance.status = lifecycle.status_for_decision(decision)
        self.db.flush()

        NotificationEngine(self.db).notify_hospital_response(ambulance, decision)
        self._audit(actor, AuditAction.HOSPITAL_RESPONSE, ambulance, {"response": decision.value})
        self.db.commit()
        logger.info(
            "Hospital %s responded %s to ambulance request %s",
            actor.user_id,
            decision.value,
            request_id,
        )
        return decision

    def list_forwarded_requests(self, actor: Actor) -> list[queries.ForwardedRequestView]:
        require_role(
            actor,
            UserRole.HOSPITAL,
            detail="Only hospitals can view their forwarded requests",
        )
        return queries.fetch_forwarded_requests(self.db, actor.user_id)

    # -- helpers ----------------------------------------------------------

    def _get_request(self, request_id: int) -> AmbulanceRequest:
        ambulance = self.db.get(AmbulanceRequest, request_id)
        if ambulance is None:
            raise NotFound("Ambulance request not found")
        return ambulance

    def _audit(self, actor: Actor, action: AuditAction, ambulance: AmbulanceRequest, details: dict | None) -> None:
        create_audit_event(
            self.db,
            actor=str(actor.user_id),
            action=action,
            entity_type=ENTITY_TYPE,
            entity_id=str(ambulance.id),
            details=details,
            request=self.request,
            commit=False,
        )
