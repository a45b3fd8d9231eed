"""Read-side projections for ambulance requests.

Each listing maps named columns onto a frozen dataclass. The staff/admin
listing comes in two column sets: deployments that predate hospital forwarding
lack the forwarding and location columns, so the column set is detected once
per engine. If the extended query still fails at run time that call falls back
to the reduced one; the detected set only changes when a fresh inspection
confirms the columns are gone.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any

from sqlalchemy import inspect, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, aliased

from ..config import get_settings
from ..models.ambulance import AmbulancePriority, AmbulanceRequest, AmbulanceStatus, HospitalResponse
from ..models.user import CustomerProfile, Hospital, HospitalStatus, User
from .lifecycle import sort_for_dispatch

logger = logging.getLogger(__name__)


class ListingSchema(str, enum.Enum):
    EXTENDED = "extended"
    REDUCED = "reduced"


# Columns the extended staff listing reads beyond the reduced set
EXTENDED_REQUEST_COLUMNS = frozenset(
    {
        "is_read",
        "forwarded_to_hospital_id",
        "hospital_response",
        "customer_state",
        "customer_district",
    }
)
EXTENDED_CUSTOMER_COLUMNS = frozenset({"signup_lat", "signup_lng"})

# Detected column set per engine
_listing_schemas: dict[Engine, ListingSchema] = {}


@dataclass(frozen=True)
class StaffRequestView:
    id: int
    customer_user_id: int
    pickup_address: str
    destination_address: str
    emergency_type: str
    customer_condition: str | None
    contact_number: str
    status: AmbulanceStatus
    priority: AmbulancePriority
    assigned_staff_id: int | None
    notes: str | None
    created_at: datetime
    patient_name: str
    patient_email: str
    patient_phone: str | None
    customer_signup_address: str | None
    assigned_staff_name: str | None
    assigned_staff_phone: str | None
    # Extended column set only
    is_read: bool | None = None
    forwarded_to_hospital_id: int | None = None
    hospital_response: HospitalResponse | None = None
    customer_state: str | None = None
    customer_district: str | None = None
    customer_signup_lat: float | None = None
    customer_signup_lng: float | None = None
    hospital_name: str | None = None
    hospital_address: str | None = None


@dataclass(frozen=True)
class StaffListing:
    column_set: ListingSchema
    items: list[StaffRequestView]


@dataclass(frozen=True)
class CustomerRequestView:
    id: int
    customer_user_id: int
    pickup_address: str
    destination_address: str
    emergency_type: str
    customer_condition: str | None
    contact_number: str
    status: AmbulanceStatus
    priority: AmbulancePriority
    assigned_staff_id: int | None
    notes: str | None
    created_at: datetime
    updated_at: datetime
    assigned_staff_name: str | None
    assigned_staff_phone: str | None


@dataclass(frozen=True)
class ForwardedRequestView:
    id: int
    pickup_address: str
    emergency_type: str
    customer_condition: str | None
    contact_number: str
    status: AmbulanceStatus
    priority: AmbulancePriority
    hospital_response: HospitalResponse | None
    hospital_response_notes: str | None
    hospital_response_date: datetime | None
    created_at: datetime
    updated_at: datetime
    patient_name: str
    patient_email: str
    patient_phone: str | None


@dataclass(frozen=True)
class HospitalSummary:
    user_id: int
    name: str
    account_name: str
    address: str | None
    state: str
    district: str | None
    number_of_ambulances: int


def view_to_dict(view: Any) -> dict[str, Any]:
    payload = {}
    for field in fields(view):
        value = getattr(view, field.name)
        if isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, enum.Enum):
            value = value.value
        payload[field.name] = value
    return payload


def _from_row(view_cls, row) -> Any:
    mapping = row._mapping
    return view_cls(**{field.name: mapping[field.name] for field in fields(view_cls) if field.name in mapping})


def reset_listing_schema() -> None:
    _listing_schemas.clear()


def _inspect_listing_schema(db: Session) -> ListingSchema:
    inspector = inspect(db.get_bind())
    tables = set(inspector.get_table_names())
    if not {"ambulance_requests", "customers", "hospitals"} <= tables:
        return ListingSchema.REDUCED
    request_cols = {col["name"] for col in inspector.get_columns("ambulance_requests")}
    customer_cols = {col["name"] for col in inspector.get_columns("customers")}
    if EXTENDED_REQUEST_COLUMNS <= request_cols and EXTENDED_CUSTOMER_COLUMNS <= customer_cols:
        return ListingSchema.EXTENDED
    return ListingSchema.REDUCED


def detect_listing_schema(db: Session) -> ListingSchema:
    engine = db.get_bind().engine
    schema = _listing_schemas.get(engine)
    if schema is not None:
        return schema

    configured = get_settings().AMBULANCE_LISTING_SCHEMA.lower()
    if configured in (ListingSchema.EXTENDED.value, ListingSchema.REDUCED.value):
        schema = ListingSchema(configured)
    else:
        schema = _inspect_listing_schema(db)
        logger.info("Ambulance listing column set detected: %s", schema.value)

    _listing_schemas[engine] = schema
    return schema


def _reduced_columns(staff):
    return [
        AmbulanceRequest.id,
        AmbulanceRequest.customer_user_id,
        AmbulanceRequest.pickup_address,
        AmbulanceRequest.destination_address,
        AmbulanceRequest.emergency_type,
        AmbulanceRequest.customer_condition,
        AmbulanceRequest.contact_number,
        AmbulanceRequest.status,
        AmbulanceRequest.priority,
        AmbulanceRequest.assigned_staff_id,
        AmbulanceRequest.notes,
        AmbulanceRequest.created_at,
        User.full_name.label("patient_name"),
        User.email.label("patient_email"),
        User.phone.label("patient_phone"),
        CustomerProfile.address.label("customer_signup_address"),
        staff.full_name.label("assigned_staff_name"),
        staff.phone.label("assigned_staff_phone"),
    ]


def _staff_base_query(columns, staff):
    return (
        select(*columns)
        .join(User, AmbulanceRequest.customer_user_id == User.id)
        .outerjoin(CustomerProfile, User.id == CustomerProfile.user_id)
        .outerjoin(staff, AmbulanceRequest.assigned_staff_id == staff.id)
    )


def _fetch_extended(db: Session) -> list[StaffRequestView]:
    staff = aliased(User, name="staff")
    columns = _reduced_columns(staff) + [
        AmbulanceRequest.is_read,
        AmbulanceRequest.forwarded_to_hospital_id,
        AmbulanceRequest.hospital_response,
        AmbulanceRequest.customer_state,
        AmbulanceRequest.customer_district,
        CustomerProfile.signup_lat.label("customer_signup_lat"),
        CustomerProfile.signup_lng.label("customer_signup_lng"),
        Hospital.hospital_name.label("hospital_name"),
        Hospital.address.label("hospital_address"),
    ]
    stmt = (
        _staff_base_query(columns, staff)
        .outerjoin(Hospital, AmbulanceRequest.forwarded_to_hospital_id == Hospital.user_id)
        .order_by(AmbulanceRequest.created_at.desc())
    )
    return [_from_row(StaffRequestView, row) for row in db.execute(stmt)]


def _fetch_reduced(db: Session) -> list[StaffRequestView]:
    staff = aliased(User, name="staff")
    stmt = _staff_base_query(_reduced_columns(staff), staff).order_by(
        AmbulanceRequest.created_at.desc()
    )
    return [_from_row(StaffRequestView, row) for row in db.execute(stmt)]


def fetch_staff_listing(db: Session, unread_only: bool = False) -> StaffListing:
    schema = detect_listing_schema(db)
    if schema == ListingSchema.EXTENDED:
        try:
            rows = _fetch_extended(db)
        except DBAPIError as exc:
            logger.warning(
                "Ambulance query with forwarding columns failed, falling back to reduced query: %s",
                exc.__class__.__name__,
            )
            db.rollback()
            schema = ListingSchema.REDUCED
            rows = _fetch_reduced(db)
            # Only a schema that really lacks the columns pins the reduced set
            if _inspect_listing_schema(db) == ListingSchema.REDUCED:
                _listing_schemas[db.get_bind().engine] = ListingSchema.REDUCED
    else:
        rows = _fetch_reduced(db)

    if unread_only:
        # The reduced column set carries no read flag, so nothing is filtered out
        rows = [row for row in rows if not row.is_read]

    return StaffListing(column_set=schema, items=sort_for_dispatch(rows))


def fetch_customer_requests(db: Session, customer_user_id: int) -> list[CustomerRequestView]:
    staff = aliased(User, name="staff")
    stmt = (
        select(
            AmbulanceRequest.id,
            AmbulanceRequest.customer_user_id,
            AmbulanceRequest.pickup_address,
            AmbulanceRequest.destination_address,
            AmbulanceRequest.emergency_type,
            AmbulanceRequest.customer_condition,
            AmbulanceRequest.contact_number,
            AmbulanceRequest.status,
            AmbulanceRequest.priority,
            AmbulanceRequest.assigned_staff_id,
            AmbulanceRequest.notes,
            AmbulanceRequest.created_at,
            AmbulanceRequest.updated_at,
            staff.full_name.label("assigned_staff_name"),
            staff.phone.label("assigned_staff_phone"),
        )
        .outerjoin(staff, AmbulanceRequest.assigned_staff_id == staff.id)
        .where(AmbulanceRequest.customer_user_id == customer_user_id)
        .order_by(AmbulanceRequest.created_at.desc(), AmbulanceRequest.id.desc())
    )
    return [_from_row(CustomerRequestView, row) for row in db.execute(stmt)]


def fetch_forwarded_requests(db: Session, hospital_user_id: int) -> list[ForwardedRequestView]:
    stmt = (
        select(
            AmbulanceRequest.id,
            AmbulanceRequest.pickup_address,
            AmbulanceRequest.emergency_type,
            AmbulanceRequest.customer_condition,
            AmbulanceRequest.contact_number,
            AmbulanceRequest.status,
            AmbulanceRequest.priority,
            AmbulanceRequest.hospital_response,
            AmbulanceRequest.hospital_response_notes,
            AmbulanceRequest.hospital_response_date,
            AmbulanceRequest.created_at,
            AmbulanceRequest.updated_at,
            User.full_name.label("patient_name"),
            User.email.label("patient_email"),
            User.phone.label("patient_phone"),
        )
        .join(User, AmbulanceRequest.customer_user_id == User.id)
        .where(AmbulanceRequest.forwarded_to_hospital_id == hospital_user_id)
        .order_by(AmbulanceRequest.created_at.desc(), AmbulanceRequest.id.desc())
    )
    return [_from_row(ForwardedRequestView, row) for row in db.execute(stmt)]


def fetch_hospitals_in_region(
    db: Session, state: str, district: str | None = None
) -> list[HospitalSummary]:
    stmt = (
        select(
            Hospital.user_id,
            Hospital.hospital_name.label("name"),
            User.full_name.label("account_name"),
            Hospital.address,
            Hospital.state,
            Hospital.district,
            Hospital.number_of_ambulances,
        )
        .join(User, Hospital.user_id == User.id)
        .where(Hospital.state == state, Hospital.status == HospitalStatus.ACTIVE)
        .order_by(Hospital.hospital_name.asc())
    )
    if district:
        stmt = stmt.where(Hospital.district == district)
    return [_from_row(HospitalSummary, row) for row in db.execute(stmt)]
