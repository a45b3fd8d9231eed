import enum
from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import mapped_column, relationship
from .base import Base, IntIdMixin, TimestampMixin
from .types import EncryptedText


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class AmbulanceStatus(str, enum.Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    ON_THE_WAY = "on_the_way"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FORWARDED_TO_HOSPITAL = "forwarded_to_hospital"
    HOSPITAL_ACCEPTED = "hospital_accepted"
    HOSPITAL_REJECTED = "hospital_rejected"


class AmbulancePriority(str, enum.Enum):
    CRITICAL = "critical"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


class HospitalResponse(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class AmbulanceRequest(Base, IntIdMixin, TimestampMixin):
    __tablename__ = "ambulance_requests"

    customer_user_id = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    pickup_address = mapped_column(Text, nullable=False)
    destination_address = mapped_column(Text, nullable=False)
    emergency_type = mapped_column(String(64), nullable=False)
    customer_condition = mapped_column(EncryptedText, nullable=True)
    contact_number = mapped_column(String(32), nullable=False)
    status = mapped_column(
        Enum(AmbulanceStatus, name="ambulancestatus", values_callable=_enum_values),
        default=AmbulanceStatus.PENDING,
        nullable=False,
    )
    priority = mapped_column(
        Enum(AmbulancePriority, name="ambulancepriority", values_callable=_enum_values),
        default=AmbulancePriority.NORMAL,
        nullable=False,
    )
    assigned_staff_id = mapped_column(ForeignKey("users.id"), nullable=True)
    notes = mapped_column(Text, nullable=True)

    # Forwarding columns; older deployments lack these (see ambulance_queries)
    is_read = mapped_column(Boolean, default=False, nullable=False)
    forwarded_to_hospital_id = mapped_column(ForeignKey("users.id"), nullable=True, index=True)
    forwarded_by_admin_id = mapped_column(ForeignKey("users.id"), nullable=True)
    hospital_response = mapped_column(
        Enum(HospitalResponse, name="hospitalresponse", values_callable=_enum_values),
        nullable=True,
    )
    hospital_response_notes = mapped_column(Text, nullable=True)
    hospital_response_date = mapped_column(DateTime(timezone=True), nullable=True)
    customer_state = mapped_column(String(64), nullable=True)
    customer_district = mapped_column(String(64), nullable=True)

    customer = relationship("User", foreign_keys=[customer_user_id])
    assigned_staff = relationship("User", foreign_keys=[assigned_staff_id])
