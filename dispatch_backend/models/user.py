import enum
from sqlalchemy import Boolean, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import mapped_column, relationship
from .base import Base, IntIdMixin, TimestampMixin


class UserRole(str, enum.Enum):
    CUSTOMER = "customer"
    STAFF = "staff"
    ADMIN = "admin"
    HOSPITAL = "hospital"


class User(Base, IntIdMixin, TimestampMixin):
    __tablename__ = "users"

    email = mapped_column(String(255), unique=True, nullable=False)
    full_name = mapped_column(String(128), nullable=False)
    phone = mapped_column(String(32), nullable=True)
    role = mapped_column(
        Enum(UserRole, name="userrole", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.CUSTOMER,
    )
    password_hash = mapped_column(String(256), nullable=False)
    is_active = mapped_column(Boolean, default=True, nullable=False)
    last_login_at = mapped_column(DateTime(timezone=True), nullable=True)


class CustomerProfile(Base, TimestampMixin):
    __tablename__ = "customers"

    user_id = mapped_column(ForeignKey("users.id"), primary_key=True)
    address = mapped_column(Text, nullable=True)
    state = mapped_column(String(64), nullable=True)
    district = mapped_column(String(64), nullable=True)
    signup_lat = mapped_column(Float, nullable=True)
    signup_lng = mapped_column(Float, nullable=True)

    user = relationship("User")


class HospitalStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Hospital(Base, TimestampMixin):
    __tablename__ = "hospitals"

    user_id = mapped_column(ForeignKey("users.id"), primary_key=True)
    hospital_name = mapped_column(String(128), nullable=False)
    address = mapped_column(Text, nullable=True)
    state = mapped_column(String(64), nullable=False)
    district = mapped_column(String(64), nullable=True)
    number_of_ambulances = mapped_column(Integer, default=0, nullable=False)
    status = mapped_column(
        Enum(HospitalStatus, name="hospitalstatus", values_callable=lambda e: [m.value for m in e]),
        default=HospitalStatus.ACTIVE,
        nullable=False,
    )

    user = relationship("User")
