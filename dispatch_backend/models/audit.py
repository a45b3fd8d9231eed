import enum
from sqlalchemy import DateTime, Enum, String, JSON
from sqlalchemy.orm import mapped_column
from .base import Base, IntIdMixin


class AuditAction(str, enum.Enum):
    CREATE = "CREATE"
    ASSIGN = "ASSIGN"
    UPDATE = "UPDATE"
    STATUS_CHANGE = "STATUS_CHANGE"
    FORWARD = "FORWARD"
    MARK_READ = "MARK_READ"
    HOSPITAL_RESPONSE = "HOSPITAL_RESPONSE"
    LOGIN = "LOGIN"


class AuditEvent(Base, IntIdMixin):
    __tablename__ = "audit_events"

    actor = mapped_column(String(64), nullable=False)
    action = mapped_column(Enum(AuditAction), nullable=False)
    entity_type = mapped_column(String(64), nullable=False)
    entity_id = mapped_column(String(64), nullable=False)
    request_id = mapped_column(String(64), nullable=False)
    ip_address = mapped_column(String(64), nullable=False)
    details = mapped_column(JSON, nullable=True)
    timestamp = mapped_column(DateTime(timezone=True), nullable=False)
