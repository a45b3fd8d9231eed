from .base import Base
from .user import User, UserRole, CustomerProfile, Hospital, HospitalStatus
from .ambulance import AmbulanceRequest, AmbulanceStatus, AmbulancePriority, HospitalResponse
from .notifications import Notification, AMBULANCE_NOTIFICATION_TYPE
from .audit import AuditEvent, AuditAction

__all__ = [
    "Base",
    "User",
    "UserRole",
    "CustomerProfile",
    "Hospital",
    "HospitalStatus",
    "AmbulanceRequest",
    "AmbulanceStatus",
    "AmbulancePriority",
    "HospitalResponse",
    "Notification",
    "AMBULANCE_NOTIFICATION_TYPE",
    "AuditEvent",
    "AuditAction",
]
