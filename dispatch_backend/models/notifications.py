from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import mapped_column
from .base import Base, IntIdMixin

AMBULANCE_NOTIFICATION_TYPE = "ambulance"


class Notification(Base, IntIdMixin):
    __tablename__ = "notifications"

    user_id = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    type = mapped_column(String(32), nullable=False, default=AMBULANCE_NOTIFICATION_TYPE)
    title = mapped_column(String(128), nullable=False)
    message = mapped_column(Text, nullable=True)
    related_id = mapped_column(Integer, nullable=True)
    is_read = mapped_column(Boolean, default=False, nullable=False)
    created_at = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
