from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..config import get_settings
from ..models.ambulance import AmbulanceRequest, HospitalResponse
from ..models.notifications import AMBULANCE_NOTIFICATION_TYPE, Notification
from ..models.user import User, UserRole

logger = logging.getLogger(__name__)


class NotificationEngine:
    """Writes ambulance notifications into the sink table.

    Rows are added to the caller's session and flushed; committing them together
    with the request update is the caller's job.
    """

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()

    def notify_forwarded(self, request: AmbulanceRequest, hospital_user_id: int) -> list[Notification]:
        if not self.settings.IN_APP_NOTIFICATIONS_ENABLED:
            return []
        return [
            self._create_notification(
                user_id=hospital_user_id,
                title="New Ambulance Request",
                message="An ambulance request has been forwarded to you",
                request=request,
            ),
            self._create_notification(
                user_id=request.customer_user_id,
                title="Request Forwarded",
                message="Your ambulance request has been forwarded to a hospital for processing",
                request=request,
            ),
        ]

    def notify_hospital_response(
        self, request: AmbulanceRequest, decision: HospitalResponse
    ) -> list[Notification]:
        if not self.settings.IN_APP_NOTIFICATIONS_ENABLED:
            return []

        if decision == HospitalResponse.ACCEPTED:
            customer_message = "Your ambulance request has been accepted by the hospital"
        else:
            customer_message = "Your ambulance request has been rejected by the hospital"

        created = [
            self._create_notification(
                user_id=request.customer_user_id,
                title="Hospital Response",
                message=customer_message,
                request=request,
            )
        ]
        for admin_id in self._admin_recipients(request):
            created.append(
                self._create_notification(
                    user_id=admin_id,
                    title="Hospital Response",
                    message="Hospital has responded to ambulance request",
                    request=request,
                )
            )
        return created

    def _admin_recipients(self, request: AmbulanceRequest) -> list[int]:
        if request.forwarded_by_admin_id is not None:
            return [request.forwarded_by_admin_id]
        # Forwarded before the forwarding admin was recorded
        rows = (
            self.db.query(User.id)
            .filter(User.role == UserRole.ADMIN, User.is_active.is_(True))
            .order_by(User.id.asc())
            .all()
        )
        return [row.id for row in rows]

    def _create_notification(
        self,
        *,
        user_id: int,
        title: str,
        message: str,
        request: AmbulanceRequest,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=AMBULANCE_NOTIFICATION_TYPE,
            title=title,
            message=message,
            related_id=request.id,
        )
        self.db.add(notification)
        self.db.flush()
        logger.debug("Queued notification %s for user %s", notification.id, user_id)
        return notification
