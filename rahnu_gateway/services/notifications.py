"""In-app notifications for back-office users"""

from typing import Any, Dict, List

from rahnu_gateway.domain.models import Loan, Notification, NotificationStatus
from rahnu_gateway.services.common import Service, parse_enum


class NotificationService(Service):
    def list_for_user(self, user_id: int) -> List[Notification]:
        self.storage.users.get(user_id)
        return self.storage.notifications.list(user_id=user_id)

    def list_unread_for_user(self, user_id: int) -> List[Notification]:
        self.storage.users.get(user_id)
        return self.storage.notifications.list(user_id=user_id, status=NotificationStatus.UNREAD)

    def create_notification(self, fields: Dict[str, Any]) -> Notification:
        fields = dict(fields)
        fields["status"] = parse_enum(
            NotificationStatus, fields.get("status", NotificationStatus.UNREAD), "status"
        )
        with self.storage.transaction():
            self.storage.users.get(fields.get("user_id"))
            return self.storage.notifications.create(fields)

    def mark_read(self, notification_id: int) -> Notification:
        with self.storage.transaction():
            return self.storage.notifications.update(
                notification_id, {"status": NotificationStatus.READ}
            )

    def notify_loan_owner(self, loan: Loan, title: str, message: str, type: str) -> Notification:
        """Notify the assigned officer, or the creator when nobody is assigned"""
        return self.storage.notifications.create(
            {
                "user_id": loan.assigned_to or loan.created_by,
                "title": title,
                "message": message,
                "type": type,
                "status": NotificationStatus.UNREAD,
            }
        )
