"""
NotificationService - In-app notifications.

Creates notification rows for users and admins, and queues an email copy of
every notification through Celery. Callers treat notification failures as
non-fatal: the business operation that triggered them has already succeeded.
"""

from typing import Iterable, List, Optional

from django.contrib.auth import get_user_model
from django.core.paginator import EmptyPage, Paginator
from django.db.models import Q
from django.utils import timezone

from notifications.metrics import notifications_created_total
from notifications.models import Notification
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok


class NotificationService(BaseService):
    """
    Service for creating and reading in-app notifications.

    Responsibilities:
    - Create notifications for a single user or for every admin
    - Queue the email copy of each created notification
    - List, count, mark read and delete a user's notifications
    """

    def __init__(self, send_emails: bool = True):
        super().__init__()
        self.send_emails = send_emails

    @BaseService.log_performance
    def notify_user(
        self,
        user,
        type: str,
        title: str,
        message: str,
        related_id="",
        related_type: str = "",
        action_url: str = "",
    ) -> ServiceResult[Notification]:
        """
        Create a notification for one user.

        Args:
            user: Recipient (CustomUser instance)
            type: One of Notification.TYPE_CHOICES
            title: Short headline
            message: Body text
            related_id: Id of the object the notification is about
            related_type: Kind of that object ("product", "order", ...)
            action_url: Frontend path the notification links to

        Returns:
            ServiceResult with the created Notification
        """
        if user is None:
            return service_err(ErrorCodes.USER_NOT_FOUND, "Notification recipient is required")

        try:
            notification = Notification.objects.create(
                user=user,
                type=type,
                title=title,
                message=message,
                related_id=str(related_id or ""),
                related_type=related_type,
                action_url=action_url,
            )
            notifications_created_total.labels(type=type).inc()
            self.logger.info(f"Notification {notification.id} ({type}) created for user {user.id}")

            if self.send_emails:
                self._queue_email(notification)

            return service_ok(notification)

        except Exception as e:
            self.logger.error(f"Error creating {type} notification for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def notify_admins(
        self,
        type: str,
        title: str,
        message: str,
        related_id="",
        related_type: str = "",
        action_url: str = "",
    ) -> ServiceResult[List[Notification]]:
        """Create the same notification for every active admin and superuser."""
        try:
            admins = self.get_admin_users()
        except Exception as e:
            self.logger.error(f"Error loading admin recipients: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        created = []
        for admin in admins:
            result = self.notify_user(
                admin,
                type=type,
                title=title,
                message=message,
                related_id=related_id,
                related_type=related_type,
                action_url=action_url,
            )
            if result.ok:
                created.append(result.value)
            else:
                self.logger.warning(f"Admin notification for {admin.id} failed: {result.error_detail}")

        return service_ok(created)

    @staticmethod
    def get_admin_users() -> Iterable:
        User = get_user_model()
        return User.objects.filter(is_active=True).filter(Q(role="admin") | Q(is_superuser=True)).distinct()

    @BaseService.log_performance
    def list_for_user(self, user, unread_only: bool = False, page: int = 1, page_size: int = 20) -> ServiceResult[dict]:
        try:
            queryset = Notification.objects.filter(user=user)
            if unread_only:
                queryset = queryset.filter(is_read=False)

            paginator = Paginator(queryset, page_size)
            try:
                page_obj = paginator.page(page)
            except EmptyPage:
                page_obj = paginator.page(paginator.num_pages or 1)

            return service_ok(
                {
                    "results": list(page_obj.object_list),
                    "count": paginator.count,
                    "page": page_obj.number,
                    "page_size": page_size,
                    "num_pages": paginator.num_pages,
                    "has_next": page_obj.has_next(),
                    "has_previous": page_obj.has_previous(),
                    "unread_count": Notification.objects.filter(user=user, is_read=False).count(),
                }
            )
        except Exception as e:
            self.logger.error(f"Error listing notifications for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    def unread_count(self, user) -> ServiceResult[int]:
        try:
            return service_ok(Notification.objects.filter(user=user, is_read=False).count())
        except Exception as e:
            self.logger.error(f"Error counting notifications for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def mark_read(self, user, notification_id) -> ServiceResult[Notification]:
        notification = self._get_own(user, notification_id)
        if notification is None:
            return service_err(ErrorCodes.NOTIFICATION_NOT_FOUND, f"Notification {notification_id} not found")

        if not notification.is_read:
            notification.is_read = True
            notification.read_at = timezone.now()
            notification.save(update_fields=["is_read", "read_at"])

        return service_ok(notification)

    @BaseService.log_performance
    def mark_all_read(self, user) -> ServiceResult[int]:
        try:
            updated = Notification.objects.filter(user=user, is_read=False).update(
                is_read=True, read_at=timezone.now()
            )
            self.logger.info(f"Marked {updated} notifications read for user {user.id}")
            return service_ok(updated)
        except Exception as e:
            self.logger.error(f"Error marking notifications read for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def delete(self, user, notification_id) -> ServiceResult[None]:
        notification = self._get_own(user, notification_id)
        if notification is None:
            return service_err(ErrorCodes.NOTIFICATION_NOT_FOUND, f"Notification {notification_id} not found")

        notification.delete()
        return service_ok()

    # ===== Helpers =====

    def _get_own(self, user, notification_id) -> Optional[Notification]:
        # Other users' notifications are reported as missing
        try:
            return Notification.objects.filter(id=notification_id, user=user).first()
        except (ValueError, TypeError):
            return None

    def _queue_email(self, notification: Notification):
        from notifications.tasks import send_notification_email

        try:
            send_notification_email.delay(notification.id)
        except Exception as e:
            self.logger.warning(f"Could not queue email for notification {notification.id}: {e}")
