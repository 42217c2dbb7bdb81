# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Powiadomienia o zamowieniach.
    Wysylka idzie przez Celery, request nie czeka na kanal (email/SMS/push).
    """

    @staticmethod
    def order_placed(user_id: int, order_number: str, total):
        send_order_notification_task.delay(user_id, order_number, "placed", f"total {total}")

    @staticmethod
    def payment_confirmed(user_id: int, order_number: str, provider: str):
        send_order_notification_task.delay(user_id, order_number, "paid", f"via {provider}")

    @staticmethod
    def status_changed(user_id: int, order_number: str, status: str):
        send_order_notification_task.delay(user_id, order_number, status, None)

    @staticmethod
    def contact_received(message_id: int, email: str, subject: str):
        send_contact_notification_task.delay(message_id, email, subject)


@celery_app.task(name="storefront.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_number: str, event: str, detail: str | None = None):
    """Kanal wysylki (email/SMS/push) podpina sie tutaj, na razie zdarzenie trafia do logu."""
    suffix = f" ({detail})" if detail else ""
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_number} {event}{suffix}")
    return {"user_id": user_id, "order_number": order_number, "event": event, "status": "sent"}


@celery_app.task(name="storefront.services.notification_service.send_contact_notification_task")
def send_contact_notification_task(message_id: int, email: str, subject: str):
    """Powiadomienie zespolu o nowej wiadomosci z formularza kontaktowego."""
    logger.info(f"[NOTIFICATION] Contact message {message_id} from {email}: {subject}")
    return {"message_id": message_id, "event": "contact", "status": "sent"}
