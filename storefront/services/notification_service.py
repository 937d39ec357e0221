# storefront/services/notification_service.py
from decimal import Decimal

from storefront.celery_worker import celery_app
from storefront.domain.schemas import OrderConfirmation
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def render_order_confirmation(order_id: int, total_amount: str, delivery_date: str | None) -> dict:
    delivery = f"Expected delivery: {delivery_date}" if delivery_date else "Delivery date will follow"
    return {
        "subject": f"Order #{order_id} confirmed",
        "body": f"Thank you for your order #{order_id}.\nTotal: ${Decimal(total_amount):.2f}\n{delivery}",
    }


class NotificationService:
    """
    Order notifications.
    Sent through celery so the checkout never waits on the mail system.
    """

    @staticmethod
    def send_order_confirmation(email: str, confirmation: OrderConfirmation):
        if not email:
            logger.warning(f"No e-mail for order {confirmation.order_id}, confirmation skipped")
            return
        # json serializer: Decimal travels as a string
        send_order_confirmation_task.delay(
            email,
            confirmation.order_id,
            str(confirmation.total_amount),
            confirmation.delivery_date,
        )


@celery_app.task(name="storefront.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(email: str, order_id: int, total_amount: str, delivery_date: str | None = None):
    """
    Celery task - renders the confirmation. There is no mail gateway yet,
    the message is only logged.
    """
    message = render_order_confirmation(order_id, total_amount, delivery_date)
    logger.info(f"[NOTIFICATION] {message['subject']} -> {email}")

    return {"email": email, "order_id": order_id, "status": "sent", **message}
