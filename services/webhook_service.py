import logging
from datetime import datetime, timezone
from fastapi import HTTPException, BackgroundTasks
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette import status

from core.constants import PAID, FAILED, PAYMENT_PENDING, PAYMENT_SUCCESS, status_title
from models.orders import Order
from models.order_items import OrderItem
from models.order_status_events import OrderStatusEvent
from schemas.order_schemas import CartItem
from schemas.webhook_schemas import PaymentWebhookRequest
from services.notification_service import dispatch_notification
from utils.links import tracking_path
from utils.logger import get_logger, log_order_event

logger = get_logger(__name__)


class PaymentWebhookService:
    """
    Applies payment provider callbacks to prepaid orders.

    Providers retry and may deliver the same callback more than once, so the
    handler is idempotent at two levels: the order's paid state, and the
    presence of item rows. Item insertion and the status update are separate
    writes; checking both keeps a crash between them safe to retry.
    """

    @staticmethod
    def handle_payment(body: PaymentWebhookRequest, db: Session, bg: BackgroundTasks,
                       base_url: str = "") -> dict:
        """
        Flow:
        1. Load the order
        2. Already paid -> acknowledge, nothing to do
        3. Provider reported failure -> mark failed, record event
        4. Write order items from the cart snapshot unless they already exist
        5. Mark paid, clear snapshot, record event with the provider txn id
        6. Schedule the customer notification
        """
        order = db.query(Order).filter(Order.id == body.order_id).one_or_none()
        if not order:
            logger.warning("Payment webhook for unknown order", extra={"order_id": body.order_id})
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found")

        if order.status == PAID or order.is_prepaid:
            log_order_event(logger, "Payment webhook replay ignored, order already paid", order.id, status=order.status)
            return {"success": True, "message": "Order already marked paid."}

        if body.payment_status != PAYMENT_SUCCESS:
            return PaymentWebhookService._record_failure(order, body, db, bg, base_url)

        if order.status != PAYMENT_PENDING:
            PaymentWebhookService._record_unexpected_payment(order, body, db)
            raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                detail="Order is not awaiting payment.")

        PaymentWebhookService._materialize_items(order, db)

        order.status = PAID
        order.is_prepaid = True
        order.cart_data = None
        order.status_updated_at = datetime.now(timezone.utc)
        db.add(OrderStatusEvent(
            order_id=order.id,
            status=PAID,
            note=f"Provider TXN: {body.provider_txn_id}" if body.provider_txn_id else "Paid via UPI provider webhook",
        ))
        db.commit()

        log_order_event(logger, "Order payment confirmed", order.id, status=PAID,
            extra={"provider_txn_id": body.provider_txn_id})

        PaymentWebhookService._schedule_notification(order, PAID, "We received your payment.", bg, base_url)
        return {"success": True, "message": "Order confirmed successfully."}

    @staticmethod
    def _record_failure(order: Order, body: PaymentWebhookRequest, db: Session,
                        bg: BackgroundTasks, base_url: str) -> dict:
        if order.status != PAYMENT_PENDING:
            # repeated failure callback, or the order moved on already
            log_order_event(logger, "Payment failure callback ignored", order.id, status=order.status,
                extra={"payment_status": body.payment_status})
            return {"success": True, "message": "Payment failure already recorded."}

        order.status = FAILED
        order.status_updated_at = datetime.now(timezone.utc)
        db.add(OrderStatusEvent(
            order_id=order.id,
            status=FAILED,
            note=f"Payment gateway reported failure: {body.payment_status}",
        ))
        db.commit()

        log_order_event(logger, "Order payment failed", order.id, status=FAILED, level=logging.WARNING,
            extra={"payment_status": body.payment_status})

        PaymentWebhookService._schedule_notification(
            order, FAILED, "Your payment did not go through. Please try again.", bg, base_url)
        return {"success": True, "message": "Payment failure recorded."}

    @staticmethod
    def _record_unexpected_payment(order: Order, body: PaymentWebhookRequest, db: Session):
        """
        A payment arrived for an order that is no longer awaiting one (e.g.
        cancelled by staff). The order is left as is; an audit event under its
        current status records the money so it can be refunded.
        """
        logger.error(
            "Payment success for order not awaiting payment, refund required",
            extra={"order_id": order.id, "order_status": order.status, "provider_txn_id": body.provider_txn_id}
        )

        note = f"Payment received while order was {order.status}; refund required."
        if body.provider_txn_id:
            note += f" Provider TXN: {body.provider_txn_id}"

        already_recorded = db.query(OrderStatusEvent.id).filter(
            OrderStatusEvent.order_id == order.id,
            OrderStatusEvent.note == note
        ).first()
        if already_recorded:
            return

        db.add(OrderStatusEvent(order_id=order.id, status=order.status, note=note))
        db.commit()

    @staticmethod
    def _materialize_items(order: Order, db: Session):
        """
        Write order_items from the cart snapshot, at most once per order.

        Failure here is raised as a 500 so the provider retries: a paid order
        without items cannot be fulfilled.
        """
        already_written = db.query(OrderItem.id).filter(OrderItem.order_id == order.id).first()
        if already_written:
            log_order_event(logger, "Order items already exist, skipping insert", order.id)
            return

        snapshot = order.cart_data or []
        if not snapshot:
            logger.warning("No cart snapshot on paid order, skipping items insert", extra={"order_id": order.id})
            return

        try:
            cart_items = [CartItem.model_validate(entry) for entry in snapshot]
            db.add_all([
                OrderItem(order_id=order.id, menu_item_id=item.id, quantity=item.quantity, price=item.price)
                for item in cart_items
            ])
            db.commit()
        except (ValidationError, SQLAlchemyError) as e:
            db.rollback()
            logger.critical(
                f"Failed to save items for paid order: {e}",
                extra={"order_id": order.id, "error_type": type(e).__name__},
                exc_info=True
            )
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not save order items")

        log_order_event(logger, "Order items written from cart snapshot", order.id,
            extra={"items": len(cart_items)})

    @staticmethod
    def _schedule_notification(order: Order, new_status: str, message: str,
                               bg: BackgroundTasks, base_url: str):
        bg.add_task(
            dispatch_notification,
            order.id,
            status_title(new_status),
            message,
            base_url + tracking_path(order.restaurant.slug, order.track_code),
        )
