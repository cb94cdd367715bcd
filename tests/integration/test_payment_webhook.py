import pytest
from decimal import Decimal
from fastapi import BackgroundTasks, HTTPException
from core.constants import PAID, FAILED, PREPARING, CANCELLED
from models.order_items import OrderItem
from models.order_status_events import OrderStatusEvent
from schemas.webhook_schemas import PaymentWebhookRequest
from services.notification_service import dispatch_notification
from services.webhook_service import PaymentWebhookService


def _webhook(order_id, payment_status="SUCCESS", txn="TXN-1001"):
    return PaymentWebhookRequest.model_validate({
        "orderId": order_id, "paymentStatus": payment_status, "provider_txn_id": txn
    })


def test_success_materializes_items_and_marks_paid(session, pending_order):
    bg = BackgroundTasks()

    result = PaymentWebhookService.handle_payment(_webhook(pending_order.id), session, bg, "http://test")

    assert result == {"success": True, "message": "Order confirmed successfully."}
    session.refresh(pending_order)
    assert pending_order.status == PAID
    assert pending_order.is_prepaid is True
    assert pending_order.cart_data is None

    items = session.query(OrderItem).filter(OrderItem.order_id == pending_order.id).all()
    assert len(items) == 1
    assert items[0].menu_item_id == 5
    assert items[0].quantity == 2
    assert float(items[0].price) == 12.99

    events = session.query(OrderStatusEvent).filter(OrderStatusEvent.order_id == pending_order.id).all()
    assert [(e.status, e.note) for e in events] == [(PAID, "Provider TXN: TXN-1001")]

    assert len(bg.tasks) == 1
    task = bg.tasks[0]
    assert task.func is dispatch_notification
    assert task.args[0] == pending_order.id
    assert task.args[3] == f"http://test/customer-end-pages/blue-cafe/orders/{pending_order.track_code}"


def test_replayed_success_is_a_no_op(session, pending_order):
    PaymentWebhookService.handle_payment(_webhook(pending_order.id), session, BackgroundTasks())

    bg = BackgroundTasks()
    result = PaymentWebhookService.handle_payment(_webhook(pending_order.id), session, bg)

    assert result["message"] == "Order already marked paid."
    assert session.query(OrderItem).filter(OrderItem.order_id == pending_order.id).count() == 1
    assert session.query(OrderStatusEvent).filter(OrderStatusEvent.order_id == pending_order.id).count() == 1
    assert bg.tasks == []


def test_retry_after_crash_between_items_and_status(session, pending_order):
    # items were written but the process died before the order was marked paid
    session.add(OrderItem(order_id=pending_order.id, menu_item_id=5, quantity=2, price=Decimal("12.99")))
    session.commit()

    PaymentWebhookService.handle_payment(_webhook(pending_order.id), session, BackgroundTasks())

    session.refresh(pending_order)
    assert pending_order.status == PAID
    assert session.query(OrderItem).filter(OrderItem.order_id == pending_order.id).count() == 1


def test_success_without_txn_id_uses_default_note(session, pending_order):
    PaymentWebhookService.handle_payment(_webhook(pending_order.id, txn=None), session, BackgroundTasks())

    event = session.query(OrderStatusEvent).filter(OrderStatusEvent.order_id == pending_order.id).one()
    assert event.note == "Paid via UPI provider webhook"


def test_failure_marks_order_failed_once(session, pending_order):
    bg = BackgroundTasks()
    result = PaymentWebhookService.handle_payment(_webhook(pending_order.id, "FAILURE"), session, bg)

    assert result["message"] == "Payment failure recorded."
    session.refresh(pending_order)
    assert pending_order.status == FAILED
    assert session.query(OrderItem).filter(OrderItem.order_id == pending_order.id).count() == 0
    event = session.query(OrderStatusEvent).filter(OrderStatusEvent.order_id == pending_order.id).one()
    assert event.note == "Payment gateway reported failure: FAILURE"
    assert len(bg.tasks) == 1

    again = PaymentWebhookService.handle_payment(_webhook(pending_order.id, "FAILURE"), session, BackgroundTasks())
    assert again["message"] == "Payment failure already recorded."
    assert session.query(OrderStatusEvent).filter(OrderStatusEvent.order_id == pending_order.id).count() == 1


def test_success_for_order_not_awaiting_payment(session, pending_order):
    pending_order.status = PREPARING
    session.commit()

    with pytest.raises(HTTPException) as exc_info:
        PaymentWebhookService.handle_payment(_webhook(pending_order.id), session, BackgroundTasks())

    assert exc_info.value.status_code == 409


def test_payment_for_cancelled_order_is_recorded_for_refund(session, pending_order):
    pending_order.status = CANCELLED
    session.commit()

    for _ in range(2):
        with pytest.raises(HTTPException) as exc_info:
            PaymentWebhookService.handle_payment(_webhook(pending_order.id, txn="TXN-9"), session, BackgroundTasks())
        assert exc_info.value.status_code == 409

    session.refresh(pending_order)
    assert pending_order.status == CANCELLED
    assert pending_order.is_prepaid is False
    assert session.query(OrderItem).filter(OrderItem.order_id == pending_order.id).count() == 0

    event = session.query(OrderStatusEvent).filter(OrderStatusEvent.order_id == pending_order.id).one()
    assert event.status == CANCELLED
    assert event.note == "Payment received while order was cancelled; refund required. Provider TXN: TXN-9"


def test_unknown_order(session):
    with pytest.raises(HTTPException) as exc_info:
        PaymentWebhookService.handle_payment(_webhook(999), session, BackgroundTasks())

    assert exc_info.value.status_code == 404


def test_item_insert_failure_leaves_order_pending(session, pending_order):
    # snapshot points at a menu item that does not exist -> FK violation
    pending_order.cart_data = [{"id": 404, "price": "1.00", "quantity": 1}]
    session.commit()

    with pytest.raises(HTTPException) as exc_info:
        PaymentWebhookService.handle_payment(_webhook(pending_order.id), session, BackgroundTasks())

    assert exc_info.value.status_code == 500
    session.refresh(pending_order)
    assert pending_order.status == "payment_pending"
    assert pending_order.cart_data is not None
