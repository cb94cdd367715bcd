"""
Order status vocabulary.

Statuses are stored lowercase. Staff clients may send capitalized names
("Preparing"); they are mapped through STAFF_STATUSES by the status update schema.
"""

PAYMENT_PENDING = "payment_pending"
PENDING = "pending"
PAID = "paid"
CONFIRMED = "confirmed"
PREPARING = "preparing"
READY = "ready"
COMPLETE = "complete"
FAILED = "failed"
CANCELLED = "cancelled"

ORDER_STATUSES = (
    PAYMENT_PENDING,
    PENDING,
    PAID,
    CONFIRMED,
    PREPARING,
    READY,
    COMPLETE,
    FAILED,
    CANCELLED,
)

# Statuses a restaurant owner may set from the dashboard.
# payment_pending, paid and failed are owned by the checkout and webhook paths.
STAFF_STATUSES = (PENDING, CONFIRMED, PREPARING, READY, COMPLETE, CANCELLED)

PAYMENT_SUCCESS = "SUCCESS"

STATUS_TITLES = {
    PENDING: "Order received",
    PAID: "Payment received",
    CONFIRMED: "Order confirmed",
    PREPARING: "Your order is being prepared",
    READY: "Your order is ready",
    COMPLETE: "Order complete",
    CANCELLED: "Order cancelled",
    FAILED: "Payment failed",
}


def status_title(status: str) -> str:
    return STATUS_TITLES.get(status, f"Order {status}")
