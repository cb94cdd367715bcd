from core.database import Base
from core.constants import ORDER_STATUSES, PENDING
from sqlalchemy.orm import relationship
from sqlalchemy import (Column, Integer, String, Boolean, ForeignKey, Numeric, Enum, JSON, Text, DateTime)
from .mixins import CreatedAtMixin

order_status_enum = Enum(*ORDER_STATUSES, name="order_status")


class Order(Base, CreatedAtMixin):
    """
    One customer transaction at one table.

    cart_data holds the customer's cart until payment is confirmed and the
    rows in order_items are written; the two are never populated together.
    total_amount is fixed at creation and never recomputed from items.
    """
    __tablename__ = "orders"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False, index=True)
    table_id = Column(Integer, ForeignKey("tables.id"), nullable=False)

    #relationships
    restaurant = relationship("Restaurant", back_populates="orders")
    table = relationship("Table", back_populates="orders")
    items = relationship("OrderItem", back_populates="order")
    status_events = relationship("OrderStatusEvent", back_populates="order", order_by="OrderStatusEvent.id")
    payment_links = relationship("PaymentLink", back_populates="order")
    push_subscriptions = relationship("PushSubscription", back_populates="order")

    track_code = Column(String(16), unique=True, nullable=False, index=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(order_status_enum, default=PENDING, nullable=False)
    estimated_time = Column(Integer, nullable=True)
    is_prepaid = Column(Boolean, default=False, nullable=False)
    cart_data = Column(JSON, nullable=True)
    upi_link = Column(String, nullable=True)
    payment_qr_url = Column(Text, nullable=True)
    status_updated_at = Column(DateTime(timezone=True), nullable=True)
