from core.database import Base
from models.orders import order_status_enum
from sqlalchemy import (Column, Integer, ForeignKey, Text)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin

class OrderStatusEvent(Base, CreatedAtMixin):
    """Append-only audit trail of status changes. Rows are never updated."""
    __tablename__ = "order_status_events"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)

    #relationships
    order = relationship("Order", back_populates="status_events")

    status = Column(order_status_enum, nullable=False)
    note = Column(Text, nullable=True)
