from core.database import Base
from sqlalchemy import Column, Boolean, DateTime, String, Integer, ForeignKey
from sqlalchemy.orm import relationship
from models.mixins import CreatedAtMixin

class PaymentLink(Base, CreatedAtMixin):
    """
    Single-use magic link granting access to the checkout page of one order.

    Links expire 15 minutes after issuance and are kept after use for audit.
    """
    __tablename__ = "payment_links"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)

    #relationships
    order = relationship("Order", back_populates="payment_links")

    token = Column(String(255), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used = Column(Boolean, default=False, nullable=False)
