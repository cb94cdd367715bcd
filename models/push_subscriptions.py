from core.database import Base
from sqlalchemy import Column, String, Integer, ForeignKey
from sqlalchemy.orm import relationship
from models.mixins import CreatedAtMixin

class PushSubscription(Base, CreatedAtMixin):
    __tablename__ = "web_push_subscriptions"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)

    #relationships
    order = relationship("Order", back_populates="push_subscriptions")

    # one row per browser endpoint; re-subscribing rebinds the row
    endpoint = Column(String(1024), nullable=False, unique=True)
    p256dh = Column(String, nullable=False)
    auth = Column(String, nullable=False)
