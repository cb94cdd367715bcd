from core.database import Base
from sqlalchemy import (Column, Integer, ForeignKey, Numeric, CheckConstraint)
from sqlalchemy.orm import relationship

class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id"), nullable=False)

    #relationships
    order = relationship("Order", back_populates="items")
    menu_item = relationship("MenuItem", back_populates="order_items")


    # unit price captured when the order was placed
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
