from core.database import Base
from sqlalchemy import (Column, Integer, String, ForeignKey, UniqueConstraint)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin

class Table(Base, CreatedAtMixin):
    __tablename__ = "tables"
    __table_args__ = (
        UniqueConstraint("restaurant_id", "table_number", name="uq_tables_restaurant_number"),
    )

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False, index=True)

    #relationships
    restaurant = relationship("Restaurant", back_populates="tables")
    orders = relationship("Order", back_populates="table")

    table_number = Column(String, nullable=False)
