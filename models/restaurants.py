from core.database import Base
from sqlalchemy import (Column, Integer, String, ForeignKey, Text)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin, UpdatedAtMixin

class Restaurant(Base, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "restaurants"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

    #relationships
    owner = relationship("User", back_populates="restaurant")
    tables = relationship("Table", back_populates="restaurant")
    menu_items = relationship("MenuItem", back_populates="restaurant")
    orders = relationship("Order", back_populates="restaurant")

    restaurant_name = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False, index=True)
    upi_id = Column(String, nullable=True)
    phone_number = Column(String, nullable=True)
    address = Column(String, nullable=True)
    description = Column(Text, nullable=True)
