from core.database import Base
from sqlalchemy import (Column, Integer, String, Boolean)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin

class User(Base, CreatedAtMixin):
    __tablename__ = "users"

    #pk 
    id = Column(Integer, primary_key=True, index=True)

    #relationships
    restaurant = relationship("Restaurant", back_populates="owner", uselist=False)


    email = Column(String, unique=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    role = Column(String, default="owner")
