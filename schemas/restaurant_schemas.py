from pydantic import BaseModel, ConfigDict, field_validator
from schemas.auth_schemas import validate_phone_number
import re

# virtual payment address: <name>@<provider>, e.g. cafe.blue@okicici
UPI_HANDLE_PATTERN = re.compile(r'^[A-Za-z0-9.\-_]{2,256}@[A-Za-z][A-Za-z0-9]{1,63}$')


class RestaurantProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    restaurant_name: str
    slug: str
    upi_id: str | None = None
    phone_number: str | None = None
    address: str | None = None
    description: str | None = None


class UpdateRestaurantRequest(BaseModel):
    restaurant_name: str | None = None
    upi_id: str | None = None
    phone_number: str | None = None
    address: str | None = None
    description: str | None = None

    @field_validator('restaurant_name')
    @classmethod
    def validate_restaurant_name(cls, value):
        if value is not None and not value.strip():
            raise ValueError('Restaurant name cannot be empty')
        return value.strip() if value else value

    @field_validator('upi_id')
    @classmethod
    def validate_upi_id(cls, value):
        if value is None:
            return value
        value = value.strip()
        if not UPI_HANDLE_PATTERN.match(value):
            raise ValueError('UPI ID must look like name@bank')
        return value

    @field_validator('phone_number')
    @classmethod
    def validate_phone(cls, value):
        if value is None:
            return value
        return validate_phone_number(value)
