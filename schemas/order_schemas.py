from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from core.constants import STAFF_STATUSES


class CartItem(BaseModel):
    """
    One cart line as sent by the customer menu.

    Also used to re-validate the cart snapshot stored on a prepaid order
    before its items are written.
    """
    model_config = ConfigDict(extra="ignore")

    id: int = Field(gt=0)
    quantity: int = Field(gt=0)
    price: Decimal = Field(ge=0)


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    restaurant_id: int = Field(alias="restaurantId", gt=0)
    table_number: str = Field(alias="tableNumber")
    total_amount: Decimal = Field(alias="totalAmount", gt=0)
    cart_items: list[CartItem] = Field(alias="cartItems")

    @field_validator('table_number', mode='before')
    @classmethod
    def validate_table_number(cls, value):
        # QR codes encode the table number; some clients send it as a number
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str) or not value.strip():
            raise ValueError('Table number is required')
        return value.strip()

    @field_validator('cart_items')
    @classmethod
    def validate_cart_items(cls, value):
        if not value:
            raise ValueError('Cart cannot be empty')
        return value


class UpdateOrderStatusRequest(BaseModel):
    """
    Status change from the restaurant dashboard.

    Status names are matched case-insensitively ("Preparing" -> "preparing");
    only the staff vocabulary is accepted here.
    """
    model_config = ConfigDict(populate_by_name=True)

    status: str | None = None
    note: str | None = Field(default=None, max_length=500)
    eta_minutes: int | None = Field(default=None, alias="etaMinutes", ge=0, le=24 * 60)

    @field_validator('status')
    @classmethod
    def validate_status(cls, value):
        if value is None:
            return value
        normalized = value.strip().lower()
        if normalized not in STAFF_STATUSES:
            raise ValueError(f'Unknown status value: {value}')
        return normalized

    @model_validator(mode='after')
    def validate_not_empty(self):
        if self.status is None and self.eta_minutes is None:
            raise ValueError('Nothing to update')
        if self.note and self.status is None:
            raise ValueError('A note can only be added with a status change')
        return self
