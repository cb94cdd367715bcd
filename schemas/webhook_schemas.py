from pydantic import BaseModel, ConfigDict, Field


class PaymentWebhookRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: int = Field(alias="orderId", gt=0)
    payment_status: str = Field(alias="paymentStatus", min_length=1)
    provider_txn_id: str | None = Field(default=None, max_length=255)
