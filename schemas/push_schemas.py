from pydantic import BaseModel, ConfigDict, Field


class SubscriptionKeys(BaseModel):
    p256dh: str = Field(min_length=1)
    auth: str = Field(min_length=1)


class BrowserSubscription(BaseModel):
    model_config = ConfigDict(extra="ignore")

    endpoint: str = Field(min_length=1, max_length=1024)
    keys: SubscriptionKeys


class PushSubscribeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: int = Field(alias="orderId", gt=0)
    subscription: BrowserSubscription


class PushNotifyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: int = Field(alias="orderId", gt=0)
    title: str = Field(default="Order update", min_length=1)
    body: str = ""
    url: str | None = None
