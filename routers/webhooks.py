import hmac
from typing import Annotated
from fastapi import APIRouter, Request, BackgroundTasks, Depends, Header, HTTPException
from starlette import status
from core.config import settings
from utils.deps import db_dependency, get_base_url
from schemas.webhook_schemas import PaymentWebhookRequest
from services.webhook_service import PaymentWebhookService
from utils.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(
    prefix="/webhooks",
    tags=["webhooks"]
)


def verify_webhook_secret(x_webhook_secret: Annotated[str | None, Header()] = None):
    """
    Providers authenticate with a shared secret header when one is configured.
    """
    if not settings.PAYMENT_WEBHOOK_SECRET:
        return

    if not x_webhook_secret or not hmac.compare_digest(x_webhook_secret, settings.PAYMENT_WEBHOOK_SECRET):
        logger.warning("Payment webhook rejected - bad secret")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook signature")


# Not rate limited: providers retry aggressively and must never be throttled.
@router.post("/payment", status_code=status.HTTP_200_OK, dependencies=[Depends(verify_webhook_secret)])
async def payment_webhook(request: Request, body: PaymentWebhookRequest, db: db_dependency, bg: BackgroundTasks):
    logger.info(
        "Payment webhook received",
        extra={"order_id": body.order_id, "payment_status": body.payment_status}
    )
    return PaymentWebhookService.handle_payment(body, db, bg, get_base_url(request))
