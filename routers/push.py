import hmac
from typing import Annotated
from fastapi import APIRouter, Request, Depends, Header, HTTPException
from starlette import status
from core.config import settings
from utils.deps import db_dependency
from schemas.push_schemas import PushSubscribeRequest, PushNotifyRequest
from services.notification_service import NotificationService
from middleware.rate_limiter import limiter


router = APIRouter(
    prefix="/push",
    tags=["push"]
)


def verify_internal_key(x_internal_key: Annotated[str | None, Header()] = None):
    if not settings.INTERNAL_API_KEY:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Internal notifications are not enabled")

    if not x_internal_key or not hmac.compare_digest(x_internal_key, settings.INTERNAL_API_KEY):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden")


@router.post("/subscribe", status_code=status.HTTP_200_OK)
@limiter.limit("20/minute")
async def subscribe(request: Request, body: PushSubscribeRequest, db: db_dependency):
    """
    Save the browser's push subscription for an order it is tracking.
    """
    return NotificationService.subscribe(body, db)


@router.post("/notify", status_code=status.HTTP_200_OK, dependencies=[Depends(verify_internal_key)])
def notify(body: PushNotifyRequest, db: db_dependency):
    """
    Fan out a push message to every subscription of an order (internal).
    """
    results = NotificationService.notify(db, body.order_id, body.title, body.body, body.url)
    return {"ok": True, "results": results}


@router.get("/public-key", status_code=status.HTTP_200_OK)
async def vapid_public_key():
    """
    VAPID application server key the browser needs for pushManager.subscribe().
    """
    if not settings.VAPID_PUBLIC_KEY:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
            detail="Push notifications are not configured")
    return {"publicKey": settings.VAPID_PUBLIC_KEY}
