"""
Web Push notifications for order updates.

Subscriptions are bound to an order. Every status change fans out one push
message to each subscription of that order; endpoints the push service reports
as gone are pruned.
"""
import json

from fastapi import HTTPException
from pywebpush import webpush, WebPushException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from starlette import status

from core.config import settings
from core.database import SessionLocal
from models.orders import Order
from models.push_subscriptions import PushSubscription
from schemas.push_schemas import PushSubscribeRequest
from utils.logger import get_logger

logger = get_logger(__name__)

# push service answers for an unsubscribed / expired endpoint
GONE_STATUS_CODES = (404, 410)


def _is_gone(exc: WebPushException) -> bool:
    response = getattr(exc, "response", None)
    return response is not None and getattr(response, "status_code", None) in GONE_STATUS_CODES


class NotificationService:

    @staticmethod
    def subscribe(body: PushSubscribeRequest, db: Session) -> dict:
        """
        Register a browser push subscription for an order.

        Upserts by endpoint: a browser that subscribes again (same endpoint)
        rebinds its row to the new order and refreshes its keys.
        """
        order = db.query(Order.id).filter(Order.id == body.order_id).one_or_none()
        if not order:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found")

        values = {
            "order_id": body.order_id,
            "p256dh": body.subscription.keys.p256dh,
            "auth": body.subscription.keys.auth,
        }
        endpoint = body.subscription.endpoint

        existing = db.query(PushSubscription).filter(PushSubscription.endpoint == endpoint).one_or_none()
        if existing:
            for field, value in values.items():
                setattr(existing, field, value)
            db.commit()
        else:
            db.add(PushSubscription(endpoint=endpoint, **values))
            try:
                db.commit()
            except IntegrityError:
                # a concurrent subscribe from the same browser inserted first
                db.rollback()
                db.query(PushSubscription).filter(PushSubscription.endpoint == endpoint).update(values)
                db.commit()

        logger.info(
            "Push subscription saved",
            extra={"order_id": body.order_id}
        )
        return {"ok": True}

    @staticmethod
    def notify(db: Session, order_id: int, title: str, body: str = "", url: str | None = None) -> list[dict]:
        """
        Deliver one push message to every subscription of an order.

        Each subscription is tried exactly once and independently: a failing
        endpoint never stops delivery to the others. Endpoints reported gone
        (404/410) are deleted; other failures are logged and the subscription
        is kept.

        Returns:
            One outcome per subscription: {"endpoint", "ok", "error"?, "removed"?}

        Raises:
            SQLAlchemyError if the subscriptions cannot be loaded at all.
        """
        subscriptions = db.query(PushSubscription).filter(PushSubscription.order_id == order_id).all()
        if not subscriptions:
            logger.debug("No push subscriptions for order", extra={"order_id": order_id})
            return []

        if not settings.VAPID_PRIVATE_KEY:
            logger.info(
                "Web Push not configured (no VAPID_PRIVATE_KEY); skipping notification",
                extra={"order_id": order_id}
            )
            return []

        payload = json.dumps({"title": title, "body": body, "data": {"url": url}})

        results = []
        for subscription in subscriptions:
            results.append(NotificationService._deliver(db, subscription, payload))

        delivered = sum(1 for r in results if r["ok"])
        logger.info(
            "Push notification fan-out finished",
            extra={"order_id": order_id, "delivered": delivered, "attempted": len(results)}
        )
        return results

    @staticmethod
    def _deliver(db: Session, subscription: PushSubscription, payload: str) -> dict:
        endpoint = subscription.endpoint
        try:
            webpush(
                subscription_info={
                    "endpoint": endpoint,
                    "keys": {"p256dh": subscription.p256dh, "auth": subscription.auth},
                },
                data=payload,
                vapid_private_key=settings.VAPID_PRIVATE_KEY,
                vapid_claims={"sub": settings.VAPID_SUBJECT},
                timeout=10,
            )
            return {"endpoint": endpoint, "ok": True}

        except WebPushException as e:
            if _is_gone(e):
                removed = NotificationService._remove(db, subscription)
                return {"endpoint": endpoint, "ok": False, "error": str(e), "removed": removed}

            logger.warning(
                f"Push delivery failed: {e}",
                extra={"order_id": subscription.order_id, "error_type": type(e).__name__}
            )
            return {"endpoint": endpoint, "ok": False, "error": str(e)}

        except Exception as e:
            logger.warning(
                f"Push delivery failed: {e}",
                extra={"order_id": subscription.order_id, "error_type": type(e).__name__}
            )
            return {"endpoint": endpoint, "ok": False, "error": str(e)}

    @staticmethod
    def _remove(db: Session, subscription: PushSubscription) -> bool:
        order_id = subscription.order_id
        try:
            db.delete(subscription)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                f"Could not remove expired push subscription: {e}",
                extra={"order_id": order_id},
                exc_info=True
            )
            return False

        logger.info("Removed expired push subscription", extra={"order_id": order_id})
        return True


def dispatch_notification(order_id: int, title: str, body: str = "", url: str | None = None):
    """
    Background task entry point used after an order state change is committed.

    Runs with its own session, after the response is sent. Failures only show
    up in the logs; they never touch the order.
    """
    db = SessionLocal()
    try:
        NotificationService.notify(db, order_id, title, body, url)
    except Exception as e:
        logger.error(
            f"Push notification dispatch failed: {e}",
            extra={"order_id": order_id, "error_type": type(e).__name__},
            exc_info=True
        )
    finally:
        db.close()
