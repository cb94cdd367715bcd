from datetime import datetime, timezone
from fastapi import HTTPException
from sqlalchemy.orm import Session
from starlette import status

from core.config import settings
from core.constants import PAYMENT_PENDING
from models.orders import Order
from models.payment_links import PaymentLink
from utils.codes import as_utc, generate_link_token, get_expiry_time
from utils.links import checkout_path, magic_link_path, tracking_path
from utils.logger import get_logger

logger = get_logger(__name__)


class MagicLinkService:
    """
    Single-use, short-lived links that open the checkout page of one order.
    """

    @staticmethod
    def issue(order_id: int, db: Session, base_url: str) -> dict:
        """
        Issue a magic link for an order that is still awaiting payment.

        Returns:
            {"success", "magicUrl", "expiresAt"}
        """
        order = db.query(Order).filter(Order.id == order_id).one_or_none()
        if not order:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found.")

        if order.status != PAYMENT_PENDING:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                detail="Magic link can only be generated for payment_pending orders.")

        link = PaymentLink(
            order_id=order.id,
            token=generate_link_token(),
            expires_at=get_expiry_time(settings.MAGIC_LINK_TTL_MINUTES),
            used=False,
        )
        db.add(link)
        db.commit()
        db.refresh(link)

        logger.info(
            "Magic link issued",
            extra={"order_id": order.id, "payment_link_id": link.id}
        )

        return {
            "success": True,
            "magicUrl": base_url + magic_link_path(link.token),
            "expiresAt": as_utc(link.expires_at).isoformat(),
        }

    @staticmethod
    def redeem(token: str, db: Session, base_url: str) -> str:
        """
        Consume a magic link and return the URL to redirect to.

        The link is claimed with one conditional UPDATE (unused and not
        expired), so two simultaneous redemptions cannot both succeed. When
        nothing was claimed the row is read only to pick the error.

        Raises:
            404 for unknown tokens, 410 for used or expired links
        """
        now = datetime.now(timezone.utc)
        claimed = db.query(PaymentLink).filter(
            PaymentLink.token == token,
            PaymentLink.used == False,
            PaymentLink.expires_at > now
        ).update({PaymentLink.used: True}, synchronize_session=False)
        db.commit()

        link = db.query(PaymentLink).filter(PaymentLink.token == token).one_or_none()

        if not claimed:
            if not link:
                logger.warning("Magic link redemption with unknown token")
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                    detail="Invalid or expired link.")

            if link.used:
                logger.warning("Magic link reuse attempt", extra={"order_id": link.order_id})
                raise HTTPException(status_code=status.HTTP_410_GONE,
                    detail="This link has already been used.")

            logger.info("Expired magic link redeemed", extra={"order_id": link.order_id})
            raise HTTPException(status_code=status.HTTP_410_GONE,
                detail="This link has expired.")

        order = db.query(Order).filter(Order.id == link.order_id).one_or_none()
        if not order:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found.")

        restaurant = order.restaurant
        if not restaurant:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                detail="Restaurant not found.")

        logger.info("Magic link redeemed", extra={"order_id": order.id, "order_status": order.status})

        # paid (or otherwise resolved) orders go straight to tracking
        if order.status != PAYMENT_PENDING:
            return base_url + tracking_path(restaurant.slug, order.track_code)
        return base_url + checkout_path(order.track_code, restaurant.slug)
