from datetime import datetime, timezone
from fastapi import HTTPException, BackgroundTasks
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from starlette import status

from core.constants import PAYMENT_PENDING, PENDING, status_title
from models.orders import Order
from models.order_items import OrderItem
from models.order_status_events import OrderStatusEvent
from models.restaurants import Restaurant
from models.tables import Table
from schemas.order_schemas import CreateOrderRequest, UpdateOrderStatusRequest
from services.notification_service import dispatch_notification
from services.payment_service import build_upi_link, render_payment_qr
from services.restaurant_service import RestaurantService
from utils.codes import generate_track_code
from utils.links import tracking_path
from utils.logger import get_logger, log_order_event

logger = get_logger(__name__)

ORDER_NOT_FOUND_OR_FORBIDDEN = "Order not found or you do not have permission to modify it."
TRACK_CODE_ATTEMPTS = 5


def _money(value) -> float | None:
    return float(value) if value is not None else None


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


class OrderService:
    """
    Order lifecycle: creation (prepaid checkout and pay-on-table), staff status
    transitions, and read models for the dashboard and the customer pages.

    Concurrent staff updates to one order are last-write-wins; the status
    event log keeps every attempted change.
    """

    # ---- creation -------------------------------------------------------

    @staticmethod
    def create_prepaid_order(request: CreateOrderRequest, db: Session) -> dict:
        """
        Create a payment_pending order and its UPI payment link.

        Flow:
        1. Restaurant must have a UPI handle configured
        2. Resolve the table by number
        3. Insert the order with the cart snapshot (items are written by the
           payment webhook once the payment is confirmed)
        4. Build the UPI link and render its QR (QR failure is not fatal)
        """
        restaurant = db.query(Restaurant).filter(Restaurant.id == request.restaurant_id).one_or_none()
        if not restaurant or not restaurant.upi_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                detail="This restaurant has not configured online payments.")

        table = OrderService._get_table(restaurant.id, request.table_number, db)

        order = OrderService._insert_order(
            db,
            restaurant_id=restaurant.id,
            table_id=table.id,
            total_amount=request.total_amount,
            status=PAYMENT_PENDING,
            is_prepaid=False,
            cart_data=[item.model_dump(mode="json") for item in request.cart_items],
        )

        upi_link = build_upi_link(
            restaurant.upi_id,
            restaurant.restaurant_name,
            request.total_amount,
            f"Order #{order.track_code}",
        )
        payment_qr_url = render_payment_qr(upi_link)

        try:
            order.upi_link = upi_link
            order.payment_qr_url = payment_qr_url
            db.commit()
        except SQLAlchemyError as e:
            # the client still gets the link in the response
            db.rollback()
            logger.error(
                f"Failed to store payment link on order: {e}",
                extra={"order_id": order.id},
                exc_info=True
            )

        log_order_event(logger, "Prepaid order created", order.id, status=PAYMENT_PENDING,
            extra={"restaurant_id": restaurant.id, "track_code": order.track_code})

        return {
            "success": True,
            "orderId": order.id,
            "restaurantSlug": restaurant.slug,
            "trackCode": order.track_code,
            "upiLink": upi_link,
            "paymentQrUrl": payment_qr_url,
        }

    @staticmethod
    def create_postpaid_order(request: CreateOrderRequest, db: Session) -> dict:
        """
        Create a pay-on-table order with its items.

        The order row is written first; if the items cannot be written the
        order is deleted again so no order is left without its items.
        """
        restaurant = db.query(Restaurant).filter(Restaurant.id == request.restaurant_id).one_or_none()
        if not restaurant:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                detail="Restaurant not found")

        table = OrderService._get_table(restaurant.id, request.table_number, db)

        order = OrderService._insert_order(
            db,
            restaurant_id=restaurant.id,
            table_id=table.id,
            total_amount=request.total_amount,
            status=PENDING,
            is_prepaid=False,
        )
        order_id, track_code = order.id, order.track_code

        try:
            db.add_all([
                OrderItem(order_id=order_id, menu_item_id=item.id, quantity=item.quantity, price=item.price)
                for item in request.cart_items
            ])
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                f"Could not save order items, rolling back order: {e}",
                extra={"order_id": order_id, "error_type": type(e).__name__},
                exc_info=True
            )
            OrderService._delete_order(order_id, db)
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not place your order. Please try again.")

        log_order_event(logger, "Postpaid order created", order_id, status=PENDING,
            extra={"restaurant_id": restaurant.id, "track_code": track_code, "items": len(request.cart_items)})

        return {"success": True, "trackCode": track_code, "restaurantSlug": restaurant.slug}

    @staticmethod
    def _get_table(restaurant_id: int, table_number: str, db: Session) -> Table:
        table = db.query(Table).filter(
            Table.restaurant_id == restaurant_id,
            Table.table_number == table_number
        ).one_or_none()
        if not table:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                detail=f'Table "{table_number}" does not exist for this restaurant.')
        return table

    @staticmethod
    def _insert_order(db: Session, **values) -> Order:
        """Insert an order with a fresh tracking code, retrying on a code collision."""
        for attempt in range(TRACK_CODE_ATTEMPTS):
            order = Order(track_code=generate_track_code(), **values)
            db.add(order)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                logger.warning("Tracking code collision, retrying", extra={"attempt": attempt + 1})
                continue
            db.refresh(order)
            return order

        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not place your order. Please try again.")

    @staticmethod
    def _delete_order(order_id: int, db: Session):
        try:
            db.query(OrderItem).filter(OrderItem.order_id == order_id).delete()
            db.query(Order).filter(Order.id == order_id).delete()
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.critical(
                "Order rollback failed, order persisted without items",
                extra={"order_id": order_id},
                exc_info=True
            )

    # ---- staff operations ----------------------------------------------

    @staticmethod
    def get_owned_order(order_id: int, principal: dict, db: Session) -> Order:
        """
        Load an order only if it belongs to the principal's restaurant.

        A missing restaurant, a missing order and another tenant's order all
        produce the same 404 so nothing is revealed about other restaurants.
        """
        restaurant = RestaurantService.get_restaurant_for_user(principal.get("user_id"), db)
        order = None
        if restaurant:
            order = db.query(Order).filter(
                Order.id == order_id,
                Order.restaurant_id == restaurant.id
            ).one_or_none()

        if not order:
            logger.warning(
                "Order access denied or order missing",
                extra={"order_id": order_id, "user_id": principal.get("user_id")}
            )
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                detail=ORDER_NOT_FOUND_OR_FORBIDDEN)
        return order

    @staticmethod
    def update_status(order_id: int, request: UpdateOrderStatusRequest, principal: dict,
                      db: Session, bg: BackgroundTasks, base_url: str = "") -> dict:
        """
        Apply a staff status change.

        Flow:
        1. Verify the order belongs to the principal's restaurant
        2. Update status, estimated time and status timestamp
        3. Append a status event with the note
        4. After commit, schedule the customer push notification

        The notification runs after the response and its failure never
        affects the stored status.
        """
        order = OrderService.get_owned_order(order_id, principal, db)

        if request.eta_minutes is not None:
            order.estimated_time = request.eta_minutes

        new_status = request.status
        if new_status:
            order.status = new_status
            order.status_updated_at = datetime.now(timezone.utc)
            db.add(OrderStatusEvent(order_id=order.id, status=new_status, note=request.note))

        db.commit()
        db.refresh(order)

        log_order_event(logger, "Order updated from dashboard", order.id, status=order.status,
            extra={"user_id": principal.get("user_id"), "eta_minutes": request.eta_minutes})

        if new_status:
            bg.add_task(
                dispatch_notification,
                order.id,
                status_title(new_status),
                request.note or f"Your order status changed to {new_status}",
                base_url + tracking_path(order.restaurant.slug, order.track_code),
            )

        return {"success": True, "status": order.status, "estimatedTime": order.estimated_time}

    @staticmethod
    def list_orders(principal: dict, db: Session, limit: int | None = None) -> list[dict]:
        restaurant = RestaurantService.get_restaurant_for_user(principal.get("user_id"), db)
        if not restaurant:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                detail="Restaurant not found for user")

        query = db.query(Order).options(
            selectinload(Order.items),
            selectinload(Order.table),
        ).filter(Order.restaurant_id == restaurant.id).order_by(Order.created_at.desc(), Order.id.desc())

        if limit:
            query = query.limit(limit)

        return [OrderService.serialize_order(order) for order in query.all()]

    @staticmethod
    def get_order_detail(order_id: int, principal: dict, db: Session) -> dict:
        order = OrderService.get_owned_order(order_id, principal, db)
        data = OrderService.serialize_order(order)
        data["status_events"] = [
            {"status": event.status, "note": event.note, "created_at": _iso(event.created_at)}
            for event in order.status_events
        ]
        return data

    @staticmethod
    def serialize_order(order: Order) -> dict:
        return {
            "id": order.id,
            "track_code": order.track_code,
            "status": order.status,
            "total_amount": _money(order.total_amount),
            "estimated_time": order.estimated_time,
            "is_prepaid": order.is_prepaid,
            "table_number": order.table.table_number if order.table else None,
            "created_at": _iso(order.created_at),
            "status_updated_at": _iso(order.status_updated_at),
            "items": [
                {"menu_item_id": item.menu_item_id, "quantity": item.quantity, "price": _money(item.price)}
                for item in order.items
            ],
        }

    # ---- public (customer) reads ---------------------------------------

    @staticmethod
    def _get_by_track_code(track_code: str, db: Session) -> Order:
        order = db.query(Order).filter(Order.track_code == track_code).one_or_none()
        if not order:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found")
        return order

    @staticmethod
    def get_public_status(track_code: str, db: Session) -> dict:
        """Status only; this endpoint is polled by the checkout page."""
        order = OrderService._get_by_track_code(track_code, db)
        return {"status": order.status}

    @staticmethod
    def get_public_order(track_code: str, db: Session) -> dict:
        order = OrderService._get_by_track_code(track_code, db)

        data = {
            "orderId": order.id,
            "trackCode": order.track_code,
            "status": order.status,
            "estimatedTime": order.estimated_time,
            "createdAt": _iso(order.created_at),
            "totalAmount": _money(order.total_amount),
            "restaurantName": order.restaurant.restaurant_name,
            "restaurantSlug": order.restaurant.slug,
            "items": [
                {"name": item.menu_item.name if item.menu_item else None,
                 "quantity": item.quantity, "price": _money(item.price)}
                for item in order.items
            ],
        }
        if order.status == PAYMENT_PENDING:
            data["upiLink"] = order.upi_link
            data["paymentQrUrl"] = order.payment_qr_url
        return data
