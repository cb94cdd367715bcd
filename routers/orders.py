from fastapi import APIRouter, Request, BackgroundTasks
from starlette import status
from utils.deps import db_dependency, user_dependency, get_base_url
from schemas.order_schemas import CreateOrderRequest, UpdateOrderStatusRequest
from services.order_service import OrderService
from services.magic_link_service import MagicLinkService
from middleware.rate_limiter import limiter


router = APIRouter(
    tags=["orders"]
)


# ---- customer (public) ----

@router.post("/checkout", status_code=status.HTTP_200_OK)
@limiter.limit("20/minute")
async def checkout(request: Request, body: CreateOrderRequest, db: db_dependency):
    """
    Prepaid checkout: creates a payment_pending order and returns its UPI
    link and QR code.
    """
    return OrderService.create_prepaid_order(body, db)


@router.post("/orders/postpaid", status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
async def create_postpaid_order(request: Request, body: CreateOrderRequest, db: db_dependency):
    """
    Pay-on-table order: the kitchen can start right away.
    """
    return OrderService.create_postpaid_order(body, db)


@router.post("/orders/{order_id}/magic-link", status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
async def create_magic_link(request: Request, order_id: int, db: db_dependency):
    return MagicLinkService.issue(order_id, db, get_base_url(request))


# ---- restaurant dashboard ----

@router.get("/orders", status_code=status.HTTP_200_OK)
@limiter.limit("60/minute")
async def list_orders(request: Request, user: user_dependency, db: db_dependency):
    """
    All orders of the owner's restaurant, newest first.
    """
    return OrderService.list_orders(user, db)


@router.get("/orders/recent", status_code=status.HTTP_200_OK)
@limiter.limit("60/minute")
async def recent_orders(request: Request, user: user_dependency, db: db_dependency):
    return OrderService.list_orders(user, db, limit=10)


@router.get("/orders/{order_id}", status_code=status.HTTP_200_OK)
@limiter.limit("60/minute")
async def get_order(request: Request, order_id: int, user: user_dependency, db: db_dependency):
    return OrderService.get_order_detail(order_id, user, db)


@router.put("/orders/{order_id}/status", status_code=status.HTTP_200_OK)
@limiter.limit("60/minute")
async def update_order_status(request: Request, order_id: int, body: UpdateOrderStatusRequest,
                              user: user_dependency, db: db_dependency, bg: BackgroundTasks):
    """
    Move an order through the kitchen states (or cancel it) and notify the customer.
    """
    return OrderService.update_status(order_id, body, user, db, bg, get_base_url(request))
