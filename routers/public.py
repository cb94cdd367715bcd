from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse
from starlette import status
from utils.deps import db_dependency, get_base_url
from services.order_service import OrderService
from services.magic_link_service import MagicLinkService
from middleware.rate_limiter import limiter


router = APIRouter(
    tags=["public"]
)


@router.get("/public/orders/{track_code}/status", status_code=status.HTTP_200_OK)
@limiter.limit("120/minute")
async def get_order_status(request: Request, track_code: str, db: db_dependency):
    """
    Current status of an order by tracking code. Returns nothing else.
    """
    return OrderService.get_public_status(track_code, db)


@router.get("/public/orders/{track_code}", status_code=status.HTTP_200_OK)
@limiter.limit("60/minute")
async def get_order_tracking(request: Request, track_code: str, db: db_dependency):
    return OrderService.get_public_order(track_code, db)


@router.get("/magic/{token}")
@limiter.limit("10/minute")
async def redeem_magic_link(request: Request, token: str, db: db_dependency):
    """
    Consume a single-use checkout link and redirect to the checkout page.
    """
    redirect_url = MagicLinkService.redeem(token, db, get_base_url(request))
    return RedirectResponse(redirect_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
