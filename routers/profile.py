from fastapi import APIRouter, Request
from starlette import status
from utils.deps import db_dependency, user_dependency
from schemas.restaurant_schemas import RestaurantProfile, UpdateRestaurantRequest
from services.restaurant_service import RestaurantService
from middleware.rate_limiter import limiter


router = APIRouter(
    prefix="/profile",
    tags=["profile"]
)


@router.get("", response_model=RestaurantProfile, status_code=status.HTTP_200_OK)
@limiter.limit("30/minute")
async def get_profile(request: Request, user: user_dependency, db: db_dependency):
    """
    Restaurant profile of the logged-in owner.
    """
    return RestaurantService.get_profile(user, db)


@router.put("", response_model=RestaurantProfile, status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
async def update_profile(request: Request, body: UpdateRestaurantRequest, user: user_dependency, db: db_dependency):
    """
    Update name, UPI handle and contact details. Online checkout is only
    offered once a UPI handle is set.
    """
    return RestaurantService.update_profile(user, body, db)
