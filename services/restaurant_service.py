from sqlalchemy.orm import Session
from fastapi import HTTPException
from starlette import status
from models.restaurants import Restaurant
from schemas.restaurant_schemas import UpdateRestaurantRequest
from utils.codes import slugify
from utils.logger import get_logger

logger = get_logger(__name__)


class RestaurantService:

    @staticmethod
    def get_restaurant_for_user(user_id: int, db: Session) -> Restaurant | None:
        return db.query(Restaurant).filter(Restaurant.user_id == user_id).one_or_none()

    @staticmethod
    def get_profile(principal: dict, db: Session) -> Restaurant:
        restaurant = RestaurantService.get_restaurant_for_user(principal.get("user_id"), db)
        if not restaurant:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                detail="Profile not found for this user.")
        return restaurant

    @staticmethod
    def update_profile(principal: dict, body: UpdateRestaurantRequest, db: Session) -> Restaurant:
        restaurant = RestaurantService.get_profile(principal, db)

        changes = body.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(restaurant, field, value)

        db.commit()
        db.refresh(restaurant)

        logger.info(
            "Restaurant profile updated",
            extra={"restaurant_id": restaurant.id, "fields": sorted(changes)}
        )
        return restaurant

    @staticmethod
    def generate_unique_slug(name: str, db: Session) -> str:
        base = slugify(name)
        slug = base
        suffix = 2
        while db.query(Restaurant.id).filter(Restaurant.slug == slug).first():
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug
