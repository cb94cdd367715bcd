from utils.hashing import verify_password, get_password_hash
from models.users import User
from models.restaurants import Restaurant
from schemas.auth_schemas import CreateOwnerRequest
from services.restaurant_service import RestaurantService
from sqlalchemy.orm import Session
from fastapi import HTTPException
from starlette import status
from utils.logger import get_logger

logger = get_logger(__name__)

class AuthService:

    @staticmethod
    def create_owner(request: CreateOwnerRequest, db: Session):
        """
        Creates a restaurant owner together with their restaurant.

        Flow:
        1. Check if email already exists
        2. Create user
        3. Create restaurant with a unique slug
        4. Return the user
        """
        email = request.email.lower().strip()
        existing_user = db.query(User).filter(User.email == email).first()
        if existing_user:
            logger.warning(
                "Registration attempt with existing email",
                extra={"email": email}
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered"
            )

        user = User(
            email=email,
            hashed_password=get_password_hash(request.password),
            role="owner",
        )
        db.add(user)
        db.flush()

        restaurant = Restaurant(
            user_id=user.id,
            restaurant_name=request.restaurant_name,
            slug=RestaurantService.generate_unique_slug(request.restaurant_name, db),
            phone_number=request.phone_number,
        )
        db.add(restaurant)
        db.commit()

        db.refresh(user)
        return user


    @staticmethod
    def authenticate_user(email: str, password: str, db: Session):
        user = db.query(User).filter(User.email == email.lower().strip()).first()

        if not user:
            logger.warning(
            "Login failed - user not found",
            extra={"email": email}
            )
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate user.")

        if not user.is_active:
            logger.warning(
            "Login failed - inactive account",
            extra={"email": email}
            )
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate user.")

        if not verify_password(password, user.hashed_password):
            logger.warning(
                "Login failed - invalid password",
                extra={"user_id": user.id, "email": email}
            )
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate user.")

        logger.debug(
            "User authenticated successfully",
            extra={"user_id": user.id, "email": email}
        )

        return user
