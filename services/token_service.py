from datetime import datetime, timezone, timedelta
from jose import jwt
from core.config import settings


class TokenService:
    """
    Issues access tokens for restaurant owners.
    """

    @staticmethod
    def create_access_token(email: str, user_id: int, role: str, expires_delta: timedelta = None):
        """
        Creates a JWT access token.

        Args:
            email: Owner's email
            user_id: Owner's user ID
            role: User's role
            expires_delta: Token lifetime (default: ACCESS_TOKEN_EXPIRE_MINUTES)

        Returns:
            JWT access token string
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

        expire = datetime.now(timezone.utc) + expires_delta

        payload = {
            "sub": email,
            "id": user_id,
            "role": role,
            "type": "access",
            "exp": expire
        }

        return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def create_tokens(email: str, user_id: int, role: str):
        return {
            "access_token": TokenService.create_access_token(email, user_id, role),
            "token_type": "bearer"
        }
