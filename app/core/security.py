from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
import logging
import secrets
import string

from app.core.config import settings
from app.schemas.user import TokenData

logger = logging.getLogger(__name__)


def generate_otp(length: Optional[int] = None) -> str:
    """Generate a uniformly random numeric one-time passcode"""
    length = length or settings.OTP_LENGTH
    return "".join(secrets.choice(string.digits) for _ in range(length))


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})

    try:
        encoded_jwt = jwt.encode(
            to_encode,
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM
        )
        return encoded_jwt
    except Exception as e:
        logger.error(f"JWT token creation error: {e}")
        raise


def verify_token(token: str) -> Optional[TokenData]:
    """Verify signature and expiry of a JWT and return its claims.

    ``jwt.decode`` rejects expired tokens itself, so any failure here
    (bad signature, malformed token, expiry, missing subject) yields None.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )

        user_id: str = payload.get("sub")
        email: str = payload.get("email")

        if user_id is None:
            return None

        return TokenData(user_id=user_id, email=email)

    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


def generate_token_response(user_data: dict) -> dict:
    """Generate complete token response for a verified user"""
    access_token_expires = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)

    token_data = {
        "sub": str(user_data["id"]),
        "email": user_data["email"],
    }

    access_token = create_access_token(
        data=token_data,
        expires_delta=access_token_expires
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": settings.JWT_EXPIRE_MINUTES * 60,  # Convert to seconds
        "user_id": str(user_data["id"]),
        "name": user_data["name"],
        "email": user_data["email"],
    }
