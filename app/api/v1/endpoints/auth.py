from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.core.database import get_db
from app.core.deps import auth_rate_limiter, get_notifier
from app.core.exceptions import AppError, InternalError
from app.schemas.user import OtpRequest, OtpSent, OtpVerify, Token
from app.services.notifier import Notifier
from app.services.user_service import get_user_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=OtpSent, status_code=status.HTTP_200_OK)
async def request_otp(
    otp_request: OtpRequest,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    _: None = Depends(auth_rate_limiter)
):
    """Email a one-time passcode, creating the identity on first contact"""
    try:
        user_service = get_user_service(db, notifier)
        await user_service.request_otp(otp_request)
        return OtpSent(message="OTP sent successfully")

    except AppError:
        raise
    except Exception as e:
        logger.error(f"OTP request error: {e}")
        raise InternalError("Failed to send OTP")


@router.post("/verify", response_model=Token)
async def verify_otp(
    otp_verify: OtpVerify,
    db: AsyncSession = Depends(get_db),
    _: None = Depends(auth_rate_limiter)
):
    """Exchange a valid one-time passcode for a session credential"""
    try:
        user_service = get_user_service(db)
        token_response = await user_service.verify_otp(otp_verify)
        return Token(**token_response)

    except AppError:
        raise
    except Exception as e:
        logger.error(f"OTP verification error: {e}")
        raise InternalError()
