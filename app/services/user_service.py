from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from datetime import timedelta
from typing import Optional

from app.core.config import settings
from app.core.database import utcnow
from app.core.exceptions import InternalError, InvalidOtp, NotFound, NotifierError
from app.core.logging import get_logger
from app.core.security import generate_otp, generate_token_response
from app.models.user import User
from app.schemas.user import OtpRequest, OtpVerify, normalize_email
from app.services.notifier import Notifier

logger = get_logger(__name__)

OTP_SUBJECT = "Your OTP Code for Energy Calculator"


def render_otp_email(name: str, otp: str) -> tuple:
    """Plain-text and HTML bodies of the OTP email"""
    minutes = settings.OTP_EXPIRE_MINUTES
    text = (
        f"Hello {name},\n\n"
        f"Your One-Time Password (OTP) is: {otp}\n\n"
        f"This OTP is valid for {minutes} minutes.\n"
    )
    html = f"""
      <div style="font-family: Arial, sans-serif; background:#f6f9fc; padding:20px; text-align:center;">
        <h2 style="color:#333;">Hello {name},</h2>
        <p style="font-size:16px;">Your One-Time Password (OTP) is:</p>
        <h1 style="background:#4CAF50; color:#fff; display:inline-block; padding:10px 20px; border-radius:5px;">{otp}</h1>
        <p style="font-size:14px; color:#555;">This OTP is valid for {minutes} minutes.</p>
      </div>
    """
    return text, html


class UserService:
    """Issues one-time passcodes and exchanges them for session credentials"""

    def __init__(self, db: AsyncSession, notifier: Optional[Notifier] = None):
        self.db = db
        self.notifier = notifier

    async def get_user_by_email(self, email: str) -> Optional[User]:
        stmt = (
            select(User)
            .where(User.email == normalize_email(email))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def request_otp(self, data: OtpRequest) -> User:
        """Arm a fresh OTP for the identity and email it.

        The identity is upserted before dispatch and stays persisted if the
        notifier fails; a NotifierError is raised in that case.
        """
        email = normalize_email(data.email)
        otp = generate_otp()
        expires_at = utcnow() + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)

        try:
            user = await self._upsert_pending_otp(email, data.name, otp, expires_at)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("OTP upsert failed", email=email, error=e)
            raise InternalError("Failed to send OTP") from e

        logger.info("OTP issued", email=email, expires_at=expires_at.isoformat())

        text, html = render_otp_email(data.name, otp)
        try:
            await self.notifier.send(email, OTP_SUBJECT, text, html=html)
        except NotifierError:
            logger.error("OTP dispatch failed, pending OTP kept", email=email)
            raise
        except Exception as e:
            logger.error("OTP dispatch failed, pending OTP kept", email=email, error=e)
            raise NotifierError() from e

        return user

    async def _upsert_pending_otp(self, email: str, name: str, otp: str, expires_at) -> User:
        user = await self.get_user_by_email(email)
        if user is None:
            user = User(email=email, name=name, otp=otp, otp_expires_at=expires_at)
            self.db.add(user)
        else:
            user.name = name
            user.otp = otp
            user.otp_expires_at = expires_at

        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent first request created the identity; re-arm it instead
            await self.db.rollback()
            stmt = (
                update(User)
                .where(User.email == email)
                .values(name=name, otp=otp, otp_expires_at=expires_at)
            )
            await self.db.execute(stmt)
            await self.db.commit()
            user = await self.get_user_by_email(email)

        return user

    async def verify_otp(self, data: OtpVerify) -> dict:
        """Consume a pending OTP and issue a session credential.

        The match, expiry check and clear happen in one conditional UPDATE,
        so of two concurrent verifications with the same code only one
        affects a row. The expiry instant itself is still valid.
        """
        email = normalize_email(data.email)

        stmt = (
            update(User)
            .where(
                User.email == email,
                User.otp.is_not(None),
                User.otp == data.otp,
                User.otp_expires_at >= utcnow(),
            )
            .values(otp=None, otp_expires_at=None)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)

        if result.rowcount != 1:
            await self.db.rollback()
            user = await self.get_user_by_email(email)
            if user is None:
                logger.info("OTP verification for unknown email", email=email)
                raise NotFound("User not found")
            logger.info("OTP verification rejected", email=email)
            raise InvalidOtp()

        await self.db.commit()

        user = await self.get_user_by_email(email)
        logger.info("OTP verified", user_id=user.id, email=email)
        return generate_token_response(user.to_dict())


def get_user_service(db: AsyncSession, notifier: Optional[Notifier] = None) -> UserService:
    """Dependency to get user service"""
    return UserService(db, notifier)
