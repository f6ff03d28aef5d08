import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.settings import Settings
from shared.errors import Conflict, Expired, InvalidCredential, NotFound
from shared.security.jwt_handler import JWTHandler

from .models import User
from .repository import UserRepository
from .schemas import OTPVerification, SendOTPRequest, TokenResponse, UserRegister, UserResponse

logger = structlog.get_logger(__name__)

# Fixed code until an SMS provider is wired in.
STATIC_OTP = "123456"


def generate_otp() -> str:
    return STATIC_OTP


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands timestamps back naive; they were written as UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AuthService:

    def __init__(self, users: UserRepository, jwt_handler: JWTHandler, settings: Settings):
        self.users = users
        self.jwt_handler = jwt_handler
        self.otp_ttl = timedelta(seconds=settings.otp_ttl_seconds)

    async def register(self, db: AsyncSession, data: UserRegister) -> UserResponse:
        existing = await self.users.get_by_phone(db, data.phone)
        if existing:
            raise Conflict("Phone number already registered")

        user = User(
            id=str(uuid.uuid4()),
            name=data.name,
            phone=data.phone,
            otp=generate_otp(),
            otp_expires_at=datetime.now(timezone.utc) + self.otp_ttl,
        )
        # The lookup above is only a fast path; the unique phone index decides races.
        await self.users.create(db, user)
        logger.info("user_registered", user_id=user.id)
        return UserResponse.model_validate(user)

    async def send_otp(self, db: AsyncSession, data: SendOTPRequest) -> None:
        user = await self.users.get_by_phone(db, data.phone)
        if not user:
            raise NotFound("User not found with the provided phone number")

        await self.users.set_otp(
            db, user.id, generate_otp(), datetime.now(timezone.utc) + self.otp_ttl
        )
        logger.info("otp_sent", user_id=user.id)

    async def verify_otp(self, db: AsyncSession, data: OTPVerification) -> TokenResponse:
        user = await self.users.get_by_phone(db, data.phone)
        if not user:
            raise NotFound("User not found")

        if not user.otp or user.otp != data.otp:
            raise InvalidCredential("Invalid OTP")

        expires_at = _as_utc(user.otp_expires_at)
        if expires_at is None or datetime.now(timezone.utc) > expires_at:
            raise Expired("OTP has expired")

        await self.users.clear_otp(db, user.id)
        token = self.jwt_handler.create_access_token(user.id, user.name, user.phone)
        logger.info("otp_verified", user_id=user.id)
        return TokenResponse(user=UserResponse.model_validate(user), token=token)

