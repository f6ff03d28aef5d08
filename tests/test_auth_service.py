from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select

from services.auth_service.models import User
from services.auth_service.schemas import OTPVerification, SendOTPRequest, UserRegister
from services.auth_service.service import STATIC_OTP, _as_utc
from shared.errors import Conflict, Expired, InvalidCredential, NotFound


async def count_users_with_phone(components, db, phone):
    table = components.users.table
    result = await db.execute(select(func.count()).select_from(table).where(table.c.phone == phone))
    return result.scalar_one()


class TestRegistration:

    async def test_register_stores_otp_but_does_not_return_it(self, components, db):
        user = await components.auth_service.register(db, UserRegister(name="A", phone="+1"))

        assert user.model_dump(by_alias=True) == {"id": user.id, "name": "A", "phone": "+1"}
        stored = await components.users.get_by_phone(db, "+1")
        assert stored.otp == STATIC_OTP
        expires_at = _as_utc(stored.otp_expires_at)
        remaining = expires_at - datetime.now(timezone.utc)
        assert timedelta(seconds=100) < remaining <= timedelta(seconds=120)

    async def test_duplicate_phone_is_conflict(self, components, db):
        await components.auth_service.register(db, UserRegister(name="A", phone="+1"))

        with pytest.raises(Conflict):
            await components.auth_service.register(db, UserRegister(name="B", phone="+1"))

        assert await count_users_with_phone(components, db, "+1") == 1

    async def test_store_rejects_duplicate_phone_without_a_prior_lookup(self, components, db):
        await components.users.create(db, User(id="u1", name="A", phone="+1"))

        with pytest.raises(Conflict):
            await components.users.create(db, User(id="u2", name="B", phone="+1"))

        assert await count_users_with_phone(components, db, "+1") == 1

    async def test_race_past_the_lookup_is_still_a_conflict(self, components, db, monkeypatch):
        # Both requests see "no such phone" before either one writes.
        monkeypatch.setattr(components.users, "get_by_phone", AsyncMock(return_value=None))

        await components.auth_service.register(db, UserRegister(name="A", phone="+7"))
        with pytest.raises(Conflict):
            await components.auth_service.register(db, UserRegister(name="B", phone="+7"))

        assert await count_users_with_phone(components, db, "+7") == 1


class TestSendOTP:

    async def test_unknown_phone_is_not_found(self, components, db):
        with pytest.raises(NotFound):
            await components.auth_service.send_otp(db, SendOTPRequest(phone="+404"))

    async def test_send_resets_the_window(self, components, db):
        await components.auth_service.register(db, UserRegister(name="A", phone="+1"))
        user = await components.users.get_by_phone(db, "+1")
        await components.users.set_otp(db, user.id, "000000", datetime.now(timezone.utc) - timedelta(minutes=5))

        await components.auth_service.send_otp(db, SendOTPRequest(phone="+1"))

        refreshed = await components.users.get_by_phone(db, "+1")
        assert refreshed.otp == STATIC_OTP
        assert _as_utc(refreshed.otp_expires_at) > datetime.now(timezone.utc)


class TestVerifyOTP:

    async def test_verify_returns_token_for_the_same_user_and_clears_otp(self, components, db):
        registered = await components.auth_service.register(db, UserRegister(name="A", phone="+1"))

        result = await components.auth_service.verify_otp(db, OTPVerification(phone="+1", otp=STATIC_OTP))

        claims = components.jwt_handler.verify_access_token(result.token)
        assert claims["userId"] == registered.id
        assert claims["phone"] == "+1"
        assert claims["name"] == "A"
        assert result.user.id == registered.id

        stored = await components.users.get_by_phone(db, "+1")
        assert stored.otp is None
        assert stored.otp_expires_at is None

    async def test_second_verify_with_same_code_fails(self, components, db):
        await components.auth_service.register(db, UserRegister(name="A", phone="+1"))
        await components.auth_service.verify_otp(db, OTPVerification(phone="+1", otp=STATIC_OTP))

        with pytest.raises(InvalidCredential):
            await components.auth_service.verify_otp(db, OTPVerification(phone="+1", otp=STATIC_OTP))

    async def test_wrong_code_is_invalid_credential(self, components, db):
        await components.auth_service.register(db, UserRegister(name="A", phone="+1"))

        with pytest.raises(InvalidCredential):
            await components.auth_service.verify_otp(db, OTPVerification(phone="+1", otp="999999"))

    async def test_expired_code(self, components, db):
        await components.auth_service.register(db, UserRegister(name="A", phone="+1"))
        user = await components.users.get_by_phone(db, "+1")
        await components.users.set_otp(db, user.id, STATIC_OTP, datetime.now(timezone.utc) - timedelta(seconds=1))

        with pytest.raises(Expired):
            await components.auth_service.verify_otp(db, OTPVerification(phone="+1", otp=STATIC_OTP))

    async def test_unknown_phone_is_not_found(self, components, db):
        with pytest.raises(NotFound):
            await components.auth_service.verify_otp(db, OTPVerification(phone="+404", otp=STATIC_OTP))
