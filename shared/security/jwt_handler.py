from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from shared.config.settings import Settings


class JWTHandler:
    """Issues and verifies the HS256 bearer tokens handed out after OTP verification."""

    def __init__(self, settings: Settings):
        self.secret_key = settings.jwt_secret
        self.algorithm = settings.jwt_algorithm
        self.issuer = settings.jwt_issuer
        self.expire_delta = timedelta(hours=settings.access_token_expire_hours)

    def create_access_token(
        self, user_id: str, name: str, phone: str, expires_delta: Optional[timedelta] = None
    ) -> str:
        """Creates a JWT access token with a UTC expiration."""
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None else self.expire_delta)
        to_encode = {
            "userId": user_id,
            "name": name,
            "phone": phone,
            "iat": now,
            "nbf": now,
            "exp": expire,
            "iss": self.issuer,
            "sub": user_id,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify_access_token(self, token: str) -> dict | None:
        """Decodes and verifies the JWT. Returns payload if valid, None if invalid/expired."""
        if not token:
            return None
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
            )
        except JWTError:
            return None
