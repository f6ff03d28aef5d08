from dataclasses import dataclass

from shared.dispatch import Handler, Middleware, Request, Response
from shared.errors import Forbidden, Unauthorized

from .api_key import verify_api_key
from .jwt_handler import JWTHandler

CURRENT_USER = "current_user"
INTERNAL_API_KEY_HEADER = "X-Internal-API-Key"


@dataclass(frozen=True)
class AuthUser:
    """Identity taken from validated token claims; never re-read from storage."""
    id: str
    name: str
    phone: str


def require_auth(jwt_handler: JWTHandler) -> Middleware:
    """Middleware that validates `Authorization: Bearer <token>` and stores the AuthUser."""

    def middleware(next_handler: Handler) -> Handler:
        async def handler(request: Request) -> Response:
            auth_header = request.header("Authorization")
            if not auth_header:
                raise Unauthorized("Authorization header is required")

            parts = auth_header.split(" ")
            if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
                raise Unauthorized("Authorization header format must be Bearer {token}")

            payload = jwt_handler.verify_access_token(parts[1])
            if payload is None:
                raise Unauthorized("Could not validate credentials")

            user_id = payload.get("sub") or payload.get("userId")
            if not user_id:
                raise Unauthorized("Could not validate credentials")

            request.context[CURRENT_USER] = AuthUser(
                id=user_id,
                name=payload.get("name", ""),
                phone=payload.get("phone", ""),
            )
            return await next_handler(request)

        return handler

    return middleware


def get_current_user(request: Request) -> AuthUser:
    user = request.context.get(CURRENT_USER)
    if user is None:
        raise Unauthorized("Could not validate credentials")
    return user


def require_internal_api_key(expected_key: str) -> Middleware:
    """Middleware for service-to-service calls from the fulfilment side."""

    def middleware(next_handler: Handler) -> Handler:
        async def handler(request: Request) -> Response:
            if not verify_api_key(request.header(INTERNAL_API_KEY_HEADER), expected_key):
                raise Forbidden(f"Invalid or missing {INTERNAL_API_KEY_HEADER} header")
            return await next_handler(request)

        return handler

    return middleware
