from .jwt_handler import JWTHandler
from .api_key import verify_api_key
from .dependencies import (
    AuthUser,
    get_current_user,
    require_auth,
    require_internal_api_key,
)

__all__ = [
    "JWTHandler",
    "verify_api_key",
    "AuthUser",
    "get_current_user",
    "require_auth",
    "require_internal_api_key",
]
