"""
Application error taxonomy.

Services raise these; the error_handler middleware turns them into
HTTP responses with the matching status code and a {"detail": ...} body.
"""


class AppError(Exception):
    status_code = 500
    code = "internal"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"


class Unauthorized(AppError):
    status_code = 401
    code = "unauthorized"


class InvalidCredential(Unauthorized):
    code = "invalid_credential"


class Expired(Unauthorized):
    code = "expired"


class Forbidden(AppError):
    status_code = 403
    code = "forbidden"


class NotFound(AppError):
    status_code = 404
    code = "not_found"


class Conflict(AppError):
    status_code = 409
    code = "conflict"


class UnprocessableEntity(AppError):
    status_code = 422
    code = "unprocessable_entity"


class InvalidTransition(AppError):
    status_code = 400
    code = "invalid_transition"


class InternalError(AppError):
    status_code = 500
    code = "internal"
