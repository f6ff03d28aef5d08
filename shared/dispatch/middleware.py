"""
Global middleware applied to every dispatched route.

Registered in create_app() as router.use(request_logging, error_handler,
db_session(database)), so logging wraps everything and sees the final
status code, including error responses produced by error_handler.
"""
import time
import uuid

import structlog

from shared.config.database import Database
from shared.errors import AppError
from shared.observability.metrics import delivery_request_duration_seconds

from .http import Handler, Middleware, Request, Response, json_response

logger = structlog.get_logger(__name__)


def request_logging(next_handler: Handler) -> Handler:
    async def handler(request: Request) -> Response:
        request_id = request.header("X-Request-ID") or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.path,
        )
        started = time.perf_counter()
        response = await next_handler(request)
        elapsed = time.perf_counter() - started

        route = request.context.get("route", request.path)
        delivery_request_duration_seconds.labels(route=route).observe(elapsed)
        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round(elapsed * 1000, 2),
        )
        response.headers.setdefault("X-Request-ID", request_id)
        return response

    return handler


def error_handler(next_handler: Handler) -> Handler:
    """Maps AppError subclasses to their HTTP status; anything else is a logged 500."""

    async def handler(request: Request) -> Response:
        try:
            return await next_handler(request)
        except AppError as exc:
            log = logger.warning if exc.status_code < 500 else logger.error
            log("request_failed", error=exc.code, detail=exc.message)
            return json_response(exc.status_code, {"detail": exc.message})
        except Exception:
            logger.exception("unhandled_error")
            return json_response(500, {"detail": "Internal server error"})

    return handler


def db_session(database: Database) -> Middleware:
    """Opens one AsyncSession per request and exposes it as request.context['db']."""

    def middleware(next_handler: Handler) -> Handler:
        async def handler(request: Request) -> Response:
            async with database.session() as session:
                request.context["db"] = session
                return await next_handler(request)

        return handler

    return middleware
