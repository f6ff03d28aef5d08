from .http import Handler, Middleware, Request, Response, json_response
from .router import NOT_FOUND, Route, RouteMatch, Router, apply_middleware

__all__ = [
    "Handler",
    "Middleware",
    "Request",
    "Response",
    "json_response",
    "NOT_FOUND",
    "Route",
    "RouteMatch",
    "Router",
    "apply_middleware",
]
