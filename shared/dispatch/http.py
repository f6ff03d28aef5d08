"""
Transport-neutral request/response types for the dispatch layer.

The FastAPI adapter in main.py builds a Request from the incoming HTTP call
and turns the returned Response back into a JSONResponse, so handlers and
middleware never touch Starlette objects directly.
"""
import json
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from shared.errors import ValidationError

M = TypeVar("M", bound=BaseModel)


@dataclass
class Request:
    method: str
    path: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    query: Dict[str, str] = field(default_factory=dict)
    path_params: Dict[str, str] = field(default_factory=dict)
    # Request-scoped values set by middleware (db session, current user, ...)
    context: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())

    def json(self) -> Any:
        if not self.body:
            raise ValidationError("Request body is required")
        try:
            return json.loads(self.body)
        except (ValueError, UnicodeDecodeError):
            raise ValidationError("Invalid request format")

    def parse(self, schema: Type[M]) -> M:
        """Validate the JSON body against a pydantic schema."""
        try:
            return schema.model_validate(self.json())
        except PydanticValidationError as exc:
            raise ValidationError(_describe(exc))


@dataclass
class Response:
    status_code: int
    body: Any = None
    headers: Dict[str, str] = field(default_factory=dict)


Handler = Callable[[Request], Awaitable[Response]]
Middleware = Callable[[Handler], Handler]


def json_response(status_code: int, payload: Any) -> Response:
    return Response(
        status_code=status_code,
        body=_to_jsonable(payload),
        headers={"Content-Type": "application/json"},
    )


def _to_jsonable(payload: Any) -> Any:
    if isinstance(payload, BaseModel):
        return payload.model_dump(by_alias=True, mode="json")
    if isinstance(payload, (list, tuple)):
        return [_to_jsonable(p) for p in payload]
    if isinstance(payload, dict):
        return {k: _to_jsonable(v) for k, v in payload.items()}
    return payload


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts) or "Invalid request"
