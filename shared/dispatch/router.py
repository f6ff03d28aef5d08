from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .http import Handler, Middleware, Request, Response, json_response

# Returned by Router.match when nothing matches. No handler is invoked.
NOT_FOUND = None


@dataclass
class Route:
    path: str
    method: Optional[str]
    handler: Handler
    middleware: List[Middleware] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.method:
            self.method = self.method.upper()
        self._segments = _split(self.path)

    def match_path(self, path: str) -> Optional[Dict[str, str]]:
        """Segment-wise equality; a {name} segment binds exactly one non-empty segment."""
        segments = _split(path)
        if len(segments) != len(self._segments):
            return None
        params: Dict[str, str] = {}
        for pattern, actual in zip(self._segments, segments):
            if pattern.startswith("{") and pattern.endswith("}"):
                if not actual:
                    return None
                params[pattern[1:-1]] = actual
            elif pattern != actual:
                return None
        return params

    def accepts(self, method: str) -> bool:
        return self.method is None or self.method == method.upper()


@dataclass
class RouteMatch:
    route: Route
    handler: Handler
    path_params: Dict[str, str]


def apply_middleware(handler: Handler, middleware: Sequence[Middleware]) -> Handler:
    """Wrap so that middleware[0] is outermost: first on the way in, last on the way out."""
    for mw in reversed(middleware):
        handler = mw(handler)
    return handler


class Router:
    def __init__(self):
        self.routes: List[Route] = []
        self.global_middleware: List[Middleware] = []

    def use(self, *middleware: Middleware) -> "Router":
        self.global_middleware.extend(middleware)
        return self

    def add(self, path: str, method: Optional[str], handler: Handler, *middleware: Middleware) -> "Router":
        self.routes.append(Route(path=path, method=method, handler=handler, middleware=list(middleware)))
        return self

    def match(self, request: Request) -> Optional[RouteMatch]:
        # First match in declaration order wins.
        for route in self.routes:
            if not route.accepts(request.method):
                continue
            params = route.match_path(request.path)
            if params is None:
                continue
            chain = [*self.global_middleware, *route.middleware]
            return RouteMatch(
                route=route,
                handler=apply_middleware(route.handler, chain),
                path_params=params,
            )
        return NOT_FOUND

    async def dispatch(self, request: Request) -> Response:
        match = self.match(request)
        if match is NOT_FOUND:
            return json_response(404, {"detail": "Not found"})
        request.path_params = match.path_params
        request.context["route"] = match.route.path
        return await match.handler(request)


def _split(path: str) -> List[str]:
    path = path.split("?", 1)[0].strip("/")
    return path.split("/") if path else []
