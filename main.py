from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from services.address_service.router import register_routes as register_address_routes
from services.auth_service.router import register_routes as register_auth_routes
from services.catalog_service.router import register_routes as register_catalog_routes
from services.order_service.router import register_routes as register_order_routes
from services.registry import Components, build_components
from shared.config.settings import Settings, get_settings
from shared.dispatch import Request as DispatchRequest
from shared.dispatch import Router
from shared.dispatch.middleware import db_session, error_handler, request_logging
from shared.observability import setup_observability
from shared.security import require_auth, require_internal_api_key

DISPATCH_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def build_router(components: Components) -> Router:
    router = Router()
    # Outermost first: logging sees the status produced by error_handler.
    router.use(request_logging, error_handler, db_session(components.database))

    auth = require_auth(components.jwt_handler)
    internal_auth = require_internal_api_key(components.settings.internal_api_key)

    register_auth_routes(router, components.auth_service)
    register_catalog_routes(router, components.catalog_service, auth)
    register_order_routes(router, components.order_service, auth, internal_auth)
    register_address_routes(router, components.address_service, auth)
    return router


def create_app(settings: Optional[Settings] = None, components: Optional[Components] = None) -> FastAPI:
    settings = settings or get_settings()
    components = components or build_components(settings)
    router = build_router(components)

    app = FastAPI(title="Delivery API", version="1.0.0")
    app.state.components = components
    app.state.router = router

    # --- OBSERVABILITY BOOTSTRAP (before the catch-all so /metrics wins) ---
    setup_observability(app, settings)

    @app.on_event("startup")
    async def startup_event():
        await components.database.create_all()

    @app.on_event("shutdown")
    async def shutdown_event():
        await components.database.dispose()

    @app.get("/health", include_in_schema=False)
    async def health_check():
        return {"service": settings.service_name, "status": "running"}

    @app.api_route("/{full_path:path}", methods=DISPATCH_METHODS, include_in_schema=False)
    async def dispatch(full_path: str, request: Request):
        response = await router.dispatch(DispatchRequest(
            method=request.method,
            path=request.url.path,
            headers=dict(request.headers),
            body=await request.body(),
            query=dict(request.query_params),
        ))
        return JSONResponse(
            status_code=response.status_code,
            content=response.body,
            headers={k: v for k, v in response.headers.items() if k.lower() != "content-type"},
        )

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=8000)
