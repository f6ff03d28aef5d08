from shared.dispatch import Middleware, Request, Response, Router, json_response

from .service import CatalogService


def register_routes(router: Router, service: CatalogService, auth: Middleware) -> None:

    async def list_ads(request: Request) -> Response:
        return json_response(200, await service.list_ads(request.context["db"]))

    async def list_categories(request: Request) -> Response:
        return json_response(200, await service.list_categories(request.context["db"]))

    async def list_products(request: Request) -> Response:
        category_id = request.path_params["categoryId"]
        return json_response(200, await service.list_products(request.context["db"], category_id))

    router.add("/ads", "GET", list_ads, auth)
    router.add("/categories", "GET", list_categories, auth)
    router.add("/products/{categoryId}", "GET", list_products, auth)
