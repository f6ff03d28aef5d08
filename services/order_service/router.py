from shared.dispatch import Middleware, Request, Response, Router, json_response
from shared.security import get_current_user

from .schemas import OrderCreate, OrderStatusUpdate
from .service import OrderService


def register_routes(router: Router, service: OrderService, auth: Middleware, internal_auth: Middleware) -> None:

    async def create_order(request: Request) -> Response:
        payload = request.parse(OrderCreate)
        order = await service.create_order(request.context["db"], get_current_user(request), payload)
        return json_response(201, order)

    async def list_orders(request: Request) -> Response:
        orders = await service.list_user_orders(request.context["db"], get_current_user(request))
        return json_response(200, orders)

    async def get_order(request: Request) -> Response:
        order = await service.get_order_details(
            request.context["db"], get_current_user(request), request.path_params["orderId"]
        )
        return json_response(200, order)

    async def cancel_order(request: Request) -> Response:
        order = await service.cancel_order(
            request.context["db"], get_current_user(request), request.path_params["orderId"]
        )
        return json_response(200, order)

    # THIS IS FOR THE FULFILMENT SIDE ONLY (internal API key, no customer token)
    async def update_status(request: Request) -> Response:
        payload = request.parse(OrderStatusUpdate)
        order = await service.apply_status_update(
            request.context["db"], request.path_params["orderId"], payload.status
        )
        return json_response(200, order)

    router.add("/orders", "POST", create_order, auth)
    router.add("/orders", "GET", list_orders, auth)
    router.add("/orders/{orderId}", "GET", get_order, auth)
    router.add("/orders/{orderId}/cancel", "POST", cancel_order, auth)
    router.add("/internal/orders/{orderId}/status", "PUT", update_status, internal_auth)
