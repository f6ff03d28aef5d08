from shared.dispatch import Middleware, Request, Response, Router, json_response
from shared.security import get_current_user

from .schemas import DeliveryAddressCreate
from .service import DeliveryAddressService


def register_routes(router: Router, service: DeliveryAddressService, auth: Middleware) -> None:

    async def create_address(request: Request) -> Response:
        payload = request.parse(DeliveryAddressCreate)
        address = await service.create_address(
            request.context["db"], get_current_user(request), payload
        )
        return json_response(201, address)

    async def list_addresses(request: Request) -> Response:
        addresses = await service.list_addresses(request.context["db"], get_current_user(request))
        return json_response(200, addresses)

    router.add("/delivery-addresses", "POST", create_address, auth)
    router.add("/delivery-addresses", "GET", list_addresses, auth)
