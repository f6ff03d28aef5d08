from shared.dispatch import Request, Response, Router, json_response

from .schemas import MessageResponse, OTPVerification, SendOTPRequest, UserRegister
from .service import AuthService


def register_routes(router: Router, service: AuthService) -> None:
    """Public endpoints: no bearer token is required to obtain one."""

    async def register(request: Request) -> Response:
        payload = request.parse(UserRegister)
        user = await service.register(request.context["db"], payload)
        return json_response(201, user)

    async def send_otp(request: Request) -> Response:
        payload = request.parse(SendOTPRequest)
        await service.send_otp(request.context["db"], payload)
        return json_response(200, MessageResponse(message="OTP sent successfully"))

    async def verify_otp(request: Request) -> Response:
        payload = request.parse(OTPVerification)
        return json_response(200, await service.verify_otp(request.context["db"], payload))

    router.add("/users/register", "POST", register)
    router.add("/users/send-otp", "POST", send_otp)
    router.add("/users/verify-otp", "POST", verify_otp)
