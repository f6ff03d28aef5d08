from pydantic import Field

from shared.schemas import CamelModel


class UserRegister(CamelModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)


class SendOTPRequest(CamelModel):
    phone: str = Field(min_length=1)


class OTPVerification(CamelModel):
    phone: str = Field(min_length=1)
    otp: str = Field(min_length=1)


class UserResponse(CamelModel):
    # No OTP fields: they never leave the service.
    id: str
    name: str
    phone: str


class TokenResponse(CamelModel):
    user: UserResponse
    token: str


class MessageResponse(CamelModel):
    message: str
