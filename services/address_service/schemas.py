from typing import Optional

from pydantic import Field

from shared.schemas import CamelModel


class DeliveryAddressCreate(CamelModel):
    name: str = Field(min_length=1)
    address_line: str = Field(min_length=1)
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class DeliveryAddressResponse(CamelModel):
    id: str
    user_id: str
    name: str
    address_line: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
