import uuid
from typing import List

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.security import AuthUser

from .models import DeliveryAddress
from .repository import DeliveryAddressRepository
from .schemas import DeliveryAddressCreate, DeliveryAddressResponse

logger = structlog.get_logger(__name__)


class DeliveryAddressService:

    def __init__(self, addresses: DeliveryAddressRepository):
        self.addresses = addresses

    async def create_address(
        self, db: AsyncSession, user: AuthUser, data: DeliveryAddressCreate
    ) -> DeliveryAddressResponse:
        address = DeliveryAddress(
            id=str(uuid.uuid4()),
            user_id=user.id,
            name=data.name,
            address_line=data.address_line,
            latitude=data.latitude,
            longitude=data.longitude,
        )
        await self.addresses.create(db, address)
        logger.info("delivery_address_created", address_id=address.id, user_id=user.id)
        return DeliveryAddressResponse.model_validate(address)

    async def list_addresses(self, db: AsyncSession, user: AuthUser) -> List[DeliveryAddressResponse]:
        addresses = await self.addresses.list_by_user(db, user.id)
        return [DeliveryAddressResponse.model_validate(a) for a in addresses]
