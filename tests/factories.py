import uuid
from typing import Optional

from services.address_service.models import DeliveryAddress
from services.auth_service.models import User
from services.catalog_service.models import Product
from shared.security import AuthUser


async def make_user(components, db, name: str = "Alice", phone: Optional[str] = None) -> AuthUser:
    user = User(id=str(uuid.uuid4()), name=name, phone=phone or f"+1{uuid.uuid4().int % 10**9}")
    await components.users.create(db, user)
    return AuthUser(id=user.id, name=user.name, phone=user.phone)


async def make_address(components, db, user: AuthUser, name: str = "Home") -> DeliveryAddress:
    address = DeliveryAddress(
        id=str(uuid.uuid4()),
        user_id=user.id,
        name=name,
        address_line="12 Nile St",
    )
    return await components.addresses.create(db, address)


async def make_product(components, db, price: float, name: str = "Falafel", category_id: str = "cat-1") -> Product:
    product = Product(
        id=str(uuid.uuid4()),
        name=name,
        description="",
        price=price,
        image_url="",
        category_id=category_id,
    )
    return await components.catalog.add_product(db, product)
