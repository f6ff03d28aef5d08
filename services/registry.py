"""
Builds every component from one Settings value.

Both the API process (main.create_app) and the consumer process
(notification_service.worker) start here, so they agree on table names,
queue and channel without reading the environment themselves.
"""
from dataclasses import dataclass
from typing import Optional

from services.address_service.repository import DeliveryAddressRepository
from services.address_service.service import DeliveryAddressService
from services.auth_service.repository import UserRepository
from services.auth_service.service import AuthService
from services.catalog_service.repository import CatalogRepository
from services.catalog_service.service import CatalogService
from services.notification_service.consumer import OrderEventConsumer
from services.notification_service.publisher import OrderEventPublisher
from services.notification_service.service import NotificationService
from services.order_service.repository import OrderRepository
from services.order_service.service import OrderService
from shared.config.database import Database
from shared.config.settings import Settings
from shared.messaging import NotificationChannel, OrderQueue, build_messaging
from shared.security import JWTHandler


@dataclass
class Components:
    settings: Settings
    database: Database
    queue: OrderQueue
    channel: NotificationChannel
    jwt_handler: JWTHandler
    users: UserRepository
    addresses: DeliveryAddressRepository
    catalog: CatalogRepository
    orders: OrderRepository
    auth_service: AuthService
    address_service: DeliveryAddressService
    catalog_service: CatalogService
    order_service: OrderService
    notification_service: NotificationService
    consumer: OrderEventConsumer


def build_components(
    settings: Settings,
    *,
    database: Optional[Database] = None,
    queue: Optional[OrderQueue] = None,
    channel: Optional[NotificationChannel] = None,
) -> Components:
    database = database or Database(settings)
    if queue is None or channel is None:
        default_queue, default_channel = build_messaging(settings)
        queue = queue or default_queue
        channel = channel or default_channel

    jwt_handler = JWTHandler(settings)

    users = UserRepository(database, settings.users_table_name)
    addresses = DeliveryAddressRepository(database, settings.delivery_address_table_name)
    catalog = CatalogRepository(database, settings)
    orders = OrderRepository(database, settings.orders_table_name, settings.order_items_table_name)

    publisher = OrderEventPublisher(queue)
    notification_service = NotificationService(orders, users, channel)

    return Components(
        settings=settings,
        database=database,
        queue=queue,
        channel=channel,
        jwt_handler=jwt_handler,
        users=users,
        addresses=addresses,
        catalog=catalog,
        orders=orders,
        auth_service=AuthService(users, jwt_handler, settings),
        address_service=DeliveryAddressService(addresses),
        catalog_service=CatalogService(catalog),
        order_service=OrderService(orders, addresses, catalog, publisher),
        notification_service=notification_service,
        consumer=OrderEventConsumer(
            queue,
            notification_service,
            database,
            batch_size=settings.consumer_batch_size,
            wait_seconds=settings.consumer_wait_seconds,
            max_attempts=settings.consumer_max_attempts,
        ),
    )
