from .setup import configure_logging, setup_observability
from .metrics import (
    delivery_orders_created_total,
    delivery_orders_canceled_total,
    delivery_order_events_published_total,
    delivery_notifications_total,
    delivery_request_duration_seconds
)
