from prometheus_client import Counter, Histogram

# Business Metrics
delivery_orders_created_total = Counter(
    "delivery_orders_created_total",
    "Total orders created"
)

delivery_orders_canceled_total = Counter(
    "delivery_orders_canceled_total",
    "Total orders canceled by customers"
)

delivery_order_events_published_total = Counter(
    "delivery_order_events_published_total",
    "Order status events sent to the queue",
    ["outcome"] # Labels: 'success', 'failed'
)

delivery_notifications_total = Counter(
    "delivery_notifications_total",
    "Order status notifications processed by the consumer",
    ["outcome"] # Labels: 'sent', 'failed', 'dead_letter', 'poison'
)

delivery_request_duration_seconds = Histogram(
    "delivery_request_duration_seconds",
    "Dispatched request duration in seconds",
    ["route"]
)
