"""
Order status consumer process.

    python -m services.notification_service.worker

Runs independently of the API; both share only configuration and storage.
"""
import asyncio
import signal

import structlog

from services.registry import build_components
from shared.config.settings import get_settings
from shared.observability import configure_logging

logger = structlog.get_logger(__name__)


async def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    components = build_components(settings)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    logger.info("worker_starting", queue=settings.order_queue_name, backend=settings.messaging_backend)
    try:
        await components.database.create_all()
        await components.consumer.run(stop)
    finally:
        await components.database.dispose()


if __name__ == "__main__":
    asyncio.run(main())
