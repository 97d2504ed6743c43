import asyncio
import signal
from typing import Any

from loguru import logger

from sqs_listener.composition import create_listener_client, create_queue_client_from_settings
from sqs_listener.config.settings import Settings
from sqs_listener.core import SERVICE_NAME
from sqs_listener.domain.models import Message


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def log_message(message: Message) -> None:
    _log("message_received", message_id=message.message_id, body_length=len(message.body))


async def run_listener(settings: Settings | None = None) -> None:
    settings = settings or Settings()
    queue_client = create_queue_client_from_settings(settings)
    client = create_listener_client(settings, log_message, queue_client=queue_client)

    def request_shutdown() -> None:
        if client.running:
            _log("shutdown_signal")
            client.stop()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_shutdown)
        except NotImplementedError:
            pass

    try:
        await client.start()
    finally:
        try:
            await queue_client.close()
        except Exception as e:
            logger.warning("queue client close failed: {}", e)


def main() -> None:
    try:
        asyncio.run(run_listener())
    except KeyboardInterrupt:
        _log("listener_interrupted")
    except Exception as e:
        logger.exception("listener failed: {}", e)
        raise


if __name__ == "__main__":
    main()
