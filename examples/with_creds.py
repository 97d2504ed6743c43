"""Listen to a queue with explicit credentials and manual acknowledgment."""
import asyncio
import os

from botocore.config import Config as BotoConfig
from loguru import logger

from sqs_listener import Config, Credentials, Listener, Message, SQSListenerClientBuilder


async def main() -> None:
    credentials = Credentials(
        access_key_id=os.environ["AWS_ACCESS_KEY_ID"],
        secret_access_key=os.environ["AWS_SECRET_ACCESS_KEY"],
    )
    client = None

    async def handle(message: Message) -> None:
        logger.info("Message received {}", message.body)
        await client.ack_message(message)

    client = (
        SQSListenerClientBuilder.new_with(
            credentials,
            "us-east-1",
            boto_config=BotoConfig(retries={"max_attempts": 3}),
        )
        .listener(Listener(os.environ["QUEUE_URL"], handle))
        .config(Config(check_interval_seconds=1.0, auto_ack=False))
        .build()
    )
    await client.start()


if __name__ == "__main__":
    asyncio.run(main())
