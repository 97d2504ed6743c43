"""Listen to a queue with the default AWS credential chain."""
import asyncio
import os

from loguru import logger

from sqs_listener import Listener, SQSListenerClientBuilder


async def main() -> None:
    listener = Listener(
        os.environ["QUEUE_URL"],
        lambda message: logger.info("Message received {}", message),
    )
    client = SQSListenerClientBuilder.new("us-east-1").listener(listener).build()
    await client.start()


if __name__ == "__main__":
    asyncio.run(main())
