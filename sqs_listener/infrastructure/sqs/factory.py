"""Queue client factory: builds a QueueClient from region and credentials. Only place that imports boto3."""
from __future__ import annotations

import boto3
from botocore.config import Config as BotoConfig

from sqs_listener.domain.models import Credentials
from sqs_listener.infrastructure.sqs.boto3_client import Boto3SqsClient
from sqs_listener.ports.queue_client import QueueClient


def create_queue_client(
    region: str | None = None,
    *,
    credentials: Credentials | None = None,
    boto_config: BotoConfig | None = None,
    endpoint_url: str | None = None,
) -> QueueClient:
    """Build an SQS queue client.

    Without credentials the boto3 default chain (env, shared config, instance role) is used.
    """
    kwargs = {}
    if credentials is not None:
        kwargs = {
            "aws_access_key_id": credentials.access_key_id,
            "aws_secret_access_key": credentials.secret_access_key,
            "aws_session_token": credentials.session_token,
        }
    session = boto3.Session(region_name=region, **kwargs)
    client = session.client("sqs", config=boto_config, endpoint_url=endpoint_url)
    return Boto3SqsClient(client)
