"""Event sinks receiving completion reports."""

import json
import logging
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from core.config import Settings


logger = logging.getLogger(__name__)


class LoggingEventSink:
    """Writes events to the application log."""

    def publish(self, event_type: str, payload: Dict[str, Any]) -> bool:
        logger.info(f"Event {event_type} published", extra={"event_type": event_type})
        return True


class SqsEventSink:
    """Sends events to an Amazon SQS queue as JSON messages."""

    def __init__(self, queue_url: str, region: str = "eu-central-1", client: Optional[Any] = None):
        """
        Initialize the sink.

        Args:
            queue_url: Target queue URL
            region: AWS region used when no client is supplied
            client: Pre-built boto3 SQS client
        """
        self.queue_url = queue_url
        self.client = client or boto3.client("sqs", region_name=region)

    def publish(self, event_type: str, payload: Dict[str, Any]) -> bool:
        """
        Send one event.

        Returns:
            True if SQS accepted the message, False otherwise
        """
        body = json.dumps({"eventType": event_type, "payload": payload}, default=str)
        try:
            response = self.client.send_message(
                QueueUrl=self.queue_url,
                MessageBody=body,
                MessageAttributes={
                    "eventType": {"DataType": "String", "StringValue": event_type},
                },
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to publish {event_type} to SQS: {e}")
            return False

        logger.info(f"Event {event_type} sent to SQS as message {response.get('MessageId')}")
        return True


def create_event_sink(config: Settings):
    """Build the sink selected in settings."""
    if config.event_sink == "sqs":
        return SqsEventSink(config.sqs_queue_url, region=config.aws_region)
    return LoggingEventSink()
