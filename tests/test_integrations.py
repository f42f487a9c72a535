"""Tests for the event sinks and the QR encoder."""
import json
import logging
import pytest
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError

from core.config import Settings
from integrations.event_sink import LoggingEventSink, SqsEventSink, create_event_sink
from integrations.qr_encoder import SvgQrEncoder


@pytest.mark.unit
class TestLoggingEventSink:

    def test_publish_logs_event(self, caplog):
        sink = LoggingEventSink()

        with caplog.at_level(logging.INFO, logger="integrations.event_sink"):
            assert sink.publish("ReservationCompleted", {"location": "12 Harbour Street"}) is True

        assert caplog.records[-1].getMessage() == "Event ReservationCompleted published"
        assert caplog.records[-1].event_type == "ReservationCompleted"

    def test_keeps_no_events_in_memory(self):
        sink = LoggingEventSink()
        for _ in range(3):
            sink.publish("ReservationCompleted", {"location": "12 Harbour Street"})

        assert vars(sink) == {}


@pytest.mark.unit
class TestSqsEventSink:
    """Test SQS delivery with a stubbed boto3 client."""

    QUEUE_URL = "https://sqs.eu-central-1.amazonaws.com/123456789012/reports"

    def test_publish_sends_json_message(self):
        client = MagicMock()
        client.send_message.return_value = {"MessageId": "m-1"}
        sink = SqsEventSink(self.QUEUE_URL, client=client)

        assert sink.publish("ReservationCompleted", {"waiter": "Anna Berg"}) is True

        kwargs = client.send_message.call_args.kwargs
        assert kwargs["QueueUrl"] == self.QUEUE_URL
        assert json.loads(kwargs["MessageBody"]) == {
            "eventType": "ReservationCompleted",
            "payload": {"waiter": "Anna Berg"},
        }
        assert kwargs["MessageAttributes"]["eventType"]["StringValue"] == "ReservationCompleted"

    def test_client_error_returns_false(self):
        client = MagicMock()
        client.send_message.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "SendMessage"
        )
        sink = SqsEventSink(self.QUEUE_URL, client=client)

        assert sink.publish("ReservationCompleted", {}) is False

    def test_factory_selects_sink(self):
        assert isinstance(create_event_sink(Settings(event_sink="log")), LoggingEventSink)

        with patch("integrations.event_sink.boto3.client") as boto_client:
            sink = create_event_sink(
                Settings(event_sink="sqs", sqs_queue_url=self.QUEUE_URL, aws_region="eu-west-1")
            )

        assert isinstance(sink, SqsEventSink)
        boto_client.assert_called_once_with("sqs", region_name="eu-west-1")


@pytest.mark.unit
class TestSvgQrEncoder:

    def test_encode_returns_svg(self):
        image = SvgQrEncoder().encode("https://tables.example.com/feedback?token=abc")

        assert image
        assert b"svg" in image
