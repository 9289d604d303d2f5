"""Publishing and consuming SMS request events on the message queue."""

from __future__ import annotations

from typing import Any

from .logging_utils import component_logger, kafka_logger
from .models import KafkaPayload, SendSmsPayload

KAFKA_TOPIC_NAME = "notification.send_sms"
SMS_REQUEST = "SMS_REQUEST"


def _preview(raw: Any) -> str:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode("utf-8", errors="replace")
    return str(raw)


class KafkaDao:
    """Queue access over a producer and a consumer.

    The producer must offer ``produce(topic, value)``; the consumer must offer
    ``subscribe(topics)``, ``read_message()`` returning the message bytes (raising
    on a read error) and ``close()``.
    """

    def __init__(self, producer: Any, consumer: Any, topic: str = KAFKA_TOPIC_NAME) -> None:
        self.producer = producer
        self.consumer = consumer
        self.topic = topic
        component_logger("kafka").info("Kafka DAO initialized successfully")

    def produce(self, payload: KafkaPayload) -> None:
        """Serialise ``payload`` and publish it to the topic."""
        log = kafka_logger("produce", self.topic)
        try:
            value = payload.to_json()
        except (TypeError, ValueError) as exc:
            log.error(
                "Failed to marshal Kafka payload",
                extra={"payload_type": payload.type, "error": str(exc)},
            )
            raise
        log.info(
            "Attempting to produce message",
            extra={"payload_type": payload.type, "payload_size": len(value)},
        )
        try:
            self.producer.produce(self.topic, value)
        except Exception as exc:
            log.error(
                "Failed to produce message to Kafka",
                extra={"payload_type": payload.type, "error": str(exc)},
            )
            raise
        log.info("Message successfully sent to Kafka", extra={"payload_type": payload.type})

    def handle_message(self, service: Any, raw: bytes | str) -> bool:
        """Dispatch one raw queue message to ``service``; return whether it was processed."""
        log = kafka_logger("consume", self.topic)
        try:
            payload = KafkaPayload.from_json(raw)
        except (TypeError, ValueError, UnicodeDecodeError) as exc:
            log.error(
                "Failed to unmarshal Kafka payload",
                extra={"raw_message": _preview(raw), "error": str(exc)},
            )
            return False

        log.info("Successfully parsed Kafka message", extra={"message_type": payload.type})

        if payload.type != SMS_REQUEST:
            log.warning("Received unknown message type", extra={"message_type": payload.type})
            return False

        try:
            if payload.data is None:
                raise ValueError("unexpected end of JSON input")
            sms = SendSmsPayload.from_json(payload.data)
        except (TypeError, ValueError) as exc:
            log.error(
                "Failed to unmarshal SMS payload",
                extra={"raw_data": _preview(payload.data or b""), "error": str(exc)},
            )
            return False

        log.info("Processing SMS request from Kafka", extra={"message_id": sms.message_id})
        try:
            service.handle_kafka_message(sms.message_id)
        except Exception as exc:
            log.error(
                "Failed to process SMS request",
                extra={"message_id": sms.message_id, "error": str(exc)},
            )
            return False
        log.info("Successfully processed SMS request", extra={"message_id": sms.message_id})
        return True

    def consume(self, service: Any, max_messages: int | None = None) -> int:
        """Read and dispatch messages until ``max_messages`` reads (forever if None).

        Returns the number of messages processed successfully. The consumer is
        closed on exit.
        """
        log = kafka_logger("consume", self.topic)
        processed = 0
        attempts = 0
        try:
            self.consumer.subscribe([self.topic])
            log.info("Kafka consumer started and subscribed to topic")
            while max_messages is None or attempts < max_messages:
                attempts += 1
                try:
                    raw = self.consumer.read_message()
                except Exception as exc:
                    log.error("Error reading message from Kafka", extra={"error": str(exc)})
                    continue
                log.info("Received message from Kafka", extra={"message_size": len(raw)})
                if self.handle_message(service, raw):
                    processed += 1
        finally:
            self.consumer.close()
        return processed