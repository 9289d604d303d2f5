"""Notification service: SMS requests and the number blacklist."""

from __future__ import annotations

import sys
import uuid
from typing import Any, TextIO

from .logging_utils import component_logger, request_logger
from .models import AddSmsEntryInDb, AddToBlacklist, SendSms, SMSRequest


class ServiceError(Exception):
    """Raised when a service operation cannot be completed."""


class NotificationService:
    """Business operations over a blacklist store and an SMS request store.

    ``redis_dao`` must offer ``add_number_to_blacklist``, ``is_number_blacklisted``,
    ``get_all_blacklisted_numbers`` and ``remove_from_blacklist``; ``scylla_dao`` must
    offer ``insert_sms_request``, ``get_sms_details`` and ``update_sms_details``.
    """

    def __init__(self, redis_dao: Any, scylla_dao: Any, output: TextIO | None = None) -> None:
        self.redis_dao = redis_dao
        self.scylla_dao = scylla_dao
        self._output = output

    def send_sms(self, request: SendSms) -> str:
        """Store a new pending SMS request and return its generated id."""
        log = request_logger("service", "send_sms")
        request_id = str(uuid.uuid4())
        log.info(
            "Processing SMS send request",
            extra={"request_id": request_id, "phone_number": request.phone_number},
        )
        entry = AddSmsEntryInDb(
            request_id=request_id,
            phone_number=request.phone_number,
            message=request.message,
        )
        try:
            self.scylla_dao.insert_sms_request(entry)
        except Exception as exc:
            log.error(
                "Failed to insert SMS request into database",
                extra={
                    "request_id": request_id,
                    "phone_number": request.phone_number,
                    "error": str(exc),
                },
            )
            raise ServiceError(str(exc)) from exc
        log.info(
            "Successfully created SMS request",
            extra={"request_id": request_id, "phone_number": request.phone_number},
        )
        return request_id

    def handle_kafka_message(self, request_id: str) -> bool:
        """Deliver the stored SMS ``request_id`` unless its number is blacklisted.

        Returns True when the message was sent. Lookup failures are logged and
        swallowed; a failure to record the result is raised.
        """
        log = request_logger("service", "handle_kafka_message")
        log.info("Processing Kafka message for SMS request", extra={"request_id": request_id})

        try:
            details = self.scylla_dao.get_sms_details(request_id)
        except Exception as exc:
            log.error(
                "Failed to retrieve SMS details from database",
                extra={"request_id": request_id, "error": str(exc)},
            )
            return False

        try:
            blacklisted = self.redis_dao.is_number_blacklisted(details.phone_number)
        except Exception as exc:
            log.error(
                "Failed to check blacklist status",
                extra={
                    "request_id": request_id,
                    "phone_number": details.phone_number,
                    "error": str(exc),
                },
            )
            return False

        if blacklisted:
            log.warning(
                "SMS blocked - phone number is blacklisted",
                extra={"request_id": request_id, "phone_number": details.phone_number},
            )
            return False

        log.info(
            "Sending SMS to external service",
            extra={"request_id": request_id, "phone_number": details.phone_number},
        )
        self.send_message(details)

        try:
            self.scylla_dao.update_sms_details(details)
        except Exception as exc:
            log.error(
                "Failed to update SMS status in database",
                extra={"request_id": request_id, "error": str(exc)},
            )
            raise

        log.info(
            "Successfully processed SMS request",
            extra={"request_id": request_id, "phone_number": details.phone_number},
        )
        return True

    def send_message(self, sms: SMSRequest) -> None:
        """Hand the SMS to the gateway, which writes it to the output stream."""
        log = component_logger("sms_gateway")
        log.info(
            "Sending SMS via external gateway",
            extra={"request_id": sms.id, "phone_number": sms.phone_number},
        )
        print(
            f"RequestID: {sms.id} | PhoneNumber: {sms.phone_number} | Message: {sms.message}",
            file=self._output if self._output is not None else sys.stdout,
        )

    def get_sms(self, request_id: str) -> SMSRequest:
        """Return the stored details of SMS request ``request_id``."""
        log = request_logger("service", "get_sms")
        log.info("Retrieving SMS request details", extra={"request_id": request_id})
        try:
            details = self.scylla_dao.get_sms_details(request_id)
        except Exception as exc:
            log.error(
                "Failed to retrieve SMS details from database",
                extra={"request_id": request_id, "error": str(exc)},
            )
            raise ServiceError(
                f"failed to retrieve SMS details for request ID {request_id}"
            ) from exc
        log.info(
            "Successfully retrieved SMS details",
            extra={"request_id": request_id, "status": details.status},
        )
        return details

    def get_blacklist(self) -> list[str]:
        """Return every blacklisted number."""
        log = request_logger("service", "get_blacklist")
        log.info("Retrieving blacklisted numbers")
        try:
            numbers = list(self.redis_dao.get_all_blacklisted_numbers())
        except Exception as exc:
            log.error("Failed to retrieve blacklisted numbers", extra={"error": str(exc)})
            raise ServiceError("failed to retrieve blacklisted numbers") from exc
        log.info("Successfully retrieved blacklisted numbers", extra={"count": len(numbers)})
        return numbers

    def add_to_blacklist(self, request: AddToBlacklist) -> None:
        """Add the number in ``request`` to the blacklist."""
        log = request_logger("service", "add_to_blacklist")
        number = request.phone_numbers
        log.info("Adding number to blacklist", extra={"phone_number": number})
        try:
            self.redis_dao.add_number_to_blacklist(number)
        except Exception as exc:
            log.error(
                "Failed to add number to blacklist",
                extra={"phone_number": number, "error": str(exc)},
            )
            raise ServiceError(f"failed to add number {number} to blacklist") from exc
        log.info("Successfully added number to blacklist", extra={"phone_number": number})

    def remove_from_blacklist(self, number: str) -> bool:
        """Remove ``number`` from the blacklist; return whether it was present."""
        log = request_logger("service", "remove_from_blacklist")
        log.info("Removing number from blacklist", extra={"phone_number": number})
        try:
            removed = self.redis_dao.remove_from_blacklist(number)
        except Exception as exc:
            log.error(
                "Failed to remove number from blacklist",
                extra={"phone_number": number, "error": str(exc)},
            )
            raise ServiceError(f"failed to remove number {number} from blacklist") from exc
        success = removed > 0
        log.info(
            "Blacklist removal completed",
            extra={"phone_number": number, "removed": success, "removed_count": removed},
        )
        return success