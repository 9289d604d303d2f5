"""Blacklist storage backed by a Redis set."""

from __future__ import annotations

from typing import Any

from .logging_utils import database_logger

BLACKLISTED_NUMBERS_SET = "blacklisted_numbers_set"
_TABLE = "blacklisted_numbers"


class DaoError(Exception):
    """Raised when a storage operation fails."""


def _text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)


class RedisDao:
    """Blacklist operations over a client offering ``sadd``, ``sismember``, ``smembers`` and ``srem``."""

    def __init__(self, client: Any, set_name: str = BLACKLISTED_NUMBERS_SET) -> None:
        self._client = client
        self.set_name = set_name

    def add_number_to_blacklist(self, number: str) -> None:
        """Add ``number`` to the blacklist set."""
        log = database_logger("sadd", _TABLE)
        log.info("Attempting to add number to blacklist", extra={"phone_number": number})
        try:
            added = self._client.sadd(self.set_name, number)
        except Exception as exc:
            log.error(
                "Failed to add number to Redis blacklist",
                extra={"phone_number": number, "error": str(exc)},
            )
            raise DaoError("failed to add number to blacklist") from exc
        log.info(
            "Successfully added number to blacklist",
            extra={"phone_number": number, "added_count": added},
        )

    def is_number_blacklisted(self, number: str) -> bool:
        """Return whether ``number`` is in the blacklist set."""
        log = database_logger("sismember", _TABLE)
        log.debug("Checking if number is blacklisted", extra={"phone_number": number})
        try:
            exists = bool(self._client.sismember(self.set_name, number))
        except Exception as exc:
            log.error(
                "Failed to check number in Redis blacklist",
                extra={"phone_number": number, "error": str(exc)},
            )
            raise DaoError("failed to check blacklist status") from exc
        log.debug(
            "Blacklist check completed",
            extra={"phone_number": number, "is_blacklisted": exists},
        )
        return exists

    def get_all_blacklisted_numbers(self) -> list[str]:
        """Return every number in the blacklist set."""
        log = database_logger("smembers", _TABLE)
        log.info("Retrieving all blacklisted numbers")
        try:
            members = [_text(member) for member in self._client.smembers(self.set_name)]
        except Exception as exc:
            log.error(
                "Failed to retrieve blacklisted numbers from Redis",
                extra={"error": str(exc)},
            )
            raise DaoError("failed to retrieve blacklisted numbers") from exc
        log.info("Successfully retrieved blacklisted numbers", extra={"count": len(members)})
        return members

    def remove_from_blacklist(self, number: str) -> int:
        """Remove ``number`` from the blacklist set and return how many entries were removed."""
        log = database_logger("srem", _TABLE)
        log.info("Attempting to remove number from blacklist", extra={"phone_number": number})
        try:
            removed = int(self._client.srem(self.set_name, number))
        except Exception as exc:
            log.error(
                "Failed to remove number from Redis blacklist",
                extra={"phone_number": number, "error": str(exc)},
            )
            raise DaoError("failed to remove number from blacklist") from exc
        log.info(
            "Successfully removed number from blacklist",
            extra={"phone_number": number, "removed_count": removed},
        )
        return removed