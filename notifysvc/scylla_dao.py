"""Storage of SMS requests in the ``sms_requests`` table."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from .logging_utils import database_logger
from .models import AddSmsEntryInDb, SMSRequest
from .redis_dao import DaoError

TABLE = "sms_requests"
COLUMNS = (
    "id",
    "phone_number",
    "message",
    "status",
    "failure_code",
    "failure_comments",
    "created_at",
    "updated_at",
)
_UPDATE_COLUMNS = ("status", "failure_code", "failure_comments", "updated_at")

INSERT_QUERY = "INSERT INTO {table} ({cols}) VALUES ({vals})".format(
    table=TABLE,
    cols=", ".join(COLUMNS),
    vals=", ".join(f"%({c})s" for c in COLUMNS),
)
SELECT_QUERY = "SELECT {cols} FROM {table} WHERE id = %(id)s".format(
    table=TABLE, cols=", ".join(COLUMNS)
)
UPDATE_QUERY = "UPDATE {table} SET {sets} WHERE id = %(id)s".format(
    table=TABLE, sets=", ".join(f"{c} = %({c})s" for c in _UPDATE_COLUMNS)
)


class RecordNotFound(DaoError, LookupError):
    """Raised when no row matches the requested id."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _column(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def _str_column(row: Any, name: str) -> str:
    value = _column(row, name)
    return "" if value is None else str(value)


class ScyllaDao:
    """SMS request persistence over a session exposing ``execute(query, params)``."""

    def __init__(self, session: Any, clock: Callable[[], datetime] | None = None) -> None:
        self._session = session
        self._clock = clock or _utcnow

    def insert_sms_request(self, entry: AddSmsEntryInDb) -> None:
        """Insert a new request with status ``Pending``."""
        log = database_logger("insert", TABLE, entry.request_id)
        log.info(
            "Attempting to insert SMS request",
            extra={"phone_number": entry.phone_number, "message_preview": entry.message[:50]},
        )
        now = self._clock()
        params = {
            "id": entry.request_id,
            "phone_number": entry.phone_number,
            "message": entry.message,
            "status": "Pending",
            "failure_code": "",
            "failure_comments": "",
            "created_at": now,
            "updated_at": now,
        }
        try:
            self._session.execute(INSERT_QUERY, params)
        except Exception as exc:
            log.error(
                "Failed to insert SMS request into database",
                extra={"phone_number": entry.phone_number, "error": str(exc)},
            )
            raise
        log.info(
            "Successfully inserted SMS request into database",
            extra={"phone_number": entry.phone_number},
        )

    def get_sms_details(self, request_id: str) -> SMSRequest:
        """Fetch the request with id ``request_id``; raise RecordNotFound if absent."""
        log = database_logger("select", TABLE, request_id)
        log.info("Attempting to retrieve SMS request from database")
        try:
            rows = self._session.execute(SELECT_QUERY, {"id": request_id})
            row = next(iter(rows if rows is not None else ()), None)
        except Exception as exc:
            log.error("Failed to retrieve SMS request from database", extra={"error": str(exc)})
            raise
        if row is None:
            log.error("Failed to retrieve SMS request from database", extra={"error": "not found"})
            raise RecordNotFound(f"no SMS request with id {request_id!r}")
        record = SMSRequest(
            id=_str_column(row, "id"),
            phone_number=_str_column(row, "phone_number"),
            message=_str_column(row, "message"),
            status=_str_column(row, "status"),
            failure_code=_str_column(row, "failure_code"),
            failure_comments=_str_column(row, "failure_comments"),
            created_at=_column(row, "created_at"),
            updated_at=_column(row, "updated_at"),
        )
        log.info(
            "Successfully retrieved SMS request from database",
            extra={"phone_number": record.phone_number, "status": record.status},
        )
        return record

    def update_sms_details(self, details: SMSRequest) -> None:
        """Write the status fields of ``details``, filling blanks with defaults."""
        log = database_logger("update", TABLE, details.id)
        log.info("Attempting to update SMS request in database", extra={"new_status": details.status})
        status = details.status or "Success"
        failure_code = details.failure_code or "null"
        failure_comments = details.failure_comments or "null"
        params = {
            "id": details.id,
            "status": status,
            "failure_code": failure_code,
            "failure_comments": failure_comments,
            "updated_at": self._clock(),
        }
        try:
            self._session.execute(UPDATE_QUERY, params)
        except Exception as exc:
            log.error(
                "Failed to update SMS request in database",
                extra={"new_status": status, "failure_code": failure_code, "error": str(exc)},
            )
            raise
        log.info("Successfully updated SMS request in database", extra={"new_status": status})