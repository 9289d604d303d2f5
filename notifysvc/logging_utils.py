"""Structured loggers carrying component, operation and trace identifiers."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

_LOGGER_NAME = "notifysvc"
_trace_id: ContextVar[str] = ContextVar("trace_id", default="")


class FieldLogger(logging.LoggerAdapter):
    """Logger adapter that attaches fixed fields to every record."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    def bind(self, **fields: Any) -> "FieldLogger":
        return FieldLogger(self.logger, {**(self.extra or {}), **fields})


def _logger(fields: dict[str, Any]) -> FieldLogger:
    return FieldLogger(logging.getLogger(_LOGGER_NAME), fields)


def get_trace_id() -> str:
    """Return the trace id of the current context, or an empty string."""
    return _trace_id.get()


@contextmanager
def trace_context(trace_id: str) -> Iterator[str]:
    """Make ``trace_id`` the current trace id for the duration of the block."""
    token = _trace_id.set(trace_id)
    try:
        yield trace_id
    finally:
        _trace_id.reset(token)


def log_with_context() -> FieldLogger:
    return _logger({"trace_id": get_trace_id()})


def component_logger(component: str) -> FieldLogger:
    return _logger({"component": component})


def operation_logger(component: str, operation: str) -> FieldLogger:
    return _logger({"component": component, "operation": operation})


def request_logger(component: str, operation: str) -> FieldLogger:
    fields = {"component": component, "operation": operation}
    trace_id = get_trace_id()
    if trace_id:
        fields["trace_id"] = trace_id
    return _logger(fields)


def database_logger(operation: str, table: str, request_id: str = "") -> FieldLogger:
    fields = {"component": "database", "operation": operation, "table": table}
    if request_id:
        fields["request_id"] = request_id
    trace_id = get_trace_id()
    if trace_id:
        fields["trace_id"] = trace_id
    return _logger(fields)


def kafka_logger(operation: str, topic: str) -> FieldLogger:
    return _logger({"component": "kafka", "operation": operation, "topic": topic})