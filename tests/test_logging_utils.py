import logging

from notifysvc.logging_utils import (
    component_logger,
    database_logger,
    get_trace_id,
    kafka_logger,
    log_with_context,
    operation_logger,
    request_logger,
    trace_context,
)


def test_trace_id_scoped_to_context():
    assert get_trace_id() == ""
    with trace_context("t-1") as tid:
        assert tid == "t-1"
        assert get_trace_id() == "t-1"
    assert get_trace_id() == ""


def test_nested_trace_contexts_restore():
    with trace_context("outer"):
        with trace_context("inner"):
            assert get_trace_id() == "inner"
        assert get_trace_id() == "outer"


def test_log_with_context_always_has_trace_id():
    assert log_with_context().extra == {"trace_id": ""}
    with trace_context("abc"):
        assert log_with_context().extra == {"trace_id": "abc"}


def test_component_and_operation_loggers():
    assert component_logger("kafka").extra == {"component": "kafka"}
    assert operation_logger("svc", "op").extra == {"component": "svc", "operation": "op"}


def test_request_logger_adds_trace_only_when_set():
    assert "trace_id" not in request_logger("service", "send_sms").extra
    with trace_context("tr"):
        assert request_logger("service", "send_sms").extra == {
            "component": "service",
            "operation": "send_sms",
            "trace_id": "tr",
        }


def test_database_logger_optional_fields():
    assert database_logger("select", "sms_requests", "").extra == {
        "component": "database",
        "operation": "select",
        "table": "sms_requests",
    }
    with trace_context("tr"):
        fields = database_logger("update", "sms_requests", "req").extra
    assert fields["request_id"] == "req"
    assert fields["trace_id"] == "tr"


def test_kafka_logger_fields():
    assert kafka_logger("produce", "notification.send_sms").extra == {
        "component": "kafka",
        "operation": "produce",
        "topic": "notification.send_sms",
    }


def test_records_carry_fields(caplog):
    caplog.set_level(logging.INFO, logger="notifysvc")
    component_logger("kafka").info("hello", extra={"count": 3})
    record = caplog.records[-1]
    assert record.component == "kafka"
    assert record.count == 3
    assert record.getMessage() == "hello"


def test_bind_extends_fields():
    logger = component_logger("app").bind(request_id="r")
    assert logger.extra == {"component": "app", "request_id": "r"}