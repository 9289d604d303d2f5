"""HTTP API: health check, SMS submission and lookup, blacklist management."""

from __future__ import annotations

import functools
from typing import Any, Callable

from flask import Blueprint, Flask, g, jsonify, request

from .logging_utils import log_with_context, trace_context
from .middleware import TRACE_HEADER, AuthError, check_authorization, new_trace_id
from .models import AddToBlacklist, KafkaPayload, SendSms, SendSmsPayload
from .service import ServiceError

SMS_REQUEST = "SMS_REQUEST"
_PROCESS_FAILED = "Failed to process request"


def _traced(view: Callable[..., Any]) -> Callable[..., Any]:
    """Run ``view`` with the request's trace id as the current trace id."""

    @functools.wraps(view)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        with trace_context(g.get("trace_id", "")):
            return view(*args, **kwargs)

    return wrapper


def _error(exc: Exception, status: int = 400) -> Any:
    return jsonify({"ERROR": str(exc)}), status


def create_app(service: Any, kafka_dao: Any = None) -> Flask:
    """Build the web application over ``service`` and the queue publisher ``kafka_dao``."""
    app = Flask(__name__)

    @app.get("/health")
    def health() -> Any:
        return jsonify({"system": "up"})

    api = Blueprint("v1", __name__, url_prefix="/v1")

    @api.before_request
    def _authorize_and_trace() -> Any:
        try:
            check_authorization(request.headers.get("Authorization"))
        except AuthError as exc:
            return jsonify({"error": exc.message}), exc.status_code
        g.trace_id = new_trace_id()
        return None

    @api.after_request
    def _trace_header(response: Any) -> Any:
        trace_id = g.get("trace_id")
        if trace_id:
            response.headers[TRACE_HEADER] = trace_id
        return response

    @api.post("/sms/send")
    @_traced
    def send_sms() -> Any:
        log = log_with_context()
        log.info("SendSmsController called")
        try:
            req = SendSms.from_dict(request.get_json(silent=True))
        except ValueError:
            return jsonify({"message": "Invalid Request Body"}), 400
        try:
            request_id = service.send_sms(req)
        except ServiceError as exc:
            return _error(exc)

        try:
            data = SendSmsPayload(message_id=request_id).to_json()
        except (TypeError, ValueError) as exc:
            log.error("Failed to marshal SMS payload", extra={"error": str(exc)})
            return jsonify({"error": _PROCESS_FAILED}), 500

        if kafka_dao is None:
            log.error("Kafka DAO not initialized")
            return jsonify({"error": _PROCESS_FAILED}), 500
        try:
            kafka_dao.produce(KafkaPayload(type=SMS_REQUEST, data=data))
        except Exception as exc:
            log.error("Failed to produce Kafka message", extra={"error": str(exc)})
            return jsonify({"error": _PROCESS_FAILED}), 500

        return jsonify({"request_id": request_id, "message": "message sent successfully!"})

    @api.get("/sms/<request_id>")
    @_traced
    def get_sms(request_id: str) -> Any:
        log_with_context().info("Processing SMS request", extra={"request_id": request_id})
        try:
            details = service.get_sms(request_id)
        except ServiceError as exc:
            return _error(exc)
        body = details.to_dict() if hasattr(details, "to_dict") else details
        return jsonify({"request_id": request_id, "message_details": body})

    @api.get("/blacklist")
    @_traced
    def get_blacklist() -> Any:
        log_with_context().info("GetBlacklistController called")
        try:
            numbers = service.get_blacklist()
        except ServiceError as exc:
            return _error(exc)
        return jsonify({"blacklisted_numbers": list(numbers)})

    @api.post("/blacklist")
    @_traced
    def add_to_blacklist() -> Any:
        log_with_context().info("AddToBlacklistController called")
        try:
            req = AddToBlacklist.from_dict(request.get_json(silent=True))
        except ValueError:
            return jsonify({"message": "Invalid Request Body"}), 400
        try:
            service.add_to_blacklist(req)
        except ServiceError as exc:
            return _error(exc)
        return jsonify({"Message": f"{req.phone_numbers} successfully blacklisted"})

    @api.delete("/blacklist/<number>")
    @_traced
    def remove_from_blacklist(number: str) -> Any:
        log_with_context().info("RemoveFromBlacklistController called")
        try:
            removed = service.remove_from_blacklist(number)
        except ServiceError as exc:
            return _error(exc)
        if removed:
            return jsonify({"Message": "number successfully removed!"})
        return jsonify({"Message": "number not present in blacklist!"})

    app.register_blueprint(api)
    return app