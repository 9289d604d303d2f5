"""Data models: configuration, stored SMS records, queue events and API requests."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import Any, Mapping, TypeVar


def _normalise_key(key: Any) -> str:
    return str(key).lower().replace("_", "")


def _lookup(data: Mapping[str, Any], name: str) -> Any:
    for key, value in data.items():
        if _normalise_key(key) == name:
            return value
    return None


def _as_str(value: Any, name: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ValueError(f"field {name!r} expects a string, got {type(value).__name__}")


def _as_int(value: Any, name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return int(text)
        except ValueError:
            pass
    raise ValueError(f"field {name!r} expects an integer, got {value!r}")


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = _lookup(data, name)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"section {name!r} must be a mapping")
    return value


_Settings = TypeVar("_Settings")


def _build_settings(cls: type[_Settings], section: Mapping[str, Any]) -> _Settings:
    """Fill a settings dataclass from a section, matching keys case-insensitively."""
    values = {}
    for item in fields(cls):
        key = _normalise_key(item.name)
        raw = _lookup(section, key)
        convert = _as_int if isinstance(item.default, int) else _as_str
        values[item.name] = convert(raw, key)
    return cls(**values)


@dataclass
class KafkaSettings:
    bootstrap_servers: str = ""
    group_id: str = ""
    auto_offset_reset: str = ""


@dataclass
class RedisSettings:
    addr: str = ""
    db: int = 0
    pwd: str = str()


@dataclass
class ScyllaSettings:
    hosts: str = ""
    keyspace: str = ""


@dataclass
class AppConfig:
    kafka: KafkaSettings = field(default_factory=KafkaSettings)
    redis: RedisSettings = field(default_factory=RedisSettings)
    scylla: ScyllaSettings = field(default_factory=ScyllaSettings)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AppConfig":
        """Build a config from a nested mapping; key names match case-insensitively."""
        if not isinstance(data, Mapping):
            raise ValueError("configuration must be a mapping")
        return cls(
            kafka=_build_settings(KafkaSettings, _section(data, "kafka")),
            redis=_build_settings(RedisSettings, _section(data, "redis")),
            scylla=_build_settings(ScyllaSettings, _section(data, "scylla")),
        )


@dataclass
class SMSRequest:
    """A row of the sms_requests table."""

    id: str = ""
    phone_number: str = ""
    message: str = ""
    status: str = ""
    failure_code: str = ""
    failure_comments: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        for key in ("created_at", "updated_at"):
            stamp = result[key]
            result[key] = stamp.isoformat() if stamp is not None else None
        return result


def _decode_object(raw: bytes | str) -> dict[str, Any]:
    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode("utf-8")
    value = json.loads(raw)
    if not isinstance(value, dict):
        raise ValueError("expected a JSON object")
    return value


def _dump(value: Any) -> bytes:
    return json.dumps(value, separators=(",", ":")).encode("utf-8")


@dataclass
class SendSmsPayload:
    message_id: str = ""

    def to_json(self) -> bytes:
        return _dump({"message_id": self.message_id})

    @classmethod
    def from_json(cls, raw: bytes | str) -> "SendSmsPayload":
        data = _decode_object(raw)
        return cls(message_id=_string_field(data, "message_id"))


@dataclass
class KafkaPayload:
    """A queue message: its type and the raw JSON body to decode later."""

    type: str = ""
    data: bytes | None = None

    def to_json(self) -> bytes:
        body = b"null" if self.data is None else _dump(json.loads(self.data))
        return b'{"type":' + _dump(self.type) + b',"data":' + body + b"}"

    @classmethod
    def from_json(cls, raw: bytes | str) -> "KafkaPayload":
        data = _decode_object(raw)
        body = _dump(data["data"]) if "data" in data else None
        return cls(type=_string_field(data, "type"), data=body)


def _string_field(data: Mapping[str, Any], name: str) -> str:
    value = data.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {name!r} must be a string")
    return value


def _require_dict(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError("request body must be a JSON object")
    return data


@dataclass
class SendSms:
    phone_number: str = ""
    message: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "SendSms":
        body = _require_dict(data)
        return cls(
            phone_number=_string_field(body, "phone_number"),
            message=_string_field(body, "message"),
        )


@dataclass
class AddToBlacklist:
    phone_numbers: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "AddToBlacklist":
        body = _require_dict(data)
        return cls(phone_numbers=_string_field(body, "phone_numbers"))


@dataclass
class AddSmsEntryInDb:
    request_id: str = ""
    phone_number: str = ""
    message: str = ""


@dataclass
class GetSmsDetailsFromDbRequest:
    request_id: str = ""


@dataclass
class UpdateSmsDetailsInDbRequest:
    id: str = ""
    phone_number: str = ""
    status: str = ""
    failure_code: str = ""
    failure_comments: str = ""