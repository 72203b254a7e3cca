"""Serialization of daily usage stored in database columns."""

from pydantic import TypeAdapter

from models.user_record import DailyUsage

_usage_adapter = TypeAdapter(dict[str, DailyUsage])


def encode_usage(usage: dict[str, DailyUsage]) -> str:
    """Serialize daily usage into JSON text."""
    return _usage_adapter.dump_json(usage).decode("utf-8")


def decode_usage(payload: str | bytes | dict | None) -> dict[str, DailyUsage]:
    """Deserialize daily usage from JSON text or already decoded JSON object."""
    if payload is None or payload == "":
        return {}
    if isinstance(payload, dict):
        return _usage_adapter.validate_python(payload)
    return _usage_adapter.validate_json(payload)
