"""Deep copy of caller-supplied property bags through JSON.

Property bags may hold exceptions, pydantic models, self-references or other
values a JSON encoder refuses. The pipeline is two explicit steps:

1. sanitize_properties(): orjson dumps/loads round-trip. Exceptions become
   ``{"name", "message", "stack"}`` so they survive generic serialization.
   Returns Ok(copy) or Err(SerializationFailure); it never raises.
2. safe_json_process(): takes the Ok copy, or falls back to the original bag.
   A serialization failure never drops a log record.
"""

from __future__ import annotations

import dataclasses
import logging
import traceback
from typing import Any

import orjson

from tasklog.foundation.errors import Err, JsonDict, JsonMapping, Ok, Result, SerializationFailure

logger = logging.getLogger("tasklog.serialize")

# Dataclasses go through _json_default so error-like ones are rewritten too
_DUMPS_OPTIONS = orjson.OPT_NON_STR_KEYS | orjson.OPT_SERIALIZE_NUMPY | orjson.OPT_PASSTHROUGH_DATACLASS


def error_to_dict(exc: BaseException) -> JsonDict:
    """Plain record of an exception: type name, message and formatted traceback."""
    return {
        "name": type(exc).__name__,
        "message": str(exc),
        "stack": "".join(traceback.format_exception(exc)),
    }


def _is_error_like(value: object) -> bool:
    return all(hasattr(value, attr) for attr in ("name", "message", "stack"))


def _json_default(value: Any) -> Any:
    """orjson fallback for types it cannot encode natively."""
    if isinstance(value, BaseException):
        return error_to_dict(value)
    if _is_error_like(value):
        return {"name": str(value.name), "message": str(value.message), "stack": str(value.stack)}
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    if isinstance(value, (set, frozenset)):
        return list(value)
    raise TypeError(f"Type is not JSON serializable: {type(value).__name__}")


def sanitize_properties(properties: JsonMapping | None) -> Result[JsonDict | None, SerializationFailure]:
    """Deep-copy a property bag through a JSON round-trip.

    Returns:
        Ok(copy) with exceptions rewritten to plain records, Ok(None) for no
        properties, or Err(SerializationFailure) when the bag cannot be
        encoded (circular structure, unsupported value, oversized integer).
    """
    if properties is None:
        return Ok(None)
    try:
        encoded = orjson.dumps(properties, default=_json_default, option=_DUMPS_OPTIONS)
    except (orjson.JSONEncodeError, TypeError, ValueError, RecursionError) as e:
        return Err(SerializationFailure.from_exc(e))
    return Ok(orjson.loads(encoded))


def safe_json_process(properties: JsonMapping | None) -> JsonMapping | None:
    """Sanitized copy of properties, or the original bag if it cannot be copied."""
    return sanitize_properties(properties).inspect_err(_report_failure).unwrap_or(properties)


def _report_failure(failure: SerializationFailure) -> None:
    logger.debug("property bag not serializable, using it unsanitized: %s", failure)
