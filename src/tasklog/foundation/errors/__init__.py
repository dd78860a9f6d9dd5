"""Error handling for tasklog.

- TasklogError/ConfigurationError: construction-time failures
- SerializationFailure: structured Err payload for the sanitize step
- Result/Ok/Err: explicit success/failure branches
- Json*/Attributes: shared type aliases
"""

from .errors import ConfigurationError, SerializationFailure, TasklogError
from .result import Err, Ok, Result
from .types import AttributeValue, Attributes, JsonDict, JsonMapping, JsonPrimitive, JsonValue

__all__ = [
    # Exceptions
    "TasklogError", "ConfigurationError",
    # Payloads
    "SerializationFailure",
    # Result
    "Result", "Ok", "Err",
    # Types
    "JsonPrimitive", "JsonValue", "JsonDict", "JsonMapping", "AttributeValue", "Attributes",
]
