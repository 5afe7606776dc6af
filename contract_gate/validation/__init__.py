"""Request validation against matched contract operations."""

from .errors import ErrorKind, ValidationError, ValidationResult
from .parsed_value import BodyParseError, ParsedValue, ValueKind, conforms, parse_body, parse_flat_object
from .request_validator import JSON_MEDIA_TYPE, RequestValidator, parameter_value_matches

__all__ = [
    "JSON_MEDIA_TYPE",
    "BodyParseError",
    "ErrorKind",
    "ParsedValue",
    "RequestValidator",
    "ValidationError",
    "ValidationResult",
    "ValueKind",
    "conforms",
    "parameter_value_matches",
    "parse_body",
    "parse_flat_object",
]
