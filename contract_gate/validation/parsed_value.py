"""
Parsed request body values.

A body is parsed once into a closed set of tagged values. Only the top level
of an object is exposed as fields; nested objects and arrays are tagged but
never walked.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from contract_gate.contracts import SchemaKind


class ValueKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    ARRAY = "array"
    OBJECT = "object"
    NULL = "null"


class BodyParseError(ValueError):
    """Raised when a request body is not a well-formed JSON document."""


@dataclass(frozen=True)
class ParsedValue:
    kind: ValueKind
    value: Any = None

    @property
    def is_integral(self) -> bool:
        if self.kind != ValueKind.NUMBER:
            return False
        return isinstance(self.value, int) or float(self.value).is_integer()

    def fields(self) -> Dict[str, "ParsedValue"]:
        """
        Top-level members of an object value.

        Raises:
            BodyParseError: If the value is not an object
        """
        if self.kind != ValueKind.OBJECT:
            raise BodyParseError(f"Expected a JSON object, got {self.kind.value}")
        return {str(name): tag_value(member) for name, member in self.value.items()}


def tag_value(value: Any) -> ParsedValue:
    """Tag a decoded JSON value with its kind."""
    # bool before number: bool is an int subclass
    if value is None:
        return ParsedValue(ValueKind.NULL)
    if isinstance(value, bool):
        return ParsedValue(ValueKind.BOOL, value)
    if isinstance(value, (int, float)):
        return ParsedValue(ValueKind.NUMBER, value)
    if isinstance(value, str):
        return ParsedValue(ValueKind.STRING, value)
    if isinstance(value, list):
        return ParsedValue(ValueKind.ARRAY, value)
    if isinstance(value, dict):
        return ParsedValue(ValueKind.OBJECT, value)
    raise BodyParseError(f"Unsupported JSON value: {type(value).__name__}")


def _reject_constant(token: str) -> Any:
    raise BodyParseError(f"Invalid JSON constant: {token}")


def parse_body(body: str) -> ParsedValue:
    """
    Parse a request body.

    Args:
        body: Raw body text

    Returns:
        Top-level tagged value

    Raises:
        BodyParseError: If the body is not valid JSON
    """
    try:
        decoded = json.loads(body, parse_constant=_reject_constant)
    except BodyParseError:
        raise
    except json.JSONDecodeError as e:
        raise BodyParseError(f"Invalid JSON body: {e.msg} (line {e.lineno}, col {e.colno})") from e
    except (ValueError, RecursionError) as e:
        # integers past the digit limit, nesting past the recursion limit
        raise BodyParseError(f"Unparseable JSON body: {e}") from e
    return tag_value(decoded)


def parse_flat_object(body: str) -> Dict[str, ParsedValue]:
    """Parse a body that must be a JSON object and return its top-level fields."""
    return parse_body(body).fields()


def conforms(value: ParsedValue, kind: SchemaKind) -> bool:
    """
    Check a parsed value against a declared schema kind.

    Null conforms to every kind; unknown kinds accept everything.
    """
    if value.kind == ValueKind.NULL or kind == SchemaKind.UNKNOWN:
        return True
    if kind == SchemaKind.STRING:
        return value.kind == ValueKind.STRING
    if kind == SchemaKind.INTEGER:
        return value.is_integral
    if kind == SchemaKind.NUMBER:
        return value.kind == ValueKind.NUMBER
    if kind == SchemaKind.BOOLEAN:
        return value.kind == ValueKind.BOOL
    if kind == SchemaKind.ARRAY:
        return value.kind == ValueKind.ARRAY
    if kind == SchemaKind.OBJECT:
        return value.kind == ValueKind.OBJECT
    return True
