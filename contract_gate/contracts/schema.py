"""
Schema model for contract type declarations.

One frozen dataclass per declared kind. Objects carry their properties and
required names, arrays carry their element schema, everything else carries
nothing beyond an optional description.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class SchemaKind(str, Enum):
    """Declared type tag of a schema."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Schema:
    """Base of the schema variants. Never instantiated directly."""

    description: Optional[str] = None

    kind = SchemaKind.UNKNOWN


@dataclass(frozen=True)
class StringSchema(Schema):
    kind = SchemaKind.STRING


@dataclass(frozen=True)
class IntegerSchema(Schema):
    kind = SchemaKind.INTEGER


@dataclass(frozen=True)
class NumberSchema(Schema):
    kind = SchemaKind.NUMBER


@dataclass(frozen=True)
class BooleanSchema(Schema):
    kind = SchemaKind.BOOLEAN


@dataclass(frozen=True)
class UnknownSchema(Schema):
    kind = SchemaKind.UNKNOWN


@dataclass(frozen=True)
class ArraySchema(Schema):
    items: Schema = field(default_factory=UnknownSchema)

    kind = SchemaKind.ARRAY


@dataclass(frozen=True)
class ObjectSchema(Schema):
    properties: Mapping[str, Schema] = field(default_factory=dict)
    required: Tuple[str, ...] = ()

    kind = SchemaKind.OBJECT

    def property_schema(self, name: str) -> Optional[Schema]:
        """Declared schema of a property, or None if undeclared."""
        return self.properties.get(name)


_SCALARS = {
    "string": StringSchema,
    "integer": IntegerSchema,
    "number": NumberSchema,
    "boolean": BooleanSchema,
}


def _declared_type(raw: Mapping[str, Any]) -> Optional[str]:
    declared = raw.get("type")
    # OpenAPI 3.1 allows ["string", "null"]
    if isinstance(declared, list):
        declared = next((t for t in declared if t != "null"), None)
    return declared if isinstance(declared, str) else None


def schema_from_dict(raw: Any) -> Schema:
    """
    Build a schema from an already dereferenced schema mapping.

    Args:
        raw: Schema object from a contract document (refs resolved)

    Returns:
        Schema variant matching the declared type; UnknownSchema when the
        type is absent or not recognized
    """
    if not isinstance(raw, Mapping):
        return UnknownSchema()

    description = raw.get("description")
    if not isinstance(description, str):
        description = None

    declared = _declared_type(raw)

    if declared in _SCALARS:
        return _SCALARS[declared](description=description)

    if declared == "array":
        return ArraySchema(description=description, items=schema_from_dict(raw.get("items")))

    if declared == "object":
        raw_properties = raw.get("properties")
        properties: Dict[str, Schema] = {}
        if isinstance(raw_properties, Mapping):
            for name, child in raw_properties.items():
                properties[str(name)] = schema_from_dict(child)

        raw_required = raw.get("required")
        required: Tuple[str, ...] = ()
        if isinstance(raw_required, list):
            required = tuple(str(name) for name in raw_required)

        return ObjectSchema(description=description, properties=properties, required=required)

    return UnknownSchema(description=description)
