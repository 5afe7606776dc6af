"""Contract model and loading."""

from .model import HTTP_METHODS, Contract, Operation, Parameter, PathItem, RequestBody
from .schema import (
    ArraySchema,
    BooleanSchema,
    IntegerSchema,
    NumberSchema,
    ObjectSchema,
    Schema,
    SchemaKind,
    StringSchema,
    UnknownSchema,
    schema_from_dict,
)
from .store import (
    ContractDirectoryError,
    ContractDocumentError,
    ContractStore,
    SkippedContract,
    load_contracts,
)

__all__ = [
    "HTTP_METHODS",
    "ArraySchema",
    "BooleanSchema",
    "Contract",
    "ContractDirectoryError",
    "ContractDocumentError",
    "ContractStore",
    "IntegerSchema",
    "NumberSchema",
    "ObjectSchema",
    "Operation",
    "Parameter",
    "PathItem",
    "RequestBody",
    "Schema",
    "SchemaKind",
    "SkippedContract",
    "StringSchema",
    "UnknownSchema",
    "load_contracts",
    "schema_from_dict",
]
