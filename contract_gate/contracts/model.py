"""
Contract model.

In-memory form of a loaded API contract: servers, path templates and the
operations declared for each method. Built once by the contract store and
never mutated afterwards.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .schema import Schema, UnknownSchema, schema_from_dict


HTTP_METHODS: Tuple[str, ...] = ("get", "post", "put", "delete", "patch", "options", "head")

PARAMETER_LOCATIONS = ("query", "header", "path", "cookie")


@dataclass(frozen=True)
class Parameter:
    name: str
    location: str
    required: bool = False
    schema: Schema = field(default_factory=UnknownSchema)
    description: Optional[str] = None


@dataclass(frozen=True)
class RequestBody:
    required: bool = False
    content: Mapping[str, Schema] = field(default_factory=dict)
    description: Optional[str] = None

    def schema_for(self, media_type: str) -> Optional[Schema]:
        """Schema declared for a media type, or None if not declared."""
        return self.content.get(media_type)


@dataclass(frozen=True)
class Operation:
    parameters: Tuple[Parameter, ...] = ()
    request_body: Optional[RequestBody] = None
    operation_id: Optional[str] = None
    summary: Optional[str] = None

    def parameters_in(self, location: str) -> List[Parameter]:
        """Declared parameters for one location, in declaration order."""
        return [p for p in self.parameters if p.location == location]


@dataclass(frozen=True)
class PathItem:
    operations: Mapping[str, Operation] = field(default_factory=dict)

    def operation_for(self, method: str) -> Optional[Operation]:
        """
        Look up the operation declared for a method.

        Args:
            method: HTTP method token, any case

        Returns:
            Operation, or None for undeclared or unsupported methods
        """
        return self.operations.get(method.lower())


@dataclass(frozen=True)
class Contract:
    """
    One loaded API contract.

    Invariants:
    - servers keep document order (the first one supplies the base path)
    - paths keep document declaration order
    """

    source: str
    title: Optional[str] = None
    servers: Tuple[str, ...] = ()
    paths: Mapping[str, PathItem] = field(default_factory=dict)


def _parameter_from_dict(raw: Mapping[str, Any]) -> Optional[Parameter]:
    name = raw.get("name")
    location = raw.get("in")
    if not isinstance(name, str) or location not in PARAMETER_LOCATIONS:
        return None

    # Path parameters are always required
    required = location == "path" or raw.get("required") is True

    description = raw.get("description")
    return Parameter(
        name=name,
        location=location,
        required=required,
        schema=schema_from_dict(raw.get("schema")),
        description=description if isinstance(description, str) else None,
    )


def _parameters_from_list(raw: Any) -> List[Parameter]:
    if not isinstance(raw, list):
        return []
    parameters = []
    for entry in raw:
        if isinstance(entry, Mapping):
            parameter = _parameter_from_dict(entry)
            if parameter is not None:
                parameters.append(parameter)
    return parameters


def _merge_parameters(
    shared: List[Parameter], own: List[Parameter]
) -> Tuple[Parameter, ...]:
    """Path-level parameters first, overridden by operation-level ones."""
    own_keys = {(p.name, p.location) for p in own}
    merged = [p for p in shared if (p.name, p.location) not in own_keys]
    merged.extend(own)
    return tuple(merged)


def _request_body_from_dict(raw: Any) -> Optional[RequestBody]:
    if not isinstance(raw, Mapping):
        return None

    content: Dict[str, Schema] = {}
    raw_content = raw.get("content")
    if isinstance(raw_content, Mapping):
        for media_type, media in raw_content.items():
            schema = media.get("schema") if isinstance(media, Mapping) else None
            content[str(media_type)] = schema_from_dict(schema)

    description = raw.get("description")
    return RequestBody(
        required=raw.get("required") is True,
        content=content,
        description=description if isinstance(description, str) else None,
    )


def _operation_from_dict(raw: Mapping[str, Any], shared: List[Parameter]) -> Operation:
    operation_id = raw.get("operationId")
    summary = raw.get("summary")
    return Operation(
        parameters=_merge_parameters(shared, _parameters_from_list(raw.get("parameters"))),
        request_body=_request_body_from_dict(raw.get("requestBody")),
        operation_id=operation_id if isinstance(operation_id, str) else None,
        summary=summary if isinstance(summary, str) else None,
    )


def path_item_from_dict(raw: Any) -> PathItem:
    """
    Build a path item from a dereferenced OpenAPI path item object.

    Args:
        raw: Path item mapping (method keys plus optional shared parameters)

    Returns:
        PathItem holding one Operation per declared method
    """
    if not isinstance(raw, Mapping):
        return PathItem()

    shared = _parameters_from_list(raw.get("parameters"))
    operations: Dict[str, Operation] = {}
    for method in HTTP_METHODS:
        raw_operation = raw.get(method)
        if isinstance(raw_operation, Mapping):
            operations[method] = _operation_from_dict(raw_operation, shared)
    return PathItem(operations=operations)


def _expand_server_url(raw: Mapping[str, Any]) -> Optional[str]:
    url = raw.get("url")
    if not isinstance(url, str):
        return None

    variables = raw.get("variables")
    if isinstance(variables, Mapping):
        for name, variable in variables.items():
            if isinstance(variable, Mapping) and "default" in variable:
                url = url.replace("{" + str(name) + "}", str(variable["default"]))
    return url


def contract_from_document(source: str, document: Mapping[str, Any]) -> Contract:
    """
    Build a contract from a dereferenced OpenAPI document.

    Args:
        source: File name the document was loaded from
        document: Parsed document with internal references already resolved

    Returns:
        Immutable Contract
    """
    servers = []
    for raw_server in document.get("servers") or []:
        if isinstance(raw_server, Mapping):
            url = _expand_server_url(raw_server)
            if url is not None:
                servers.append(url)

    paths: Dict[str, PathItem] = {}
    for template, raw_item in (document.get("paths") or {}).items():
        # Skip x- extensions
        if str(template).startswith("/"):
            paths[str(template)] = path_item_from_dict(raw_item)

    info = document.get("info")
    title = info.get("title") if isinstance(info, Mapping) else None

    return Contract(
        source=source,
        title=title if isinstance(title, str) else None,
        servers=tuple(servers),
        paths=paths,
    )
