"""
Request validation against a matched operation.

Every independent check runs and every violation is reported. The only
skips are the documented ones: an undeclared JSON media type skips the
schema checks, and an unparseable body skips the field checks.

Body validation is shallow: only the top-level fields of an object body are
checked against the declared properties.
"""

import logging
import re
from typing import List, Mapping, Optional

from contract_gate.contracts import ObjectSchema, Operation, Parameter, Schema, SchemaKind
from contract_gate.routing import EndpointMatch

from .errors import ErrorKind, ValidationError, ValidationResult
from .parsed_value import BodyParseError, ParsedValue, ValueKind, conforms, parse_body


logger = logging.getLogger(__name__)


JSON_MEDIA_TYPE = "application/json"

BOOLEAN_LITERALS = ("true", "false", "1", "0")

# plain decimal literal: no underscores, no surrounding whitespace, no nan/inf
NUMERIC_LITERAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def parameter_value_matches(value: str, schema: Schema) -> bool:
    """
    Check a raw parameter string against a declared schema kind.

    Args:
        value: Parameter value as sent on the wire
        schema: Declared parameter schema

    Returns:
        True if the value is acceptable for the kind
    """
    kind = schema.kind
    if kind in (SchemaKind.INTEGER, SchemaKind.NUMBER):
        return NUMERIC_LITERAL.fullmatch(value) is not None
    if kind == SchemaKind.BOOLEAN:
        return value.lower() in BOOLEAN_LITERALS
    if kind == SchemaKind.ARRAY:
        return len(value.split(",")) > 0
    # string, object and unknown
    return True


def _is_blank(body: Optional[str]) -> bool:
    return body is None or not body.strip()


class RequestValidator:
    """
    Validates query parameters, headers and body against an operation.

    Holds no per-request state; one instance can serve any number of
    concurrent calls.
    """

    def __init__(self, check_path_parameters: bool = False):
        """
        Initialize validator.

        Args:
            check_path_parameters: Also type-check captured path segments
                against their declared kinds (off by default)
        """
        self.check_path_parameters = check_path_parameters

    def validate(
        self,
        endpoint_match: EndpointMatch,
        query_params: Mapping[str, str],
        body: Optional[str],
        headers: Optional[Mapping[str, str]] = None,
    ) -> ValidationResult:
        """
        Validate a request against the matched operation.

        Args:
            endpoint_match: Resolved endpoint
            query_params: Supplied query parameters, in supplied order
            body: Raw request body, or None
            headers: Supplied headers; header checks are skipped when None

        Returns:
            ValidationResult listing every violation found
        """
        operation = endpoint_match.operation
        errors: List[ValidationError] = []

        errors.extend(self._check_required_parameters(operation, query_params, headers))
        errors.extend(self._check_parameter_types(operation, query_params))
        if self.check_path_parameters:
            errors.extend(self._check_path_parameter_types(operation, endpoint_match.path_params))
        errors.extend(self._check_body(operation, body))

        if errors:
            logger.debug(
                f"{endpoint_match.method} {endpoint_match.path_pattern}: "
                f"{len(errors)} violations ({', '.join(str(e) for e in errors)})"
            )
        return ValidationResult(tuple(errors))

    def _check_required_parameters(
        self,
        operation: Operation,
        query_params: Mapping[str, str],
        headers: Optional[Mapping[str, str]],
    ) -> List[ValidationError]:
        errors = []
        for param in operation.parameters_in("query"):
            if param.required and param.name not in query_params:
                errors.append(ValidationError(ErrorKind.MISSING_REQUIRED_PARAMETER, param.name))

        if headers is not None:
            supplied = {name.lower() for name in headers}
            for param in operation.parameters_in("header"):
                if param.required and param.name.lower() not in supplied:
                    errors.append(ValidationError(ErrorKind.MISSING_REQUIRED_PARAMETER, param.name))
        return errors

    def _check_parameter_types(
        self, operation: Operation, query_params: Mapping[str, str]
    ) -> List[ValidationError]:
        declared = {p.name: p for p in operation.parameters_in("query")}
        errors = []
        for name, value in query_params.items():
            param: Optional[Parameter] = declared.get(name)
            if param is not None and not parameter_value_matches(value, param.schema):
                errors.append(ValidationError(ErrorKind.INVALID_PARAMETER_TYPE, name))
        return errors

    def _check_path_parameter_types(
        self, operation: Operation, path_params: Mapping[str, str]
    ) -> List[ValidationError]:
        declared = {p.name: p for p in operation.parameters_in("path")}
        errors = []
        for name, value in path_params.items():
            param = declared.get(name)
            if param is not None and not parameter_value_matches(value, param.schema):
                errors.append(ValidationError(ErrorKind.INVALID_PARAMETER_TYPE, name))
        return errors

    def _check_body(self, operation: Operation, body: Optional[str]) -> List[ValidationError]:
        body_spec = operation.request_body

        if body_spec is None:
            if not _is_blank(body):
                return [ValidationError(ErrorKind.UNEXPECTED_BODY)]
            return []

        if _is_blank(body):
            if body_spec.required:
                return [ValidationError(ErrorKind.MISSING_REQUIRED_BODY)]
            return []

        schema = body_spec.schema_for(JSON_MEDIA_TYPE)
        if schema is None:
            return [ValidationError(ErrorKind.INVALID_CONTENT_TYPE)]

        try:
            parsed = parse_body(body)
        except BodyParseError as e:
            logger.debug(f"Body rejected: {e}")
            return [ValidationError(ErrorKind.INVALID_BODY_STRUCTURE)]

        if isinstance(schema, ObjectSchema):
            if parsed.kind != ValueKind.OBJECT:
                return [ValidationError(ErrorKind.INVALID_BODY_STRUCTURE)]
            return self._check_body_fields(parsed, schema)

        if not conforms(parsed, schema.kind):
            return [ValidationError(ErrorKind.INVALID_BODY_STRUCTURE)]
        return []

    def _check_body_fields(self, parsed: ParsedValue, schema: ObjectSchema) -> List[ValidationError]:
        fields = parsed.fields()
        errors = []

        for name in schema.required:
            if name not in fields:
                errors.append(ValidationError(ErrorKind.MISSING_REQUIRED_BODY_FIELD, name))

        for name, value in fields.items():
            declared = schema.property_schema(name)
            if declared is not None and not conforms(value, declared.kind):
                errors.append(ValidationError(ErrorKind.INVALID_BODY_FIELD_TYPE, name))

        return errors
