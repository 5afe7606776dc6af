"""
Request validator tests.

Tests parameter, header, path and body checks, error accumulation and
error ordering.
"""

import json
import sys

import pytest

from contract_gate.contracts import (
    ArraySchema,
    BooleanSchema,
    IntegerSchema,
    NumberSchema,
    Operation,
    Parameter,
    RequestBody,
    StringSchema,
    UnknownSchema,
    load_contracts,
)
from contract_gate.routing import EndpointMatch, EndpointResolver, HostIndex
from contract_gate.validation import ErrorKind, RequestValidator, ValidationError, parameter_value_matches

from .conftest import album_document, write_document


ALBUM_TRACKS = "https://api.example.com/v1/albums/abc/tracks"
SEARCH = "https://api.example.com/v1/search"
PLAYLISTS = "https://api.example.com/v1/playlists"


@pytest.fixture
def tracks_match(resolver):
    return resolver.resolve(ALBUM_TRACKS, "GET")


@pytest.fixture
def search_match(resolver):
    return resolver.resolve(SEARCH, "GET")


@pytest.fixture
def playlist_match(resolver):
    return resolver.resolve(PLAYLISTS, "POST")


def match_for(operation, path_params=None):
    return EndpointMatch(
        url="https://api.example.com/x",
        method="POST",
        path_pattern="/x",
        operation=operation,
        path_params=path_params or {},
    )


@pytest.mark.unit
class TestParameterValueMatches:
    """Test raw parameter string checks."""

    @pytest.mark.parametrize("value", ["10", "-3", "+4", "2.5", ".5", "5.", "1e3", "2.5E-2"])
    def test_numeric_values(self, value):
        """Numbers accept plain decimal literals."""
        assert parameter_value_matches(value, IntegerSchema())
        assert parameter_value_matches(value, NumberSchema())

    @pytest.mark.parametrize(
        "value", ["ten", "", "1,2", "1_000", " 1", "1 ", "nan", "inf", "-Infinity", "0x1A", "\u0661"]
    )
    def test_non_numeric_values(self, value):
        """Non-numeric strings are rejected for number kinds."""
        assert not parameter_value_matches(value, IntegerSchema())
        assert not parameter_value_matches(value, NumberSchema())

    @pytest.mark.parametrize("value", ["true", "FALSE", "1", "0"])
    def test_boolean_literals(self, value):
        """Booleans accept true/false/1/0 in any case."""
        assert parameter_value_matches(value, BooleanSchema())

    def test_boolean_rejects_other_words(self):
        """Other words are not booleans."""
        assert not parameter_value_matches("yes", BooleanSchema())

    def test_permissive_kinds(self):
        """Strings, arrays and unknown kinds accept any value."""
        assert parameter_value_matches("anything", StringSchema())
        assert parameter_value_matches("a,b,c", ArraySchema())
        assert parameter_value_matches("", UnknownSchema())


@pytest.mark.unit
class TestQueryParameters:
    """Test required and typed query parameters."""

    def test_valid_parameters(self, validator, tracks_match):
        """Correct parameters give a valid result."""
        result = validator.validate(tracks_match, {"market": "US", "limit": "10", "offset": "0"}, None)

        assert result.valid
        assert result.errors == ()

    def test_missing_required_parameter(self, validator, search_match):
        """A missing required query parameter is reported once."""
        result = validator.validate(search_match, {}, None)

        assert not result.valid
        assert result.errors == (ValidationError(ErrorKind.MISSING_REQUIRED_PARAMETER, "type"),)

    def test_invalid_parameter_type(self, validator, tracks_match):
        """A non-numeric integer parameter is reported."""
        result = validator.validate(tracks_match, {"limit": "ten"}, None)

        assert result.errors == (ValidationError(ErrorKind.INVALID_PARAMETER_TYPE, "limit"),)

    def test_type_errors_in_supplied_order(self, validator, search_match):
        """Type errors follow the order parameters were supplied in."""
        params = {"type": "album", "score": "high", "explicit": "maybe"}

        result = validator.validate(search_match, params, None)

        assert result.fields_for(ErrorKind.INVALID_PARAMETER_TYPE) == ["score", "explicit"]

    def test_undeclared_parameters_ignored(self, validator, tracks_match):
        """Parameters the operation does not declare are not checked."""
        result = validator.validate(tracks_match, {"unknown": "x"}, None)

        assert result.valid


@pytest.mark.unit
class TestHeaderParameters:
    """Test required header parameters."""

    def test_headers_not_checked_when_absent(self, validator, search_match):
        """Without a headers mapping, header parameters are not checked."""
        result = validator.validate(search_match, {"type": "album"}, None)

        assert result.valid

    def test_missing_required_header(self, validator, search_match):
        """A missing required header is reported after query parameters."""
        result = validator.validate(search_match, {}, None, headers={})

        assert result.errors == (
            ValidationError(ErrorKind.MISSING_REQUIRED_PARAMETER, "type"),
            ValidationError(ErrorKind.MISSING_REQUIRED_PARAMETER, "Authorization"),
        )

    def test_header_names_case_insensitive(self, validator, search_match):
        """Header names match regardless of case."""
        result = validator.validate(search_match, {"type": "album"}, None, headers={"authorization": "Bearer t"})

        assert result.valid


@pytest.mark.unit
class TestPathParameters:
    """Test typed path parameters."""

    def test_path_values_not_checked_by_default(self, validator, tmp_path):
        """Captured segments are not type-checked unless asked for."""
        document = album_document()
        tracks = document["paths"]["/albums/{id}/tracks"]["get"]
        tracks["parameters"][0]["schema"] = {"type": "integer"}
        write_document(tmp_path, "albums.json", document)
        resolver = EndpointResolver(HostIndex.build(load_contracts(tmp_path)))

        result = validator.validate(resolver.resolve(ALBUM_TRACKS, "GET"), {}, None)

        assert result.valid

    def test_invalid_path_parameter(self):
        """With path checks on, values are checked against their declared kind."""
        operation = Operation(parameters=(
            _param("task_id", "path", IntegerSchema()),
        ))

        result = RequestValidator(check_path_parameters=True).validate(
            match_for(operation, {"task_id": "abc"}), {}, None
        )

        assert result.errors == (ValidationError(ErrorKind.INVALID_PARAMETER_TYPE, "task_id"),)

    def test_valid_path_parameter(self):
        """Numeric path values pass for integer parameters."""
        operation = Operation(parameters=(_param("task_id", "path", IntegerSchema()),))
        validator = RequestValidator(check_path_parameters=True)

        assert validator.validate(match_for(operation, {"task_id": "42"}), {}, None).valid


@pytest.mark.unit
class TestBodyPresence:
    """Test body presence and content type rules."""

    def test_required_body_missing(self, validator, playlist_match):
        """A required body that is absent is reported."""
        result = validator.validate(playlist_match, {}, None)

        assert result.errors == (ValidationError(ErrorKind.MISSING_REQUIRED_BODY),)

    def test_required_body_blank(self, validator, playlist_match):
        """A blank body counts as absent."""
        result = validator.validate(playlist_match, {}, "   \n")

        assert result.kinds() == [ErrorKind.MISSING_REQUIRED_BODY]

    def test_optional_body_absent(self, validator):
        """An optional body may be left out."""
        operation = Operation(request_body=RequestBody(required=False, content={"application/json": StringSchema()}))

        assert validator.validate(match_for(operation), {}, None).valid

    def test_unexpected_body(self, validator, tracks_match):
        """A body on an operation without one is reported."""
        result = validator.validate(tracks_match, {}, '{"a": 1}')

        assert result.errors == (ValidationError(ErrorKind.UNEXPECTED_BODY),)

    def test_blank_body_not_unexpected(self, validator, tracks_match):
        """A blank body on an operation without one is fine."""
        assert validator.validate(tracks_match, {}, "  ").valid

    def test_invalid_content_type_skips_structure(self, validator):
        """Without a JSON media type, the body is not parsed."""
        operation = Operation(request_body=RequestBody(required=True, content={"image/jpeg": StringSchema()}))

        result = validator.validate(match_for(operation), {}, "\xff\xd8 not json")

        assert result.errors == (ValidationError(ErrorKind.INVALID_CONTENT_TYPE),)


@pytest.mark.unit
class TestBodyStructure:
    """Test parsing and field checks of JSON bodies."""

    def test_valid_body(self, validator, playlist_match):
        """A body matching the schema is valid."""
        body = '{"name": "Road trip", "public": true, "position": 3, "rating": 4.5, "tags": ["a"]}'

        assert validator.validate(playlist_match, {}, body).valid

    def test_missing_required_field(self, validator, playlist_match):
        """An empty object misses the required field."""
        result = validator.validate(playlist_match, {}, "{}")

        assert result.errors == (ValidationError(ErrorKind.MISSING_REQUIRED_BODY_FIELD, "name"),)

    def test_unparseable_body_skips_fields(self, validator, playlist_match):
        """Invalid JSON is reported once, without field errors."""
        result = validator.validate(playlist_match, {}, "{name: Road trip")

        assert result.errors == (ValidationError(ErrorKind.INVALID_BODY_STRUCTURE),)

    def test_non_object_body(self, validator, playlist_match):
        """An array where an object is declared is a structure error."""
        result = validator.validate(playlist_match, {}, '[{"name": "x"}]')

        assert result.errors == (ValidationError(ErrorKind.INVALID_BODY_STRUCTURE),)

    @pytest.mark.parametrize(
        "body",
        [
            pytest.param(
                '{"name": "x", "position": ' + "1" * 5000 + "}",
                marks=pytest.mark.skipif(
                    not hasattr(sys, "get_int_max_str_digits"), reason="no integer digit limit"
                ),
            ),
            '{"name": "x", "tags": ' + "[" * 100000 + "]" * 100000 + "}",
        ],
    )
    def test_body_beyond_parser_limits(self, validator, playlist_match, body):
        """Huge integers and deep nesting are structure errors, not crashes."""
        result = validator.validate(playlist_match, {}, body)

        assert result.errors == (ValidationError(ErrorKind.INVALID_BODY_STRUCTURE),)

    @pytest.mark.parametrize(
        "field, value",
        [
            ("name", 5),
            ("public", "yes"),
            ("position", 1.5),
            ("rating", "high"),
            ("tags", "rock"),
            ("owner", "me"),
        ],
    )
    def test_field_type_mismatch(self, validator, playlist_match, field, value):
        """Values of the wrong kind are reported by field name."""
        body = json.dumps({"name": "x", field: value})

        result = validator.validate(playlist_match, {}, body)

        assert result.errors == (ValidationError(ErrorKind.INVALID_BODY_FIELD_TYPE, field),)

    def test_integral_float_is_integer(self, validator, playlist_match):
        """2.0 is accepted for an integer field."""
        assert validator.validate(playlist_match, {}, '{"name": "x", "position": 2.0}').valid

    def test_null_values_accepted(self, validator, playlist_match):
        """Null conforms to any declared kind."""
        assert validator.validate(playlist_match, {}, '{"name": null, "position": null}').valid

    def test_undeclared_and_untyped_fields_accepted(self, validator, playlist_match):
        """Unknown fields and fields without a declared type are not checked."""
        body = '{"name": "x", "extra": [1, 2], "notes": {"any": "thing"}}'

        assert validator.validate(playlist_match, {}, body).valid

    def test_nested_values_not_inspected(self, validator, playlist_match):
        """Validation stops at the top level of the body."""
        body = '{"name": "x", "owner": {"id": 42}, "tags": [1, 2]}'

        assert validator.validate(playlist_match, {}, body).valid

    def test_required_errors_before_type_errors(self, validator, playlist_match):
        """Missing fields come before type errors."""
        result = validator.validate(playlist_match, {}, '{"public": "no", "position": "first"}')

        assert result.errors == (
            ValidationError(ErrorKind.MISSING_REQUIRED_BODY_FIELD, "name"),
            ValidationError(ErrorKind.INVALID_BODY_FIELD_TYPE, "public"),
            ValidationError(ErrorKind.INVALID_BODY_FIELD_TYPE, "position"),
        )

    def test_non_object_schema(self, validator):
        """Non-object body schemas check the top-level value kind."""
        operation = Operation(request_body=RequestBody(
            required=True, content={"application/json": ArraySchema(items=StringSchema())}
        ))
        match = match_for(operation)

        assert validator.validate(match, {}, '["a", "b"]').valid
        assert validator.validate(match, {}, '{"a": 1}').kinds() == [ErrorKind.INVALID_BODY_STRUCTURE]


@pytest.mark.unit
class TestAccumulation:
    """Test that every independent check reports."""

    def test_all_rules_reported_in_order(self, validator):
        """Parameter and body errors are all collected, in order."""
        operation = Operation(
            parameters=(
                _param("q", "query", StringSchema(), required=True),
                _param("limit", "query", IntegerSchema()),
                _param("flag", "query", BooleanSchema()),
            ),
        )

        result = validator.validate(match_for(operation), {"flag": "maybe", "limit": "x"}, '{"a": 1}')

        assert result.errors == (
            ValidationError(ErrorKind.MISSING_REQUIRED_PARAMETER, "q"),
            ValidationError(ErrorKind.INVALID_PARAMETER_TYPE, "flag"),
            ValidationError(ErrorKind.INVALID_PARAMETER_TYPE, "limit"),
            ValidationError(ErrorKind.UNEXPECTED_BODY),
        )

    def test_parameter_and_field_errors(self, validator, resolver):
        """Body field errors follow parameter errors."""
        operation = resolver.resolve(PLAYLISTS, "POST").operation
        operation = Operation(
            parameters=(_param("dry_run", "query", BooleanSchema(), required=True),),
            request_body=operation.request_body,
        )

        result = validator.validate(match_for(operation), {}, '{"name": 1}')

        assert result.kinds() == [
            ErrorKind.MISSING_REQUIRED_PARAMETER,
            ErrorKind.INVALID_BODY_FIELD_TYPE,
        ]

    def test_validation_is_idempotent(self, validator, search_match):
        """Validating twice gives equal results."""
        params = {"score": "x"}

        assert validator.validate(search_match, params, "{}") == validator.validate(search_match, params, "{}")


def _param(name, location, schema, required=False):
    return Parameter(name=name, location=location, required=required or location == "path", schema=schema)
