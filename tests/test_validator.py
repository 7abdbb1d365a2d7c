"""Tests for violation reporting."""

import json

import pytest

from validated_yaml.codes import FailureCode
from validated_yaml.kernel.registry import SchemaRegistry
from validated_yaml.kernel.validator import (
    SchemaValidationError,
    ValidationOutcome,
    Violation,
    json_pointer,
    json_type,
    validate,
)


@pytest.fixture
def compile_schema(tmp_path):
    def _compile(schema):
        path = tmp_path / "schema.json"
        path.write_text(json.dumps(schema), encoding="utf-8")
        return SchemaRegistry().compile(str(path))
    return _compile


def test_valid_value_has_no_violations(metadata_dir):
    compiled = SchemaRegistry().compile(str(metadata_dir / "schema.json"))

    outcome = validate({"id": "example-id", "name": "Example Name", "tags": ["tag1"]}, compiled)

    assert outcome.valid
    assert outcome.violations == ()


def test_type_mismatch_wording(metadata_dir):
    compiled = SchemaRegistry().compile(str(metadata_dir / "schema.json"))

    outcome = validate({"id": 12345, "name": "Example Name"}, compiled)

    assert not outcome.valid
    assert outcome.violations == (Violation(pointer="/id", message="got number, want string"),)
    assert "- at '/id': got number, want string" in outcome.render()


def test_multiple_expected_types_joined(compile_schema):
    compiled = compile_schema({"properties": {"v": {"type": ["string", "null"]}}})

    outcome = validate({"v": [1]}, compiled)

    assert outcome.violations[0].message == "got array, want string or null"


def test_other_keywords_pass_engine_message_through(compile_schema):
    compiled = compile_schema({"type": "object", "required": ["id"]})

    outcome = validate({}, compiled)

    assert outcome.violations == (Violation(pointer="", message="'id' is a required property"),)


def test_violations_sorted_by_pointer_then_message(compile_schema):
    compiled = compile_schema({
        "properties": {
            "b": {"type": "string"},
            "a": {"type": "integer", "minimum": 10},
            "list": {"items": {"type": "string"}},
        }
    })

    outcome = validate({"b": 1, "a": 2.5, "list": ["ok", 3]}, compiled)

    assert [v.pointer for v in outcome.violations] == ["/a", "/a", "/b", "/list/1"]
    assert outcome.violations[0].message == "2.5 is less than the minimum of 10"
    assert outcome.violations[1].message == "got number, want integer"


def test_render_names_schema_uri():
    outcome = ValidationOutcome(
        schema_uri="file:///s.json",
        violations=(Violation("/id", "got number, want string"), Violation("", "'name' is a required property")),
    )

    assert outcome.render() == (
        "jsonschema validation failed with 'file:///s.json#'\n"
        "- at '/id': got number, want string\n"
        "- at '': 'name' is a required property"
    )


def test_schema_validation_error_message():
    outcome = ValidationOutcome("file:///s.json", (Violation("/id", "got number, want string"),))

    err = SchemaValidationError("ex.yaml", "s.json", outcome)

    assert err.code is FailureCode.SCHEMA_VALIDATION_ERROR
    assert err.violations == outcome.violations
    assert err.diagnostic.startswith("Error validating YAML: YAML file ex.yaml does not conform to schema s.json: ")
    assert err.diagnostic.endswith("- at '/id': got number, want string")


def test_json_pointer_escaping():
    assert json_pointer([]) == ""
    assert json_pointer(["a/b", "c~d", 0]) == "/a~1b/c~0d/0"


@pytest.mark.parametrize("value,expected", [
    (None, "null"), (True, "boolean"), (1, "number"), (1.5, "number"),
    ("s", "string"), ([], "array"), ({}, "object"),
])
def test_json_type_names(value, expected):
    assert json_type(value) == expected
