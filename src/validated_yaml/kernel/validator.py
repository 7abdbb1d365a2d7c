"""Check decoded values against a compiled schema.

Violations are reported one per failing keyword, ordered by instance
pointer then message, so the same document always renders the same
diagnostic. Type mismatches are worded "got <actual>, want <expected>";
every other message is the engine's own text, unmodified.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List, Sequence, Tuple

from jsonschema.exceptions import ValidationError

from validated_yaml.codes import FailureCode
from .errors import FileStageError

if TYPE_CHECKING:
    from .decoder import DecodedValue
    from .registry import CompiledSchema


@dataclass(frozen=True)
class Violation:
    """One schema violation at a JSON pointer into the document."""
    pointer: str
    message: str

    def __str__(self) -> str:
        return f"at '{self.pointer}': {self.message}"


@dataclass(frozen=True)
class ValidationOutcome:
    """Valid when violations is empty, Invalid otherwise."""
    schema_uri: str
    violations: Tuple[Violation, ...] = field(default_factory=tuple)

    @property
    def valid(self) -> bool:
        return not self.violations

    def render(self) -> str:
        location = self.schema_uri if "#" in self.schema_uri else f"{self.schema_uri}#"
        lines = [f"jsonschema validation failed with '{location}'"]
        lines.extend(f"- {v}" for v in self.violations)
        return "\n".join(lines)


class SchemaValidationError(FileStageError):
    """Raised when a document does not conform to its schema."""
    code = FailureCode.SCHEMA_VALIDATION_ERROR
    summary = "Error validating YAML"

    def __init__(self, path: str, locator: str, outcome: ValidationOutcome):
        self.path = path
        self.locator = locator
        self.outcome = outcome
        super().__init__(f"YAML file {path} does not conform to schema {locator}: {outcome.render()}")

    @property
    def violations(self) -> Tuple[Violation, ...]:
        return self.outcome.violations


def json_pointer(parts: Iterable[object]) -> str:
    """RFC 6901 pointer for an instance path ('' is the document root)."""
    return "".join("/" + str(p).replace("~", "~0").replace("/", "~1") for p in parts)


def json_type(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _message(error: ValidationError) -> str:
    if error.validator == "type":
        expected: Sequence[str]
        expected = [error.validator_value] if isinstance(error.validator_value, str) else list(error.validator_value)
        return f"got {json_type(error.instance)}, want {' or '.join(expected)}"
    return error.message


def validate(value: "DecodedValue", schema: "CompiledSchema") -> ValidationOutcome:
    """Run a compiled schema over a decoded value."""
    violations: List[Violation] = [
        Violation(pointer=json_pointer(error.absolute_path), message=_message(error))
        for error in schema.validator.iter_errors(value)
    ]
    violations.sort(key=lambda v: (v.pointer, v.message))
    return ValidationOutcome(schema_uri=schema.uri, violations=tuple(violations))
