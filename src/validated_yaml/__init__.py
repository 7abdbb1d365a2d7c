"""validated_yaml: validate YAML files against the JSON Schemas they reference."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("validated-yaml")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from validated_yaml.api import validate_batch, load_validated, default_registry, BatchValidationError
from validated_yaml.config import PipelineConfig
from validated_yaml.contracts import BatchResult, FileReport, ViolationIssue
from validated_yaml.codes import FailureCode
from validated_yaml.kernel.errors import ValidatedYamlError, BatchAbortedError, FileStageError
from validated_yaml.kernel.paths import NoMatchError, PatternError
from validated_yaml.kernel.registry import SchemaRegistry, SchemaCompileError

__all__ = [
    "__version__",
    "validate_batch",
    "load_validated",
    "default_registry",
    "BatchValidationError",
    "PipelineConfig",
    "BatchResult",
    "FileReport",
    "ViolationIssue",
    "FailureCode",
    "ValidatedYamlError",
    "BatchAbortedError",
    "FileStageError",
    "NoMatchError",
    "PatternError",
    "SchemaRegistry",
    "SchemaCompileError",
]
