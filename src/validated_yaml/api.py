"""Public API for validated_yaml.

High-level functions that return complete, structured results.
Hosts should use these functions instead of importing from kernel.
"""

import threading
from typing import Dict, List, Optional

from validated_yaml.config import PipelineConfig
from validated_yaml.contracts import BatchResult
from validated_yaml.kernel.pipeline import BatchPipeline
from validated_yaml.kernel.registry import SchemaRegistry

_default_registry: Optional[SchemaRegistry] = None
_default_registry_lock = threading.Lock()


class BatchValidationError(Exception):
    """Raised by load_validated() when a batch did not commit."""
    def __init__(self, pattern: str, diagnostics: List[str], result: BatchResult):
        self.pattern = pattern
        self.diagnostics = diagnostics
        self.result = result
        lines = "\n".join(f"  {d}" for d in diagnostics)
        super().__init__(
            f"{len(diagnostics)} file(s) matched by {pattern} failed validation:\n{lines}"
        )


def default_registry() -> SchemaRegistry:
    """Process-wide registry used when callers do not inject one.

    Created on first use with default settings.
    """
    global _default_registry
    with _default_registry_lock:
        if _default_registry is None:
            _default_registry = SchemaRegistry()
        return _default_registry


def _registry_for(config: PipelineConfig, registry: Optional[SchemaRegistry]) -> SchemaRegistry:
    if registry is not None:
        return registry
    if config.default_draft != "2020-12" or config.format_assertion:
        # compiled schemas depend on these settings; keep them out of the shared cache
        return SchemaRegistry(default_draft=config.default_draft, format_assertion=config.format_assertion)
    return default_registry()


def validate_batch(
    pattern: str,
    registry: Optional[SchemaRegistry] = None,
    config: Optional[PipelineConfig] = None,
) -> BatchResult:
    """
    Validate every file matched by pattern against its referenced schema.

    Args:
        pattern: Glob pattern, '**' matches across directory levels
        registry: Schema registry to compile through (shared cache);
            defaults to the process-wide registry
        config: Pipeline settings (defaults to PipelineConfig())

    Returns:
        BatchResult. committed is False when any file failed, in which
        case entries is empty and diagnostics lists every failure.

    Raises:
        NoMatchError: pattern matched no file
        PatternError: pattern is malformed
    """
    config = config or PipelineConfig()
    pipeline = BatchPipeline(_registry_for(config, registry), config=config)
    return pipeline.run(pattern)


def load_validated(
    pattern: str,
    registry: Optional[SchemaRegistry] = None,
    config: Optional[PipelineConfig] = None,
) -> Dict[str, str]:
    """
    Return the validated path -> content mapping, or raise.

    Same pipeline as validate_batch(), for callers that consume the
    result as configuration data and must never see a partial mapping.

    Raises:
        BatchValidationError: at least one file failed; carries every diagnostic
        NoMatchError: pattern matched no file
        PatternError: pattern is malformed
    """
    result = validate_batch(pattern, registry=registry, config=config)
    if not result.committed:
        raise BatchValidationError(pattern, list(result.diagnostics), result)
    return dict(result.entries)
