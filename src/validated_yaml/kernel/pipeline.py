"""Batch pipeline: validate every matched file, then commit all or nothing.

Each file moves through

    matched -> opened -> reference_extracted -> schema_resolved
            -> decoded -> validated -> committed

and any stage failure stops that file only. The batch is judged after
every file has been processed: one failure anywhere means nothing is
published.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from referencing.exceptions import Unresolvable

from validated_yaml.codes import FailureCode
from validated_yaml.config import PipelineConfig
from validated_yaml.contracts import BatchResult, FileReport, ViolationIssue
from validated_yaml._internal.canonical_json import entries_digest
from .decoder import DecodeError, DocumentDecoder
from .errors import FileStageError
from .paths import PathResolver
from .projection import project, strip_marker
from .reference import ReferenceExtractor
from .registry import SchemaCompileError, SchemaRegistry
from .validator import SchemaValidationError

logger = logging.getLogger(__name__)


class FileStage(str, Enum):
    MATCHED = "matched"
    OPENED = "opened"
    REFERENCE_EXTRACTED = "reference_extracted"
    SCHEMA_RESOLVED = "schema_resolved"
    DECODED = "decoded"
    VALIDATED = "validated"
    COMMITTED = "committed"


class FileReadError(FileStageError):
    """Raised when a matched file cannot be opened or read."""
    code = FailureCode.READ_ERROR

    def __init__(self, path: str, cause: OSError, action: str = "read"):
        self.path = path
        self.action = action
        reason = cause.strerror or str(cause)
        super().__init__(
            f"Could not {action} file {path}: {reason}",
            summary=f"Error {'opening' if action == 'open' else 'reading'} file",
        )


@dataclass(frozen=True)
class FileResult:
    """Outcome of one file: committed with a payload, or failed with an error.

    stage is the last stage the file reached.
    """
    path: str
    stage: FileStage
    content: Optional[str] = None
    error: Optional[FileStageError] = None
    schema_locator: Optional[str] = None

    @property
    def committed(self) -> bool:
        return self.error is None and self.stage is FileStage.COMMITTED

    @property
    def diagnostic(self) -> Optional[str]:
        return self.error.diagnostic if self.error is not None else None

    def to_report(self) -> FileReport:
        violations = []
        if isinstance(self.error, SchemaValidationError):
            violations = [ViolationIssue(pointer=v.pointer, message=v.message) for v in self.error.violations]
        return FileReport(
            path=self.path,
            stage=self.stage.value,
            ok=self.committed,
            code=self.error.code.value if self.error is not None else None,
            schema_locator=self.schema_locator,
            diagnostic=self.diagnostic,
            violations=violations,
        )


def _read_bytes(path: str) -> bytes:
    try:
        handle = open(path, "rb")
    except OSError as exc:
        raise FileReadError(path, exc, action="open") from exc
    try:
        with handle:
            return handle.read()
    except OSError as exc:
        raise FileReadError(path, exc, action="read") from exc


class BatchPipeline:
    """Validate a batch of YAML files against the schemas they reference.

    The registry is injected so that compiled schemas are shared with
    every other batch using the same instance. Resolver, extractor and
    decoder default to the ones described by config.
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        config: Optional[PipelineConfig] = None,
        resolver: Optional[PathResolver] = None,
        extractor: Optional[ReferenceExtractor] = None,
        decoder: Optional[DocumentDecoder] = None,
    ):
        self.config = config or PipelineConfig()
        self.registry = registry
        self.resolver = resolver or PathResolver(files_only=self.config.files_only)
        self.extractor = extractor or ReferenceExtractor(position=self.config.marker_position)
        self.decoder = decoder or DocumentDecoder()

    def run(self, pattern: str) -> BatchResult:
        """Resolve pattern, process every file, then decide the commit.

        NoMatchError and PatternError propagate before any file is read.
        """
        paths = self.resolver.resolve(pattern)
        logger.info("Validating %d file(s) matched by %s", len(paths), pattern)
        results = [self.process_file(path) for path in paths]
        return self.commit(results)

    def process_file(self, path: str) -> FileResult:
        """Take one file as far through the stages as it will go."""
        stage = FileStage.MATCHED
        locator = None
        try:
            data = _read_bytes(path)
            stage = FileStage.OPENED

            try:
                content = data.decode(self.config.encoding)
            except UnicodeDecodeError as exc:
                raise DecodeError(path, str(exc)) from exc

            reference = self.extractor.extract(content, path)
            locator = reference.resolved_locator
            stage = FileStage.REFERENCE_EXTRACTED

            try:
                schema = self.registry.compile(locator)
            except SchemaCompileError as exc:
                raise exc.for_file(path) from exc
            stage = FileStage.SCHEMA_RESOLVED

            value = self.decoder.decode(content, path)
            stage = FileStage.DECODED

            try:
                outcome = self.registry.validate(schema, value)
            except Unresolvable as exc:
                # dynamic references are only looked up while validating
                raise SchemaCompileError(locator, str(exc), source_path=path) from exc
            if not outcome.valid:
                raise SchemaValidationError(path, locator, outcome)
            stage = FileStage.VALIDATED

            payload = strip_marker(content, reference)
        except FileStageError as exc:
            logger.warning("%s", exc.diagnostic)
            return FileResult(path=path, stage=stage, error=exc, schema_locator=locator)

        logger.debug("%s validated against %s", path, locator)
        return FileResult(path=path, stage=FileStage.COMMITTED, content=payload, schema_locator=locator)

    @staticmethod
    def commit(results: Sequence[FileResult]) -> BatchResult:
        """Publish the batch only if every file committed."""
        files = [result.to_report() for result in results]
        diagnostics: List[str] = [r.diagnostic for r in results if r.diagnostic is not None]
        if diagnostics:
            logger.info("Batch not committed: %d of %d file(s) failed", len(diagnostics), len(results))
            return BatchResult(committed=False, diagnostics=diagnostics, files=files)

        entries = project((r.path, r.content) for r in results)
        logger.info("Batch committed: %d file(s)", len(entries))
        return BatchResult(committed=True, entries=entries, files=files, digest=entries_digest(entries))
