"""Exception hierarchy shared by the kernel stages."""

from typing import Optional

from validated_yaml.codes import FailureCode


class ValidatedYamlError(Exception):
    """Base exception for every error raised by validated_yaml."""
    code: FailureCode


class BatchAbortedError(ValidatedYamlError):
    """Fatal error: the batch stops before any file is processed."""
    pass


class FileStageError(ValidatedYamlError):
    """Per-file error: recorded as a diagnostic, the batch continues.

    Attributes:
        summary: Short title of the failure (e.g. "Error decoding YAML")
        detail: Full human-readable description, including the file path
    """
    summary: str = "Error processing file"

    def __init__(self, detail: str, summary: Optional[str] = None):
        self.detail = detail
        if summary is not None:
            self.summary = summary
        super().__init__(detail)

    @property
    def diagnostic(self) -> str:
        """Diagnostic line as published in BatchResult.diagnostics."""
        return f"{self.summary}: {self.detail}"
