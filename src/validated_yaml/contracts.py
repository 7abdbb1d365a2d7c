"""Public result models for validated_yaml."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class ViolationIssue(BaseModel):
    """A single schema violation inside one file."""
    pointer: str  # JSON pointer into the document, "" for the root
    message: str


class FileReport(BaseModel):
    """Outcome of one matched file."""
    path: str
    stage: str  # last stage reached: "matched" ... "committed"
    ok: bool
    code: Optional[str] = None  # FailureCode value when ok is False
    schema_locator: Optional[str] = None  # resolved locator, once extracted
    diagnostic: Optional[str] = None
    violations: List[ViolationIssue] = Field(default_factory=list)


class BatchResult(BaseModel):
    """Result of validating every file matched by one pattern.

    entries is only populated when committed is True; a batch with any
    diagnostic publishes nothing.
    """
    committed: bool
    entries: Dict[str, str] = Field(default_factory=dict)  # path -> payload
    diagnostics: List[str] = Field(default_factory=list)  # one per failing file, resolver order
    files: List[FileReport] = Field(default_factory=list)  # one per matched file, resolver order
    digest: Optional[str] = None  # sha256 of canonical entries, committed only

    @model_validator(mode="after")
    def _check_commit(self) -> "BatchResult":
        if self.committed == bool(self.diagnostics):
            raise ValueError("committed must be True exactly when there are no diagnostics")
        if not self.committed and (self.entries or self.digest is not None):
            raise ValueError("a batch that did not commit cannot expose entries")
        return self
