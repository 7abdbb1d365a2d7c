"""Locate the schema-reference marker embedded in a YAML file.

The marker is the comment understood by the YAML language server:

    # yaml-language-server: $schema=../schema.json

Its locator is resolved against the directory of the file that embeds it.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Literal, Optional

from validated_yaml.codes import FailureCode
from .errors import FileStageError

logger = logging.getLogger(__name__)

MARKER_EXAMPLE = "# yaml-language-server: $schema=path"

SCHEMA_MARKER = re.compile(r"# yaml-language-server: \$schema=(.+?)[ \t\r]*$", re.MULTILINE)

MarkerPosition = Literal["anywhere", "first-line"]


class MissingReferenceError(FileStageError):
    """Raised when a file carries no usable schema-reference marker."""
    code = FailureCode.MISSING_REFERENCE
    summary = "Error validating file"

    def __init__(self, path: str, first_line_only: bool = False):
        self.path = path
        where = " in the first line" if first_line_only else ""
        super().__init__(
            f"File {path} does not contain a valid schema reference{where}, e.g. '{MARKER_EXAMPLE}'"
        )


@dataclass(frozen=True)
class SchemaReference:
    """A marker found in a file.

    span_start/span_end delimit the matched marker text inside the
    content; projection drops everything up to span_end.
    """
    raw_marker_text: str
    referenced_locator: str
    resolved_locator: str
    span_start: int
    span_end: int


def resolve_locator(source_path: str, locator: str) -> str:
    """Join a locator onto the directory of the file that references it.

    URIs with a scheme (file://, https://) are returned untouched; plain
    paths follow os.path.join semantics, so an absolute locator wins.
    No existence check happens here.
    """
    if re.match(r"^[A-Za-z][A-Za-z0-9+.-]*://", locator):
        return locator
    return os.path.normpath(os.path.join(os.path.dirname(source_path), locator))


class ReferenceExtractor:
    """Find the first schema marker in a file's text."""

    def __init__(self, position: MarkerPosition = "anywhere"):
        if position not in ("anywhere", "first-line"):
            raise ValueError("position must be 'anywhere' or 'first-line'")
        self.position = position

    def _search(self, content: str) -> Optional["re.Match[str]"]:
        if self.position == "anywhere":
            return SCHEMA_MARKER.search(content)

        # first-line: the first non-blank line must carry the marker
        offset = 0
        for line in content.splitlines(keepends=True):
            if line.strip():
                match = SCHEMA_MARKER.search(content, offset, offset + len(line.rstrip("\r\n")))
                # the marker has to open the line, not trail other content
                if match and not content[offset:match.start()].strip():
                    return match
                return None
            offset += len(line)
        return None

    def extract(self, content: str, source_path: str) -> SchemaReference:
        match = self._search(content)
        if match is None or not match.group(1).strip():
            raise MissingReferenceError(source_path, first_line_only=self.position == "first-line")

        referenced = match.group(1)
        resolved = resolve_locator(source_path, referenced)
        logger.debug("%s references schema %s (resolved to %s)", source_path, referenced, resolved)
        return SchemaReference(
            raw_marker_text=match.group(0),
            referenced_locator=referenced,
            resolved_locator=resolved,
            span_start=match.start(),
            span_end=match.end(),
        )
