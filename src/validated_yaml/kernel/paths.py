"""Expand a glob pattern into the ordered list of files to validate."""

import glob
import logging
import os
from typing import List

from validated_yaml.codes import FailureCode
from .errors import BatchAbortedError

logger = logging.getLogger(__name__)


class PatternError(BatchAbortedError):
    """Raised when the input pattern is syntactically invalid."""
    code = FailureCode.INVALID_PATTERN

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid input pattern {pattern!r}: {reason}")


class NoMatchError(BatchAbortedError):
    """Raised when the input pattern matches no file."""
    code = FailureCode.NO_MATCH

    def __init__(self, pattern: str):
        self.pattern = pattern
        super().__init__(f"No files matched the provided input pattern: {pattern}")


def check_pattern(pattern: str) -> None:
    """Reject patterns that cannot be expanded.

    Python's glob never raises on odd input, so the syntax checks
    live here: an empty pattern, an embedded NUL byte and an unclosed
    character class are errors.
    """
    if not isinstance(pattern, str) or not pattern.strip():
        raise PatternError(str(pattern), "pattern is empty")
    if "\x00" in pattern:
        raise PatternError(pattern, "pattern contains a NUL byte")
    if _has_unclosed_class(pattern.replace(os.sep, "/")):
        raise PatternError(pattern, "unterminated character class '['")


def _has_unclosed_class(pattern: str) -> bool:
    """Scan character classes the way fnmatch does, one path component at a time."""
    i, n = 0, len(pattern)
    while i < n:
        if pattern[i] != "[":
            i += 1
            continue
        j = i + 1
        if j < n and pattern[j] in "!^":
            j += 1
        if j < n and pattern[j] == "]":
            j += 1
        while j < n and pattern[j] not in "]/":
            j += 1
        if j >= n or pattern[j] == "/":
            return True
        i = j + 1
    return False


class PathResolver:
    """Shell-style glob expansion with recursive '**' support.

    Results are sorted lexicographically so that every downstream
    diagnostic is reproducible run to run.
    """

    def __init__(self, files_only: bool = True):
        self.files_only = files_only

    def resolve(self, pattern: str) -> List[str]:
        check_pattern(pattern)

        matches = glob.glob(pattern, recursive=True)
        if self.files_only:
            matches = [m for m in matches if not os.path.isdir(m)]

        # "**/" can reach the same file through more than one expansion
        paths = sorted(set(matches))
        if not paths:
            raise NoMatchError(pattern)

        logger.debug("Pattern %r matched %d file(s)", pattern, len(paths))
        return paths
