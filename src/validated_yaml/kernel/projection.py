"""Turn validated files into the published path -> content mapping."""

from typing import Dict, Iterable, Tuple

from .reference import SchemaReference


def strip_marker(content: str, reference: SchemaReference) -> str:
    """Drop everything up to and including the marker, then trim line breaks.

    Only newline characters are trimmed; indentation and trailing spaces
    of the payload are part of the content.
    """
    return content[reference.span_end:].strip("\r\n")


def project(results: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    """Assemble (path, payload) pairs into the published mapping.

    Keys keep the order they arrive in, which is the resolver's order.
    """
    entries: Dict[str, str] = {}
    for path, payload in results:
        if path in entries:
            raise ValueError(f"Duplicate entry for path {path}")
        entries[path] = payload
    return entries
