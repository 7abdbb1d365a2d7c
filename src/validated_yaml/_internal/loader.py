"""Schema document loading (internal).

The registry asks a loader for a document by absolute URI. The default
loader understands local files and file:// URIs; callers needing other
schemes pass their own loader to SchemaRegistry.
"""

import json
import re
from pathlib import Path
from typing import Any, Callable
from urllib.parse import urldefrag, urlsplit
from urllib.request import url2pathname

import yaml

SchemaLoader = Callable[[str], Any]

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


class UnsupportedLocatorError(ValueError):
    """Raised when a loader cannot handle a URI scheme."""
    pass


def to_uri(locator: str) -> str:
    """Normalize a locator into an absolute URI usable as a cache key.

    A "#fragment" suffix is kept as the URI fragment.
    """
    if _SCHEME.match(locator):
        return locator
    path, fragment = urldefrag(locator)
    uri = Path(path).resolve().as_uri()
    return f"{uri}#{fragment}" if fragment else uri


def uri_to_path(uri: str) -> Path:
    """Convert a file:// URI back into a filesystem path."""
    parts = urlsplit(uri)
    if parts.scheme != "file":
        raise UnsupportedLocatorError(f"unsupported schema locator scheme '{parts.scheme}' in {uri}")
    return Path(url2pathname(parts.path))


def parse_schema_document(path: Path, data: bytes) -> Any:
    """Parse schema bytes as JSON, or YAML for .yaml/.yml documents."""
    text = data.decode("utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        return yaml.safe_load(text)
    return json.loads(text)


def load_file_schema(uri: str) -> Any:
    """Default loader: read and parse a schema document from the filesystem."""
    path = uri_to_path(uri)
    return parse_schema_document(path, path.read_bytes())
