"""Canonical JSON serialization and digests of published entries.

Used for the CLI report file, --print output and BatchResult.digest, so
that two runs over unchanged inputs produce byte-identical output.
"""

import hashlib
import json
from typing import Any, Mapping


def canonical_dumps(obj: Any) -> str:
    """
    Canonical JSON serialization.

    Rules:
    - UTF-8 (no ASCII escaping)
    - Sorted keys
    - Stable separators (",", ":")
    - Lists keep their order (callers sort them beforehand where needed)
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False
    )


def entries_digest(entries: Mapping[str, str]) -> str:
    """SHA256 of the canonical form of a path -> content mapping, prefixed "sha256:"."""
    digest = hashlib.sha256(canonical_dumps(dict(entries)).encode("utf-8")).hexdigest()
    return f"sha256:{digest}"
