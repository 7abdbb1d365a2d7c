"""Pytest configuration and shared fixtures.

No sys.path hacks - tests import from the installed validated_yaml package.
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest

from validated_yaml.kernel.registry import SchemaRegistry
from validated_yaml._internal.loader import load_file_schema


TEST_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "https://example.com/schemas/test",
    "title": "Test Schema",
    "description": "Schema for Tests",
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "name": {"type": "string"},
        "tags": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["id", "name"],
}

VALID_DOCUMENT = """
# yaml-language-server: $schema=../schema.json
id: "example-id"
name: "Example Name"
tags:
  - "tag1"
  - "tag2"
"""

VALID_PAYLOAD = 'id: "example-id"\nname: "Example Name"\ntags:\n  - "tag1"\n  - "tag2"'


class CountingLoader:
    """Schema loader that records every URI it is asked for."""

    def __init__(self):
        self.calls: List[str] = []

    def __call__(self, uri: str) -> Any:
        self.calls.append(uri)
        return load_file_schema(uri)


@pytest.fixture
def metadata_dir(tmp_path) -> Path:
    """metadata/ with schema.json and an empty examples/ directory."""
    root = tmp_path / "metadata"
    (root / "examples").mkdir(parents=True)
    (root / "schema.json").write_text(json.dumps(TEST_SCHEMA, indent=2), encoding="utf-8")
    return root


@pytest.fixture
def write_files() -> Callable[[Path, Dict[str, str]], List[Path]]:
    """Write {relative path: text} under a root, creating parent directories."""
    def _write(root: Path, files: Dict[str, str]) -> List[Path]:
        written = []
        for rel, text in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
            written.append(path)
        return written
    return _write


@pytest.fixture
def counting_loader() -> CountingLoader:
    return CountingLoader()


@pytest.fixture
def registry(counting_loader) -> SchemaRegistry:
    """A fresh registry per test so cache state never leaks between tests."""
    return SchemaRegistry(loader=counting_loader)


@pytest.fixture
def valid_document() -> str:
    return VALID_DOCUMENT


@pytest.fixture
def valid_payload() -> str:
    return VALID_PAYLOAD


@pytest.fixture
def schema_document() -> Dict[str, Any]:
    return json.loads(json.dumps(TEST_SCHEMA))
