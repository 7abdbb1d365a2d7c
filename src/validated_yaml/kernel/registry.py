"""Schema registry: compile JSON Schema documents once per locator.

A registry instance is meant to be shared: across every file of a batch
and across batches run by the same process. Compiled schemas are never
evicted. The registry is passed into the pipeline explicitly, so tests
can substitute their own loader or a fake registry.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Literal, Optional, Set, Tuple
from urllib.parse import urldefrag, urljoin

import yaml
from jsonschema import (
    Draft4Validator,
    Draft6Validator,
    Draft7Validator,
    Draft201909Validator,
    Draft202012Validator,
)
from jsonschema.exceptions import SchemaError
from jsonschema.protocols import Validator as JsonSchemaValidator
from jsonschema.validators import validator_for
from referencing import Registry, Resource
from referencing.exceptions import CannotDetermineSpecification, Unresolvable
from referencing.jsonschema import DRAFT4, DRAFT6, DRAFT7, DRAFT201909, DRAFT202012

from validated_yaml.codes import FailureCode
from validated_yaml._internal.loader import SchemaLoader, UnsupportedLocatorError, load_file_schema, to_uri
from .decoder import DecodedValue
from .errors import FileStageError
from .validator import ValidationOutcome, validate as validate_value

logger = logging.getLogger(__name__)

Draft = Literal["2020-12", "2019-09", "7", "6", "4"]

_DIALECTS = {
    "2020-12": (Draft202012Validator, DRAFT202012),
    "2019-09": (Draft201909Validator, DRAFT201909),
    "7": (Draft7Validator, DRAFT7),
    "6": (Draft6Validator, DRAFT6),
    "4": (Draft4Validator, DRAFT4),
}

# Keywords whose values are instance data, not subschemas
_DATA_KEYWORDS = frozenset({"enum", "const", "default", "examples"})
# Keywords mapping arbitrary names to subschemas
_SCHEMA_MAPS = frozenset({"properties", "patternProperties", "$defs", "definitions", "dependentSchemas", "dependencies"})


class SchemaCompileError(FileStageError):
    """Raised when a schema cannot be loaded, checked or fully resolved."""
    code = FailureCode.SCHEMA_COMPILE_ERROR
    summary = "Error compiling schema"

    def __init__(self, locator: str, cause: str, source_path: Optional[str] = None):
        self.locator = locator
        self.cause = cause
        self.source_path = source_path
        if source_path is None:
            detail = f"Could not compile schema {locator}: {cause}"
        else:
            detail = f"Could not compile schema {locator} for file {source_path}: {cause}"
        super().__init__(detail)

    def for_file(self, source_path: str) -> "SchemaCompileError":
        """Same failure, attributed to the file that referenced the schema."""
        return SchemaCompileError(self.locator, self.cause, source_path=source_path)


@dataclass(frozen=True)
class CompiledSchema:
    """Validator-ready schema with every $ref already resolvable."""
    locator: str
    uri: str
    validator: JsonSchemaValidator


def _iter_refs(node: Any, base_uri: str, id_keyword: str) -> Iterator[Tuple[str, str]]:
    """Yield (scope, $ref) for every reference in a schema tree."""
    if isinstance(node, dict):
        node_id = node.get(id_keyword)
        if isinstance(node_id, str):
            base_uri = urljoin(base_uri, node_id)
        ref = node.get("$ref")
        if isinstance(ref, str):
            yield base_uri, ref
        for key, value in node.items():
            if key in _DATA_KEYWORDS:
                continue
            if key in _SCHEMA_MAPS and isinstance(value, dict):
                for subschema in value.values():
                    yield from _iter_refs(subschema, base_uri, id_keyword)
            else:
                yield from _iter_refs(value, base_uri, id_keyword)
    elif isinstance(node, list):
        for item in node:
            yield from _iter_refs(item, base_uri, id_keyword)


class SchemaRegistry:
    """Read-through cache of compiled schemas, keyed by absolute URI.

    Args:
        loader: Callable returning the parsed document for an absolute URI
            (defaults to local files and file:// URIs)
        default_draft: Dialect assumed for documents without "$schema"
        format_assertion: Enforce the "format" keyword
    """

    def __init__(
        self,
        loader: Optional[SchemaLoader] = None,
        default_draft: Draft = "2020-12",
        format_assertion: bool = False,
    ):
        if default_draft not in _DIALECTS:
            raise ValueError(f"Unsupported default_draft {default_draft!r}")
        self._loader = loader or load_file_schema
        self._default_cls, self._default_spec = _DIALECTS[default_draft]
        self.format_assertion = format_assertion
        self._documents: Dict[str, Any] = {}
        self._compiled: Dict[str, CompiledSchema] = {}
        # held for the whole compile so racing callers coalesce into one compile
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._compiled)

    def __contains__(self, locator: str) -> bool:
        return to_uri(locator) in self._compiled

    def _load_document(self, uri: str) -> Any:
        document_uri = urldefrag(uri).url
        if document_uri not in self._documents:
            logger.debug("Loading schema document %s", document_uri)
            self._documents[document_uri] = self._loader(document_uri)
        return self._documents[document_uri]

    def _retrieve(self, uri: str) -> Resource:
        return Resource.from_contents(self._load_document(uri), default_specification=self._default_spec)

    def compile(self, locator: str) -> CompiledSchema:
        """Compile the schema at locator, or return the cached compilation.

        A locator may carry a "#fragment" selecting a subschema of its
        document.
        """
        try:
            uri = to_uri(locator)
        except ValueError as exc:
            raise SchemaCompileError(locator, str(exc)) from exc
        with self._lock:
            cached = self._compiled.get(uri)
            if cached is not None:
                logger.debug("Schema cache hit for %s", uri)
                return cached
            loaded_before = set(self._documents)
            try:
                compiled = self._compile(locator, uri)
            except SchemaCompileError:
                # documents read by a failed compile are read again next time
                for document_uri in set(self._documents) - loaded_before:
                    del self._documents[document_uri]
                raise
            self._compiled[uri] = compiled
            return compiled

    def _compile(self, locator: str, uri: str) -> CompiledSchema:
        document_uri, fragment = urldefrag(uri)
        try:
            document = self._load_document(document_uri)
        except (OSError, ValueError, UnsupportedLocatorError, yaml.YAMLError) as exc:
            raise SchemaCompileError(locator, str(exc)) from exc

        if not isinstance(document, (dict, bool)):
            raise SchemaCompileError(locator, f"schema document must be an object or boolean, got {type(document).__name__}")
        if isinstance(document, dict) and not isinstance(document.get("$schema", ""), str):
            raise SchemaCompileError(locator, f"'$schema' must be a string, got {type(document['$schema']).__name__}")

        try:
            cls = validator_for(document, default=self._default_cls)
            cls.check_schema(document)
        except SchemaError as exc:
            raise SchemaCompileError(locator, exc.message) from exc
        except (TypeError, ValueError, KeyError) as exc:
            raise SchemaCompileError(locator, str(exc)) from exc

        id_keyword = "id" if cls is Draft4Validator else "$id"
        if isinstance(document, dict):
            # relative references resolve against the document's own location
            document = {**document, id_keyword: urljoin(document_uri, document.get(id_keyword) or "")}

        spec = next((s for c, s in _DIALECTS.values() if c is cls), self._default_spec)
        try:
            resource = Resource.from_contents(document, default_specification=spec)
            registry = Registry(retrieve=self._retrieve).with_resource(document_uri, resource).crawl()
        except (CannotDetermineSpecification, TypeError, ValueError, KeyError) as exc:
            raise SchemaCompileError(locator, str(exc)) from exc

        base_uri = resource.id() or document_uri
        self._check_references(locator, document, base_uri, registry, id_keyword)

        root = document
        if fragment:
            root = {"$ref": uri}
            self._check_references(locator, root, base_uri, registry, id_keyword)

        format_checker = cls.FORMAT_CHECKER if self.format_assertion else None
        validator = cls(root, registry=registry, format_checker=format_checker)
        logger.debug("Compiled schema %s (%s)", uri, cls.__name__)
        return CompiledSchema(locator=locator, uri=uri, validator=validator)

    def _check_references(
        self,
        locator: str,
        contents: Any,
        base_uri: str,
        registry: Registry,
        id_keyword: str,
        seen: Optional[Set[str]] = None,
    ) -> None:
        """Resolve every $ref eagerly so a broken reference fails compilation."""
        if seen is None:
            seen = set()
        for scope, ref in _iter_refs(contents, base_uri, id_keyword):
            target = urljoin(scope, ref)
            if target in seen:
                continue
            seen.add(target)
            try:
                resolved = registry.resolver(base_uri=scope).lookup(ref)
            except Unresolvable as exc:
                raise SchemaCompileError(locator, f"failed to resolve $ref '{ref}' (from {scope}): {exc}") from exc
            self._check_references(locator, resolved.contents, urldefrag(target).url, registry, id_keyword, seen)

    def validate(self, schema: CompiledSchema, value: DecodedValue) -> ValidationOutcome:
        return validate_value(value, schema)
