"""Decode YAML bytes into a plain JSON-compatible value tree."""

import logging
import math
from typing import Dict, List, Union

import yaml

from validated_yaml.codes import FailureCode
from .errors import FileStageError

logger = logging.getLogger(__name__)

# The closed set of values a decoded document may contain. Maps are
# unordered for validation purposes; arrays keep their order.
DecodedValue = Union[None, bool, int, float, str, List["DecodedValue"], Dict[str, "DecodedValue"]]


class DecodeError(FileStageError):
    """Raised when a file is not a single well-formed YAML document."""
    code = FailureCode.DECODE_ERROR
    summary = "Error decoding YAML"

    def __init__(self, path: str, cause: str):
        self.path = path
        self.cause = cause
        super().__init__(f"Could not decode YAML file {path}: {cause}")


class _DocumentLoader(yaml.SafeLoader):
    """SafeLoader that leaves timestamps as strings and rejects repeated keys."""

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            seen = set()
            for key_node, _ in node.value:
                # keys pulled in by "<<" may be overridden
                if key_node.tag == "tag:yaml.org,2002:merge":
                    continue
                key = self.construct_object(key_node, deep=True)
                try:
                    duplicate = key in seen
                except TypeError:
                    # unhashable keys are reported by the base constructor
                    continue
                if duplicate:
                    raise yaml.constructor.ConstructorError(
                        "while constructing a mapping", node.start_mark,
                        f"found duplicate key {key!r}", key_node.start_mark,
                    )
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


_DocumentLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _key_text(key: object) -> str:
    if isinstance(key, str):
        return key
    if key is None:
        return "null"
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, int):
        return str(key)
    if isinstance(key, float):
        if math.isnan(key):
            return ".nan"
        if math.isinf(key):
            return ".inf" if key > 0 else "-.inf"
        return repr(key)
    raise TypeError(f"mapping key of type {type(key).__name__} cannot be used as an object key")


def normalize(value: object) -> DecodedValue:
    """Coerce a PyYAML value tree into the DecodedValue set.

    Scalar mapping keys become their YAML text; anything JSON Schema
    cannot describe (binary, sets, complex keys) raises TypeError.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, list):
        return [normalize(item) for item in value]
    if isinstance(value, dict):
        result: Dict[str, DecodedValue] = {}
        for key, item in value.items():
            text = _key_text(key)
            if text in result:
                raise TypeError(f"mapping key {key!r} collides with another key rendered as {text!r}")
            result[text] = normalize(item)
        return result
    raise TypeError(f"unsupported value of type {type(value).__name__}")


class DocumentDecoder:
    """YAML decoder producing DecodedValue trees."""

    def decode(self, data: Union[bytes, str], path: str = "<bytes>") -> DecodedValue:
        """Decode one YAML document; bytes are sniffed for UTF-8/UTF-16."""
        try:
            raw = yaml.load(data, Loader=_DocumentLoader)
        except yaml.YAMLError as exc:
            raise DecodeError(path, str(exc)) from exc
        try:
            return normalize(raw)
        except TypeError as exc:
            raise DecodeError(path, str(exc)) from exc
