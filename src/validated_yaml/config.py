"""Pipeline configuration."""

import codecs
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PipelineConfig(BaseModel):
    """Settings for one BatchPipeline.

    Attributes:
        marker_position: Where the schema marker may appear: the first
            occurrence "anywhere" in the file, or only on the first
            non-blank line ("first-line")
        encoding: Codec used to turn file bytes into text; "utf-8-sig"
            accepts UTF-8 with or without a byte-order mark
        default_draft: JSON Schema dialect for schemas without "$schema"
        format_assertion: Enforce the "format" keyword instead of
            treating it as an annotation
        files_only: Drop directories matched by the input pattern
    """
    marker_position: Literal["anywhere", "first-line"] = "anywhere"
    encoding: str = Field(default="utf-8-sig", min_length=1)
    default_draft: Literal["2020-12", "2019-09", "7", "6", "4"] = "2020-12"
    format_assertion: bool = False
    files_only: bool = True

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator('encoding')
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Validate encoding names a codec Python knows."""
        try:
            codecs.lookup(v)
        except LookupError:
            raise ValueError(f"Unknown encoding '{v}'") from None
        return v
