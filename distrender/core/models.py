"""Domain models for distributions, finders and template configuration."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..rendering.substitution import parse_substitution

TEMPLATE_SUFFIX = ".tt"
DEFAULT_OUTPUT_REGEX = r"/\.tt$//"


def _as_list(value: Any) -> Any:
    if isinstance(value, str):
        return [value]
    return value


def _as_version(value: Any) -> Any:
    # YAML reads 1.0 as a float
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class DistMetadata(BaseModel):
    """Metadata of the distribution being built."""

    name: str = Field(..., min_length=1, description="Distribution name")
    version: str = Field(default="0.001", description="Distribution version")
    abstract: str = Field(default="", description="One-line summary")
    authors: list[str] = Field(default_factory=list, description="Author names")
    license: str | None = Field(default=None, description="License identifier")
    is_trial: bool = Field(default=False, description="Trial (pre-release) build")

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, value: Any) -> Any:
        return _as_version(value)

    @field_validator("authors", mode="before")
    @classmethod
    def coerce_authors(cls, value: Any) -> Any:
        return _as_list(value)


@dataclass(eq=False)
class DistFile:
    """A file in the distribution's in-memory file collection.

    Files are compared by identity; content may be overwritten in place.
    """

    name: str
    content: str = ""
    mode: int = 0o644
    added_by: str | None = None


class FinderConfig(BaseModel):
    """Select files by directory, filename glob and regular expression."""

    dir: list[str] = Field(default_factory=list, description="Directories to search")
    file: list[str] = Field(default_factory=list, description="Filename globs")
    match: list[str] = Field(default_factory=list, description="Regexes on the full name")
    skip: list[str] = Field(default_factory=list, description="Regexes of names to exclude")

    @field_validator("dir", "file", "match", "skip", mode="before")
    @classmethod
    def coerce_lists(cls, value: Any) -> Any:
        return _as_list(value)

    @field_validator("match", "skip")
    @classmethod
    def check_patterns(cls, patterns: list[str]) -> list[str]:
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid regular expression {pattern!r}: {e}") from e
        return patterns


class TemplateConfig(BaseModel):
    """Options of one template processing plugin."""

    plugin_name: str = Field(default="Template", description="Name used in logs and added_by")
    finder: str | None = Field(default=None, description="File finder selecting templates")
    output_regex: str = Field(
        default=DEFAULT_OUTPUT_REGEX,
        description="Substitution computing the output filename",
    )
    trim: bool = Field(default=False, description="Strip the newline after block directives")
    var: list[str] = Field(default_factory=list, description="Extra 'name = value' variables")
    replace: bool = Field(default=False, description="Overwrite existing files")
    prune: bool = Field(default=False, description="Drop source templates from the dist")

    @field_validator("output_regex")
    @classmethod
    def check_output_regex(cls, value: str) -> str:
        parse_substitution(value)
        return value

    @field_validator("var", mode="before")
    @classmethod
    def coerce_var(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return [f"{key} = {val}" for key, val in value.items()]
        return _as_list(value)


class BuildManifest(BaseModel):
    """A build description: metadata, named finders and template sections."""

    name: str = Field(..., min_length=1)
    version: str = "0.001"
    abstract: str = ""
    authors: list[str] = Field(default_factory=list)
    license: str | None = None
    is_trial: bool = False
    finders: dict[str, FinderConfig] = Field(default_factory=dict)
    templates: list[TemplateConfig] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, value: Any) -> Any:
        return _as_version(value)

    @field_validator("authors", mode="before")
    @classmethod
    def coerce_authors(cls, value: Any) -> Any:
        return _as_list(value)

    def metadata(self) -> DistMetadata:
        return DistMetadata(
            name=self.name,
            version=self.version,
            abstract=self.abstract,
            authors=self.authors,
            license=self.license,
            is_trial=self.is_trial,
        )
