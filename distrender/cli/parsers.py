"""CLI argument parsers and validators."""

from __future__ import annotations

import typer
from pydantic import ValidationError

from ..core.models import FinderConfig, TemplateConfig


def parse_finder(value: str) -> tuple[str, FinderConfig]:
    """Parse a finder definition in format NAME=GLOB[,GLOB...]."""
    if "=" not in value:
        raise typer.BadParameter(f"Must be NAME=GLOB, got: {value!r}")
    name, globs = value.split("=", 1)
    name = name.strip()
    patterns = [g.strip() for g in globs.split(",") if g.strip()]
    if not name or not patterns:
        raise typer.BadParameter(f"Must be NAME=GLOB, got: {value!r}")
    return name, FinderConfig(file=patterns)


def parse_template_config(**options: object) -> TemplateConfig:
    """Validate template options given on the command line."""
    try:
        return TemplateConfig(**options)
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise typer.BadParameter(messages) from e
