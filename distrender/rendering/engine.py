"""Template rendering engine."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

from jinja2 import Template

from .tiny import STASH, TinyEnvironment, translate

logger = logging.getLogger(__name__)


@lru_cache(maxsize=2)
def create_environment(trim: bool = False) -> TinyEnvironment:
    """Create the Jinja2 environment used for tiny templates.

    Args:
        trim: Remove the first newline after a block directive

    Returns:
        Configured environment
    """
    return TinyEnvironment(
        trim_blocks=trim,
        lstrip_blocks=False,
        keep_trailing_newline=True,
    )


def compile_template(text: str, *, trim: bool = False, name: str | None = None) -> Template:
    """Compile tiny template source into a Jinja2 template.

    Args:
        text: Template source
        trim: Remove the first newline after a block directive
        name: Template name used in error messages

    Returns:
        Compiled Jinja2 template
    """
    env = create_environment(trim)
    return env.from_string(translate(text, name=name))


def render_text(
    text: str,
    variables: Mapping[str, Any],
    *,
    trim: bool = False,
    name: str | None = None,
) -> str:
    """Render tiny template source with the given variables.

    Args:
        text: Template source
        variables: Variable mapping visible to the template
        trim: Remove the first newline after a block directive
        name: Template name used in error messages

    Returns:
        Rendered text
    """
    logger.debug(f"Rendering template: {name or '<string>'}")
    template = compile_template(text, trim=trim, name=name)
    return template.render({STASH: variables})


def render_file(
    template_path: Path, variables: Mapping[str, Any], *, trim: bool = False
) -> str:
    """Read a template file and render it."""
    if not template_path.exists():
        raise FileNotFoundError(f"Template not found: {template_path}")

    text = template_path.read_text(encoding="utf-8")
    return render_text(text, variables, trim=trim, name=str(template_path))
