"""Variable mapping construction for template rendering."""

from __future__ import annotations

import logging
from typing import Any, Iterable

logger = logging.getLogger(__name__)

RESERVED_NAME = "dist"


def parse_var(entry: str) -> tuple[str, str] | None:
    """Parse a ``name = value`` entry.

    The first ``=`` separates name from value; both are stripped of
    surrounding whitespace. Entries without ``=`` yield None.
    """
    if "=" not in entry:
        return None
    name, value = entry.split("=", 1)
    return name.strip(), value.strip()


def build_context(dist: Any, entries: Iterable[str]) -> dict[str, Any]:
    """Build the variable mapping exposed to templates.

    Args:
        dist: Build metadata object, bound as ``dist``
        entries: User supplied ``name = value`` strings, later ones win

    Returns:
        Variable mapping
    """
    context: dict[str, Any] = {RESERVED_NAME: dist}

    for entry in entries:
        parsed = parse_var(entry)
        if parsed is None:
            logger.debug(f"Ignoring var entry without '=': {entry!r}")
            continue
        name, value = parsed
        context[name] = value

    logger.debug(f"Template variables: {sorted(context)}")
    return context
