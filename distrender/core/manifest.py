"""Build manifest loading."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from .models import BuildManifest

logger = logging.getLogger(__name__)


class ManifestError(ValueError):
    """Raised when a build manifest cannot be read."""


def load_manifest(path: Path) -> BuildManifest:
    """Load and validate a YAML build manifest.

    Args:
        path: Manifest file path

    Returns:
        Validated manifest

    Raises:
        ManifestError: If the file is missing or is not a YAML mapping
        pydantic.ValidationError: If the manifest content is invalid
    """
    if not path.exists():
        raise ManifestError(f"Manifest not found at {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ManifestError(f"Manifest {path} is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"Manifest {path} must contain a mapping")

    manifest = BuildManifest.model_validate(data)
    logger.debug(
        f"Loaded manifest {path}: {len(manifest.finders)} finder(s), "
        f"{len(manifest.templates)} template section(s)"
    )
    return manifest
