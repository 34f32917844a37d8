"""File finders selecting subsets of a distribution's files."""

from __future__ import annotations

import fnmatch
import posixpath
import re
from typing import Callable, Iterable

from ..core.models import DistFile, FinderConfig

Finder = Callable[[list[DistFile]], list[DistFile]]


def _in_dirs(name: str, dirs: Iterable[str]) -> bool:
    for directory in dirs:
        prefix = directory.strip("/")
        if not prefix or prefix == ".":
            return True
        if name.startswith(prefix + "/"):
            return True
    return False


def _matches_glob(name: str, pattern: str) -> bool:
    # Globs without a slash apply to the basename only
    target = name if "/" in pattern else posixpath.basename(name)
    return fnmatch.fnmatchcase(target, pattern)


def select_by_name(config: FinderConfig, files: Iterable[DistFile]) -> list[DistFile]:
    """Select files matching a finder configuration.

    Args:
        config: Directories, globs and regexes to apply
        files: Candidate files in collection order

    Returns:
        Matching files in collection order
    """
    match_patterns = [re.compile(p) for p in config.match]
    skip_patterns = [re.compile(p) for p in config.skip]
    wanted = bool(config.file or match_patterns)

    selected: list[DistFile] = []
    for file in files:
        name = file.name
        if config.dir and not _in_dirs(name, config.dir):
            continue
        if wanted and not (
            any(_matches_glob(name, g) for g in config.file)
            or any(p.search(name) for p in match_patterns)
        ):
            continue
        if any(p.search(name) for p in skip_patterns):
            continue
        selected.append(file)

    return selected


BUILTIN_FINDERS: dict[str, Finder] = {
    ":AllFiles": lambda files: list(files),
    ":NoFiles": lambda files: [],
}
