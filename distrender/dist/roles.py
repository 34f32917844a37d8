"""Plugin roles and the fixed order in which a build invokes them."""

from __future__ import annotations

import logging
from typing import Iterable, Protocol, runtime_checkable

from ..core.models import DistFile

logger = logging.getLogger(__name__)


@runtime_checkable
class FileGatherer(Protocol):
    def gather_files(self) -> None: ...


@runtime_checkable
class FilePruner(Protocol):
    def prune_files(self) -> None: ...


@runtime_checkable
class FileMunger(Protocol):
    def munge_files(self) -> None: ...


@runtime_checkable
class FileInjector(Protocol):
    def add_file(self, file: DistFile) -> None: ...


def _name(plugin: object) -> str:
    return getattr(plugin, "plugin_name", type(plugin).__name__)


def run_phases(plugins: Iterable[object]) -> None:
    """Run the gather, prune and munge phases over the plugins in order.

    Every gatherer runs before any pruner, and every pruner before any
    munger.
    """
    plugins = list(plugins)

    for plugin in plugins:
        if isinstance(plugin, FileGatherer):
            logger.debug(f"[{_name(plugin)}] gathering files")
            plugin.gather_files()

    for plugin in plugins:
        if isinstance(plugin, FilePruner):
            logger.debug(f"[{_name(plugin)}] pruning files")
            plugin.prune_files()

    for plugin in plugins:
        if isinstance(plugin, FileMunger):
            logger.debug(f"[{_name(plugin)}] munging files")
            plugin.munge_files()
