"""In-memory distribution: metadata plus the file collection plugins mutate."""

from __future__ import annotations

import logging
import os
from collections import Counter
from pathlib import Path

from ..core.models import DistFile, DistMetadata, FinderConfig
from ..rendering.io import atomic_write_bytes, decode_content, encode_content
from .finders import BUILTIN_FINDERS, select_by_name

logger = logging.getLogger(__name__)


class UnknownFinderError(KeyError):
    """Raised when a plugin names a file finder that is not registered."""


class DuplicateFileError(ValueError):
    """Raised when two files with the same name would be written."""


class Distribution:
    """The distribution being assembled.

    Templates see this object as ``dist`` and may query its metadata
    (``dist.name``, ``dist.version`` ...) or its ``files``.
    """

    def __init__(
        self,
        metadata: DistMetadata,
        files: list[DistFile] | None = None,
        finders: dict[str, FinderConfig] | None = None,
        root: Path | None = None,
    ) -> None:
        self.metadata = metadata
        self.files: list[DistFile] = list(files or [])
        self.finders: dict[str, FinderConfig] = dict(finders or {})
        self.root = root

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def version(self) -> str:
        return self.metadata.version

    @property
    def abstract(self) -> str:
        return self.metadata.abstract

    @property
    def authors(self) -> list[str]:
        return self.metadata.authors

    @property
    def license(self) -> str | None:
        return self.metadata.license

    @property
    def is_trial(self) -> bool:
        return self.metadata.is_trial

    def __repr__(self) -> str:
        return f"Distribution(name={self.name!r}, version={self.version!r}, files={len(self.files)})"

    def register_finder(self, name: str, config: FinderConfig) -> None:
        self.finders[name] = config

    def find_files(self, finder_name: str) -> list[DistFile]:
        """Return the files selected by a named finder."""
        if finder_name in BUILTIN_FINDERS:
            return BUILTIN_FINDERS[finder_name](self.files)
        try:
            config = self.finders[finder_name]
        except KeyError:
            raise UnknownFinderError(
                f"No file finder named {finder_name!r}. "
                f"Known finders: {sorted(self.finders) + sorted(BUILTIN_FINDERS)}"
            ) from None
        return select_by_name(config, self.files)

    def find_by_name(self, name: str) -> DistFile | None:
        """Return the first file with this name, in collection order."""
        return next((f for f in self.files if f.name == name), None)

    def add_file(self, file: DistFile, added_by: str | None = None) -> None:
        if added_by is not None:
            file.added_by = added_by
        logger.debug(f"Adding {file.name} (added by {file.added_by or 'unknown'})")
        self.files.append(file)

    def prune_file(self, file: DistFile) -> None:
        """Remove a file from the collection; files not present are ignored."""
        for index, candidate in enumerate(self.files):
            if candidate is file:
                del self.files[index]
                logger.debug(f"Pruned {file.name}")
                return

    @classmethod
    def from_directory(
        cls,
        root: Path,
        metadata: DistMetadata,
        *,
        include_dotfiles: bool = False,
        exclude: list[Path] | None = None,
    ) -> "Distribution":
        """Gather every file below ``root`` into a new distribution.

        Args:
            root: Source tree to gather
            metadata: Distribution metadata
            include_dotfiles: Gather files and directories starting with '.'
            exclude: Directories to leave out, such as the build output

        Returns:
            Distribution holding the gathered files in sorted name order
        """
        if not root.is_dir():
            raise NotADirectoryError(f"Source directory not found: {root}")

        excluded = [p.resolve() for p in (exclude or [])]
        files: list[DistFile] = []
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            dirnames[:] = sorted(
                d
                for d in dirnames
                if (include_dotfiles or not d.startswith("."))
                and (current / d).resolve() not in excluded
            )
            for filename in sorted(filenames):
                if not include_dotfiles and filename.startswith("."):
                    continue
                path = current / filename
                files.append(
                    DistFile(
                        name=path.relative_to(root).as_posix(),
                        content=decode_content(path.read_bytes()),
                        mode=path.stat().st_mode & 0o777,
                    )
                )

        logger.info(f"Gathered {len(files)} file(s) from {root}")
        return cls(metadata, files=files, root=root)

    def check_duplicates(self) -> None:
        counts = Counter(f.name for f in self.files)
        duplicates = sorted(name for name, count in counts.items() if count > 1)
        if duplicates:
            raise DuplicateFileError(
                f"Files added more than once: {', '.join(duplicates)}"
            )

    def write_to(self, dest_root: Path) -> list[Path]:
        """Write every file below ``dest_root``.

        Returns:
            Written file paths
        """
        self.check_duplicates()

        outputs: list[Path] = []
        for file in self.files:
            output_path = dest_root / file.name
            atomic_write_bytes(output_path, encode_content(file.content), mode=file.mode)
            outputs.append(output_path)

        logger.info(f"Wrote {len(outputs)} file(s) to {dest_root}")
        return outputs
