"""Filename resolver that maps note names from links to files in the vault."""

import logging
import os
import unicodedata
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

from .link_extractor import strip_extension


def normalize_name(name: str) -> str:
    """Canonical composition (NFC) so decomposed and composed spellings compare equal."""
    return unicodedata.normalize('NFC', name)


class FilenameResolver:
    """
    Finds the file behind a note name across an ordered list of source directories.

    Directories are searched in configured order and the first directory with a
    match wins. Within a directory the walk is sorted, so the result does not
    depend on filesystem listing order.
    """

    def __init__(
        self,
        source_dirs: Iterable[Union[str, Path]],
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the resolver.

        Args:
            source_dirs: Directories to search, in priority order
            logger: Logger instance
        """
        self.source_dirs: List[Path] = [Path(d) for d in source_dirs]
        self.logger = logger or logging.getLogger('linked_note_exporter.links.filename_resolver')

    def resolve(self, name: str) -> Optional[Path]:
        """
        Find the file for a note name.

        Args:
            name: Logical note name as written inside the link brackets

        Returns:
            Path of the first matching file, or None if no directory has one
        """
        target = normalize_name(name)

        for source_dir in self.source_dirs:
            try:
                match = self._find_in_directory(source_dir, target)
            except OSError as e:
                self.logger.warning(f"Error while searching {source_dir} for '{name}': {e}")
                continue

            if match is not None:
                self.logger.debug(f"Resolved '{name}' -> {match}")
                return match

        return None

    def _find_in_directory(self, source_dir: Path, target: str) -> Optional[Path]:
        """Return the first file under source_dir whose name matches target."""
        by_path = '/' in target

        for path in self._walk_files(source_dir):
            if normalize_name(strip_extension(path.name)) == target:
                return path

            # [[Folder/Note]] links name a path relative to the vault folder
            if by_path:
                relative = strip_extension(path.relative_to(source_dir).as_posix())
                if normalize_name(relative) == target:
                    return path

        return None

    @staticmethod
    def _walk_files(source_dir: Path) -> Iterator[Path]:
        """Yield regular files under source_dir in sorted, top-down order."""
        if not source_dir.is_dir():
            raise FileNotFoundError(f"Source directory not found: {source_dir}")

        def on_error(error: OSError) -> None:
            raise error

        for root, dirs, files in os.walk(source_dir, onerror=on_error):
            dirs.sort()
            for filename in sorted(files):
                path = Path(root) / filename
                if path.is_file():
                    yield path


__all__ = ['FilenameResolver', 'normalize_name']
