"""Media collector for copying embedded attachments out of the vault."""

import logging
import os
import shutil
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from links import strip_extension


class MediaCollectionError(Exception):
    """Raised when a media pass cannot walk the media folder or copy a file."""
    pass


class MediaCollector:
    """
    Copies media files referenced by a note into the export tree.

    This collector:
    1. Builds the set of wanted base-names (no extension) for one note
    2. Walks the media folder recursively
    3. Copies every file whose base-name is wanted, keeping its original filename
    4. Lets later copies with the same filename overwrite earlier ones
    """

    def __init__(
        self,
        media_root: Union[str, Path],
        destination_dir: Union[str, Path],
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the media collector.

        Args:
            media_root: Folder holding the vault's attachments
            destination_dir: Media folder of the export tree
            logger: Logger instance
        """
        self.media_root = Path(media_root)
        self.destination_dir = Path(destination_dir)
        self.logger = logger or logging.getLogger('linked_note_exporter.exporters.media_collector')

        self.stats = {
            'passes': 0,
            'files_scanned': 0,
            'files_copied': 0,
            'bytes_copied': 0
        }

    def collect(self, names: Iterable[str]) -> List[Path]:
        """
        Copy every media file whose base-name is in names.

        Args:
            names: Media base-names embedded by one note

        Returns:
            Destination paths written, in walk order

        Raises:
            MediaCollectionError: If the walk or a copy fails
        """
        match_set = set(names)
        if not match_set:
            return []

        self.stats['passes'] += 1

        try:
            self.destination_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MediaCollectionError(
                f"Failed to create media directory {self.destination_dir}: {e}"
            ) from e

        copied = []
        for source in self._walk_media():
            self.stats['files_scanned'] += 1
            if strip_extension(source.name) not in match_set:
                continue

            destination = self.destination_dir / source.name
            try:
                shutil.copyfile(source, destination)
            except OSError as e:
                raise MediaCollectionError(f"Failed to copy {source}: {e}") from e

            self.stats['files_copied'] += 1
            self.stats['bytes_copied'] += destination.stat().st_size
            copied.append(destination)
            self.logger.debug(f"Copied media '{source.name}' -> {destination}")

        missing = match_set - {strip_extension(p.name) for p in copied}
        if missing:
            self.logger.info(f"Media not found in {self.media_root}: {sorted(missing)}")

        return copied

    def _walk_media(self):
        """Yield regular files under the media folder in sorted order."""
        if not self.media_root.is_dir():
            raise MediaCollectionError(f"Media directory not found: {self.media_root}")

        def on_error(error: OSError) -> None:
            raise MediaCollectionError(f"Failed to walk {self.media_root}: {error}") from error

        for root, dirs, files in os.walk(self.media_root, onerror=on_error):
            dirs.sort()
            for filename in sorted(files):
                path = Path(root) / filename
                if path.is_file():
                    yield path

    def get_stats(self) -> Dict[str, int]:
        """Get media copy statistics."""
        return self.stats.copy()
