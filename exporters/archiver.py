"""Archiver that packages the staging tree into a zip file."""

import logging
import os
import shutil
from pathlib import Path
from typing import Optional, Union
from zipfile import ZIP_DEFLATED, ZipFile


class ZipArchiver:
    """Writes the export tree into a single deflated zip and cleans up afterwards."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('linked_note_exporter.exporters.archiver')

    def archive(self, source_dir: Union[str, Path], target_zip: Union[str, Path]) -> Path:
        """
        Zip a directory tree.

        Entry names are relative to the parent of source_dir, so every entry
        starts with the staging folder name. Directories get their own
        ``name/`` entries, empty ones included.

        Args:
            source_dir: Staging root to package
            target_zip: Path of the archive to write

        Returns:
            Path of the written archive

        Raises:
            OSError: If the tree cannot be read or the archive cannot be written
        """
        source_dir = Path(source_dir)
        target_zip = Path(target_zip)

        if not source_dir.is_dir():
            raise FileNotFoundError(f"Export directory not found: {source_dir}")

        target_zip.parent.mkdir(parents=True, exist_ok=True)

        base = source_dir.parent
        entries = 0

        self.logger.info(f"Creating archive {target_zip} from {source_dir}")
        try:
            with ZipFile(target_zip, 'w', compression=ZIP_DEFLATED) as zf:
                for root, dirs, files in os.walk(source_dir):
                    dirs.sort()
                    root_path = Path(root)

                    if root_path != source_dir:
                        zf.write(root_path, root_path.relative_to(base).as_posix() + '/')
                        entries += 1

                    for filename in sorted(files):
                        path = root_path / filename
                        zf.write(path, path.relative_to(base).as_posix())
                        entries += 1
        except (OSError, ValueError):
            if target_zip.exists():
                target_zip.unlink()  # Clean up partially written archive
            raise

        self.logger.info(f"Archive created: {target_zip} ({entries} entries)")
        return target_zip

    def remove_tree(self, path: Union[str, Path]) -> None:
        """
        Delete the staging tree.

        Raises:
            OSError: If the tree cannot be removed
        """
        shutil.rmtree(path)
        self.logger.info(f"Removed staging directory {path}")
