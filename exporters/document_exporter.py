"""Document exporter that copies resolved notes into the staging tree."""

import logging
import shutil
from pathlib import Path
from typing import Optional, Union

from models import ExportLayout


class DocumentExporter:
    """Prepares the export tree and copies notes into it as ``<name>.md``."""

    def __init__(self, layout: ExportLayout, logger: Optional[logging.Logger] = None):
        """
        Initialize the document exporter.

        Args:
            layout: Staging tree layout
            logger: Logger instance
        """
        self.layout = layout
        self.logger = logger or logging.getLogger('linked_note_exporter.exporters.document_exporter')

    def prepare(self) -> None:
        """
        Create the staging root with its notes and media folders.

        Raises:
            OSError: If a directory cannot be created
        """
        self.layout.ensure()
        self.logger.debug(f"Export tree ready: {self.layout.root}")

    def export(self, source: Union[str, Path], name: str) -> Path:
        """
        Copy a note into the notes folder under its logical name.

        Args:
            source: Resolved path of the note in the vault
            name: Logical note name from the link

        Returns:
            Destination path

        Raises:
            OSError: If the copy fails
        """
        destination = self.layout.document_path(name)
        # Folder-qualified names ("Projects/Plan") keep their folder
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, destination)

        self.logger.debug(f"Exported note '{name}' -> {destination}")

        return destination
