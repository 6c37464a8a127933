"""Export package for writing collected notes and media to disk.

This package copies what the traversal collects into a staging tree and
packages that tree into a single archive.

Package Structure:
- document_exporter: Creates the staging tree and copies notes as ``<name>.md``
- media_collector: Copies embedded media matched by base-name from the media folder
- archiver: Zips the staging tree and removes it afterwards

Staging tree layout:
    <staging_directory>/
        <documents_directory>/   notes, renamed to <logical-name>.md
        <media_directory>/       media, original filenames
"""

from .document_exporter import DocumentExporter
from .media_collector import MediaCollector, MediaCollectionError
from .archiver import ZipArchiver

__all__ = [
    'DocumentExporter',
    'MediaCollector',
    'MediaCollectionError',
    'ZipArchiver'
]
