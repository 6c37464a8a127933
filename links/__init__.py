"""Link handling for wiki-style notes.

- link_extractor: finds ``[[note]]`` links and ``![[media]]`` embeds in note text
- filename_resolver: maps a note name to a file across the configured vault folders
"""

from .filename_resolver import FilenameResolver, normalize_name
from .link_extractor import (
    ExtractedLinks,
    LinkExtractor,
    extract_document_links,
    extract_media_embeds,
    is_image_file,
    strip_extension
)

__all__ = [
    'FilenameResolver',
    'normalize_name',
    'ExtractedLinks',
    'LinkExtractor',
    'extract_document_links',
    'extract_media_embeds',
    'is_image_file',
    'strip_extension'
]
