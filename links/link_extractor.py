"""Link extractor for wiki-style note links and media embeds."""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.gif', '.bmp', '.tiff', '.svg')

# [[name]] and [[name|display text]]
DOCUMENT_LINK_PATTERN = re.compile(r'\[\[(.*?)\]\]')

# ![[name]] and ![[name|400]]; the size hint is digits only
MEDIA_EMBED_PATTERN = re.compile(r'!\[\[(.*?)(\|[0-9]*)?\]\]')


def strip_extension(name: str) -> str:
    """Drop the last extension of a name, if any (``a.b.png`` -> ``a.b``)."""
    return os.path.splitext(name)[0]


def is_image_file(name: str) -> bool:
    """Check if a link target names an image by its extension."""
    return os.path.splitext(name)[1].lower() in IMAGE_EXTENSIONS


def extract_document_links(line: str) -> List[str]:
    """
    Extract note names from ``[[...]]`` links in one line.

    Image targets are dropped, and display text after ``|`` is cut off.

    Args:
        line: A single line of note content

    Returns:
        Note names in the order they appear
    """
    names = []
    for match in DOCUMENT_LINK_PATTERN.finditer(line):
        target = match.group(1)
        if is_image_file(target):
            continue
        names.append(target.split('|', 1)[0])
    return names


def extract_media_embeds(line: str) -> List[str]:
    """
    Extract media base-names from ``![[...]]`` embeds in one line.

    Args:
        line: A single line of note content

    Returns:
        Embedded file names without their extension, in order of appearance
    """
    return [strip_extension(match.group(1)) for match in MEDIA_EMBED_PATTERN.finditer(line)]


@dataclass
class ExtractedLinks:
    """Outgoing references found in one note."""
    documents: List[str] = field(default_factory=list)
    media: List[str] = field(default_factory=list)


class LinkExtractor:
    """Runs both extraction passes over every line of a note."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('linked_note_exporter.links.link_extractor')

    def extract_lines(self, lines: Iterable[str]) -> ExtractedLinks:
        """Accumulate note links and media embeds over a sequence of lines."""
        result = ExtractedLinks()
        for line in lines:
            result.documents.extend(extract_document_links(line))
            result.media.extend(extract_media_embeds(line))
        return result

    def extract_text(self, text: str) -> ExtractedLinks:
        """Extract references from in-memory note content."""
        return self.extract_lines(text.splitlines())

    def extract_file(self, path: Union[str, Path]) -> ExtractedLinks:
        """
        Read a note line by line and extract its references.

        Args:
            path: Path to the markdown file

        Returns:
            ExtractedLinks with note names and media base-names

        Raises:
            OSError: If the file cannot be read
        """
        with open(path, 'r', encoding='utf-8', errors='replace') as f:
            result = self.extract_lines(f)

        self.logger.debug(
            f"Found {len(result.documents)} note link(s) and "
            f"{len(result.media)} media embed(s) in {path}"
        )
        return result


__all__ = [
    'IMAGE_EXTENSIONS',
    'ExtractedLinks',
    'LinkExtractor',
    'extract_document_links',
    'extract_media_embeds',
    'is_image_file',
    'strip_extension'
]
