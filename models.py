"""Data models for the linked note export pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class VisitPolicy(Enum):
    """Rules for suppressing duplicate queue entries during traversal."""
    FIRST_SEEN = "first_seen"
    SHALLOWEST = "shallowest"


@dataclass(frozen=True)
class DocumentReference:
    """A note named by a link, waiting in the traversal queue."""

    name: str
    depth: int = 1

    def child(self, name: str) -> 'DocumentReference':
        """Reference to a note linked from this one, one level deeper."""
        return DocumentReference(name=name, depth=self.depth + 1)


@dataclass
class ExportLayout:
    """Staging tree that collects exported notes and media before archiving."""

    root: Path
    documents_directory: str = "notes"
    media_directory: str = "media"

    def __post_init__(self) -> None:
        self.root = Path(self.root)

    @property
    def documents_dir(self) -> Path:
        return self.root / self.documents_directory

    @property
    def media_dir(self) -> Path:
        return self.root / self.media_directory

    def ensure(self) -> None:
        """Create the staging root and both subdirectories."""
        self.documents_dir.mkdir(parents=True, exist_ok=True)
        self.media_dir.mkdir(parents=True, exist_ok=True)

    def document_path(self, name: str) -> Path:
        """Destination of an exported note: ``<name>.md`` under the documents dir."""
        return self.documents_dir / f"{name}.md"


@dataclass
class ExportSettings:
    """Everything one export run needs, resolved from the configuration file."""

    start_document: str
    source_dirs: List[Path]
    media_root: Path
    max_depth: int
    layout: ExportLayout
    blacklist: List[str] = field(default_factory=list)
    archive_path: Path = Path("export.zip")
    keep_staging: bool = False
    progress_bars: bool = True
    dry_run: bool = False
    visit_policy: VisitPolicy = VisitPolicy.FIRST_SEEN
    report_path: Optional[Path] = None


@dataclass
class TraversalStats:
    """Counters and outcomes collected over one traversal run."""

    visited: List[str] = field(default_factory=list)
    exported_documents: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    skipped_depth: int = 0
    skipped_blacklisted: int = 0
    skipped_visited: int = 0
    media_copied: int = 0
    max_depth_reached: int = 0
    errors: List[Dict[str, str]] = field(default_factory=list)

    def record_error(self, name: str, operation: str, error: Exception) -> None:
        """Remember a per-document failure that did not stop the run."""
        self.errors.append({
            'document': name,
            'operation': operation,
            'error': str(error)
        })

    def to_dict(self) -> Dict[str, Any]:
        """Serialize statistics to dictionary."""
        return {
            'visited': list(self.visited),
            'exported_documents': list(self.exported_documents),
            'missing': list(self.missing),
            'skipped_depth': self.skipped_depth,
            'skipped_blacklisted': self.skipped_blacklisted,
            'skipped_visited': self.skipped_visited,
            'media_copied': self.media_copied,
            'max_depth_reached': self.max_depth_reached,
            'errors': list(self.errors)
        }
