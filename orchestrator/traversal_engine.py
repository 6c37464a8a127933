"""
Traversal engine for collecting a note and everything it links to.

This module walks the link graph breadth-first from a start note: each
dequeued note is resolved to a file, its links and embeds are extracted,
its media is copied, the note itself is copied, and its links are queued
one level deeper. The walk stops when the queue is empty.
"""

import logging
import sys
from collections import deque
from typing import Deque, Dict, List, Optional, Set

from tqdm import tqdm

from models import DocumentReference, ExportSettings, TraversalStats, VisitPolicy
from links import ExtractedLinks, FilenameResolver, LinkExtractor
from exporters import DocumentExporter, MediaCollector, MediaCollectionError
from logger import ProgressTracker, log_section


class TraversalEngine:
    """Bounded-depth breadth-first walk over the note link graph."""

    def __init__(
        self,
        settings: ExportSettings,
        resolver: Optional[FilenameResolver] = None,
        extractor: Optional[LinkExtractor] = None,
        media_collector: Optional[MediaCollector] = None,
        document_exporter: Optional[DocumentExporter] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the traversal engine.

        Args:
            settings: Settings for this run
            resolver: Optional resolver (built from settings.source_dirs if omitted)
            extractor: Optional link extractor
            media_collector: Optional media collector (built from settings if omitted)
            document_exporter: Optional document exporter (built from settings.layout if omitted)
            logger: Optional logger instance
        """
        self.settings = settings
        self.logger = logger or logging.getLogger('linked_note_exporter.orchestrator.traversal_engine')

        self.resolver = resolver or FilenameResolver(settings.source_dirs)
        self.extractor = extractor or LinkExtractor()
        self.media_collector = media_collector or MediaCollector(
            settings.media_root, settings.layout.media_dir
        )
        self.document_exporter = document_exporter or DocumentExporter(settings.layout)

        self.blacklist: Set[str] = set(settings.blacklist)

    def run(self, start: Optional[str] = None) -> TraversalStats:
        """
        Walk the link graph from the start note.

        Args:
            start: Start note name (defaults to settings.start_document)

        Returns:
            Statistics for the run

        Raises:
            OSError: If the export tree cannot be created
        """
        start = start or self.settings.start_document
        dry_run = self.settings.dry_run

        log_section("Collecting linked notes")
        self.logger.info(
            f"Start: '{start}', max nesting level: {self.settings.max_depth}, "
            f"policy: {self.settings.visit_policy.value}, dry run: {dry_run}"
        )

        if not dry_run:
            self.document_exporter.prepare()

        stats = TraversalStats()
        queue: Deque[DocumentReference] = deque([DocumentReference(start, 1)])
        visited: Set[str] = set()
        # Shallowest depth at which each name was queued (SHALLOWEST policy only)
        queued_depth: Dict[str, int] = {start: 1}

        with ProgressTracker(item_type='notes') as tracker, tqdm(
            desc="Collecting notes",
            unit="note",
            disable=not self._should_show_progress()
        ) as pbar:
            while queue:
                current = queue.popleft()

                if current.depth > self.settings.max_depth:
                    stats.skipped_depth += 1
                    continue

                if current.name in self.blacklist:
                    self.logger.debug(f"Skipping blacklisted note '{current.name}'")
                    stats.skipped_blacklisted += 1
                    continue

                if current.name in visited:
                    stats.skipped_visited += 1
                    continue

                visited.add(current.name)
                stats.visited.append(current.name)
                stats.max_depth_reached = max(stats.max_depth_reached, current.depth)

                errors_before = len(stats.errors)
                children = self._process(current, stats, dry_run)
                tracker.increment(success=children is not None and len(stats.errors) == errors_before)
                pbar.update(1)

                for name in children or []:
                    child = current.child(name)
                    if self._should_enqueue(child, visited, queued_depth):
                        queue.append(child)

        self.logger.info(
            f"Visited {len(stats.visited)} note(s), exported {len(stats.exported_documents)}, "
            f"missing {len(stats.missing)}, media copied {stats.media_copied}"
        )
        if isinstance(self.media_collector, MediaCollector):
            media_stats = self.media_collector.get_stats()
            self.logger.debug(
                f"Media folder scanned {media_stats['passes']} time(s): "
                f"{media_stats['files_scanned']} files checked, "
                f"{media_stats['bytes_copied']} bytes copied"
            )
        return stats

    def _process(
        self,
        current: DocumentReference,
        stats: TraversalStats,
        dry_run: bool
    ) -> Optional[List[str]]:
        """
        Handle one dequeued note and return the names it links to.

        Returns None when the note cannot be found in any source directory.
        Every failure is contained here so one bad note never stops the walk.
        """
        name = current.name
        path = self.resolver.resolve(name)
        if path is None:
            self.logger.warning(f"Note '{name}' not found in any source directory")
            stats.missing.append(name)
            return None

        self.logger.info(f"[level {current.depth}] {name} -> {path}")

        links: Optional[ExtractedLinks] = None
        try:
            links = self.extractor.extract_file(path)
        except OSError as e:
            self.logger.error(f"Failed to read note '{name}' ({path}): {e}")
            stats.record_error(name, 'read', e)

        if links is not None and links.media and not dry_run:
            try:
                copied = self.media_collector.collect(links.media)
                stats.media_copied += len(copied)
            except MediaCollectionError as e:
                self.logger.error(f"Failed to copy media for note '{name}': {e}")
                stats.record_error(name, 'media', e)

        if not dry_run:
            try:
                self.document_exporter.export(path, name)
                stats.exported_documents.append(name)
            except OSError as e:
                self.logger.error(f"Failed to copy note '{name}' ({path}): {e}")
                stats.record_error(name, 'copy', e)

        return links.documents if links is not None else []

    def _should_enqueue(
        self,
        child: DocumentReference,
        visited: Set[str],
        queued_depth: Dict[str, int]
    ) -> bool:
        """Apply the visit policy to a newly discovered link."""
        if self.settings.visit_policy is VisitPolicy.FIRST_SEEN:
            # Duplicates are filtered when dequeued
            return True

        if child.name in visited:
            return False
        previous = queued_depth.get(child.name)
        if previous is not None and previous <= child.depth:
            return False
        queued_depth[child.name] = child.depth
        return True

    def _should_show_progress(self) -> bool:
        """Check if progress bars should be displayed."""
        return self.settings.progress_bars and sys.stderr.isatty()
