"""
Export report generator for summarizing one export run.

This module turns traversal statistics into a report dictionary and formats
it for console display and JSON export.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from models import TraversalStats


class ExportReport:
    """Builds and renders the summary of an export run."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize export report generator.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger('linked_note_exporter.orchestrator.export_report')

    def generate_report(
        self,
        stats: TraversalStats,
        duration: float,
        archive_path: Optional[Union[str, Path]] = None,
        dry_run: bool = False
    ) -> Dict[str, Any]:
        """
        Generate the export report.

        Args:
            stats: Statistics returned by TraversalEngine.run()
            duration: Run duration in seconds
            archive_path: Written archive, if any
            dry_run: Whether the run copied nothing

        Returns:
            Report dictionary
        """
        summary = {
            'notes_visited': len(stats.visited),
            'notes_exported': len(stats.exported_documents),
            'notes_missing': len(stats.missing),
            'media_copied': stats.media_copied,
            'max_depth_reached': stats.max_depth_reached,
            'skipped_depth': stats.skipped_depth,
            'skipped_blacklisted': stats.skipped_blacklisted,
            'skipped_visited': stats.skipped_visited,
            'total_errors': len(stats.errors),
            'duration_seconds': duration,
            'duration_formatted': self._format_duration(duration),
            'archive': str(archive_path) if archive_path else None,
            'dry_run': dry_run
        }

        report = {
            'summary': summary,
            'documents': list(stats.visited),
            'missing': list(stats.missing),
            'errors': list(stats.errors),
            'timestamp': datetime.now().isoformat()
        }

        self.logger.info(
            f"Report generated: {summary['notes_visited']} notes, "
            f"{summary['total_errors']} errors"
        )
        return report

    def format_console_report(self, report: Dict[str, Any]) -> str:
        """
        Format report for console display.

        Args:
            report: Report dictionary

        Returns:
            Formatted console string
        """
        summary = report.get('summary', {})
        sections = []

        sections.append("=" * 60)
        sections.append("EXPORT REPORT (DRY RUN)" if summary.get('dry_run') else "EXPORT REPORT")
        sections.append("=" * 60)
        sections.append("")

        sections.append("Summary:")
        sections.append(f"  Notes visited:  {summary.get('notes_visited', 0)}")
        sections.append(f"  Notes exported: {summary.get('notes_exported', 0)}")
        sections.append(f"  Notes missing:  {summary.get('notes_missing', 0)}")
        sections.append(f"  Media copied:   {summary.get('media_copied', 0)}")
        sections.append(f"  Deepest level:  {summary.get('max_depth_reached', 0)}")
        sections.append(f"  Duration:       {summary.get('duration_formatted', '0s')}")
        if summary.get('archive'):
            sections.append(f"  Archive:        {summary['archive']}")
        sections.append("")

        sections.append("Skipped:")
        sections.append("-" * 60)
        sections.append(f"  Beyond nesting level: {summary.get('skipped_depth', 0)}")
        sections.append(f"  Blacklisted:          {summary.get('skipped_blacklisted', 0)}")
        sections.append(f"  Already visited:      {summary.get('skipped_visited', 0)}")
        sections.append("")

        missing = report.get('missing', [])
        if missing:
            sections.append("Missing Notes:")
            sections.append("-" * 60)
            for name in missing[:20]:
                sections.append(f"  - {name}")
            if len(missing) > 20:
                sections.append(f"  ... and {len(missing) - 20} more")
            sections.append("")

        errors = report.get('errors', [])
        if errors:
            sections.append("Errors:")
            sections.append("-" * 60)
            for error in errors[:10]:
                sections.append(
                    f"  [{error.get('operation', '?')}] {error.get('document', '?')}: "
                    f"{error.get('error', '')}"
                )
            if len(errors) > 10:
                sections.append(f"  ... and {len(errors) - 10} more")
            sections.append("")

        sections.append("=" * 60)
        return "\n".join(sections)

    def export_json_report(self, report: Dict[str, Any], filepath: Union[str, Path]) -> None:
        """
        Export report to JSON file.

        Args:
            report: Report dictionary
            filepath: Output file path
        """
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(report, f, indent=2, ensure_ascii=False, default=str)

            self.logger.info(f"JSON report exported to {filepath}")

        except OSError as e:
            self.logger.error(f"Failed to export JSON report: {str(e)}")

    @staticmethod
    def _format_duration(seconds: float) -> str:
        """Format duration in human-readable format."""
        if seconds < 60:
            return f"{seconds:.1f}s"
        elif seconds < 3600:
            minutes = int(seconds // 60)
            secs = int(seconds % 60)
            return f"{minutes}m {secs}s"
        else:
            hours = int(seconds // 3600)
            minutes = int((seconds % 3600) // 60)
            secs = int(seconds % 60)
            return f"{hours}h {minutes}m {secs}s"
