"""Tests for the breadth-first link traversal."""

import logging

import pytest

from exporters import DocumentExporter
from links import LinkExtractor
from models import VisitPolicy
from orchestrator import TraversalEngine


def exported_names(settings) -> list:
    """Logical names of the notes in the export notes folder."""
    notes_dir = settings.layout.documents_dir
    return sorted(
        p.relative_to(notes_dir).as_posix()[:-len(".md")]
        for p in notes_dir.rglob("*.md")
    )


@pytest.fixture
def linked_vault(vault, write_note, write_media):
    """
    Start -> A, B          (level 2)
    A     -> B, C          (level 3)
    B     -> A             (cycle)
    C     -> D             (level 4)
    """
    notes = vault / "notes"
    write_note(notes, "Start", ["# Start", "[[A]] and [[B|the B note]]", "![[cover.png]]"])
    write_note(notes, "A", ["[[B]]", "[[C]]", "![[chart.jpg]]"])
    write_note(notes, "B", ["back to [[A]]"])
    write_note(vault / "archive", "C", ["[[D]]"])
    write_note(notes, "D", ["![[deep.png]]"])

    media = vault / "attachments"
    write_media(media, "cover.png")
    write_media(media, "chart.jpg")
    write_media(media, "deep.png")
    return vault


class TestTraversal:
    """Test visit-once, depth limit and level order."""

    def test_collects_notes_within_depth(self, linked_vault, make_settings):
        settings = make_settings(max_depth=3)

        stats = TraversalEngine(settings).run()

        assert stats.visited == ["Start", "A", "B", "C"]
        assert exported_names(settings) == ["A", "B", "C", "Start"]

    def test_note_beyond_depth_is_not_copied_or_expanded(self, linked_vault, make_settings):
        settings = make_settings(max_depth=3)

        stats = TraversalEngine(settings).run()

        assert "D" not in stats.visited
        assert not settings.layout.document_path("D").exists()
        # D's embed is never collected
        assert not (settings.layout.media_dir / "deep.png").exists()
        assert stats.skipped_depth == 1

    def test_depth_one_exports_only_start(self, linked_vault, make_settings):
        settings = make_settings(max_depth=1)

        stats = TraversalEngine(settings).run()

        assert stats.visited == ["Start"]
        assert exported_names(settings) == ["Start"]

    def test_each_note_exported_once(self, linked_vault, make_settings):
        settings = make_settings(max_depth=10)

        stats = TraversalEngine(settings).run()

        assert sorted(stats.exported_documents) == ["A", "B", "C", "D", "Start"]
        assert len(stats.exported_documents) == len(set(stats.exported_documents))
        # B is linked from Start and A, A is linked from Start and B
        assert stats.skipped_visited >= 2

    def test_cycle_terminates(self, vault, write_note, make_settings):
        write_note(vault / "notes", "Ping", ["[[Pong]]"])
        write_note(vault / "notes", "Pong", ["[[Ping]]"])
        settings = make_settings(start="Ping", max_depth=50)

        stats = TraversalEngine(settings).run()

        assert stats.visited == ["Ping", "Pong"]

    def test_self_link(self, vault, write_note, make_settings):
        write_note(vault / "notes", "Loop", ["[[Loop]] [[Loop]]"])
        settings = make_settings(start="Loop")

        stats = TraversalEngine(settings).run()

        assert stats.visited == ["Loop"]
        assert stats.skipped_visited == 2

    def test_level_order(self, vault, write_note, make_settings):
        notes = vault / "notes"
        write_note(notes, "Root", ["[[L1a]] [[L1b]]"])
        write_note(notes, "L1a", ["[[L2a]]"])
        write_note(notes, "L1b", ["[[L2b]]"])
        write_note(notes, "L2a", [])
        write_note(notes, "L2b", [])
        settings = make_settings(start="Root")

        stats = TraversalEngine(settings).run()

        assert stats.visited == ["Root", "L1a", "L1b", "L2a", "L2b"]
        assert stats.max_depth_reached == 3

    def test_exported_note_named_after_link(self, vault, write_note, make_settings):
        source = write_note(vault / "notes", "Plain", "text body", suffix=".txt")
        write_note(vault / "notes", "Start", ["[[Plain]]"])
        settings = make_settings()

        TraversalEngine(settings).run()

        exported = settings.layout.document_path("Plain")
        assert exported.name == "Plain.md"
        assert exported.read_text(encoding="utf-8") == source.read_text(encoding="utf-8")

    def test_folder_qualified_link(self, vault, write_note, make_settings):
        write_note(vault / "notes" / "Projects", "Plan", ["plan"])
        write_note(vault / "notes", "Start", ["[[Projects/Plan|the plan]]"])
        settings = make_settings()

        TraversalEngine(settings).run()

        assert exported_names(settings) == ["Projects/Plan", "Start"]

    def test_unreadable_note_is_copied_but_not_expanded(self, linked_vault, make_settings, caplog):
        settings = make_settings()

        class FailingExtractor(LinkExtractor):
            def extract_file(self, path):
                if path.stem == "A":
                    raise PermissionError("permission denied")
                return super().extract_file(path)

        with caplog.at_level(logging.INFO, logger='linked_note_exporter'):
            stats = TraversalEngine(settings, extractor=FailingExtractor()).run()

        assert stats.errors == [{
            'document': 'A',
            'operation': 'read',
            'error': 'permission denied'
        }]
        assert "A" in stats.exported_documents
        # C is only reachable through A
        assert "C" not in stats.visited
        assert not (settings.layout.media_dir / "chart.jpg").exists()
        assert "1 with problems" in caplog.text

    def test_collaborators_log_under_their_own_names(self, linked_vault, make_settings, caplog):
        with caplog.at_level(logging.DEBUG, logger='linked_note_exporter'):
            TraversalEngine(make_settings()).run()

        names = {record.name for record in caplog.records}
        assert 'linked_note_exporter.links.filename_resolver' in names
        assert 'linked_note_exporter.exporters.document_exporter' in names
        assert 'linked_note_exporter.exporters.media_collector' in names


class TestBlacklist:

    def test_blacklisted_note_never_processed(self, vault, write_note, make_settings):
        notes = vault / "notes"
        write_note(notes, "Start", ["[[Secret]] [[Public]]"])
        write_note(notes, "Public", ["[[Secret]]"])
        write_note(notes, "Secret", ["[[Hidden]]"])
        write_note(notes, "Hidden", [])
        settings = make_settings(blacklist=["Secret"])

        stats = TraversalEngine(settings).run()

        assert "Secret" not in stats.visited
        assert "Hidden" not in stats.visited
        assert stats.skipped_blacklisted == 2
        assert exported_names(settings) == ["Public", "Start"]

    def test_blacklist_checked_before_visited(self, vault, write_note, make_settings):
        write_note(vault / "notes", "Start", ["[[Start]]"])
        settings = make_settings(blacklist=["Start"])

        stats = TraversalEngine(settings).run()

        assert stats.visited == []
        assert stats.skipped_blacklisted == 1


class TestMissingNotes:

    def test_missing_note_is_logged_and_not_expanded(self, vault, write_note, make_settings, caplog):
        write_note(vault / "notes", "Start", ["[[Ghost]] [[Real]]"])
        write_note(vault / "notes", "Real", [])

        with caplog.at_level(logging.WARNING, logger='linked_note_exporter'):
            stats = TraversalEngine(make_settings()).run()

        assert stats.missing == ["Ghost"]
        assert "Ghost" in caplog.text
        assert "Real" in stats.exported_documents

    def test_missing_start_note(self, vault, make_settings):
        settings = make_settings(start="Nowhere")

        stats = TraversalEngine(settings).run()

        assert stats.missing == ["Nowhere"]
        assert stats.exported_documents == []
        # The staging tree is still created for the archiver
        assert settings.layout.documents_dir.is_dir()
        assert settings.layout.media_dir.is_dir()


class TestMedia:

    def test_media_collected_per_note(self, linked_vault, make_settings):
        settings = make_settings(max_depth=2)

        stats = TraversalEngine(settings).run()

        media_dir = settings.layout.media_dir
        assert sorted(p.name for p in media_dir.iterdir()) == ["chart.jpg", "cover.png"]
        assert stats.media_copied == 2

    def test_media_error_does_not_stop_traversal(self, linked_vault, make_settings, tmp_path):
        settings = make_settings(media_root=tmp_path / "missing-media")

        stats = TraversalEngine(settings).run()

        assert exported_names(settings) == ["A", "B", "C", "Start"]
        assert {e['operation'] for e in stats.errors} == {'media'}


class TestCopyErrors:

    def test_copy_error_is_contained(self, linked_vault, make_settings):
        settings = make_settings()

        class FailingExporter(DocumentExporter):
            def export(self, source, name):
                if name == "A":
                    raise PermissionError("read-only destination")
                return super().export(source, name)

        engine = TraversalEngine(settings, document_exporter=FailingExporter(settings.layout))
        stats = engine.run()

        assert "A" in stats.visited
        assert "A" not in stats.exported_documents
        # A's links are still followed
        assert "C" in stats.exported_documents
        assert stats.errors == [{
            'document': 'A',
            'operation': 'copy',
            'error': 'read-only destination'
        }]


class TestDryRun:

    def test_dry_run_copies_nothing(self, linked_vault, make_settings):
        settings = make_settings(dry_run=True)

        stats = TraversalEngine(settings).run()

        assert stats.visited == ["Start", "A", "B", "C"]
        assert stats.exported_documents == []
        assert stats.media_copied == 0
        assert not settings.layout.root.exists()


class TestVisitPolicy:

    def test_shallowest_policy_visits_same_notes(self, linked_vault, make_settings):
        first_seen = TraversalEngine(make_settings(max_depth=10, dry_run=True)).run()
        shallowest = TraversalEngine(make_settings(
            max_depth=10,
            dry_run=True,
            visit_policy=VisitPolicy.SHALLOWEST
        )).run()

        assert shallowest.visited == first_seen.visited
        assert shallowest.skipped_visited < first_seen.skipped_visited

    def test_shallowest_policy_skips_duplicate_queue_entries(self, vault, write_note, make_settings):
        notes = vault / "notes"
        write_note(notes, "Start", ["[[X]] [[X]] [[Y]]"])
        write_note(notes, "Y", ["[[X]]"])
        write_note(notes, "X", [])
        settings = make_settings(visit_policy=VisitPolicy.SHALLOWEST, dry_run=True)

        stats = TraversalEngine(settings).run()

        assert stats.visited == ["Start", "X", "Y"]
        assert stats.skipped_visited == 0
