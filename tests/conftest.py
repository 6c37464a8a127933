"""
Shared pytest fixtures for exporter tests.
"""
import logging
from pathlib import Path
from typing import Callable, Iterable, Optional

import pytest

from logger import LOGGER_NAME
from models import ExportLayout, ExportSettings, VisitPolicy


@pytest.fixture(autouse=True)
def reset_project_logger():
    """Drop handlers installed by setup_logging so they don't outlive a test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """Empty vault with two note folders and an attachments folder."""
    root = tmp_path / "vault"
    (root / "notes").mkdir(parents=True)
    (root / "archive").mkdir(parents=True)
    (root / "attachments").mkdir(parents=True)
    return root


@pytest.fixture
def write_note() -> Callable[..., Path]:
    """Write a markdown note; lines may be given as a list or a single string."""
    def _write(directory: Path, name: str, lines: Iterable[str] = (), suffix: str = ".md") -> Path:
        path = directory / f"{name}{suffix}"
        path.parent.mkdir(parents=True, exist_ok=True)
        content = lines if isinstance(lines, str) else "\n".join(lines)
        path.write_text(content, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def write_media() -> Callable[..., Path]:
    """Write a small binary media file."""
    def _write(directory: Path, filename: str, content: bytes = b"\x89media") -> Path:
        path = directory / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path
    return _write


@pytest.fixture
def make_settings(vault: Path, tmp_path: Path) -> Callable[..., ExportSettings]:
    """Build ExportSettings pointing at the vault fixture."""
    def _make(
        start: str = "Start",
        max_depth: int = 3,
        blacklist: Optional[list] = None,
        dry_run: bool = False,
        visit_policy: VisitPolicy = VisitPolicy.FIRST_SEEN,
        source_dirs: Optional[list] = None,
        media_root: Optional[Path] = None
    ) -> ExportSettings:
        return ExportSettings(
            start_document=start,
            source_dirs=source_dirs or [vault / "notes", vault / "archive"],
            media_root=media_root or vault / "attachments",
            max_depth=max_depth,
            layout=ExportLayout(tmp_path / "export"),
            blacklist=blacklist or [],
            archive_path=tmp_path / "export.zip",
            progress_bars=False,
            dry_run=dry_run,
            visit_policy=visit_policy,
        )
    return _make
