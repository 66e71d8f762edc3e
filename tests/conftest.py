"""Shared fixtures for codewiki tests."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from codewiki.ingestion.chunker import analyze_file
from codewiki.ingestion.schemas import FileAnalysis

SAMPLE_APP = Path(__file__).resolve().parent / "fixtures" / "sample_app"


@pytest.fixture
def sample_app() -> Path:
    return SAMPLE_APP


@pytest.fixture
def sample_app_copy(tmp_path: Path) -> Path:
    """A writable copy of the sample app."""
    target = tmp_path / "sample_app"
    shutil.copytree(SAMPLE_APP, target)
    return target


@pytest.fixture
def sample_files() -> list[FileAnalysis]:
    """The sample app chunked: repository file first, then service."""
    return [
        analyze_file(
            SAMPLE_APP / "src/repositories/user-repository.ts", SAMPLE_APP
        ),
        analyze_file(SAMPLE_APP / "src/services/user-service.ts", SAMPLE_APP),
    ]
