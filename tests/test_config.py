"""Tests for Settings list parsing and validators."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from codewiki.config import DEFAULT_INCLUDE_PATTERNS, Settings


class TestDefaults:
    def test_scanning_defaults(self) -> None:
        s = Settings()
        assert s.include_patterns == list(DEFAULT_INCLUDE_PATTERNS)
        assert "node_modules" in s.skip_directories
        assert s.respect_gitignore is True

    def test_output_defaults(self) -> None:
        s = Settings()
        assert s.output_path == Path("docs/wiki")
        assert s.generate_index is True
        assert s.max_depth == 3


class TestListParsing:
    def test_comma_separated_string_parsed_to_list(self) -> None:
        s = Settings(include_patterns="src/**/*.ts,lib/**/*.js")  # type: ignore[arg-type]
        assert s.include_patterns == ["src/**/*.ts", "lib/**/*.js"]

    def test_comma_separated_with_spaces(self) -> None:
        s = Settings(ignore_patterns=" **/gen/** , **/vendor/** ")  # type: ignore[arg-type]
        assert s.ignore_patterns == ["**/gen/**", "**/vendor/**"]

    def test_list_passthrough(self) -> None:
        s = Settings(skip_directories=["out"])
        assert s.skip_directories == ["out"]

    def test_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CODEWIKI_SKIP_DIRECTORIES", "tmp,cache")
        monkeypatch.setenv("CODEWIKI_PROJECT_NAME", "Shop")
        s = Settings()
        assert s.skip_directories == ["tmp", "cache"]
        assert s.project_name == "Shop"


class TestValidation:
    def test_empty_include_raises(self) -> None:
        with pytest.raises(ValueError, match="at least one glob"):
            Settings(include_patterns="")  # type: ignore[arg-type]

    def test_duplicate_globs_warn(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="codewiki.config"):
            s = Settings(include_patterns=["**/*.ts", "**/*.ts"])
        assert "Duplicate globs" in caplog.text
        assert s.include_patterns == ["**/*.ts", "**/*.ts"]

    def test_no_warning_without_duplicates(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="codewiki.config"):
            Settings(include_patterns=["**/*.ts"])
        assert "Duplicate" not in caplog.text

    @pytest.mark.parametrize(
        "field",
        [
            "embedding_dimensions",
            "analysis_max_concurrency",
            "write_max_concurrency",
            "write_retry_attempts",
            "max_relationship_chunks",
            "phase_max_concurrency",
        ],
    )
    def test_positive_fields(self, field: str) -> None:
        with pytest.raises(ValueError, match=">= 1"):
            Settings(**{field: 0})

    def test_threshold_bounds(self) -> None:
        assert Settings(relationship_threshold=0.5).relationship_threshold == 0.5
        with pytest.raises(ValueError, match="within"):
            Settings(relationship_threshold=1.5)

    def test_phase_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert Settings().phase_timeout_s is None
        monkeypatch.setenv("CODEWIKI_PHASE_TIMEOUT_S", "30")
        assert Settings().phase_timeout_s == 30.0
        with pytest.raises(ValueError, match="> 0"):
            Settings(phase_timeout_s=0)
