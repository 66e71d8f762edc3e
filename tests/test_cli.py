"""Tests for CLI argument parsing and commands."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from codewiki.cli import _build_parser, _settings_from_args, main


class TestArgParser:
    def test_version_flag(self) -> None:
        args = _build_parser().parse_args(["--version"])
        assert args.version is True

    def test_generate_defaults(self) -> None:
        args = _build_parser().parse_args(["generate", "/tmp/repo"])
        assert args.command == "generate"
        assert args.base_path == "/tmp/repo"
        assert args.output_dir is None
        assert args.include is None
        assert args.no_index is False
        assert args.verbose is False

    def test_generate_with_options(self) -> None:
        args = _build_parser().parse_args(
            [
                "generate",
                "/tmp/repo",
                "-o",
                "./docs",
                "--name",
                "Shop",
                "--include",
                "src/**/*.ts",
                "lib/**/*.ts",
                "--no-index",
                "--no-business-context",
                "-v",
            ]
        )
        settings = _settings_from_args(args)
        assert settings.output_path == Path("./docs")
        assert settings.project_name == "Shop"
        assert settings.include_patterns == ["src/**/*.ts", "lib/**/*.ts"]
        assert settings.generate_index is False
        assert settings.include_business_context is False
        assert settings.include_code_links is True

    def test_search_limit(self) -> None:
        args = _build_parser().parse_args(["search", ".", "user", "-n", "3"])
        assert args.query == "user"
        assert args.limit == 3

    def test_no_command(self) -> None:
        args = _build_parser().parse_args([])
        assert args.command is None


class TestCommands:
    def test_version_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["--version"])
        assert capsys.readouterr().out.strip() == "codewiki 0.1.0"

    def test_missing_path_exits(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["generate", str(tmp_path / "missing")])
        assert exc_info.value.code == 1
        assert "does not exist" in capsys.readouterr().err

    def test_generate(
        self,
        sample_app_copy: Path,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        out = tmp_path / "wiki"
        main(["generate", str(sample_app_copy), "-o", str(out)])

        assert (out / "overview.md").exists()
        assert (out / "index.md").exists()
        assert "Done!" in capsys.readouterr().out

    def test_file(
        self,
        sample_app: Path,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        out = tmp_path / "wiki"
        source = sample_app / "src" / "services" / "user-service.ts"
        main(["file", str(source), "--base", str(sample_app), "-o", str(out)])

        assert (out / "files" / "user-service-ts.md").exists()
        assert "Wrote" in capsys.readouterr().out

    def test_file_unsupported(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        source = tmp_path / "notes.py"
        source.write_text("x = 1\n")
        with pytest.raises(SystemExit):
            main(["file", str(source), "-o", str(tmp_path / "wiki")])
        assert "Error:" in capsys.readouterr().err

    def test_search(
        self, sample_app: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        main(["search", str(sample_app), "repository save user"])
        out = capsys.readouterr().out
        assert "UserRepository" in out or "save" in out


class TestLogLevel:
    def test_level_from_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CODEWIKI_LOG_LEVEL", "ERROR")
        with patch("codewiki.cli.setup_logging") as mock_setup:
            main([])
        mock_setup.assert_called_once_with("ERROR")

    def test_default_level(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("CODEWIKI_LOG_LEVEL", raising=False)
        with patch("codewiki.cli.setup_logging") as mock_setup:
            main([])
        mock_setup.assert_called_once_with("INFO")

    def test_verbose_overrides_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CODEWIKI_LOG_LEVEL", "ERROR")
        with (
            patch("codewiki.cli.setup_logging") as mock_setup,
            pytest.raises(SystemExit),
        ):
            main(["generate", str(tmp_path / "missing"), "-v"])
        mock_setup.assert_called_once_with("DEBUG")
