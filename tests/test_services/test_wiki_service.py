"""End-to-end tests for wiki generation over the sample app."""

from __future__ import annotations

import errno
from pathlib import Path
from unittest.mock import patch

import pytest

from codewiki.config import Settings
from codewiki.constants import StageProgress
from codewiki.resilience.errors import CodeWikiError, DocumentWriteError
from codewiki.services.events import StageEvent
from codewiki.services.wiki_service import (
    analyze_codebase,
    analyze_file,
    build_semantic_index,
    generate_comprehensive_wiki,
    generate_wiki,
    infer_domain_model,
    run_wiki_generation,
)


def _settings(tmp_path: Path) -> Settings:
    return Settings(output_path=tmp_path / "wiki", project_name="Users")


class TestRunWikiGeneration:
    @pytest.mark.asyncio
    async def test_full_run(self, sample_app_copy: Path, tmp_path: Path) -> None:
        events: list[StageEvent] = []
        result = await run_wiki_generation(
            sample_app_copy,
            settings=_settings(tmp_path),
            on_progress=events.append,
        )

        assert result.ok, result.failed_stage()
        assert [s.name for s in result.stages] == [
            "scan",
            "analysis",
            "domain_model",
            "semantic_index",
            "render",
            "write",
        ]
        assert result.analysis is not None
        assert len(result.analysis.files) == 2
        assert result.search is not None

        out = tmp_path / "wiki"
        for doc in result.documents:
            assert (out / doc.path).read_text() == doc.content + "\n"
        assert (out / "overview.md").exists()
        assert (out / "index.md").exists()

        done = {e.name for e in events if e.status == StageProgress.DONE}
        assert done == {s.name for s in result.stages}
        final_write = [e for e in events if e.name == "write" and e.percent]
        assert final_write[-1].percent == 100.0

    @pytest.mark.asyncio
    async def test_missing_path_stops_after_scan(self, tmp_path: Path) -> None:
        result = await run_wiki_generation(
            tmp_path / "missing", settings=_settings(tmp_path)
        )

        assert result.ok is False
        failed = result.failed_stage()
        assert failed is not None and failed.name == "scan"
        assert [s.name for s in result.stages] == ["scan"]
        assert result.documents == []
        assert result.total_duration_ms >= 0

    @pytest.mark.asyncio
    async def test_write_failures_are_recorded(
        self, sample_app_copy: Path, tmp_path: Path
    ) -> None:
        with patch(
            "codewiki.wiki.writer._write_file",
            side_effect=OSError(errno.EACCES, "denied"),
        ):
            result = await run_wiki_generation(
                sample_app_copy, settings=_settings(tmp_path)
            )

        write = result.stages[-1]
        assert write.name == "write"
        assert write.ok is False
        assert result.documents
        assert not any(r.ok for r in result.write_results)


class TestGenerateComprehensiveWiki:
    @pytest.mark.asyncio
    async def test_returns_result(
        self, sample_app_copy: Path, tmp_path: Path
    ) -> None:
        result = await generate_comprehensive_wiki(
            sample_app_copy, settings=_settings(tmp_path)
        )
        assert result.domain_model is not None
        assert result.documents[0].path == "overview.md"

    @pytest.mark.asyncio
    async def test_failed_scan_raises(self, tmp_path: Path) -> None:
        with pytest.raises(CodeWikiError, match="stage 'scan'"):
            await generate_comprehensive_wiki(
                tmp_path / "missing", settings=_settings(tmp_path)
            )

    @pytest.mark.asyncio
    async def test_write_failure_raises(
        self, sample_app_copy: Path, tmp_path: Path
    ) -> None:
        with (
            patch(
                "codewiki.wiki.writer._write_file",
                side_effect=OSError(errno.EACCES, "denied"),
            ),
            pytest.raises(DocumentWriteError) as exc_info,
        ):
            await generate_comprehensive_wiki(
                sample_app_copy, settings=_settings(tmp_path)
            )
        assert "overview.md" in exc_info.value.failures

    @pytest.mark.asyncio
    async def test_generate_wiki_returns_documents(
        self, sample_app_copy: Path, tmp_path: Path
    ) -> None:
        documents = await generate_wiki(
            sample_app_copy, settings=_settings(tmp_path)
        )
        assert "architecture.md" in [d.path for d in documents]


class TestConvenienceEntryPoints:
    @pytest.mark.asyncio
    async def test_analyze_and_infer(self, sample_app: Path) -> None:
        analysis = await analyze_codebase(sample_app)
        model = infer_domain_model(analysis)

        assert len(analysis.files) == 2
        assert [e.technical_name for e in model.entities] == ["User"]

    def test_analyze_file_and_index(self, sample_app: Path) -> None:
        analysis = analyze_file(
            sample_app / "src" / "services" / "user-service.ts", sample_app
        )
        search = build_semantic_index([analysis])

        assert analysis.relative_path == "src/services/user-service.ts"
        assert search.index is not None
        assert len(search.index.chunks) == len(analysis.chunks)
