"""Tests for the retrying document writer."""

from __future__ import annotations

import errno
from pathlib import Path
from unittest.mock import patch

import pytest

from codewiki.wiki.markdown import render_document
from codewiki.wiki.schemas import WikiDocument, WikiFrontmatter, WikiSection
from codewiki.wiki.writer import write_document, write_documents


def _doc(path: str, body: str = "body") -> WikiDocument:
    return render_document(
        path,
        WikiFrontmatter(title=path, generated="now", description="d"),
        [WikiSection(id="s", title="S", content=body)],
    )


class TestWriteDocuments:
    @pytest.mark.asyncio
    async def test_writes_nested_paths(self, tmp_path: Path) -> None:
        docs = [_doc("overview.md"), _doc("modules/core.md")]
        results = await write_documents(docs, tmp_path)

        assert [r.ok for r in results] == [True, True]
        written = (tmp_path / "modules" / "core.md").read_text()
        assert written == docs[1].content + "\n"

    @pytest.mark.asyncio
    async def test_results_in_input_order(self, tmp_path: Path) -> None:
        docs = [_doc(f"p{i}.md") for i in range(5)]
        results = await write_documents(docs, tmp_path, max_concurrency=2)
        assert [r.path for r in results] == [d.path for d in docs]

    @pytest.mark.asyncio
    async def test_transient_error_is_retried(self, tmp_path: Path) -> None:
        with patch(
            "codewiki.wiki.writer._write_file",
            side_effect=[OSError(errno.EBUSY, "busy"), None],
        ) as mock_write:
            (result,) = await write_documents([_doc("a.md")], tmp_path)

        assert result.ok is True
        assert mock_write.call_count == 2

    @pytest.mark.asyncio
    async def test_permanent_error_is_not_retried(self, tmp_path: Path) -> None:
        with patch(
            "codewiki.wiki.writer._write_file",
            side_effect=OSError(errno.EACCES, "denied"),
        ) as mock_write:
            (result,) = await write_documents([_doc("a.md")], tmp_path)

        assert result.ok is False
        assert result.error is not None and "denied" in result.error
        assert mock_write.call_count == 1

    @pytest.mark.asyncio
    async def test_one_failure_keeps_the_rest(self, tmp_path: Path) -> None:
        # A file where a directory is needed makes that one write fail
        (tmp_path / "blocked").write_text("")
        docs = [_doc("overview.md"), _doc("blocked/page.md"), _doc("index.md")]

        results = await write_documents(docs, tmp_path)

        assert [r.ok for r in results] == [True, False, True]
        assert (tmp_path / "overview.md").exists()
        assert (tmp_path / "index.md").exists()

    @pytest.mark.asyncio
    async def test_path_escaping_root_fails(self, tmp_path: Path) -> None:
        root = tmp_path / "wiki"
        (result,) = await write_documents([_doc("../outside.md")], root)

        assert result.ok is False
        assert result.error is not None and "escapes" in result.error
        assert not (tmp_path / "outside.md").exists()


class TestWriteDocument:
    def test_retries_exhausted_reraises(self, tmp_path: Path) -> None:
        with (
            patch(
                "codewiki.wiki.writer._write_file",
                side_effect=OSError(errno.EAGAIN, "again"),
            ) as mock_write,
            pytest.raises(OSError),
        ):
            write_document(_doc("a.md"), tmp_path, retry_attempts=2)
        assert mock_write.call_count == 2
