"""Assemble and write the architectural wiki for an analyzed codebase."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from codewiki.analysis.schemas import CodebaseAnalysis
from codewiki.config import Settings
from codewiki.domain.schemas import DomainModel
from codewiki.ingestion.chunker import analyze_file
from codewiki.resilience.errors import DocumentWriteError
from codewiki.wiki.domain_pages import (
    domain_model_page,
    entity_page,
    service_page,
    workflow_page,
)
from codewiki.wiki.pages import (
    PageContext,
    architecture_page,
    file_page,
    index_page,
    metrics_page,
    module_page,
    overview_page,
    pattern_page,
)
from codewiki.wiki.schemas import (
    DocumentWriteResult,
    WikiConfig,
    WikiDocument,
)
from codewiki.wiki.writer import write_documents

logger = logging.getLogger(__name__)


class WikiGenerator:
    """Render wiki documents from an analysis and its domain model."""

    def __init__(
        self,
        config: WikiConfig | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.config = config or WikiConfig.from_settings(self.settings)

    def _context(self) -> PageContext:
        return PageContext(
            config=self.config, generated=datetime.now(UTC).isoformat()
        )

    def render(
        self, analysis: CodebaseAnalysis, domain_model: DomainModel
    ) -> list[WikiDocument]:
        """Every page of the wiki, in a fixed order.

        Overview, architecture, patterns, modules with a public API,
        domain model, entities, services, workflows, metrics, then the
        index over all of them.
        """
        ctx = self._context()
        documents = [
            overview_page(ctx, analysis, domain_model),
            architecture_page(ctx, analysis),
        ]
        documents += [pattern_page(ctx, p) for p in analysis.patterns]
        documents += [
            module_page(ctx, m) for m in analysis.modules if m.public_api
        ]
        if self.config.include_business_context:
            documents.append(domain_model_page(ctx, domain_model))
        documents += [entity_page(ctx, e) for e in domain_model.entities]
        documents += [service_page(ctx, s) for s in domain_model.services]
        documents += [workflow_page(ctx, w) for w in domain_model.workflows]
        documents.append(metrics_page(ctx, analysis.metrics))
        documents = _dedupe_paths(documents)
        if self.config.generate_index:
            documents.append(index_page(ctx, documents))

        logger.info("event=wiki_rendered documents=%d", len(documents))
        return documents

    async def write_all(
        self, documents: list[WikiDocument]
    ) -> list[DocumentWriteResult]:
        """Write *documents*; failures are reported, never raised."""
        return await write_documents(
            documents,
            self.config.output_path,
            max_concurrency=self.settings.write_max_concurrency,
            retry_attempts=self.settings.write_retry_attempts,
        )

    async def write(
        self, documents: list[WikiDocument]
    ) -> list[DocumentWriteResult]:
        """Write *documents* under the configured output path.

        Raises DocumentWriteError after every write has been attempted
        if any of them failed. Successful writes stay on disk.
        """
        results = await self.write_all(documents)
        failures = write_failures(results)
        if failures:
            raise DocumentWriteError(failures)
        return results

    def generate_file_doc(
        self, path: str | Path, base_path: str | Path | None = None
    ) -> WikiDocument:
        """Document a single source file without scanning the codebase."""
        analysis = analyze_file(path, base_path)
        logger.debug(
            "event=file_doc path=%s chunks=%d",
            analysis.relative_path,
            len(analysis.chunks),
        )
        return file_page(self._context(), analysis)


def write_failures(results: list[DocumentWriteResult]) -> dict[str, str]:
    """Map each failed document path to its error text."""
    return {r.path: r.error or "unknown error" for r in results if not r.ok}


def _dedupe_paths(documents: list[WikiDocument]) -> list[WikiDocument]:
    """Suffix ``-2``, ``-3``... onto paths that collide after slugging."""
    seen: dict[str, int] = {}
    unique: list[WikiDocument] = []
    for doc in documents:
        count = seen.get(doc.path, 0) + 1
        seen[doc.path] = count
        if count > 1:
            stem, dot, ext = doc.path.rpartition(".")
            renamed = f"{stem}-{count}{dot}{ext}"
            logger.warning(
                "event=document_path_collision path=%s renamed=%s",
                doc.path,
                renamed,
            )
            doc = doc.model_copy(update={"path": renamed})
        unique.append(doc)
    return unique
