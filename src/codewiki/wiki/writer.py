"""Write wiki documents to disk, each independently and with retry.

Transient filesystem errors (EAGAIN, EBUSY, EINTR, ETIMEDOUT) are
retried with jittered exponential backoff. Anything else fails that
one document immediately. Documents already written are never rolled
back.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from codewiki.constants import (
    WRITE_RETRY_ATTEMPTS,
    WRITE_RETRY_INITIAL_S,
    WRITE_RETRY_MAX_S,
)
from codewiki.resilience.errors import classify_error, is_retryable
from codewiki.wiki.schemas import DocumentWriteResult, WikiDocument

logger = logging.getLogger(__name__)


def _target(output_root: Path, relative: str) -> Path:
    root = output_root.resolve()
    target = (root / relative).resolve()
    if not target.is_relative_to(root):
        raise ValueError(f"Document path escapes output root: {relative}")
    return target


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content + "\n", encoding="utf-8")


def write_document(
    document: WikiDocument,
    output_root: Path,
    retry_attempts: int = WRITE_RETRY_ATTEMPTS,
) -> None:
    """Write one document, retrying transient errors. Blocking."""
    target = _target(output_root, document.path)
    retrying = Retrying(
        stop=stop_after_attempt(retry_attempts),
        wait=wait_exponential_jitter(
            initial=WRITE_RETRY_INITIAL_S, max=WRITE_RETRY_MAX_S
        ),
        retry=retry_if_exception(is_retryable),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    retrying(_write_file, target, document.content)


async def write_documents(
    documents: list[WikiDocument],
    output_root: str | Path,
    *,
    max_concurrency: int = 8,
    retry_attempts: int = WRITE_RETRY_ATTEMPTS,
) -> list[DocumentWriteResult]:
    """Write every document in a worker thread; one result per document.

    Results come back in input order. A failure is recorded in its
    result and logged; it never stops the other writes.
    """
    root = Path(output_root)
    semaphore = asyncio.Semaphore(max_concurrency)

    async def _one(document: WikiDocument) -> DocumentWriteResult:
        async with semaphore:
            try:
                await asyncio.to_thread(
                    write_document, document, root, retry_attempts
                )
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "event=document_write_failed path=%s error_class=%s",
                    document.path,
                    classify_error(exc).value,
                    exc_info=True,
                )
                return DocumentWriteResult(
                    path=document.path, ok=False, error=str(exc)
                )
            return DocumentWriteResult(path=document.path, ok=True)

    results = await asyncio.gather(*(_one(d) for d in documents))
    written = sum(1 for r in results if r.ok)
    logger.info(
        "event=documents_written root=%s written=%d failed=%d",
        root,
        written,
        len(results) - written,
    )
    return list(results)
