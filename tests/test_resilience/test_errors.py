"""Tests for typed failures and error classification."""

from __future__ import annotations

import errno

from codewiki.resilience.errors import (
    ChunkNotFoundError,
    CodeWikiError,
    DocumentWriteError,
    ErrorClass,
    SourceFileNotFoundError,
    classify_error,
    is_retryable,
)

# ── classify_error ───────────────────────────────────────────


def test_classify_ebusy_as_transient() -> None:
    """OSError with EBUSY → TRANSIENT."""
    assert classify_error(OSError(errno.EBUSY, "busy")) == ErrorClass.TRANSIENT


def test_classify_etimedout_as_timeout() -> None:
    assert classify_error(OSError(errno.ETIMEDOUT, "slow")) == ErrorClass.TIMEOUT


def test_classify_eacces_as_permanent() -> None:
    assert classify_error(OSError(errno.EACCES, "denied")) == ErrorClass.PERMANENT


def test_classify_timeout_error_type() -> None:
    assert classify_error(TimeoutError()) == ErrorClass.TIMEOUT


def test_classify_permission_error_without_errno() -> None:
    assert classify_error(PermissionError()) == ErrorClass.PERMANENT


def test_classify_message_fallback() -> None:
    """Untyped exceptions are classified by message."""
    assert (
        classify_error(RuntimeError("resource temporarily unavailable"))
        == ErrorClass.TRANSIENT
    )
    assert classify_error(RuntimeError("request timed out")) == ErrorClass.TIMEOUT


def test_classify_unknown() -> None:
    assert classify_error(ValueError("bad value")) == ErrorClass.UNKNOWN


# ── is_retryable ─────────────────────────────────────────────


def test_transient_and_timeout_are_retryable() -> None:
    assert is_retryable(OSError(errno.EAGAIN, "again")) is True
    assert is_retryable(TimeoutError()) is True


def test_permanent_and_unknown_are_not_retryable() -> None:
    assert is_retryable(OSError(errno.ENOSPC, "full")) is False
    assert is_retryable(ValueError("bad")) is False


# ── typed failures ───────────────────────────────────────────


def test_source_file_not_found_is_file_not_found() -> None:
    err = SourceFileNotFoundError("a.ts")
    assert isinstance(err, FileNotFoundError)
    assert isinstance(err, CodeWikiError)
    assert "a.ts" in str(err)


def test_chunk_not_found_message() -> None:
    err = ChunkNotFoundError("x:class:Y")
    assert isinstance(err, KeyError)
    assert str(err) == "Chunk not found in index: x:class:Y"


def test_document_write_error_lists_paths() -> None:
    err = DocumentWriteError({"b.md": "denied", "a.md": "busy"})
    assert err.failures == {"b.md": "denied", "a.md": "busy"}
    assert str(err) == "2 document(s) failed to write: a.md, b.md"
