"""Singleton logging configuration.

setup_logging() configures the root logger once per process and
quiets third-party loggers that are noisy at INFO. Idempotent:
guarded by a module-level flag so the CLI and library callers can
both call it.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# Third-party loggers to suppress to WARNING
_SUPPRESSED_LOGGERS = (
    "tenacity",
    "asyncio",
    "pathspec",
)

_configured = False


def setup_logging(level: str = "INFO") -> None:
    """Configure root logger. Second call is a no-op."""
    global _configured  # noqa: PLW0603
    if _configured:
        return
    _configured = True

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )

    for name in _SUPPRESSED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
