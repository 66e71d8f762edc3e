"""Identifier helpers shared by the domain mapper and wiki generator."""

from __future__ import annotations

import re

_NON_SLUG = re.compile(r"[^a-z0-9]+")
_CAPITAL = re.compile(r"([A-Z])")


def slugify(text: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to '-', trim '-'.

    Idempotent: ``slugify(slugify(x)) == slugify(x)``.
    """
    return _NON_SLUG.sub("-", text.lower()).strip("-")


def humanize(text: str) -> str:
    """Turn ``userAccount`` / ``user_account`` into ``User account``."""
    spaced = _CAPITAL.sub(r" \1", text)
    spaced = spaced.replace("_", " ").replace("-", " ")
    spaced = " ".join(spaced.split()).lower()
    return spaced[:1].upper() + spaced[1:]
