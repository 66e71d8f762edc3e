"""Tests for slug and label helpers."""

from __future__ import annotations

import pytest

from codewiki.naming import humanize, slugify


class TestSlugify:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Repository Pattern", "repository-pattern"),
            ("user-service.ts", "user-service-ts"),
            ("  --Order__Items--  ", "order-items"),
            ("UserService", "userservice"),
            ("", ""),
        ],
    )
    def test_slugify(self, text: str, expected: str) -> None:
        assert slugify(text) == expected

    def test_idempotent(self) -> None:
        for text in ("A  B", "x.y.z", "Café Menu", "--"):
            assert slugify(slugify(text)) == slugify(text)


class TestHumanize:
    def test_camel_case(self) -> None:
        assert humanize("userAccount") == "User account"

    def test_snake_and_kebab(self) -> None:
        assert humanize("user_account") == "User account"
        assert humanize("data-access") == "Data access"

    def test_empty(self) -> None:
        assert humanize("") == ""
