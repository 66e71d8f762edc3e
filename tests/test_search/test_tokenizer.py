"""Tests for the identifier-aware tokenizer."""

from __future__ import annotations

from codewiki.constants import ChunkType
from codewiki.ingestion.schemas import Chunk, ChunkMetadata, ParameterInfo
from codewiki.search.tokenizer import chunk_text, tokenize


class TestTokenize:
    def test_camel_case(self) -> None:
        assert tokenize("findUserById") == ["find", "user"]

    def test_acronyms(self) -> None:
        assert tokenize("parseHTTPResponse") == ["parse", "http", "response"]

    def test_snake_and_kebab(self) -> None:
        assert tokenize("load_user-profile") == ["load", "user", "profile"]

    def test_stop_words_and_short_tokens(self) -> None:
        assert tokenize("export const getX = async function") == []

    def test_empty(self) -> None:
        assert tokenize("") == []


class TestChunkText:
    def test_includes_signature_parts(self) -> None:
        chunk = Chunk(
            id="a:function:load",
            chunk_type=ChunkType.FUNCTION,
            name="loadOrders",
            file_path="a.ts",
            start_line=1,
            end_line=3,
            code="",
            documentation="Loads orders.",
            signature="loadOrders(customer: Customer): Order[]",
            metadata=ChunkMetadata(
                parameters=[ParameterInfo(name="customer", type="Customer")],
                return_type="Order[]",
            ),
        )
        text = chunk_text(chunk)
        assert text.startswith("loadOrders Loads orders.")
        assert "customer Customer" in text
        assert text.endswith("Order[]")
