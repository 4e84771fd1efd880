"""
Unit tests for text processing: strip_null_chars, clean_text and chunk_text.
"""

import pytest

from docqa.services.text_processing import chunk_text, clean_text, strip_null_chars


class TestStripNullChars:
    def test_removes_real_nul(self) -> None:
        assert strip_null_chars("12,450\x00 tCO2e") == "12,450 tCO2e"

    def test_removes_literal_escape(self) -> None:
        assert strip_null_chars("Scope\\u0000 1") == "Scope 1"

    def test_empty(self) -> None:
        assert strip_null_chars("") == ""


class TestCleanText:
    """Tests for clean_text()."""

    def test_empty_returns_empty(self) -> None:
        assert clean_text("") == ""
        assert clean_text("   ") == ""
        assert clean_text("\n\n") == ""

    def test_strips_outer_whitespace(self) -> None:
        assert clean_text("  hello  ") == "hello"
        assert clean_text("\n  hello  \n") == "hello"

    def test_normalizes_inner_lines(self) -> None:
        # Blank lines preserved between paragraphs
        assert clean_text("  hello   \n\n  world  ") == "hello\n\nworld"
        assert clean_text("Scope 1   emissions\t 12,450") == "Scope 1 emissions 12,450"

    def test_keeps_repeated_lines(self) -> None:
        assert clean_text("0.00\n  0.00  \n0.00\nTotal") == "0.00\n0.00\n0.00\nTotal"

    def test_collapses_blank_line_runs(self) -> None:
        assert clean_text("a\n\n\n\nb") == "a\n\nb"

    def test_nfkc_normalization(self) -> None:
        # Fullwidth digits fold to ASCII
        assert clean_text("１２,450 tCO2e") == "12,450 tCO2e"


class TestChunkText:
    """Tests for chunk_text()."""

    def test_empty_returns_empty_list(self) -> None:
        assert chunk_text("") == []
        assert chunk_text("   ") == []

    def test_short_text_returns_single_chunk(self) -> None:
        short = "Featherlite reported 12,450 tCO2e for FY23."
        assert chunk_text(short) == [short]

    def test_chunks_never_exceed_size(self) -> None:
        text = " ".join(f"word{i}" for i in range(1000))
        chunks = chunk_text(text, chunk_size=1000, overlap=200)
        assert len(chunks) >= 2
        assert all(len(c) <= 1000 for c in chunks)

    def test_consecutive_chunks_overlap(self) -> None:
        text = " ".join(f"word{i}" for i in range(1000))
        chunks = chunk_text(text, chunk_size=1000, overlap=200)
        for prev, nxt in zip(chunks, chunks[1:]):
            assert nxt[:50] in prev

    def test_cuts_on_word_boundaries(self) -> None:
        text = " ".join(f"word{i}" for i in range(1000))
        words = set(text.split())
        for chunk in chunk_text(text, chunk_size=1000, overlap=200):
            assert set(chunk.split()) <= words

    def test_covers_whole_text(self) -> None:
        text = " ".join(f"word{i}" for i in range(1000))
        chunks = chunk_text(text, chunk_size=1000, overlap=200)
        assert chunks[0].startswith("word0 ")
        assert chunks[-1].endswith("word999")

    def test_text_without_spaces_is_split_by_count(self) -> None:
        chunks = chunk_text("a" * 2500, chunk_size=1000, overlap=200)
        assert [len(c) for c in chunks] == [1000, 1000, 900]

    def test_invalid_overlap(self) -> None:
        with pytest.raises(ValueError):
            chunk_text("text", chunk_size=100, overlap=100)
