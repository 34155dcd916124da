"""
Unit tests for line-group chunking.
"""

import pytest

from tieto.retrieval.chunker import Chunker, chunk_lines, split_lines


class TestChunker:
    """Tests for the Chunker sequence."""

    def test_groups_of_three(self):
        """Test lines are grouped three at a time with a short final group."""
        body = "one\ntwo\nthree\nfour"
        chunks = list(Chunker(body))

        assert chunks == ["one\ntwo\nthree", "four"]

    def test_blank_lines_and_whitespace_dropped(self):
        """Test blank lines are skipped and lines trimmed."""
        body = "  one  \n\n\ttwo\n   \nthree\n"
        chunks = list(Chunker(body))

        assert chunks == ["one\ntwo\nthree"]

    def test_empty_body(self):
        """Test an empty body yields no chunks."""
        chunker = Chunker("\n\n   \n")

        assert list(chunker) == []
        assert len(chunker) == 0

    def test_restartable(self):
        """Test iterating twice yields the same chunks."""
        chunker = Chunker("a\nb\nc\nd\ne")

        assert list(chunker) == list(chunker)

    def test_len_and_line_count(self):
        """Test length counts chunks and line_count counts lines."""
        chunker = Chunker("a\nb\nc\nd\ne\nf\ng", group_size=3)

        assert len(chunker) == 3
        assert chunker.line_count == 7

    def test_custom_group_size(self):
        """Test a non-default group size."""
        assert chunk_lines("a\nb\nc", group_size=1) == ["a", "b", "c"]

    def test_invalid_group_size(self):
        """Test a non-positive group size is rejected."""
        with pytest.raises(ValueError):
            Chunker("a", group_size=0)

    def test_every_line_covered_once(self):
        """Test chunks concatenate back to the non-empty lines."""
        body = "\n".join(f"line {i}" for i in range(10))
        chunks = chunk_lines(body)

        rejoined = [line for chunk in chunks for line in chunk.split("\n")]
        assert rejoined == split_lines(body)
