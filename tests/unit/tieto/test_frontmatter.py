"""
Unit tests for frontmatter extraction.

Tests for:
- Documents with and without a metadata block
- Value types preserved from YAML
- Malformed blocks raising ParseError
"""

import pytest

from tieto.core.exceptions import ParseError
from tieto.ingest.frontmatter import extract_frontmatter


class TestExtractFrontmatter:
    """Tests for extract_frontmatter."""

    def test_no_frontmatter(self):
        """Test a document without a block has empty metadata and unchanged body."""
        raw = "Widget A comes in blue.\nWidget B comes in red.\n"
        metadata, body = extract_frontmatter(raw)

        assert metadata == {}
        assert body == raw

    def test_basic_block(self):
        """Test a fenced block is parsed and removed from the body."""
        raw = "---\nstatus: current\nrating: 4\n---\nLine one\nLine two\n"
        metadata, body = extract_frontmatter(raw)

        assert metadata == {"status": "current", "rating": 4}
        assert body == "Line one\nLine two"

    def test_quoted_price_stays_string(self):
        """Test a quoted currency value survives as text."""
        raw = '---\nprice: "$19.95"\n---\nWidget A\n'
        metadata, _ = extract_frontmatter(raw)

        assert metadata["price"] == "$19.95"

    def test_lists_and_booleans(self):
        """Test lists and booleans keep their YAML types."""
        raw = "---\ntags: [blue, small]\nactive: true\n---\nbody"
        metadata, _ = extract_frontmatter(raw)

        assert metadata["tags"] == ["blue", "small"]
        assert metadata["active"] is True

    def test_dates_become_iso_strings(self):
        """Test YAML dates are normalised to ISO text."""
        raw = "---\npublished: 2024-03-01\n---\nbody"
        metadata, _ = extract_frontmatter(raw)

        assert metadata["published"] == "2024-03-01"

    def test_empty_block(self):
        """Test an empty block yields empty metadata."""
        metadata, body = extract_frontmatter("---\n---\nbody")

        assert metadata == {}
        assert body == "body"

    def test_dots_close_block(self):
        """Test `...` also closes the block."""
        metadata, body = extract_frontmatter("---\nstatus: old\n...\nbody")

        assert metadata == {"status": "old"}
        assert body == "body"

    def test_bom_is_ignored(self):
        """Test a leading byte-order mark does not hide the block."""
        metadata, body = extract_frontmatter("\ufeff---\nstatus: current\n---\nbody")

        assert metadata == {"status": "current"}
        assert body == "body"

    def test_bom_removed_without_block(self):
        """Test a leading byte-order mark is dropped from a plain body."""
        metadata, body = extract_frontmatter("\ufeffWidget A\nis blue")

        assert metadata == {}
        assert not body.startswith("\ufeff")
        assert body == "Widget A\nis blue"

    def test_fence_not_on_first_line(self):
        """Test a fence later in the document is body text."""
        raw = "Intro\n---\nstatus: current\n---\n"
        metadata, body = extract_frontmatter(raw)

        assert metadata == {}
        assert body == raw

    def test_unclosed_block_raises(self):
        """Test an opened but unclosed block is a parse error."""
        with pytest.raises(ParseError, match="never closed") as exc_info:
            extract_frontmatter("---\nstatus: current\nbody", source="doc.md")

        assert exc_info.value.source == "doc.md"

    def test_invalid_yaml_raises(self):
        """Test invalid YAML in the block is a parse error."""
        with pytest.raises(ParseError, match="Invalid frontmatter"):
            extract_frontmatter("---\nstatus: [unclosed\n---\nbody")

    def test_non_mapping_raises(self):
        """Test a block that is not a mapping is a parse error."""
        with pytest.raises(ParseError, match="mapping"):
            extract_frontmatter("---\n- a\n- b\n---\nbody")
