"""Tests for nvault.utils.markdown module."""

from __future__ import annotations

from datetime import datetime, timezone

from nvault.utils.markdown import (
    Frontmatter,
    count_words,
    extract_heading_title,
    make_preview,
    parse_frontmatter,
    serialize_frontmatter,
)


class TestParseFrontmatter:
    """Tests for parse_frontmatter function."""

    def test_no_frontmatter(self):
        text = "# Title\n\nBody"
        fm, body = parse_frontmatter(text)
        assert fm is None
        assert body == text

    def test_parses_known_fields(self):
        text = (
            "---\n"
            "title: Weekly Review\n"
            "tags: [work, review]\n"
            "created: 2025-11-06T10:39:00Z\n"
            "status: draft\n"
            "---\n"
            "# Weekly Review\n\nBody\n"
        )
        fm, body = parse_frontmatter(text)

        assert fm is not None
        assert fm.title == "Weekly Review"
        assert fm.tags == ["work", "review"]
        assert fm.created == datetime(2025, 11, 6, 10, 39, tzinfo=timezone.utc)
        assert fm.modified is None
        assert fm.custom_fields == {"status": "draft"}
        assert body == "# Weekly Review\n\nBody\n"

    def test_blank_lines_after_block_kept(self):
        fm, body = parse_frontmatter("---\ntitle: x\n---\n\n\nbody")
        assert fm is not None
        assert fm.title == "x"
        assert body == "\n\nbody"

    def test_crlf_block(self):
        fm, body = parse_frontmatter("---\r\ntitle: x\r\n---\r\n\r\nbody")
        assert fm is not None
        assert fm.title == "x"
        assert body == "\r\nbody"

    def test_comma_separated_tags(self):
        fm, _ = parse_frontmatter("---\ntags: a, b ,c\n---\nbody")
        assert fm is not None
        assert fm.tags == ["a", "b", "c"]

    def test_unterminated_block_is_body(self):
        text = "---\ntitle: Oops\n\nNo closing marker"
        fm, body = parse_frontmatter(text)
        assert fm is None
        assert body == text

    def test_non_mapping_is_body(self):
        text = "---\n- just\n- a list\n---\nbody"
        fm, body = parse_frontmatter(text)
        assert fm is None
        assert body == text

    def test_invalid_yaml_is_body(self):
        text = "---\ntitle: [unclosed\n---\nbody"
        fm, body = parse_frontmatter(text)
        assert fm is None
        assert body == text

    def test_unparsable_timestamp_ignored(self):
        fm, _ = parse_frontmatter("---\ncreated: someday\n---\nbody")
        assert fm is not None
        assert fm.created is None


class TestSerializeFrontmatter:
    """Tests for serialize_frontmatter function."""

    def test_keys_sorted(self):
        fm = Frontmatter(
            title="T",
            tags=["x"],
            created=datetime(2025, 11, 6, 10, 39, tzinfo=timezone.utc),
            custom_fields={"author": "me"},
        )
        text = serialize_frontmatter(fm)

        assert text.startswith("---\n")
        assert text.endswith("---\n")
        keys = [line.split(":")[0] for line in text.splitlines()[1:-1] if ":" in line]
        assert keys == sorted(keys)
        assert "2025-11-06T10:39:00Z" in text

    def test_empty(self):
        assert serialize_frontmatter(Frontmatter()) == ""

    def test_parse_back(self):
        fm = Frontmatter(title="Hello", tags=["a", "b"])
        parsed, body = parse_frontmatter(serialize_frontmatter(fm) + "body")
        assert parsed is not None
        assert parsed.title == "Hello"
        assert parsed.tags == ["a", "b"]
        assert body == "body"


class TestTextHelpers:
    """Tests for heading, preview and word count helpers."""

    def test_extract_heading_title(self):
        assert extract_heading_title("intro\n# Heading\n") == "Heading"
        assert extract_heading_title("no heading") is None

    def test_preview_strips_headings(self):
        assert make_preview("# Title\n\nSome   text\nhere") == "Title Some text here"

    def test_preview_truncates(self):
        preview = make_preview("word " * 100, length=20)
        assert len(preview) <= 20
        assert preview.endswith("…")

    def test_count_words(self):
        assert count_words("one two\nthree  ") == 3
        assert count_words("") == 0
