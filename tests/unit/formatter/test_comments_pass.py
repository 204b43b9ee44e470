"""Tests for comment placement and block comment rewriting."""

import pytest

from sqlpolish.exceptions import FormatterConfigError
from sqlpolish.formatter.config import FormatterConfig
from sqlpolish.formatter.engine import format_sql
from sqlpolish.formatter.passes import reformat_block_comment


def formatted(sql, **options):
    return format_sql(sql, FormatterConfig(**options))


def assert_stable(sql, **options):
    once = formatted(sql, **options)
    assert formatted(once, **options) == once
    return once


class TestReformatBlockComment:
    """reformat_block_comment."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("/*   hello   world */", "/* hello   world */"),
            ("/*hello*/", "/* hello */"),
            ("/*   */", "/**/"),
            ("/* a   \n\n\n b */", "/* a\n\n b */"),
            ("/*\r\n  x  \r\n*/", "/*\n  x\n*/"),
        ],
    )
    def test_whitespace_is_tidied(self, text, expected):
        """Test single and multi-line comments."""
        assert reformat_block_comment(text) == expected
        assert reformat_block_comment(expected) == expected

    @pytest.mark.parametrize(
        "text",
        ["/**/", "/*+ INDEX(t ix) */", "/***** banner *****/", "/*-- note --*/", "/* open"],
    )
    def test_kept_verbatim(self, text):
        """Test banners, hints, empty and unterminated comments."""
        assert reformat_block_comment(text) == text


class TestBlockCommentStyle:
    """block_comment_style."""

    def test_reformat(self):
        """Test a padded block comment in a query."""
        assert formatted("SELECT a /*   note   */ FROM t", block_comment_style="reformat") == (
            "SELECT a /* note */\nFROM t"
        )

    def test_preserve_is_default(self):
        """Test that comment text is untouched by default."""
        assert formatted("SELECT a /*   note   */ FROM t") == "SELECT a /*   note   */\nFROM t"


class TestCommentPosition:
    """comment_position."""

    def test_above_moves_trailing_line_comment(self):
        """Test a trailing comment on its own line before the next item."""
        assert assert_stable("SELECT a, -- first\n    b FROM t", comment_position="above") == (
            "SELECT a,\n    -- first\n    b\nFROM t"
        )

    def test_above_moves_trailing_block_comment(self):
        """Test that code after the comment starts a new line."""
        assert assert_stable(
            "SELECT a FROM t /* note */ WHERE x = 1", comment_position="above"
        ) == "SELECT a\nFROM t\n/* note */\nWHERE x = 1"

    def test_inline_joins_own_line_comment(self):
        """Test an own-line comment moved to the end of the code line."""
        assert assert_stable("SELECT a\n-- note\nFROM t", comment_position="inline") == (
            "SELECT a -- note\nFROM t"
        )
        assert formatted("SELECT a\n/* note */\nFROM t", comment_position="inline") == (
            "SELECT a /* note */\nFROM t"
        )

    def test_inline_keeps_header_and_comment_blocks(self):
        """Test comments that have no code line before them."""
        assert formatted(
            "-- header\nSELECT a\n-- one\n-- two\nFROM t", comment_position="inline"
        ) == "-- header\nSELECT a -- one\n-- two\nFROM t"

    def test_inline_does_not_cross_statements(self):
        """Test a comment after a semicolon."""
        output = formatted("SELECT 1;\n-- next\nSELECT 2", comment_position="inline")
        assert output.startswith("SELECT 1;\n")
        assert "\n-- next\nSELECT 2" in output

    def test_preserve_is_default(self):
        """Test that comments stay where they are."""
        sql = "SELECT a, -- first\n    b\nFROM t"
        assert formatted(sql) == sql

    def test_unknown_position_rejected(self):
        """Test the option domain."""
        with pytest.raises(FormatterConfigError):
            FormatterConfig(comment_position="below")


class TestBlankLineBeforeComment:
    """blank_line_before_comment."""

    def test_blank_line_above_section_comment(self):
        """Test a blank line before a comment heading a clause."""
        assert assert_stable(
            "SELECT a\nFROM t\n-- filter\nWHERE x = 1", blank_line_before_comment=True
        ) == "SELECT a\nFROM t\n\n-- filter\nWHERE x = 1"

    def test_comment_block_gets_one_blank_line(self):
        """Test consecutive comments kept together."""
        assert formatted(
            "SELECT a\nFROM t\n-- one\n-- two\nWHERE x = 1", blank_line_before_comment=True
        ) == "SELECT a\nFROM t\n\n-- one\n-- two\nWHERE x = 1"

    def test_header_and_trailing_comments_unchanged(self):
        """Test comments that do not open a section."""
        sql = "-- header\nSELECT a, -- first\n    b\nFROM t"
        assert formatted(sql, blank_line_before_comment=True) == sql

    def test_dropped_comments_ignore_comment_options(self):
        """Test that removed comments are not placed."""
        assert formatted(
            "SELECT a -- x\nFROM t\n-- y\nWHERE z = 1",
            preserve_comments=False,
            comment_position="above",
            blank_line_before_comment=True,
        ) == "SELECT a\nFROM t\nWHERE z = 1"
