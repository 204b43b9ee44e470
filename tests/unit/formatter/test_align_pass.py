"""Tests for column alignment."""

from sqlpolish.formatter.annotated import annotate_tokens
from sqlpolish.formatter.config import FormatterConfig
from sqlpolish.formatter.engine import format_sql
from sqlpolish.formatter.passes import AlignPass, build_passes
from sqlpolish.tokenizer import tokenize


def aligned(sql, **options):
    return format_sql(sql, FormatterConfig(**options))


def assert_stable(sql, **options):
    once = aligned(sql, **options)
    assert aligned(once, **options) == once
    return once


class TestSelectColumnAlign:
    """select_column_align."""

    def test_left_is_plain_indent(self):
        """Test the default layout."""
        assert aligned("select a, b from t") == "SELECT a,\n    b\nFROM t"

    def test_keyword_aligns_under_first_column(self):
        """Test columns starting after SELECT."""
        assert assert_stable("select a, b, c from t", select_column_align="keyword") == (
            "SELECT a,\n       b,\n       c\nFROM t"
        )

    def test_leading_commas_leave_text_aligned(self):
        """Test that the comma hangs left of the column text."""
        assert aligned(
            "SELECT a, b FROM t", select_column_align="keyword", comma_position="leading"
        ) == "SELECT a\n     , b\nFROM t"

    def test_subquery_aligns_to_its_own_select(self):
        """Test a nested select list."""
        assert assert_stable(
            "SELECT x FROM t WHERE EXISTS (SELECT a, b FROM u)", select_column_align="keyword"
        ) == (
            "SELECT x\n"
            "FROM t\n"
            "WHERE EXISTS (\n"
            "    SELECT a,\n"
            "           b\n"
            "    FROM u\n"
            ")"
        )


class TestFromAliasAlign:
    """from_alias_align."""

    def test_aliases_line_up(self):
        """Test FROM and JOIN aliases padded to the longest table name."""
        assert assert_stable(
            "SELECT * FROM users u JOIN dbo.orders o ON o.user_id = u.id",
            from_alias_align=True,
        ) == (
            "SELECT *\n"
            "FROM users      u\n"
            "JOIN dbo.orders o\n"
            "    ON o.user_id = u.id"
        )

    def test_as_keyword_is_aligned(self):
        """Test explicit and inserted AS."""
        expected = "SELECT *\nFROM users      AS u\nJOIN dbo.orders AS o\n    ON o.id = u.id"
        assert aligned(
            "SELECT * FROM users AS u JOIN dbo.orders AS o ON o.id = u.id",
            from_alias_align=True,
        ) == expected
        assert aligned(
            "SELECT * FROM users u JOIN dbo.orders o ON o.id = u.id",
            from_alias_align=True,
            use_as_keyword=True,
        ) == expected

    def test_stripped_schema_is_not_counted(self):
        """Test widths after from_schema_qualify removed the schema."""
        assert aligned(
            "SELECT * FROM dbo.users u JOIN orders o ON 1 = 1",
            from_alias_align=True,
            from_schema_qualify="never",
        ) == "SELECT *\nFROM users  u\nJOIN orders o\n    ON 1 = 1"

    def test_single_alias_is_not_padded(self):
        """Test a table without alias next to an aliased one."""
        assert aligned(
            "SELECT * FROM a JOIN bbbb b ON a.id = b.id", from_alias_align=True
        ) == "SELECT *\nFROM a\nJOIN bbbb b\n    ON a.id = b.id"


class TestUpdateSetAlign:
    """update_set_align."""

    def test_equals_signs_line_up(self):
        """Test assignments padded to the longest column."""
        assert assert_stable(
            "UPDATE t SET a = 1, longer = 2, t.c = 3 WHERE id = 1", update_set_align=True
        ) == (
            "UPDATE t\n"
            "SET a      = 1,\n"
            "    longer = 2,\n"
            "    t.c    = 3\n"
            "WHERE id = 1"
        )

    def test_disabled_by_default(self):
        """Test that assignments keep single spaces."""
        assert aligned("UPDATE t SET a = 1, longer = 2") == (
            "UPDATE t\nSET a = 1,\n    longer = 2"
        )

    def test_padding_is_recorded(self):
        """Test align_padding on the equals tokens."""
        config = FormatterConfig(update_set_align=True)
        tokens = annotate_tokens(tokenize("UPDATE t SET a = 1, bcd = 2"))
        for annotation_pass in build_passes(config):
            annotation_pass.run(tokens)

        equals = [tok for tok in tokens if tok.text == "="]
        assert [tok.align_padding for tok in equals] == [2, 0]


class TestInlineCommentAlign:
    """inline_comment_align."""

    def test_trailing_comments_share_a_column(self):
        """Test line comments padded to the widest code line."""
        assert assert_stable(
            "SELECT a, -- first\n    longer_name -- second\nFROM t",
            inline_comment_align=True,
        ) == "SELECT a,       -- first\n    longer_name -- second\nFROM t"

    def test_statements_are_aligned_separately(self):
        """Test that alignment stops at a semicolon."""
        assert aligned(
            "SELECT a -- x\nFROM t; SELECT bbbbbb -- y\nFROM u", inline_comment_align=True
        ) == "SELECT a -- x\nFROM t;\n\nSELECT bbbbbb -- y\nFROM u"

    def test_own_line_comments_are_not_moved(self):
        """Test that comments on their own line keep their indent."""
        assert aligned(
            "SELECT a, -- first\n    bb -- second\n-- closing\nFROM t",
            inline_comment_align=True,
        ) == "SELECT a, -- first\n    bb    -- second\n-- closing\nFROM t"


class TestAlignPassCounters:
    """AlignPass bookkeeping."""

    def test_nothing_aligned_by_default(self):
        """Test that the default config pads nothing."""
        config = FormatterConfig()
        tokens = annotate_tokens(tokenize("SELECT a, b FROM users u JOIN orders o ON 1 = 1"))
        align = None
        for annotation_pass in build_passes(config):
            annotation_pass.run(tokens)
            if isinstance(annotation_pass, AlignPass):
                align = annotation_pass
        assert align is not None
        assert align.aligned == 0
        assert all(tok.align_padding == 0 for tok in tokens)
