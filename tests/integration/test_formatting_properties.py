"""Whole-pipeline properties checked over a corpus of statements and presets."""

import pytest

from sqlpolish.formatter.config import FormatterConfig
from sqlpolish.formatter.engine import FormatterEngine
from sqlpolish.formatter.presets import list_presets, load_preset
from sqlpolish.tokenizer import TokenKind

CORPUS = {
    "simple_select": "select a,b from t",
    "join": (
        "SELECT u.id, o.total FROM users u INNER JOIN orders o ON u.id = o.user_id "
        "LEFT JOIN payments p ON p.order_id = o.id WHERE u.active = 1 AND o.total > 10"
    ),
    "cte": (
        "WITH cte1 AS (SELECT * FROM t1), cte2 AS (SELECT * FROM t2) "
        "SELECT * FROM cte1 JOIN cte2 ON cte1.id = cte2.id"
    ),
    "case_subquery": "SELECT CASE WHEN (SELECT 1) > 0 THEN 1 ELSE 0 END AS flag FROM t",
    "merge": (
        "MERGE INTO target t USING source s ON t.id = s.id "
        "WHEN MATCHED THEN UPDATE SET t.x = s.x "
        "WHEN NOT MATCHED THEN INSERT (id, x) VALUES (s.id, s.x);"
    ),
    "insert_select": "insert dbo.archive (a, b) select a, b from dbo.live where a in (1, 2, 3)",
    "delete": "delete orders where created < '2020-01-01'",
    "update": "UPDATE t SET a = a * 2, b = -1 WHERE id BETWEEN 1 AND 10",
    "create_table": (
        "CREATE TABLE #tmp (id INT PRIMARY KEY, name NVARCHAR(50) NOT NULL, "
        "amount DECIMAL(10, 2))"
    ),
    "procedure": (
        "CREATE PROCEDURE p @id INT AS BEGIN SET NOCOUNT ON; "
        "SELECT @x = COUNT(*) FROM t WHERE id = @id; END"
    ),
    "batches": "select 1;\ngo\nselect 2\nGO 3\nselect [Order Details].[Unit Price] from [Order Details]",
    "window": (
        "SELECT ROW_NUMBER() OVER (PARTITION BY a ORDER BY b DESC) rn, "
        "SUM(x) OVER (ORDER BY b) AS running FROM t GROUP BY a, b ORDER BY a"
    ),
    "comments": "-- header\nSELECT a, -- first\n    b /* second */\nFROM t\n/* footer */",
    "comment_before_operator": "SELECT a -- note\n+ b FROM t",
    "comment_in_lists": "SELECT a /* x */\n, b FROM t WHERE x IN (1, /* z */\n2)",
    "go_column": "SELECT t.go, go FROM t",
    "subtraction": "SELECT a-1, (b)-2 FROM t WHERE y = -1",
    "union": "SELECT a FROM t UNION ALL SELECT a FROM u ORDER BY a",
    "broken": "SELECT (a, 'unterminated FROM [t",
    "unbalanced": "SELECT a) FROM (t WHERE ((x",
}

PRESETS = list_presets()

# Option combinations not covered by a built-in preset
CONFIGS = {
    "dropped_comments": FormatterConfig(preserve_comments=False),
    "dropped_comments_leading": FormatterConfig(
        preserve_comments=False, comma_position="leading"
    ),
    "aligned": FormatterConfig(
        select_column_align="keyword",
        from_alias_align=True,
        update_set_align=True,
        inline_comment_align=True,
    ),
    "comments_above": FormatterConfig(
        comment_position="above",
        blank_line_before_comment=True,
        block_comment_style="reformat",
    ),
    "comments_inline": FormatterConfig(comment_position="inline"),
}


def squash(text):
    return "".join(text.split()).upper()


class TestIdempotence:
    """Formatting formatted output changes nothing."""

    @pytest.mark.parametrize("preset", PRESETS)
    @pytest.mark.parametrize("name", sorted(CORPUS))
    def test_format_is_idempotent(self, preset, name):
        """Test format(format(x)) == format(x) for every preset."""
        engine = FormatterEngine(load_preset(preset))
        once = engine.format(CORPUS[name])
        assert engine.format(once) == once

    @pytest.mark.parametrize("config", sorted(CONFIGS))
    @pytest.mark.parametrize("name", sorted(CORPUS))
    def test_option_combinations_are_idempotent(self, config, name):
        """Test format(format(x)) == format(x) for extra option sets."""
        engine = FormatterEngine(CONFIGS[config])
        once = engine.format(CORPUS[name])
        assert engine.format(once) == once


class TestLossless:
    """Without transforms only whitespace and case change."""

    @pytest.mark.parametrize("name", sorted(CORPUS))
    def test_text_is_preserved(self, name):
        """Test that non-whitespace content survives."""
        engine = FormatterEngine(load_preset("default"))
        assert squash(engine.format(CORPUS[name])) == squash(CORPUS[name])

    @pytest.mark.parametrize("name", sorted(CORPUS))
    def test_no_trailing_whitespace(self, name):
        """Test that no output line ends in whitespace."""
        output = FormatterEngine(load_preset("compact")).format(CORPUS[name])
        assert all(line == line.rstrip() for line in output.splitlines())


class TestAnnotationInvariants:
    """Depth and frame bookkeeping over the corpus."""

    def setup_method(self):
        self.engine = FormatterEngine(load_preset("default"))

    @pytest.mark.parametrize("name", sorted(CORPUS))
    def test_depth_never_negative(self, name):
        """Test paren depth on every token."""
        tokens = self.engine.annotate(CORPUS[name])
        assert all(tok.paren_depth >= 0 for tok in tokens)
        assert all(tok.indent_level >= 0 for tok in tokens)

    @pytest.mark.parametrize("name", sorted(CORPUS))
    def test_partners_are_symmetric(self, name):
        """Test that matched parentheses point at each other at one depth."""
        tokens = self.engine.annotate(CORPUS[name])
        for index, tok in enumerate(tokens):
            if tok.partner is None:
                continue
            partner = tokens[tok.partner]
            assert partner.partner == index
            assert partner.paren_depth == tok.paren_depth
            assert {tok.kind, partner.kind} == {TokenKind.PAREN_OPEN, TokenKind.PAREN_CLOSE}

    @pytest.mark.parametrize("name", [n for n in sorted(CORPUS) if n not in ("broken", "unbalanced")])
    def test_frames_close_with_their_kind(self, name):
        """Test that a closing paren reports the frame its opener pushed."""
        tokens = self.engine.annotate(CORPUS[name])
        for tok in tokens:
            if tok.kind == TokenKind.PAREN_OPEN and tok.frame_kind is not None:
                assert tokens[tok.partner].frame_kind == tok.frame_kind

    def test_clauses_recorded(self):
        """Test that every code token carries a clause once one started."""
        tokens = self.engine.annotate(CORPUS["join"])
        assert all(tok.current_clause is not None for tok in tokens)
