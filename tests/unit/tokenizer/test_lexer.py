"""Tests for the SQL lexer."""

import pytest

from sqlpolish.tokenizer import KeywordCategory, Lexer, TokenKind, tokenize


def kinds(source):
    return [token.kind for token in tokenize(source)]


def texts(source):
    return [token.text for token in tokenize(source)]


class TestBasicTokens:
    """Keywords, identifiers, punctuation and operators."""

    def test_select_star_from(self):
        tokens = tokenize("SELECT * FROM Users")

        assert [(t.kind, t.text) for t in tokens] == [
            (TokenKind.KEYWORD, "SELECT"),
            (TokenKind.STAR, "*"),
            (TokenKind.KEYWORD, "FROM"),
            (TokenKind.IDENTIFIER, "Users"),
        ]

    def test_empty_and_whitespace_input(self):
        assert tokenize("") == []
        assert tokenize("   \n\t ") == []

    def test_keywords_are_case_insensitive_and_categorized(self):
        tokens = tokenize("select count(x) from t")

        assert tokens[0].kind == TokenKind.KEYWORD
        assert tokens[0].category == KeywordCategory.STATEMENT
        assert tokens[1].kind == TokenKind.KEYWORD
        assert tokens[1].category == KeywordCategory.FUNCTION
        assert tokens[1].text == "count"

    def test_punctuation(self):
        assert kinds("( ) , . ;") == [
            TokenKind.PAREN_OPEN,
            TokenKind.PAREN_CLOSE,
            TokenKind.COMMA,
            TokenKind.DOT,
            TokenKind.SEMICOLON,
        ]

    @pytest.mark.parametrize("operator", ["<=", ">=", "<>", "!=", "::", "||", "+="])
    def test_multi_char_operators_are_single_tokens(self, operator):
        tokens = tokenize(f"a {operator} b")

        assert tokens[1].kind == TokenKind.OPERATOR
        assert tokens[1].text == operator
        assert len(tokens) == 3

    def test_single_char_operators(self):
        assert texts("a+b/c%d") == ["a", "+", "b", "/", "c", "%", "d"]
        assert all(kind == TokenKind.OPERATOR for kind in kinds("+ / % = < > & | ^ ~"))

    def test_star_is_never_an_operator(self):
        tokens = tokenize("a * b")

        assert tokens[1].kind == TokenKind.STAR


class TestLiterals:
    """Strings, bracket identifiers and numbers."""

    def test_escaped_quote_stays_in_string(self):
        tokens = tokenize("SELECT 'it''s a test'")

        assert len(tokens) == 2
        assert tokens[1].kind == TokenKind.STRING
        assert tokens[1].text == "'it''s a test'"

    def test_unicode_prefix_folds_into_string(self):
        tokens = tokenize("SELECT N'abc'")

        assert tokens[1].kind == TokenKind.STRING
        assert tokens[1].text == "N'abc'"

    def test_unterminated_string_degrades_to_identifier(self):
        tokens = tokenize("SELECT 'abc")

        assert tokens[1].kind == TokenKind.IDENTIFIER
        assert tokens[1].text == "'abc"

    def test_bracket_identifier_may_contain_spaces(self):
        tokens = tokenize("SELECT [Order Details].[Unit Price]")

        assert tokens[1].kind == TokenKind.BRACKET_IDENTIFIER
        assert tokens[1].text == "[Order Details]"
        assert tokens[2].kind == TokenKind.DOT
        assert tokens[3].text == "[Unit Price]"

    def test_unterminated_bracket_degrades_to_identifier(self):
        tokens = tokenize("SELECT [TableName")

        assert [(t.kind, t.text) for t in tokens] == [
            (TokenKind.KEYWORD, "SELECT"),
            (TokenKind.IDENTIFIER, "[TableName"),
        ]

    def test_double_quoted_identifier(self):
        tokens = tokenize('SELECT "my col" FROM t')

        assert tokens[1].kind == TokenKind.BRACKET_IDENTIFIER
        assert tokens[1].text == '"my col"'

    def test_decimal_number(self):
        tokens = tokenize("SELECT 3.14")

        assert tokens[1].kind == TokenKind.NUMBER
        assert tokens[1].text == "3.14"

    def test_leading_minus_folds_into_number(self):
        tokens = tokenize("SELECT -42")

        assert [(t.kind, t.text) for t in tokens] == [
            (TokenKind.KEYWORD, "SELECT"),
            (TokenKind.NUMBER, "-42"),
        ]

    @pytest.mark.parametrize(
        "source, folded",
        [
            ("x = -1", "-1"),
            ("(-1)", "-1"),
            ("1, -2", "-2"),
            ("THEN -3", "-3"),
            ("SELECT 1; -4", "-4"),
            ("-5", "-5"),
        ],
    )
    def test_minus_folds_in_sign_position(self, source, folded):
        assert folded in texts(source)

    @pytest.mark.parametrize(
        "source, expected",
        [
            ("a-1", ["a", "-", "1"]),
            ("5-3", ["5", "-", "3"]),
            ("(b)-2", ["(", "b", ")", "-", "2"]),
            ("@n-1", ["@n", "-", "1"]),
        ],
    )
    def test_minus_after_operand_is_subtraction(self, source, expected):
        tokens = tokenize(source)

        assert [t.text for t in tokens] == expected
        assert tokens[expected.index("-")].kind == TokenKind.OPERATOR

    def test_comment_does_not_change_sign_context(self):
        assert texts("a /* c */ -1") == ["a", "/* c */", "-", "1"]

    def test_non_ascii_digit_is_not_a_number(self):
        tokens = tokenize("SELECT ²")

        assert [(t.kind, t.text) for t in tokens] == [
            (TokenKind.KEYWORD, "SELECT"),
            (TokenKind.IDENTIFIER, "²"),
        ]

    def test_hex_and_exponent_numbers(self):
        assert texts("0x1F 1e10 2.5E-3") == ["0x1F", "1e10", "2.5E-3"]
        assert kinds("0x1F 1e10") == [TokenKind.NUMBER, TokenKind.NUMBER]


class TestCommentsAndMarkers:
    """Comments, variables, temp tables and batch separators."""

    def test_line_comment_runs_to_end_of_line(self):
        tokens = tokenize("SELECT 1 -- trailing note\nFROM t")

        assert tokens[2].kind == TokenKind.LINE_COMMENT
        assert tokens[2].text == "-- trailing note"
        assert tokens[3].text == "FROM"

    def test_line_comment_excludes_carriage_return(self):
        tokens = tokenize("-- note\r\nSELECT 1")

        assert tokens[0].text == "-- note"
        assert tokens[1].line == 2

    def test_block_comment_spans_lines(self):
        tokens = tokenize("/* one\ntwo */ SELECT 1")

        assert tokens[0].kind == TokenKind.BLOCK_COMMENT
        assert tokens[0].text == "/* one\ntwo */"
        assert tokens[1].line == 2

    def test_nested_block_comment(self):
        tokens = tokenize("/* a /* b */ c */ SELECT")

        assert tokens[0].text == "/* a /* b */ c */"
        assert tokens[1].kind == TokenKind.KEYWORD

    def test_unterminated_block_comment_takes_rest(self):
        tokens = tokenize("SELECT 1 /* never closed\nFROM t")

        assert tokens[-1].kind == TokenKind.BLOCK_COMMENT
        assert tokens[-1].text == "/* never closed\nFROM t"

    def test_variables(self):
        tokens = tokenize("SELECT @id, @@ROWCOUNT, @")

        assert tokens[1].kind == TokenKind.VARIABLE
        assert tokens[1].text == "@id"
        assert tokens[3].kind == TokenKind.GLOBAL_VARIABLE
        assert tokens[3].text == "@@ROWCOUNT"
        assert tokens[5].kind == TokenKind.AT_SIGN

    def test_temp_tables(self):
        tokens = tokenize("SELECT * FROM #tmp JOIN ##global")

        assert tokens[3].kind == TokenKind.IDENTIFIER
        assert tokens[3].text == "#tmp"
        assert tokens[3].is_temp_table
        assert tokens[5].text == "##global"
        assert tokens[5].is_temp_table

    def test_lone_hash(self):
        assert kinds("# ") == [TokenKind.HASH]

    def test_go_is_batch_separator(self):
        tokens = tokenize("SELECT 1;\nGO\nSELECT 2")

        assert [t.kind for t in tokens] == [
            TokenKind.KEYWORD,
            TokenKind.NUMBER,
            TokenKind.SEMICOLON,
            TokenKind.BATCH_SEPARATOR,
            TokenKind.KEYWORD,
            TokenKind.NUMBER,
        ]
        separator = tokens[3]
        assert (separator.line, separator.col) == (2, 1)
        assert tokens[4].line == 3

    def test_go_is_case_insensitive(self):
        assert kinds("go") == [TokenKind.BATCH_SEPARATOR]

    @pytest.mark.parametrize(
        "source",
        ["GO 5\nSELECT 1", "GO -- next batch", "  GO /* x */", "GO\r\nSELECT 1"],
    )
    def test_go_with_count_or_comment_is_separator(self, source):
        assert kinds(source)[0] == TokenKind.BATCH_SEPARATOR

    @pytest.mark.parametrize(
        "source, index",
        [
            ("SELECT t.go, go FROM t", 3),
            ("SELECT t.go, go FROM t", 5),
            ("SELECT 1; GO SELECT 2", 3),
            ("go.col", 0),
            ("GO 5 SELECT 1", 0),
        ],
    )
    def test_go_inside_a_line_is_identifier(self, source, index):
        tokens = tokenize(source)

        assert tokens[index].upper == "GO"
        assert tokens[index].kind == TokenKind.IDENTIFIER


class TestPositions:
    """Line and column tracking."""

    def test_one_based_positions(self):
        tokens = tokenize("SELECT a\n  FROM t")

        assert [(t.line, t.col) for t in tokens] == [(1, 1), (1, 8), (2, 3), (2, 8)]

    def test_crlf_counts_as_one_line_break(self):
        tokens = tokenize("SELECT a\r\nFROM t\r\nWHERE x")

        assert [t.line for t in tokens] == [1, 1, 2, 2, 3, 3]

    def test_end_line_of_multiline_token(self):
        token = tokenize("/* a\nb\nc */")[0]

        assert token.line == 1
        assert token.end_line == 3

    def test_tokens_are_ordered(self):
        tokens = tokenize("SELECT a, b\nFROM t WHERE x = 1")
        positions = [(t.line, t.col) for t in tokens]

        assert positions == sorted(positions)


class TestFallback:
    """The lexer never raises and never drops text."""

    @pytest.mark.parametrize(
        "source",
        [
            "SELECT (a, 'unterminated FROM [t",
            "))) ((( ,,, ;;;",
            "SELECT été FROM café",
            "`weird` $ \\ ?",
            "/*",
            "'",
            "[",
            "SELECT ² ٣ 1٣",
        ],
    )
    def test_non_whitespace_text_is_preserved(self, source):
        joined = "".join(token.text for token in tokenize(source))

        assert "".join(joined.split()) == "".join(source.split())

    def test_unknown_character_becomes_identifier(self):
        tokens = tokenize("a ? b")

        assert tokens[1].kind == TokenKind.IDENTIFIER
        assert tokens[1].text == "?"

    def test_lexer_class_matches_function(self):
        source = "SELECT a FROM t"

        assert Lexer(source).tokenize() == tokenize(source)
