"""Formatter configuration.

``FormatterConfig`` is an immutable record of named style options. Every
option has a fixed domain (boolean, a small set of choices or a bounded
integer) and the record is validated when it is constructed, which is the
only fail-fast point of the formatter.
"""

import dataclasses
import json
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Tuple, Union

from sqlpolish.exceptions import FormatterConfigError

CASE_CHOICES = ("upper", "lower", "preserve")
LAYOUT_CHOICES = ("stacked", "inline")

# name -> bool, tuple of allowed strings, or inclusive (min, max) int range
Domain = Union[type, Tuple[str, ...], Tuple[int, int]]

OPTION_DOMAINS: Dict[str, Domain] = {
    # General
    "keyword_case": CASE_CHOICES,
    "preserve_comments": bool,
    "max_line_length": (0, 1000),
    # Indentation
    "indent_size": (1, 16),
    "indent_style": ("space", "tab"),
    "subquery_indent": (0, 8),
    "case_indent": (0, 8),
    # Clause layout
    "newline_before_clause": bool,
    "select_list_style": LAYOUT_CHOICES,
    "select_into_newline": bool,
    "comma_position": ("trailing", "leading"),
    "from_table_style": LAYOUT_CHOICES,
    "where_condition_style": LAYOUT_CHOICES,
    "and_or_position": ("leading", "trailing"),
    "join_on_same_line": bool,
    "on_condition_style": LAYOUT_CHOICES,
    "group_by_style": LAYOUT_CHOICES,
    "order_by_style": LAYOUT_CHOICES,
    "cte_style": ("expanded", "compact"),
    "cte_separator_newline": bool,
    "insert_values_style": LAYOUT_CHOICES,
    "update_set_style": LAYOUT_CHOICES,
    "case_style": LAYOUT_CHOICES,
    "in_list_style": LAYOUT_CHOICES,
    "create_table_column_newline": bool,
    # Casing
    "function_case": CASE_CHOICES,
    "datatype_case": CASE_CHOICES,
    "identifier_case": CASE_CHOICES,
    "alias_case": CASE_CHOICES,
    # Spacing
    "operator_spacing": bool,
    "equals_spacing": bool,
    "comparison_spacing": bool,
    "concatenation_spacing": bool,
    "parenthesis_spacing": bool,
    "comma_spacing": ("after", "before", "both", "none"),
    "semicolon_spacing": bool,
    "bracket_spacing": bool,
    # Blank lines
    "blank_line_before_clause": bool,
    "blank_line_between_statements": (0, 5),
    "blank_line_after_go": (0, 5),
    "max_consecutive_blank_lines": (0, 10),
    # Transforms
    "use_as_keyword": bool,
    "insert_into_keyword": bool,
    "delete_from_keyword": bool,
    "join_keyword_style": ("preserve", "full", "short"),
    "from_schema_qualify": ("preserve", "never"),
    # Alignment
    "select_column_align": ("left", "keyword"),
    "from_alias_align": bool,
    "update_set_align": bool,
    "inline_comment_align": bool,
    # Comments
    "comment_position": ("preserve", "above", "inline"),
    "blank_line_before_comment": bool,
    "block_comment_style": ("preserve", "reformat"),
}


def describe_domain(domain: Domain) -> str:
    """Human readable description of an option domain."""
    if domain is bool:
        return "true, false"
    if isinstance(domain[0], int):
        return f"integer {domain[0]}..{domain[1]}"
    return ", ".join(domain)


def _check_value(name: str, value: Any) -> None:
    domain = OPTION_DOMAINS[name]
    if domain is bool:
        valid = isinstance(value, bool)
    elif isinstance(domain[0], int):
        valid = (
            isinstance(value, int)
            and not isinstance(value, bool)
            and domain[0] <= value <= domain[1]
        )
    else:
        valid = isinstance(value, str) and value in domain

    if not valid:
        raise FormatterConfigError(name, value, describe_domain(domain))


@dataclass(frozen=True)
class FormatterConfig:
    """Immutable formatter options.

    Construct it once, then pass it to any number of format calls. Unknown
    or out-of-domain values raise ``FormatterConfigError`` immediately.
    """

    # General
    keyword_case: str = "upper"
    preserve_comments: bool = True
    max_line_length: int = 120

    # Indentation
    indent_size: int = 4
    indent_style: str = "space"
    subquery_indent: int = 1
    case_indent: int = 1

    # Clause layout
    newline_before_clause: bool = True
    select_list_style: str = "stacked"
    select_into_newline: bool = True
    comma_position: str = "trailing"
    from_table_style: str = "stacked"
    where_condition_style: str = "stacked"
    and_or_position: str = "leading"
    join_on_same_line: bool = False
    on_condition_style: str = "inline"
    group_by_style: str = "inline"
    order_by_style: str = "inline"
    cte_style: str = "expanded"
    cte_separator_newline: bool = False
    insert_values_style: str = "stacked"
    update_set_style: str = "stacked"
    case_style: str = "stacked"
    in_list_style: str = "inline"
    create_table_column_newline: bool = True

    # Casing
    function_case: str = "upper"
    datatype_case: str = "upper"
    identifier_case: str = "preserve"
    alias_case: str = "preserve"

    # Spacing
    operator_spacing: bool = True
    equals_spacing: bool = True
    comparison_spacing: bool = True
    concatenation_spacing: bool = True
    parenthesis_spacing: bool = False
    comma_spacing: str = "after"
    semicolon_spacing: bool = False
    bracket_spacing: bool = False

    # Blank lines
    blank_line_before_clause: bool = False
    blank_line_between_statements: int = 1
    blank_line_after_go: int = 1
    max_consecutive_blank_lines: int = 2

    # Transforms
    use_as_keyword: bool = False
    insert_into_keyword: bool = False
    delete_from_keyword: bool = False
    join_keyword_style: str = "preserve"
    from_schema_qualify: str = "preserve"

    # Alignment
    select_column_align: str = "left"
    from_alias_align: bool = False
    update_set_align: bool = False
    inline_comment_align: bool = False

    # Comments
    comment_position: str = "preserve"
    blank_line_before_comment: bool = False
    block_comment_style: str = "preserve"

    def __post_init__(self) -> None:
        for field in fields(self):
            _check_value(field.name, getattr(self, field.name))

    @classmethod
    def from_dict(cls, options: Dict[str, Any]) -> "FormatterConfig":
        """Create a config from a mapping of option names to values.

        Args:
            options: Option overrides; missing options keep their defaults

        Returns:
            Validated FormatterConfig

        Raises:
            FormatterConfigError: If an option is unknown or out of domain
        """
        for name in options:
            if name not in OPTION_DOMAINS:
                raise FormatterConfigError(name, known_options=OPTION_DOMAINS)
        return cls(**options)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def serialize(self) -> str:
        """Canonical JSON form, stable across runs and used for cache keys."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    def replace(self, **changes: Any) -> "FormatterConfig":
        """Return a copy with some options changed, validated again."""
        for name in changes:
            if name not in OPTION_DOMAINS:
                raise FormatterConfigError(name, known_options=OPTION_DOMAINS)
        return dataclasses.replace(self, **changes)

    @property
    def indent_unit(self) -> str:
        """Text of one indentation level."""
        if self.indent_style == "tab":
            return "\t"
        return " " * self.indent_size


DEFAULT_CONFIG = FormatterConfig()
