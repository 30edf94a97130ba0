"""
Parsers Package.

This package contains the parsing helpers and constants used by the menu
parser, the order matcher and the recommendation engine.

Exports:
- Constants: number words, misspelling table, combo table, preference keywords
- Normalization: accent stripping and compact matching helpers
- Deterministic Parsers: regex-based price, header and quantity extraction
"""

from .constants import (
    # Normalization
    strip_accents,
    normalize_text,
    normalize_for_match,
    # Quantities and misspellings
    WORD_TO_NUM,
    TYPO_MAP,
    ORDER_FILLER_WORDS,
    CONNECTOR_WORDS,
    # Menu text
    COMBO_MENU_KEYWORD,
    COMBO_MENU_EMOJIS,
    COMBO_DEFINITIONS,
    # Recommendations
    BUDGET_OPTION_RANGES,
    DEFAULT_BUDGET_RANGE,
    OPEN_BUDGET_MAX,
    NO_RESTRICTION_ANSWERS,
    DIETARY_EXCLUSIONS,
    MEAL_TYPE_KEYWORDS,
    MEAL_TYPE_REASONS,
    ROMANTIC_KEYWORDS,
    WORK_MEETING_PRICE_CEILING,
)

from .deterministic import (
    # Compiled regex patterns
    PRICE_TOKEN_PATTERN,
    DASH_PRICE_PATTERN,
    SPACE_PRICE_PATTERN,
    TRAILING_PRICE_PATTERN,
    FRAGMENT_SEPARATOR_PATTERN,
    # Menu lines
    parse_amount,
    clean_item_name,
    extract_price_line,
    parse_section_header,
    parse_category_line,
    # Utterances
    extract_leading_quantity,
    extract_trailing_quantity,
    apply_typo_corrections,
    split_order_fragments,
)

__all__ = [
    "strip_accents",
    "normalize_text",
    "normalize_for_match",
    "WORD_TO_NUM",
    "TYPO_MAP",
    "ORDER_FILLER_WORDS",
    "CONNECTOR_WORDS",
    "COMBO_MENU_KEYWORD",
    "COMBO_MENU_EMOJIS",
    "COMBO_DEFINITIONS",
    "BUDGET_OPTION_RANGES",
    "DEFAULT_BUDGET_RANGE",
    "OPEN_BUDGET_MAX",
    "NO_RESTRICTION_ANSWERS",
    "DIETARY_EXCLUSIONS",
    "MEAL_TYPE_KEYWORDS",
    "MEAL_TYPE_REASONS",
    "ROMANTIC_KEYWORDS",
    "WORK_MEETING_PRICE_CEILING",
    "PRICE_TOKEN_PATTERN",
    "DASH_PRICE_PATTERN",
    "SPACE_PRICE_PATTERN",
    "TRAILING_PRICE_PATTERN",
    "FRAGMENT_SEPARATOR_PATTERN",
    "parse_amount",
    "clean_item_name",
    "extract_price_line",
    "parse_section_header",
    "parse_category_line",
    "extract_leading_quantity",
    "extract_trailing_quantity",
    "apply_typo_corrections",
    "split_order_fragments",
]
