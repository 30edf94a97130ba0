"""
Deterministic Parsing Functions (no LLM).

This module contains the regex/string-based helpers used by the menu parser
and the order matcher: price extraction, header detection, item name
cleanup, quantity extraction and utterance splitting.
"""

import re
import logging
import unicodedata

from .constants import WORD_TO_NUM, TYPO_MAP

logger = logging.getLogger(__name__)


# =============================================================================
# Compiled Regex Patterns (internal use)
# =============================================================================

# An amount with optional thousands separators: "8500", "18,000", "21.900"
AMOUNT = r"\d{1,3}(?:[.,]\d{3})+|\d+"

# Any "$price" token, used to scan whole menus for prices
PRICE_TOKEN_PATTERN = re.compile(rf"\$\s?({AMOUNT})")

# Line format 1: "name - $price" (also "name - - $price" from pasted menus)
DASH_PRICE_PATTERN = re.compile(rf"^(.+?)\s*-\s*\$\s?({AMOUNT})")

# Line format 2: "name $price"
SPACE_PRICE_PATTERN = re.compile(rf"^(.+?)\s+\$\s?({AMOUNT})")

# Line format 3: bare trailing "$price"
TRAILING_PRICE_PATTERN = re.compile(rf"\$\s?({AMOUNT})\s*$")

# Admin log dumps prefix each product with "Producto 64:"
PRODUCT_LABEL_PATTERN = re.compile(r"^producto\s+\d+\s*:\s*", re.IGNORECASE)

# Separators between items of one order: commas, "y", "and", "+", newlines
FRAGMENT_SEPARATOR_PATTERN = re.compile(
    r"\s*(?:,|;|\+|\n|\s(?:y|e|and|mas|tambien)\s)\s*"
)

_NUMBER_WORDS = sorted(WORD_TO_NUM, key=len, reverse=True)
_NUMBER_WORDS_ALT = "|".join(re.escape(w) for w in _NUMBER_WORDS)

# Quantity at the start of a fragment: "2 cafes", "dos cafes", "una docena de"
LEADING_QUANTITY_PATTERN = re.compile(rf"^(?:(-?\d+)|({_NUMBER_WORDS_ALT}))\s+")

# Quantity at the end of the text preceding a matched item name
TRAILING_QUANTITY_PATTERN = re.compile(rf"(?:^|\s)(?:(-?\d+)|({_NUMBER_WORDS_ALT}))\s*$")

# Markdown-style emphasis used for section titles: "*BEBIDAS*", "_Postres_"
EMPHASIS_HEADER_PATTERN = re.compile(r"^([*_]{1,2})(.+?)\1$")

MAX_CAPS_HEADER_LENGTH = 40


# =============================================================================
# Prices and Item Names
# =============================================================================

def parse_amount(raw: str) -> int:
    """Convert an amount token to integer currency units ("21.900" -> 21900)."""
    digits = re.sub(r"[^\d]", "", raw or "")
    if not digits:
        return 0
    return int(digits)


def _is_symbol(ch: str) -> bool:
    """True for emoji and pictographs (Unicode category So/Sk) and variation selectors."""
    return unicodedata.category(ch) in ("So", "Sk") or ch in ("\ufe0f", "\u200d")


def strip_leading_markers(text: str) -> str:
    """Remove bullets, dashes, check marks and emoji before the first word."""
    i = 0
    while i < len(text) and not text[i].isalnum():
        i += 1
    return text[i:]


def clean_item_name(raw: str) -> str:
    """
    Clean the name part of a price line.

    "✅ Producto 67: • Crepes de Nutella -" -> "Crepes de Nutella"
    """
    name = strip_leading_markers(raw.strip())
    name = PRODUCT_LABEL_PATTERN.sub("", name)
    name = strip_leading_markers(name)
    name = re.sub(r"[\s\-–—:.·•|*_]+$", "", name)
    return re.sub(r"\s+", " ", name).strip()


def extract_price_line(line: str) -> tuple[str, int, str] | None:
    """
    Try the price line formats in priority order.

    Returns:
        (name, price, format) for the first format that matches, or None.
        The name is cleaned but not validated; callers drop short names
        and non-positive prices.
    """
    match = DASH_PRICE_PATTERN.match(line)
    if match:
        return clean_item_name(match.group(1)), parse_amount(match.group(2)), "dash"

    match = SPACE_PRICE_PATTERN.match(line)
    if match:
        return clean_item_name(match.group(1)), parse_amount(match.group(2)), "space"

    match = TRAILING_PRICE_PATTERN.search(line)
    if match and len(line) > 10:
        name = line[:match.start()]
        return clean_item_name(name), parse_amount(match.group(1)), "trailing"

    return None


# =============================================================================
# Header Detection
# =============================================================================

def parse_section_header(line: str) -> str | None:
    """
    Return the section title if the line is a section header.

    Headers are lines without a price that are wrapped in emphasis markers,
    start with an emoji, or are short and all caps. Decorative lines
    ("━━━━━") return an empty string: a header with no title.
    """
    if "$" in line:
        return None

    match = EMPHASIS_HEADER_PATTERN.match(line)
    if match:
        return match.group(2).strip(" *_")

    if _is_symbol(line[0]):
        return strip_leading_markers(line).strip().rstrip(":").strip()

    letters = [c for c in line if c.isalpha()]
    if (
        len(line) <= MAX_CAPS_HEADER_LENGTH
        and len(letters) >= 3
        and all(c.isupper() for c in letters)
    ):
        return strip_leading_markers(line).rstrip(":").strip()

    return None


def parse_category_line(line: str) -> str | None:
    """Return the category name for "Bebidas Frías:" style lines (colon, no price)."""
    if ":" not in line or "$" in line:
        return None
    return strip_leading_markers(line).replace(":", "", 1).strip()


# =============================================================================
# Utterance Helpers
# =============================================================================

def _word_to_quantity(number: str | None, word: str | None) -> int | None:
    if number is not None:
        return int(number)
    if word is not None:
        return WORD_TO_NUM.get(word)
    return None


def extract_leading_quantity(fragment: str) -> tuple[int | None, str]:
    """
    Split a leading quantity off an order fragment.

    "2 flan de caramelo" -> (2, "flan de caramelo")
    "dos cafes" -> (2, "cafes")
    "flan" -> (None, "flan")
    """
    match = LEADING_QUANTITY_PATTERN.match(fragment)
    if not match:
        return None, fragment
    return _word_to_quantity(match.group(1), match.group(2)), fragment[match.end():]


def extract_trailing_quantity(prefix: str) -> int | None:
    """Quantity written right before an item mention ("quiero 2 " -> 2)."""
    match = TRAILING_QUANTITY_PATTERN.search(prefix)
    if not match:
        return None
    return _word_to_quantity(match.group(1), match.group(2))


def apply_typo_corrections(text: str) -> str:
    """
    Replace known misspellings word by word.

    Handles plurals of table entries: "capuchinos" -> "cappuccinos".
    """
    corrected = []
    for word in text.split(" "):
        core = word.rstrip(",")
        suffix = word[len(core):]
        if core in TYPO_MAP:
            core = TYPO_MAP[core]
        elif core.endswith("s") and core[:-1] in TYPO_MAP:
            core = TYPO_MAP[core[:-1]] + "s"
        corrected.append(core + suffix)
    return " ".join(corrected)


def split_order_fragments(text: str) -> list[tuple[int, str]]:
    """
    Split an utterance into item fragments.

    Returns:
        List of (start_offset, fragment) so callers can keep mention order.
    """
    fragments = []
    pos = 0
    for match in FRAGMENT_SEPARATOR_PATTERN.finditer(text):
        if match.start() > pos:
            fragments.append((pos, text[pos:match.start()]))
        pos = match.end()
    if pos < len(text):
        fragments.append((pos, text[pos:]))
    return [
        (start + len(frag) - len(frag.lstrip()), frag.strip())
        for start, frag in fragments
        if frag.strip()
    ]
