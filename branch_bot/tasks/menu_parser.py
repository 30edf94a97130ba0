"""
Menu Parser for Branch Menu Text.

This module turns the unstructured menu text a branch pastes (or extracts
from a PDF) into a flat list of priced MenuItem records.

Two strategies exist:

- StandardLineStrategy: scans line by line, tracking the current section and
  category from header lines, and extracts "name - $price", "name $price"
  or trailing "$price" lines.
- PositionalComboStrategy: for wings menus that compress every combo price
  onto trailing lines, assigns the prices found in the text, in order, to a
  fixed table of combo definitions.

The positional strategy assumes the prices appear in exactly the order of
COMBO_DEFINITIONS. Nothing in the text ties a price to a combo, so a menu
that reorders or omits a combo is silently mispriced. It is isolated here so
it can be replaced once real menus show a better signal.
"""

import logging
import re

from .models import MenuItem, ParseReport
from .parsers.constants import (
    COMBO_DEFINITIONS,
    COMBO_MENU_EMOJIS,
    COMBO_MENU_KEYWORD,
)
from .parsers.deterministic import (
    PRICE_TOKEN_PATTERN,
    extract_price_line,
    parse_amount,
    parse_category_line,
    parse_section_header,
)

logger = logging.getLogger(__name__)

# Names must be longer than this to count as a product
MIN_NAME_LENGTH = 3


def _make_item(index: int, display_name: str, price: int, **fields) -> MenuItem:
    return MenuItem(
        id=f"prod_{index}",
        name=display_name.lower(),
        display_name=display_name,
        price=price,
        **fields,
    )


class StandardLineStrategy:
    """Line-by-line parser for bullet/price menus."""

    name = "standard"

    def parse(self, menu_text: str) -> ParseReport:
        items: list[MenuItem] = []
        dropped: list[str] = []
        current_section = ""
        current_category = ""

        for raw_line in menu_text.splitlines():
            line = raw_line.strip()
            if not line:
                continue

            section = parse_section_header(line)
            if section is not None:
                if section:
                    current_section = section
                    current_category = ""
                    logger.debug("Section: %s", section)
                else:
                    dropped.append(line)
                continue

            category = parse_category_line(line)
            if category is not None:
                current_category = category
                logger.debug("Category: %s", category)
                continue

            extracted = extract_price_line(line)
            if extracted is None:
                dropped.append(line)
                continue

            name, price, line_format = extracted
            if price <= 0 or len(name) <= MIN_NAME_LENGTH:
                logger.debug("Dropping %s line %r (name=%r, price=%d)", line_format, line, name, price)
                dropped.append(line)
                continue

            items.append(_make_item(
                len(items) + 1,
                name,
                price,
                category=current_category or current_section,
                section=current_section,
                description=line,
                raw_line=raw_line,
            ))

        return ParseReport(items=items, strategy="standard", dropped_lines=dropped)


class PositionalComboStrategy:
    """
    Assigns prices to COMBO_DEFINITIONS by position.

    Extra prices beyond the table are ignored; if fewer prices than combos
    are found, only the first combos are emitted.
    """

    name = "positional_combo"

    def __init__(self, combos: list[dict] | None = None):
        self.combos = combos if combos is not None else COMBO_DEFINITIONS

    def _find_prices(self, menu_text: str) -> list[tuple[int, str]]:
        prices = []
        for raw_line in menu_text.splitlines():
            for match in PRICE_TOKEN_PATTERN.finditer(raw_line):
                prices.append((parse_amount(match.group(1)), raw_line))
        return prices

    def parse(self, menu_text: str) -> ParseReport:
        prices = self._find_prices(menu_text)
        items: list[MenuItem] = []
        dropped: list[str] = []

        for combo, (price, raw_line) in zip(self.combos, prices):
            if price <= 0:
                dropped.append(raw_line.strip())
                continue
            items.append(_make_item(
                len(items) + 1,
                combo["name"],
                price,
                category="Combos",
                section="Combos",
                description=combo["description"].format(wings=combo["wings"]),
                raw_line=raw_line,
            ))

        if len(prices) != len(self.combos):
            logger.warning(
                "Combo menu has %d prices for %d combo definitions; positional assignment may be wrong",
                len(prices), len(self.combos),
            )
        dropped.extend(raw_line.strip() for _, raw_line in prices[len(self.combos):])

        return ParseReport(items=items, strategy="positional_combo", dropped_lines=dropped)


def is_compressed_combo_menu(menu_text: str) -> bool:
    """
    Detect a wings combo menu whose prices were compressed onto their own lines.

    Requires the word "combo", a wings emoji, and at least one line that
    holds two or more prices and no words.
    """
    lowered = menu_text.lower()
    if COMBO_MENU_KEYWORD not in lowered:
        return False
    if not any(emoji in menu_text for emoji in COMBO_MENU_EMOJIS):
        return False
    for line in menu_text.splitlines():
        if len(PRICE_TOKEN_PATTERN.findall(line)) >= 2 and not re.search(r"[^\W\d_]", line):
            return True
    return False


class MenuParser:
    """
    Parses branch menu text into MenuItem records.

    Pure: holds no state between calls. Strategies can be injected for
    testing or for branches with a known menu shape.
    """

    def __init__(
        self,
        standard: StandardLineStrategy | None = None,
        combo: PositionalComboStrategy | None = None,
    ):
        self.standard = standard or StandardLineStrategy()
        self.combo = combo or PositionalComboStrategy()

    def select_strategy(self, menu_text: str):
        if is_compressed_combo_menu(menu_text):
            return self.combo
        return self.standard

    def parse_with_report(self, menu_text: str | None) -> ParseReport:
        """Parse menu text, returning items plus the dropped noise lines."""
        if not menu_text or not menu_text.strip():
            return ParseReport()

        strategy = self.select_strategy(menu_text)
        report = strategy.parse(menu_text)
        logger.info(
            "Parsed %d menu items with %s strategy (%d lines dropped)",
            len(report.items), report.strategy, len(report.dropped_lines),
        )
        return report

    def parse(self, menu_text: str | None) -> list[MenuItem]:
        """Parse menu text into items. Empty or unrecognizable text gives []."""
        return self.parse_with_report(menu_text).items


def parse_menu(menu_text: str | None) -> list[MenuItem]:
    """Convenience wrapper around MenuParser().parse()."""
    return MenuParser().parse(menu_text)
