"""
Menu Lookup Engine for Order Utterances.

This module matches free-text customer messages ("quiero 2 capuchinos y un
croissant") against a parsed menu and turns each mention into an OrderLine.

Matching runs in two passes over the normalized utterance:

1. Full item names (longest first, any word may be plural), so "cafe
   americano" wins over "cafe" and a multi-word name containing "y" is not
   split apart. Quantities are then read in mention order from the text
   between one name and the next, and consumed with the name.
2. The text left over is split on commas and conjunctions, and each
   fragment is resolved with partial matching (substring, token
   containment, item name inside fragment, compact spelling).

Consumed text is never matched twice. Misspellings are only tolerated
through the curated TYPO_MAP; there is no edit-distance matching.
"""

import logging
import re
from dataclasses import dataclass

from ..config import MAX_ITEM_QUANTITY
from .models import MenuItem, OrderLine
from .parsers.constants import (
    CONNECTOR_WORDS,
    ORDER_FILLER_WORDS,
    normalize_for_match,
    normalize_text,
)
from .parsers.deterministic import (
    TRAILING_QUANTITY_PATTERN,
    apply_typo_corrections,
    extract_leading_quantity,
    split_order_fragments,
)

logger = logging.getLogger(__name__)

# Fragments this short are conversational noise ("ok", "si")
MIN_FRAGMENT_LENGTH = 4


def _stem(token: str) -> str:
    """Crude singular form: "crepes" -> "crepe", "alitas" -> "alita"."""
    if len(token) > 3 and token.endswith("s"):
        return token[:-1]
    return token


def _content_tokens(text: str) -> set[str]:
    return {_stem(t) for t in text.split() if t not in CONNECTOR_WORDS}


def _name_pattern(key: str) -> re.Pattern:
    """
    Whole-name pattern that tolerates a plural on any content word.

    "flan de caramelo" matches "flanes de caramelo"; "combo 2" stays exact.
    """
    parts = []
    for token in key.split(" "):
        if token.isalpha() and token not in CONNECTOR_WORDS:
            parts.append(re.escape(_stem(token)) + r"(?:e?s)?")
        else:
            parts.append(re.escape(token))
    return re.compile(r"(?<![a-z0-9])" + " ".join(parts) + r"(?![a-z0-9])")


@dataclass
class _IndexedItem:
    key: str  # normalized, typo-corrected name
    tokens: set[str]
    compact: str
    pattern: re.Pattern
    item: MenuItem


@dataclass
class _Mention:
    start: int
    item: MenuItem
    quantity: int | None


class ProductMatcher:
    """
    Matches order utterances against a list of MenuItem records.

    Stateless apart from the item index built at construction; build one
    per parsed menu (the menu cache keeps the parsed list per branch).
    """

    def __init__(self, menu_items: list[MenuItem], max_quantity: int = MAX_ITEM_QUANTITY):
        self.max_quantity = max_quantity
        self._index: list[_IndexedItem] = []

        seen_keys = set()
        for item in menu_items:
            key = apply_typo_corrections(normalize_text(item.name))
            if not key or key in seen_keys:
                continue
            seen_keys.add(key)
            self._index.append(_IndexedItem(
                key=key,
                tokens=_content_tokens(key),
                compact=normalize_for_match(key),
                pattern=_name_pattern(key),
                item=item,
            ))

        # Longest names first: most specific match wins
        self._index.sort(key=lambda entry: len(entry.key), reverse=True)

    # =========================================================================
    # Single Name Lookup
    # =========================================================================

    def lookup_menu_item(self, name: str) -> MenuItem | None:
        """
        Look up the best menu item for a product name or fragment.

        Passes, each preferring the longest item name:
            1. Exact name (singular/plural tolerant)
            2. Fragment is a word-prefix substring of the item name
            3. All content words of the fragment appear in the item name
            4. Item name appears inside the fragment
            5. Compact (space-free) containment either way

        Returns:
            The matched MenuItem, or None.
        """
        phrase = apply_typo_corrections(normalize_text(name)).replace(",", "")
        if len(phrase) < MIN_FRAGMENT_LENGTH:
            return None

        # Pass 1: exact
        for entry in self._index:
            if entry.key == phrase or _stem(entry.key) == _stem(phrase) or entry.pattern.fullmatch(phrase):
                return entry.item

        # Pass 2: fragment inside item name, starting at a word boundary
        pattern = re.compile(r"(?<![a-z0-9])" + re.escape(_stem(phrase)))
        for entry in self._index:
            if pattern.search(entry.key):
                return entry.item

        # Pass 3: every content word of the fragment is in the item name
        tokens = _content_tokens(phrase)
        if tokens:
            for entry in self._index:
                if tokens <= entry.tokens:
                    return entry.item

        # Pass 4: item name inside the fragment
        for entry in self._index:
            if len(entry.key) >= MIN_FRAGMENT_LENGTH and re.search(
                r"(?<![a-z0-9])" + re.escape(entry.key) + r"(?![a-z0-9])", phrase
            ):
                return entry.item

        # Pass 5: compact matching ("limonadacoco" style spacing errors)
        compact = normalize_for_match(phrase)
        for entry in self._index:
            if compact in entry.compact or (
                len(entry.compact) >= MIN_FRAGMENT_LENGTH and entry.compact in compact
            ):
                return entry.item

        return None

    # =========================================================================
    # Utterance Matching
    # =========================================================================

    def _clamp_quantity(self, quantity: int | None) -> int:
        if quantity is None or quantity < 1:
            return 1
        return min(quantity, self.max_quantity)

    def _match_full_names(self, text: str, consumed: list[bool]) -> list[_Mention]:
        # Claim non-overlapping name spans, longest names first
        spans = []
        for entry in self._index:
            for match in entry.pattern.finditer(text):
                if any(consumed[match.start():match.end()]):
                    continue
                for i in range(match.start(), match.end()):
                    consumed[i] = True
                spans.append((match.start(), match.end(), entry))
        spans.sort(key=lambda span: span[0])

        # A quantity is only read from the gap since the previous name, so a
        # number inside another item's name ("combo 2") is never reused
        mentions = []
        gap_start = 0
        for start, end, entry in spans:
            quantity = None
            mention_start = start
            qty_match = TRAILING_QUANTITY_PATTERN.search(text, gap_start, start)
            if qty_match:
                number, word = qty_match.group(1), qty_match.group(2)
                quantity, _ = extract_leading_quantity(f"{number or word} ")
                for i in range(qty_match.start(), qty_match.end()):
                    consumed[i] = True
                mention_start = qty_match.start()

            logger.debug("Full-name match %r -> %s (qty=%s)", text[start:end], entry.item.id, quantity)
            mentions.append(_Mention(start=mention_start, item=entry.item, quantity=quantity))
            gap_start = end
        return mentions

    def _match_fragments(self, text: str, consumed: list[bool]) -> list[_Mention]:
        remaining = "".join("," if used else ch for ch, used in zip(text, consumed))
        mentions = []
        for start, fragment in split_order_fragments(remaining):
            # Filler first: "y dos cafecitos" and "quiero 2 flanes" both lead with noise
            words = [w for w in fragment.split() if w not in ORDER_FILLER_WORDS]
            quantity, phrase = extract_leading_quantity(" ".join(words))
            if len(phrase) < MIN_FRAGMENT_LENGTH:
                continue
            item = self.lookup_menu_item(phrase)
            if item is None:
                logger.debug("No menu match for fragment %r", fragment)
                continue
            logger.debug("Partial match %r -> %s (qty=%s)", fragment, item.id, quantity)
            mentions.append(_Mention(start=start, item=item, quantity=quantity))
        return mentions

    def match(self, utterance: str) -> list[OrderLine]:
        """
        Extract (item, quantity) pairs from a customer message.

        Args:
            utterance: Raw customer text, e.g. "quiero Crepes de Nutella, 2 Flan de Caramelo"

        Returns:
            OrderLines in the order the items were mentioned. Unmatched text
            is ignored; an empty list means the caller should ask for
            clarification.
        """
        if not self._index:
            return []

        text = apply_typo_corrections(normalize_text(utterance))
        if not text:
            return []

        consumed = [False] * len(text)
        mentions = self._match_full_names(text, consumed)
        mentions.extend(self._match_fragments(text, consumed))
        mentions.sort(key=lambda m: m.start)

        lines = [
            OrderLine.from_item(m.item, self._clamp_quantity(m.quantity))
            for m in mentions
        ]
        logger.debug("Matched %d order lines from %r", len(lines), utterance)
        return lines


def match_order(utterance: str, menu_items: list[MenuItem]) -> list[OrderLine]:
    """Convenience wrapper around ProductMatcher(menu_items).match()."""
    return ProductMatcher(menu_items).match(utterance)
