"""
Tests for matching customer messages against a parsed menu.
"""
import pytest

from branch_bot.tasks.menu_lookup import ProductMatcher, match_order
from branch_bot.tasks.parsers import (
    apply_typo_corrections,
    extract_leading_quantity,
    normalize_text,
    split_order_fragments,
)


def _lines(lines):
    return [(line.display_name, line.quantity) for line in lines]


@pytest.fixture
def matcher(cafe_items):
    return ProductMatcher(cafe_items)


class TestNormalization:
    """Test the text helpers the matcher relies on."""

    def test_normalize_strips_accents_and_case(self):
        """Test lowercasing, accent stripping and punctuation removal."""
        assert normalize_text("¡Quiero 2 CAFÉS, por favor!") == "quiero 2 cafes, por favor"

    def test_normalize_keeps_minus_before_digits(self):
        """Test that "-3" keeps its sign while word hyphens become spaces."""
        assert normalize_text("Quiero -3 Coca-Cola") == "quiero -3 coca cola"
        assert normalize_text("15000-25000") == "15000 25000"

    def test_typo_corrections_handle_plurals(self):
        """Test that plural misspellings are corrected."""
        assert apply_typo_corrections("dos capuchinos y un croisant") == "dos cappuccinos y un croissant"

    def test_typo_corrections_whole_words_only(self):
        """Test that correct words containing a misspelling are untouched."""
        assert apply_typo_corrections("chocolate") == "chocolate"

    @pytest.mark.parametrize("fragment,expected", [
        ("2 flan de caramelo", (2, "flan de caramelo")),
        ("dos cafes", (2, "cafes")),
        ("una docena de croissants", (12, "croissants")),
        ("flan", (None, "flan")),
    ])
    def test_extract_leading_quantity(self, fragment, expected):
        """Test digit and number-word quantities."""
        assert extract_leading_quantity(fragment) == expected

    def test_split_fragments_keeps_offsets(self):
        """Test splitting on commas and conjunctions with start offsets."""
        text = "2 cafes, 1 croissant y una limonada"
        fragments = split_order_fragments(text)
        assert [f for _, f in fragments] == ["2 cafes", "1 croissant", "una limonada"]
        for start, fragment in fragments:
            assert text[start:start + len(fragment)] == fragment


class TestSingleLookup:
    """Test resolving one product name."""

    def test_exact_name(self, matcher):
        """Test exact, accent-insensitive lookup."""
        assert matcher.lookup_menu_item("cafe americano").display_name == "Café Americano"

    def test_plural_name(self, matcher):
        """Test singular/plural tolerance."""
        assert matcher.lookup_menu_item("croissants").display_name == "Croissant"

    def test_exact_name_beats_partial(self, matcher):
        """Test that an exact name wins over longer names containing it."""
        assert matcher.lookup_menu_item("cafe").display_name == "Café"

    def test_partial_name_prefers_longest(self, make_item):
        """Test that a fragment contained in several names picks the longest."""
        items = [make_item("Limonada", 4000), make_item("Limonada de coco", 6000)]
        assert ProductMatcher(items).lookup_menu_item("limon").display_name == "Limonada de coco"

    def test_partial_name(self, matcher):
        """Test a fragment found inside a single item name."""
        assert matcher.lookup_menu_item("nutella").display_name == "Crepes de Nutella"

    def test_misspelled_name(self, matcher):
        """Test lookup through the misspelling table."""
        assert matcher.lookup_menu_item("capuchino").display_name == "Cappuccino"

    def test_unknown_name(self, matcher):
        """Test that an unknown product returns None."""
        assert matcher.lookup_menu_item("hamburguesa doble") is None

    def test_short_fragment_ignored(self, matcher):
        """Test that very short fragments never match."""
        assert matcher.lookup_menu_item("ok") is None


class TestUtteranceMatching:
    """Test extracting order lines from whole messages."""

    def test_order_preservation(self, matcher):
        """Test that lines follow the order of mention."""
        lines = matcher.match("2 cafés, 1 croissant")
        assert _lines(lines) == [("Café", 2), ("Croissant", 1)]

    def test_order_preservation_reversed(self, matcher):
        """Test the same items mentioned in the opposite order."""
        lines = matcher.match("un croissant y 3 cafés")
        assert _lines(lines) == [("Croissant", 1), ("Café", 3)]

    def test_fuzzy_tolerance(self, matcher):
        """Test that a misspelled item still matches."""
        lines = matcher.match("quiero un capuchino")
        assert _lines(lines) == [("Cappuccino", 1)]

    def test_longest_name_wins(self, matcher):
        """Test that "café americano" is not matched as plain "café"."""
        lines = matcher.match("me regalas un café americano")
        assert _lines(lines) == [("Café Americano", 1)]

    def test_text_consumed_once(self, matcher):
        """Test that one mention never yields two lines."""
        lines = matcher.match("2 cafe americano y 1 cafe")
        assert _lines(lines) == [("Café Americano", 2), ("Café", 1)]

    def test_number_words(self, matcher):
        """Test Spanish number words as quantities."""
        lines = matcher.match("dos capuchinos y tres croissants")
        assert _lines(lines) == [("Cappuccino", 2), ("Croissant", 3)]

    def test_default_quantity(self, matcher):
        """Test quantity 1 when none is given."""
        lines = matcher.match("flan de caramelo")
        assert _lines(lines) == [("Flan de Caramelo", 1)]

    def test_partial_fragment(self, matcher):
        """Test a fragment that only partially names the item."""
        lines = matcher.match("2 nutella, una limonada")
        assert _lines(lines) == [("Crepes de Nutella", 2), ("Limonada de coco", 1)]

    def test_multi_word_name_with_conjunction_kept_whole(self, make_item):
        """Test that a name containing "y" is not split at the conjunction."""
        items = [make_item("Fresas con crema y helado", 9000), make_item("Helado", 4000)]
        lines = ProductMatcher(items).match("quiero fresas con crema y helado")
        assert _lines(lines) == [("Fresas con crema y helado", 1)]

    def test_quantity_clamped_to_maximum(self, matcher):
        """Test that absurd quantities are clamped."""
        lines = matcher.match("100 cappuccinos")
        assert lines[0].quantity == 50

    def test_zero_quantity_counts_as_one(self, matcher):
        """Test that a zero quantity is normalized to one."""
        lines = matcher.match("0 cappuccino")
        assert lines[0].quantity == 1

    def test_negative_quantity_counts_as_one(self, matcher):
        """Test that a minus sign is not dropped into a positive quantity."""
        lines = matcher.match("quiero -3 croissant")
        assert _lines(lines) == [("Croissant", 1)]

    def test_plural_on_first_word_of_name(self, matcher):
        """Test a plural on a word other than the last one."""
        lines = matcher.match("quiero 2 flanes de caramelo")
        assert _lines(lines) == [("Flan de Caramelo", 2)]

    def test_plural_first_word_with_number_word(self, matcher):
        """Test number words before a multi-word plural name."""
        lines = matcher.match("me das dos limonadas de coco")
        assert _lines(lines) == [("Limonada de coco", 2)]

    def test_plural_name_followed_by_second_item(self, matcher):
        """Test that the first item survives when another follows it."""
        lines = matcher.match("quiero 2 flanes de caramelo y un cafe")
        assert _lines(lines) == [("Flan de Caramelo", 2), ("Café", 1)]

    def test_quantity_after_conjunction_in_partial_fragment(self, make_item):
        """Test that "y" before the quantity does not hide it."""
        items = [make_item("Croissant", 4200), make_item("Café", 3000)]
        lines = ProductMatcher(items).match("un croissant y dos cafecitos")
        assert _lines(lines) == [("Croissant", 1), ("Café", 2)]

    def test_number_inside_name_not_reused_as_quantity(self, make_item):
        """Test that the "2" of "combo 2" is not the next item's quantity."""
        items = [make_item("Combo 2", 24000), make_item("Hamburguesa doble", 18000)]
        lines = ProductMatcher(items).match("quiero combo 2 hamburguesa doble")

        assert _lines(lines) == [("Combo 2", 1), ("Hamburguesa doble", 1)]
        assert sum(l.line_total for l in lines) == 42000

    def test_quantities_between_numbered_names(self, make_item):
        """Test explicit quantities next to names that end in a number."""
        items = [make_item("Combo 2", 24000), make_item("Hamburguesa doble", 18000)]
        lines = ProductMatcher(items).match("3 combo 2 y 2 hamburguesas dobles")
        assert _lines(lines) == [("Combo 2", 3), ("Hamburguesa doble", 2)]

    def test_line_totals(self, matcher):
        """Test unit price and line total on the matched lines."""
        lines = matcher.match("2 flan de caramelo")
        assert lines[0].unit_price == 5500
        assert lines[0].line_total == 11000

    def test_no_match_is_empty(self, matcher):
        """Test that conversational noise yields no lines."""
        assert matcher.match("hola buenas tardes") == []

    def test_unmatched_fragment_ignored(self, matcher):
        """Test that unknown fragments are skipped and the rest still match."""
        lines = matcher.match("una hamburguesa y un croissant")
        assert _lines(lines) == [("Croissant", 1)]

    def test_empty_menu(self):
        """Test that an empty menu matches nothing."""
        assert ProductMatcher([]).match("2 cafés") == []


class TestEndToEnd:
    """Test parse -> match against the reference crepes/flan menu."""

    def test_crepes_and_flan(self, cafe_items):
        """Test the crepes and flan order from a pasted admin menu."""
        lines = match_order("quiero Crepes de Nutella, 2 Flan de Caramelo", cafe_items)

        assert [(l.name, l.quantity, l.line_total) for l in lines] == [
            ("crepes de nutella", 1, 8500),
            ("flan de caramelo", 2, 11000),
        ]
        assert sum(l.line_total for l in lines) == 19500
