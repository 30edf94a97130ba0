"""
Tests for menu text parsing.
"""
import pytest

from branch_bot.tasks.menu_parser import (
    MenuParser,
    PositionalComboStrategy,
    StandardLineStrategy,
    is_compressed_combo_menu,
    parse_menu,
)
from branch_bot.tasks.parsers import (
    clean_item_name,
    extract_price_line,
    parse_amount,
    parse_category_line,
    parse_section_header,
)


def _pairs(items):
    return [(item.display_name, item.price) for item in items]


class TestPriceLineFormats:
    """Test the three price line formats and their priority."""

    def test_dash_format(self):
        """Test "name - $price" lines."""
        assert extract_price_line("Croissant - $4200") == ("Croissant", 4200, "dash")

    def test_double_dash_with_product_label(self):
        """Test admin-log lines with check mark, label and doubled dash."""
        line = "✅ Producto 67: • Crepes de Nutella - - $8500"
        assert extract_price_line(line) == ("Crepes de Nutella", 8500, "dash")

    def test_space_format(self):
        """Test "name $price" lines without a dash."""
        assert extract_price_line("Cappuccino $4500") == ("Cappuccino", 4500, "space")

    def test_trailing_format(self):
        """Test a bare trailing price on a long line."""
        name, price, fmt = extract_price_line("Limonada de coco.....$6000")
        assert (name, price, fmt) == ("Limonada de coco", 6000, "trailing")

    def test_trailing_format_needs_long_line(self):
        """Test that short lines with a bare trailing price are not items."""
        assert extract_price_line("Té....$20") is None

    def test_dash_wins_over_space(self):
        """Test that the dash format is tried first."""
        _, _, fmt = extract_price_line("Jugo de mora - $5000")
        assert fmt == "dash"

    def test_line_without_price(self):
        """Test that a line without a price is not a price line."""
        assert extract_price_line("Pedidos al 300 123 4567") is None

    @pytest.mark.parametrize("raw,expected", [
        ("8500", 8500),
        ("18,000", 18000),
        ("21.900", 21900),
        ("", 0),
    ])
    def test_parse_amount_thousands_separators(self, raw, expected):
        """Test amounts with comma or dot thousands separators."""
        assert parse_amount(raw) == expected

    def test_clean_item_name_strips_markers(self):
        """Test that bullets, emoji and trailing dashes are removed."""
        assert clean_item_name("🔥 • Alitas BBQ -") == "Alitas BBQ"


class TestHeaderDetection:
    """Test section and category header detection."""

    def test_emphasis_header(self):
        """Test *WRAPPED* section titles."""
        assert parse_section_header("*POSTRES*") == "POSTRES"

    def test_emoji_header(self):
        """Test section titles with a leading emoji."""
        assert parse_section_header("☕ BEBIDAS CALIENTES") == "BEBIDAS CALIENTES"

    def test_any_emoji_header(self):
        """Test that any pictograph starts a header, not only a fixed set."""
        assert parse_section_header("🥐 Panadería") == "Panadería"

    def test_short_all_caps_header(self):
        """Test short all-caps lines."""
        assert parse_section_header("ENTRADAS") == "ENTRADAS"

    def test_line_with_price_is_not_header(self):
        """Test that a priced line is never a header."""
        assert parse_section_header("*COMBO* $18000") is None

    def test_regular_line_is_not_header(self):
        """Test that mixed-case text is not a header."""
        assert parse_section_header("Pedidos al 300 123 4567") is None

    def test_category_line(self):
        """Test "Name:" category lines."""
        assert parse_category_line("Bebidas Frías:") == "Bebidas Frías"

    def test_category_line_with_price_is_not_category(self):
        """Test that a colon line with a price is not a category."""
        assert parse_category_line("Producto 1: Flan - $5500") is None


class TestStandardParsing:
    """Test parsing a full menu with the standard strategy."""

    def test_recovers_names_and_prices(self, cafe_menu_text):
        """Test that every format in the menu yields its (name, price) pair."""
        items = MenuParser().parse(cafe_menu_text)
        assert _pairs(items) == [
            ("Crepes de Nutella", 8500),
            ("Flan de Caramelo", 5500),
            ("Café", 3000),
            ("Café Americano", 3500),
            ("Cappuccino", 4500),
            ("Chocolate caliente", 4000),
            ("Limonada de coco", 6000),
            ("Jugo de mora", 5000),
            ("Croissant", 4200),
        ]

    def test_category_from_nearest_header(self, cafe_menu_text):
        """Test that each item takes the nearest preceding header."""
        items = {item.display_name: item for item in MenuParser().parse(cafe_menu_text)}

        assert items["Crepes de Nutella"].category == "POSTRES"
        assert items["Cappuccino"].category == "BEBIDAS CALIENTES"
        assert items["Limonada de coco"].category == "Bebidas Frías"
        assert items["Limonada de coco"].section == "BEBIDAS CALIENTES"
        # A new section resets the category
        assert items["Croissant"].category == "PANADERÍA"

    def test_ids_and_lowercase_names(self, cafe_menu_text):
        """Test sequential ids and lowercase names."""
        items = MenuParser().parse(cafe_menu_text)
        assert [item.id for item in items[:3]] == ["prod_1", "prod_2", "prod_3"]
        assert items[0].name == "crepes de nutella"
        assert items[0].display_name == "Crepes de Nutella"

    def test_description_keeps_line(self, cafe_menu_text):
        """Test that standard items keep their source line as description."""
        items = MenuParser().parse(cafe_menu_text)
        assert items[4].description == "Cappuccino $4500"

    def test_short_names_and_noise_are_dropped(self, cafe_menu_text):
        """Test that short names and unpriced lines are reported as dropped."""
        report = MenuParser().parse_with_report(cafe_menu_text)

        assert report.strategy == "standard"
        assert "Pan - $900" in report.dropped_lines
        assert "Pedidos al 300 123 4567" in report.dropped_lines
        assert "Pan" not in [item.display_name for item in report.items]

    def test_zero_price_is_dropped(self):
        """Test that non-positive prices are dropped."""
        assert MenuParser().parse("Agua de la casa - $0") == []

    def test_idempotent(self, cafe_menu_text):
        """Test that parsing twice gives identical items."""
        parser = MenuParser()
        first = parser.parse(cafe_menu_text)
        second = parser.parse(cafe_menu_text)
        assert [i.model_dump() for i in first] == [i.model_dump() for i in second]

    @pytest.mark.parametrize("text", ["", "   \n\n  ", None])
    def test_empty_input(self, text):
        """Test that empty input gives an empty list, not an error."""
        assert MenuParser().parse(text) == []

    def test_unrecognizable_text(self):
        """Test that text without price lines gives an empty list."""
        assert parse_menu("Hola, bienvenidos!\nAbrimos a las 8am") == []


class TestCompressedComboParsing:
    """Test the positional combo strategy for compressed wings menus."""

    def test_detects_compressed_combo_menu(self, wings_menu_text, cafe_menu_text):
        """Test the menu-shape heuristic."""
        assert is_compressed_combo_menu(wings_menu_text) is True
        assert is_compressed_combo_menu(cafe_menu_text) is False

    def test_combo_keyword_without_price_only_line(self):
        """Test that a wings menu with per-line prices uses the standard strategy."""
        text = "🍗 ALITAS\nCombo 1 - $18000\nCombo 2 - $24000"
        assert is_compressed_combo_menu(text) is False
        items = MenuParser().parse(text)
        assert _pairs(items) == [("Combo 1", 18000), ("Combo 2", 24000)]

    def test_prices_assigned_by_position(self, wings_menu_text):
        """Test that the Nth price goes to the Nth combo definition."""
        report = MenuParser().parse_with_report(wings_menu_text)

        assert report.strategy == "positional_combo"
        assert _pairs(report.items) == [
            ("Combo 1", 18000),
            ("Combo 2", 24500),
            ("Combo 3", 29900),
            ("Combo Emparejado", 45000),
            ("Combo Familiar 1", 62000),
            ("Combo Familiar 2", 89000),
        ]

    def test_combo_descriptions_from_template(self, wings_menu_text):
        """Test that descriptions fill in the wing count."""
        items = MenuParser().parse(wings_menu_text)
        assert items[0].description == "5 alitas + acompañante + salsas"
        assert items[0].category == "Combos"
        assert items[3].description.startswith("14 alitas")

    def test_fewer_prices_than_combos(self):
        """Test that only the first combos are emitted when prices are missing."""
        report = PositionalComboStrategy().parse("$18,000 $24,500")
        assert _pairs(report.items) == [("Combo 1", 18000), ("Combo 2", 24500)]

    def test_extra_prices_are_dropped(self):
        """Test that prices beyond the combo table are reported as dropped."""
        combos = [{"name": "Combo Solo", "description": "{wings} alitas", "wings": 6}]
        report = PositionalComboStrategy(combos=combos).parse("$10000\n$12000")

        assert _pairs(report.items) == [("Combo Solo", 10000)]
        assert report.dropped_lines == ["$12000"]

    def test_injected_strategy(self, cafe_menu_text):
        """Test that MenuParser uses injected strategies."""

        class FixedStrategy(StandardLineStrategy):
            def parse(self, menu_text):
                report = super().parse(menu_text)
                report.items = report.items[:1]
                return report

        items = MenuParser(standard=FixedStrategy()).parse(cafe_menu_text)
        assert _pairs(items) == [("Crepes de Nutella", 8500)]
