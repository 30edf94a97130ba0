"""
Tests for the order quote service.
"""
import pytest

from branch_bot.models import BranchMenu
from branch_bot.services.order import OrderService
from branch_bot.tasks.errors import MenuUnavailableError
from branch_bot.tasks.pricing import PricingEngine


@pytest.fixture
def service(menu_cache):
    return OrderService(menu_cache)


class TestOrderQuote:
    """Test cache -> matcher -> pricing for one message."""

    def test_end_to_end_quote(self, service, cafe_menu_text):
        """Test the crepes and flan order from menu text to total."""
        quote = service.quote("branch_01", cafe_menu_text, "quiero Crepes de Nutella, 2 Flan de Caramelo")

        assert quote.has_products is True
        assert quote.needs_clarification is False
        assert [(l.name, l.quantity, l.line_total) for l in quote.lines] == [
            ("crepes de nutella", 1, 8500),
            ("flan de caramelo", 2, 11000),
        ]
        assert quote.pricing.subtotal == 19500
        assert quote.pricing.delivery_fee == 3000
        assert quote.pricing.total == 22500

    def test_no_match_needs_clarification(self, service, cafe_menu_text):
        """Test that an unmatched message is a clarification, not an error."""
        quote = service.quote("branch_01", cafe_menu_text, "hola, tienen domicilio?")

        assert quote.needs_clarification is True
        assert quote.has_products is False
        assert quote.pricing.subtotal == 0

    def test_branch_fee_overrides(self, service, cafe_menu_text):
        """Test per-branch delivery fee and minimum order."""
        quote = service.quote(
            "branch_01",
            cafe_menu_text,
            "un cappuccino",
            delivery_fee=5000,
            minimum_order=15000,
        )
        assert quote.pricing.total == 9500
        assert quote.pricing.below_minimum is True

    def test_custom_pricing_engine(self, menu_cache, cafe_menu_text):
        """Test that the pricing engine can be injected."""
        service = OrderService(menu_cache, pricing=PricingEngine(delivery_fee=0))
        quote = service.quote("branch_01", cafe_menu_text, "un croissant")
        assert quote.pricing.total == 4200

    def test_menu_parsed_once_per_branch(self, service, menu_cache, cafe_menu_text):
        """Test that repeated messages reuse the parsed menu."""
        service.quote("branch_01", cafe_menu_text, "un café")
        service.quote("branch_01", cafe_menu_text, "dos cafés")

        stats = menu_cache.get_stats()
        assert stats["misses"] == 1
        assert stats["hits"] == 1


class TestOrderQuoteForStoredBranch:
    """Test quoting against the menu and fees stored for a branch."""

    def test_uses_stored_fees(self, db_session, service, cafe_menu_text):
        """Test that stored delivery fee and minimum apply."""
        db_session.add(BranchMenu(
            branch_id="branch_01",
            menu_text=cafe_menu_text,
            delivery_fee=2500,
            minimum_order=0,
        ))
        db_session.commit()

        quote = service.quote_for_branch(db_session, "branch_01", "2 flan de caramelo")
        assert quote.pricing.total == 13500

    def test_unset_fees_use_defaults(self, db_session, service, cafe_menu_text):
        """Test that NULL fees fall back to the configured defaults."""
        db_session.add(BranchMenu(branch_id="branch_02", menu_text=cafe_menu_text))
        db_session.commit()

        quote = service.quote_for_branch(db_session, "branch_02", "un croissant")
        assert quote.pricing.delivery_fee == 3000

    def test_missing_branch_menu(self, db_session, service):
        """Test that a branch without a menu raises MenuUnavailableError."""
        with pytest.raises(MenuUnavailableError):
            service.quote_for_branch(db_session, "branch_99", "un café")
