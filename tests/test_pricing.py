"""
Tests for order pricing.
"""
import pytest
from pydantic import ValidationError

from branch_bot.tasks.models import OrderLine
from branch_bot.tasks.pricing import PricingEngine, price_order


def _line(price, quantity):
    return OrderLine(
        item_id="prod_1",
        name="item",
        display_name="Item",
        unit_price=price,
        quantity=quantity,
        line_total=price * quantity,
    )


class TestPricingEngine:
    """Test subtotal, delivery fee and total."""

    def test_subtotal_and_total(self):
        """Test the crepes and flan order with the default delivery fee."""
        result = price_order([_line(8500, 1), _line(5500, 2)])

        assert result.subtotal == 19500
        assert result.delivery_fee == 3000
        assert result.total == 22500
        assert result.below_minimum is False

    def test_explicit_delivery_fee(self):
        """Test a per-call delivery fee override."""
        result = PricingEngine().price([_line(4000, 1)], delivery_fee=0)
        assert result.total == 4000

    def test_empty_order(self):
        """Test that an empty order prices to the delivery fee only."""
        result = PricingEngine(delivery_fee=2000).price([])
        assert result.subtotal == 0
        assert result.total == 2000

    def test_below_minimum_flag(self):
        """Test that a small order is flagged, not rejected."""
        result = PricingEngine(minimum_order=20000).price([_line(8500, 1)])

        assert result.below_minimum is True
        assert result.shortfall == 11500
        assert result.total == 11500

    def test_exact_minimum_not_flagged(self):
        """Test that reaching the minimum exactly is enough."""
        result = PricingEngine(minimum_order=17000).price([_line(8500, 2)])
        assert result.below_minimum is False
        assert result.shortfall == 0

    def test_negative_inputs_clamped(self):
        """Test that negative fees and minimums are clamped to zero."""
        result = PricingEngine().price([_line(5000, 1)], delivery_fee=-500, minimum_order=-1)
        assert result.delivery_fee == 0
        assert result.minimum_order == 0
        assert result.total == 5000

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_non_positive_quantity_rejected_by_model(self, quantity):
        """Test that an order line cannot carry a quantity below one."""
        with pytest.raises(ValidationError):
            OrderLine(item_id="prod_1", name="flan", display_name="Flan", unit_price=5500, quantity=quantity)

    def test_line_total_uses_quantity(self):
        """Test price x quantity for one line."""
        line = OrderLine(item_id="prod_1", name="flan", display_name="Flan", unit_price=5500, quantity=2)
        assert PricingEngine.line_total(line) == 11000
