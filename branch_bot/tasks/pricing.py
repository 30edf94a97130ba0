"""
Pricing Engine for Order Lines.

This module sums matched order lines into subtotal, delivery fee and total,
and flags orders below the branch's minimum. Pricing never fails: negative
inputs are clamped to zero and the minimum-order rule only sets a flag so
the caller can decide how to tell the customer.
"""

import logging

from ..config import DEFAULT_DELIVERY_FEE, DEFAULT_MINIMUM_ORDER
from .models import OrderLine, PriceBreakdown

logger = logging.getLogger(__name__)


class PricingEngine:
    """
    Prices a list of order lines for one branch.

    The delivery fee and minimum order come from the branch configuration
    (an external collaborator); the defaults come from config.py.
    """

    def __init__(
        self,
        delivery_fee: int = DEFAULT_DELIVERY_FEE,
        minimum_order: int = DEFAULT_MINIMUM_ORDER,
    ):
        self.delivery_fee = delivery_fee
        self.minimum_order = minimum_order

    @staticmethod
    def line_total(line: OrderLine) -> int:
        """Price x quantity; OrderLine guarantees quantity >= 1."""
        return max(line.unit_price, 0) * line.quantity

    def price(
        self,
        lines: list[OrderLine],
        delivery_fee: int | None = None,
        minimum_order: int | None = None,
    ) -> PriceBreakdown:
        """
        Price an order.

        Args:
            lines: Matched order lines
            delivery_fee: Overrides the engine's delivery fee
            minimum_order: Overrides the engine's minimum order

        Returns:
            PriceBreakdown with subtotal, delivery fee, total and the
            below_minimum flag.
        """
        fee = self.delivery_fee if delivery_fee is None else delivery_fee
        minimum = self.minimum_order if minimum_order is None else minimum_order
        fee = max(int(fee), 0)
        minimum = max(int(minimum), 0)

        subtotal = sum(self.line_total(line) for line in lines)
        breakdown = PriceBreakdown(
            subtotal=subtotal,
            delivery_fee=fee,
            total=subtotal + fee,
            minimum_order=minimum,
            below_minimum=subtotal < minimum,
        )

        if breakdown.below_minimum:
            logger.info(
                "Order subtotal %d is below the minimum of %d", subtotal, minimum
            )
        logger.debug("Priced %d lines: %s", len(lines), breakdown)
        return breakdown


def price_order(
    lines: list[OrderLine],
    delivery_fee: int = DEFAULT_DELIVERY_FEE,
    minimum_order: int = DEFAULT_MINIMUM_ORDER,
) -> PriceBreakdown:
    """Convenience wrapper: PricingEngine(delivery_fee, minimum_order).price(lines)."""
    return PricingEngine(delivery_fee, minimum_order).price(lines)
