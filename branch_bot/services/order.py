"""
Order Quote Service.

Combines the parsed-menu cache, the product matcher and the pricing engine
into one call per inbound ordering message:

    service = OrderService(MenuCache())
    quote = service.quote(branch_id, menu_text, "quiero 2 capuchinos")
    if quote.needs_clarification:
        ...

Delivery fee and minimum order come from the branch configuration when the
caller has it, and from config.py otherwise.
"""

import logging

from sqlalchemy.orm import Session

from ..menu_data_cache import MenuCache
from ..models import BranchMenu
from ..tasks.errors import MenuUnavailableError
from ..tasks.models import OrderQuote
from ..tasks.pricing import PricingEngine

logger = logging.getLogger(__name__)


class OrderService:
    """Quotes customer messages against a branch menu."""

    def __init__(self, menu_cache: MenuCache, pricing: PricingEngine | None = None):
        self.menu_cache = menu_cache
        self.pricing = pricing or PricingEngine()

    def quote(
        self,
        branch_id: str,
        menu_text: str,
        utterance: str,
        delivery_fee: int | None = None,
        minimum_order: int | None = None,
    ) -> OrderQuote:
        """
        Match an utterance against the branch menu and price it.

        Args:
            branch_id: Branch whose menu is used (cache key)
            menu_text: The branch's current menu text
            utterance: Customer message
            delivery_fee: Branch delivery fee; None uses the default
            minimum_order: Branch minimum order; None uses the default

        Returns:
            OrderQuote. No matched lines means needs_clarification; the
            pricing is still filled in (subtotal 0).
        """
        matcher = self.menu_cache.get_matcher(branch_id, menu_text)
        lines = matcher.match(utterance)
        pricing = self.pricing.price(lines, delivery_fee=delivery_fee, minimum_order=minimum_order)

        quote = OrderQuote(lines=lines, pricing=pricing)
        if quote.needs_clarification:
            logger.info("Branch %s: no products matched, asking for clarification", branch_id)
        else:
            logger.info(
                "Branch %s: quoted %d line(s), total %d",
                branch_id, len(lines), pricing.total,
            )
        return quote

    def quote_for_branch(self, db: Session, branch_id: str, utterance: str) -> OrderQuote:
        """
        Quote against the menu and fees stored for the branch.

        Raises:
            MenuUnavailableError: the branch has no stored menu text
        """
        menu = db.query(BranchMenu).filter(BranchMenu.branch_id == branch_id).first()
        if menu is None or not (menu.menu_text or "").strip():
            logger.warning("No stored menu for branch %s", branch_id)
            raise MenuUnavailableError(branch_id)
        return self.quote(
            branch_id,
            menu.menu_text,
            utterance,
            delivery_fee=menu.delivery_fee,
            minimum_order=menu.minimum_order,
        )
