"""
Configuration Module for Branch Bot
===================================

This module centralizes the configuration settings and environment variables
used by the menu parser, order matcher, pricing and recommendation engine.

Configuration Categories:
-------------------------
- **Persistence**: Database URL used for branch menu text and recommendation
  sessions.

- **Ordering**: Default delivery fee and minimum order applied when the
  branch configuration supplies none, plus the quantity clamp used when
  extracting quantities from customer messages.

- **Recommendations**: Question count per session, number of ranked results
  and the budget tolerance applied when filtering candidates.

- **Caching**: TTL and size bounds for the session cache and the parsed-menu
  cache.

Environment Variables:
----------------------
- DATABASE_URL: SQLAlchemy URL (default: "sqlite:///./branch_bot.db")
- DEFAULT_DELIVERY_FEE: Delivery fee in currency units (default: 3000)
- DEFAULT_MINIMUM_ORDER: Minimum subtotal (default: 0)
- MAX_ITEM_QUANTITY: Largest quantity accepted for one item (default: 50)
- RECOMMENDATION_MAX_STEPS: Questions per session (default: 5)
- RECOMMENDATION_TOP_N: Ranked recommendations returned (default: 3)
- BUDGET_TOLERANCE: Multiplier over budget.max before an item is dropped (default: 1.2)
- SESSION_TTL_SECONDS: Session cache TTL (default: 3600)
- SESSION_MAX_CACHE_SIZE: Max cached sessions (default: 1000)
- MENU_CACHE_MAX_BRANCHES: Max branches with a cached parsed menu (default: 500)

Usage:
------
    from branch_bot.config import (
        DEFAULT_DELIVERY_FEE,
        RECOMMENDATION_MAX_STEPS,
    )

Library modules never load ``.env`` files themselves; entry points (the
scripts) call ``load_dotenv()`` before importing this module.
"""

import os


# =============================================================================
# Persistence Configuration
# =============================================================================

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./branch_bot.db")


# =============================================================================
# Ordering Configuration
# =============================================================================
# Amounts are integer currency units (Colombian pesos, no decimals).

DEFAULT_DELIVERY_FEE: int = int(os.getenv("DEFAULT_DELIVERY_FEE", "3000"))
DEFAULT_MINIMUM_ORDER: int = int(os.getenv("DEFAULT_MINIMUM_ORDER", "0"))

# Quantities above this are treated as typos ("quiero 500 cafes")
MAX_ITEM_QUANTITY: int = int(os.getenv("MAX_ITEM_QUANTITY", "50"))


# =============================================================================
# Recommendation Configuration
# =============================================================================

RECOMMENDATION_MAX_STEPS: int = int(os.getenv("RECOMMENDATION_MAX_STEPS", "5"))
RECOMMENDATION_TOP_N: int = int(os.getenv("RECOMMENDATION_TOP_N", "3"))

# Items up to 20% above the stated maximum budget are still considered
BUDGET_TOLERANCE: float = float(os.getenv("BUDGET_TOLERANCE", "1.2"))


# =============================================================================
# Cache Configuration
# =============================================================================

SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", "3600"))  # 1 hour
SESSION_MAX_CACHE_SIZE: int = int(os.getenv("SESSION_MAX_CACHE_SIZE", "1000"))

MENU_CACHE_MAX_BRANCHES: int = int(os.getenv("MENU_CACHE_MAX_BRANCHES", "500"))
