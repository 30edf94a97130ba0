"""
Ordering and Recommendation Core.

This package turns branch menu text and customer messages into structured
results with:
- MenuParser: menu text -> priced MenuItem records
- ProductMatcher: customer utterance -> ordered OrderLine records
- PricingEngine: order lines -> subtotal, delivery fee, total
- RecommendationEngine: guided five-question session -> ranked recommendations
- MessageBuilder: Spanish reply text for all of the above

Everything here is pure computation over its inputs; persistence and caching
live in branch_bot.services and branch_bot.menu_data_cache.
"""

from .models import (
    MenuItem,
    OrderLine,
    PriceBreakdown,
    OrderQuote,
    ParseReport,
    SessionStatus,
    Question,
    QuestionPrompt,
    BudgetRange,
    Preferences,
    QuestionResponse,
    Recommendation,
    RecommendationSession,
    ScoredCandidate,
    RecommendationResult,
)

from .errors import (
    MenuUnavailableError,
    RecommendationError,
    EmptyCandidateSetError,
    InvalidSessionStepError,
)

from .menu_parser import (
    MenuParser,
    StandardLineStrategy,
    PositionalComboStrategy,
    is_compressed_combo_menu,
    parse_menu,
)

from .menu_lookup import (
    ProductMatcher,
    match_order,
)

from .pricing import (
    PricingEngine,
    price_order,
)

from .recommendation import (
    QUESTION_BANK,
    RecommendationEngine,
    budget_score,
    parse_budget_answer,
    question_rotation,
)

from .message_builder import (
    MessageBuilder,
    format_price,
)

__all__ = [
    # Models
    "MenuItem",
    "OrderLine",
    "PriceBreakdown",
    "OrderQuote",
    "ParseReport",
    "SessionStatus",
    "Question",
    "QuestionPrompt",
    "BudgetRange",
    "Preferences",
    "QuestionResponse",
    "Recommendation",
    "RecommendationSession",
    "ScoredCandidate",
    "RecommendationResult",
    # Errors
    "MenuUnavailableError",
    "RecommendationError",
    "EmptyCandidateSetError",
    "InvalidSessionStepError",
    # Menu parsing
    "MenuParser",
    "StandardLineStrategy",
    "PositionalComboStrategy",
    "is_compressed_combo_menu",
    "parse_menu",
    # Matching
    "ProductMatcher",
    "match_order",
    # Pricing
    "PricingEngine",
    "price_order",
    # Recommendations
    "QUESTION_BANK",
    "RecommendationEngine",
    "budget_score",
    "parse_budget_answer",
    "question_rotation",
    # Messages
    "MessageBuilder",
    "format_price",
]
