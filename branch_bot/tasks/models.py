"""
Pydantic models for the ordering and recommendation core.

Menu text is parsed into MenuItem records, customer messages are matched
into OrderLine records, and guided discovery is tracked in a
RecommendationSession that the caller stores between messages.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal
from pydantic import BaseModel, Field


# =============================================================================
# Menu and Order Models
# =============================================================================

class MenuItem(BaseModel):
    """One priced product parsed from a branch's menu text."""
    id: str  # "prod_1", "prod_2", ... assigned in parse order
    name: str  # lowercase, bullets and separators stripped
    display_name: str  # same as name but with the menu's original casing
    price: int
    category: str = ""
    section: str = ""
    description: str = ""
    raw_line: str = ""


class OrderLine(BaseModel):
    """A matched menu item with its quantity."""
    item_id: str
    name: str
    display_name: str
    unit_price: int
    quantity: int = Field(default=1, ge=1)
    line_total: int = 0

    @classmethod
    def from_item(cls, item: MenuItem, quantity: int) -> "OrderLine":
        """Build a line for an item, computing the line total."""
        return cls(
            item_id=item.id,
            name=item.name,
            display_name=item.display_name,
            unit_price=item.price,
            quantity=quantity,
            line_total=item.price * quantity,
        )


class PriceBreakdown(BaseModel):
    """Result of pricing a list of order lines."""
    subtotal: int = 0
    delivery_fee: int = 0
    total: int = 0
    minimum_order: int = 0
    below_minimum: bool = False

    @property
    def shortfall(self) -> int:
        """Amount still needed to reach the minimum order."""
        if not self.below_minimum:
            return 0
        return self.minimum_order - self.subtotal


class OrderQuote(BaseModel):
    """Matched lines plus pricing for one customer message."""
    lines: list[OrderLine] = Field(default_factory=list)
    pricing: PriceBreakdown = Field(default_factory=PriceBreakdown)

    @property
    def has_products(self) -> bool:
        return bool(self.lines)

    @property
    def needs_clarification(self) -> bool:
        """No item matched anywhere in the message."""
        return not self.lines


class ParseReport(BaseModel):
    """Parsed items plus diagnostics about the lines that were skipped."""
    items: list[MenuItem] = Field(default_factory=list)
    strategy: Literal["standard", "positional_combo"] = "standard"
    dropped_lines: list[str] = Field(default_factory=list)


# =============================================================================
# Recommendation Models
# =============================================================================

class SessionStatus(str, Enum):
    """Lifecycle of a recommendation session."""
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class Question(BaseModel):
    """An entry in the recommendation question bank."""
    id: str
    text: str
    type: Literal["budget_range", "single_choice", "multiple_choice"]
    options: list[str]
    weight: int = 1


class QuestionPrompt(BaseModel):
    """A question as presented to the customer for one step."""
    kind: Literal["question"] = "question"
    question_id: str
    text: str
    options: list[str]
    session_id: str
    step: int
    total_steps: int


class BudgetRange(BaseModel):
    min: int = 0
    max: int = 50000

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2


class Preferences(BaseModel):
    """Preferences accumulated from the customer's answers."""
    budget: BudgetRange | None = None
    meal_type: str | None = None
    dietary_restrictions: list[str] = Field(default_factory=list)
    cuisine_preferences: list[str] = Field(default_factory=list)
    special_occasion: str | None = None
    spice_level: str | None = None


class QuestionResponse(BaseModel):
    question_id: str
    question: str
    answer: str  # raw text as typed by the customer
    resolved_answer: str  # option text when the answer was an option number


class Recommendation(BaseModel):
    """One recommended menu item, priced for the party size."""
    item_id: str
    name: str
    display_name: str
    price: int
    quantity: int
    total_price: int
    category: str = ""
    reason: str
    confidence: int


class RecommendationSession(BaseModel):
    """State of one guided-recommendation conversation.

    The engine reads and mutates this object; persisting it between
    messages is the caller's job (see services.session.SessionStore).
    """
    session_id: str
    phone_number: str | None = None
    branch_id: str | None = None
    people_count: int = 1
    status: SessionStatus = SessionStatus.ACTIVE
    current_step: int = 0
    max_steps: int = 5
    responses: list[QuestionResponse] = Field(default_factory=list)
    preferences: Preferences = Field(default_factory=Preferences)
    recommendations: list[Recommendation] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None

    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    def answered_question_ids(self) -> list[str]:
        return [r.question_id for r in self.responses]


class ScoredCandidate(BaseModel):
    """A menu item with its recommendation score and the reasons behind it."""
    item: MenuItem
    score: float
    reason: str


class RecommendationResult(BaseModel):
    """Final output of a recommendation session."""
    kind: Literal["recommendations"] = "recommendations"
    session_id: str
    primary: Recommendation
    alternatives: list[Recommendation] = Field(default_factory=list)
    preferences: Preferences
