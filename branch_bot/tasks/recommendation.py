"""
Recommendation Engine for Guided Menu Discovery.

Drives a fixed five-question conversation (budget, meal type, dietary
restrictions, cuisine, occasion), folds each answer into a Preferences
accumulator, and once every step is answered filters and scores the branch's
menu items to produce a primary recommendation plus alternatives.

The engine keeps no state between calls: it reads and mutates the
RecommendationSession passed in, and the caller persists it (see
services.session.SessionStore).

Question order is rotated per session with a deterministic seed derived
from (people_count, session_id). This varies the conversation between
customers while keeping any given session reproducible in tests; it is not
meant to be random or uniform.
"""

import logging
import random
import re
import string
import time
from datetime import datetime, timezone

from ..config import BUDGET_TOLERANCE, RECOMMENDATION_MAX_STEPS, RECOMMENDATION_TOP_N
from .errors import EmptyCandidateSetError, InvalidSessionStepError, MenuUnavailableError
from .models import (
    BudgetRange,
    MenuItem,
    Preferences,
    Question,
    QuestionPrompt,
    QuestionResponse,
    Recommendation,
    RecommendationResult,
    RecommendationSession,
    ScoredCandidate,
    SessionStatus,
)
from .parsers.constants import (
    BUDGET_OPTION_RANGES,
    DEFAULT_BUDGET_RANGE,
    DIETARY_EXCLUSIONS,
    MEAL_TYPE_KEYWORDS,
    MEAL_TYPE_REASONS,
    NO_RESTRICTION_ANSWERS,
    OPEN_BUDGET_MAX,
    ROMANTIC_KEYWORDS,
    WORK_MEETING_PRICE_CEILING,
    normalize_text,
    strip_accents,
)
from .parsers.deterministic import parse_amount

logger = logging.getLogger(__name__)


# =============================================================================
# Question Bank
# =============================================================================

QUESTION_BANK = [
    Question(
        id="budget",
        text="¿Cuál es tu presupuesto aproximado para esta comida? 💰",
        type="budget_range",
        options=list(BUDGET_OPTION_RANGES),
        weight=10,
    ),
    Question(
        id="meal_type",
        text="¿Qué tipo de comida prefieres? 🍽️",
        type="single_choice",
        options=["Desayuno", "Almuerzo", "Cena", "Snack/Merienda", "Cualquiera"],
        weight=8,
    ),
    Question(
        id="dietary_restrictions",
        text="¿Tienes alguna restricción alimentaria? 🥗",
        type="multiple_choice",
        options=["Vegetariano", "Vegano", "Sin gluten", "Sin lactosa", "Halal", "Kosher", "Ninguna"],
        weight=9,
    ),
    Question(
        id="cuisine_preference",
        text="¿Qué tipo de cocina prefieres? 🌮",
        type="single_choice",
        options=["Colombiana", "Internacional", "Italiana", "Asiática", "Mexicana", "Cualquiera"],
        weight=6,
    ),
    Question(
        id="special_occasion",
        text="¿Es para alguna ocasión especial? 🎉",
        type="single_choice",
        options=["Comida casual", "Cita romántica", "Celebración", "Reunión de trabajo", "Solo comer"],
        weight=3,
    ),
]

BASE_SEQUENCE = [
    "budget",
    "meal_type",
    "dietary_restrictions",
    "cuisine_preference",
    "special_occasion",
]

QUESTION_TEXT_VARIANTS = {
    "budget": [
        "¿Cuál es tu presupuesto aproximado para esta comida? 💰",
        "Para esta ocasión, ¿qué presupuesto tienes en mente? 💵",
        "Para saber qué recomendarte, ¿cuál es tu presupuesto? 💸",
    ],
    "meal_type": [
        "¿Qué tipo de comida prefieres? 🍽️",
        "¿Qué te antoja más ahora mismo? 🍛",
        "Pensando en el momento, ¿qué tipo de comida quieres? 🥗",
    ],
    "dietary_restrictions": [
        "¿Tienes alguna restricción alimentaria? 🥗",
        "¿Debo tener en cuenta alguna preferencia o restricción? ✅",
        "¿Comes de todo o prefieres evitar algo? 🚫",
    ],
    "cuisine_preference": [
        "¿Qué tipo de cocina prefieres? 🌮",
        "¿Te gusta más cocina colombiana u otra? 🍝",
        "¿Qué estilo de comida te provoca? 🍣",
    ],
    "special_occasion": [
        "¿Es para alguna ocasión especial? 🎉",
        "¿La salida es casual o algo especial? ✨",
        "¿Hay alguna ocasión particular para este plan? 🎈",
    ],
}

BASE_SCORE = 50.0
MAX_BUDGET_BONUS = 30.0
MEAL_TYPE_BONUS = 20.0
SPICE_BONUS = 15.0
ROMANTIC_BONUS = 25.0
WORK_MEETING_BONUS = 15.0
FALLBACK_REASON = "Buena opción para ti"


# =============================================================================
# Deterministic Seeding
# =============================================================================

def session_seed(session_id: str | None) -> int:
    """Sum of the session id's code points; stable across processes."""
    return sum(ord(c) for c in session_id or "")


def question_rotation(people_count: int, session_id: str | None, question_count: int) -> int:
    """Offset into the base question sequence for this session."""
    if question_count <= 0:
        return 0
    return ((people_count or 1) + session_seed(session_id)) % question_count


def generate_session_id() -> str:
    """Session ids look like "rec_1729350000000_k3j9x0a2b"."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"rec_{int(time.time() * 1000)}_{suffix}"


# =============================================================================
# Answer Interpretation
# =============================================================================

def resolve_option(question: Question, raw_answer: str) -> str:
    """Map "2" to the second option's text; anything else is taken literally."""
    answer = (raw_answer or "").strip()
    if re.fullmatch(r"\d+", answer):
        index = int(answer) - 1
        if 0 <= index < len(question.options):
            return question.options[index]
    # Accept the option typed out with different case or accents
    normalized = normalize_text(answer)
    for option in question.options:
        if normalize_text(option) == normalized:
            return option
    return answer


def parse_budget_answer(answer_text: str) -> BudgetRange:
    """
    Turn a budget answer into a numeric range.

    Accepts the option texts ("$15,000 - $25,000") and free text such as
    "menos de 20000", "entre 15 y 25 mil" or "más de 60.000". Anything
    without a number falls back to DEFAULT_BUDGET_RANGE.
    """
    if answer_text in BUDGET_OPTION_RANGES:
        low, high = BUDGET_OPTION_RANGES[answer_text]
        return BudgetRange(min=low, max=high)

    text = normalize_text(answer_text.replace("$", " "))
    amounts = [parse_amount(token) for token in re.findall(r"\d+(?:[.,]\d{3})*", answer_text)]
    amounts = [a for a in amounts if a > 0]
    if not amounts:
        low, high = DEFAULT_BUDGET_RANGE
        return BudgetRange(min=low, max=high)

    # "25 mil", "25k"
    if re.search(r"\bmil\b|\d\s*k\b", text):
        amounts = [a * 1000 if a < 1000 else a for a in amounts]

    if len(amounts) >= 2:
        return BudgetRange(min=min(amounts[:2]), max=max(amounts[:2]))

    amount = amounts[0]
    if re.search(r"\b(mas de|desde|minimo|more than|over)\b", text):
        return BudgetRange(min=amount, max=OPEN_BUDGET_MAX)
    return BudgetRange(min=0, max=amount)


def _split_choices(answer: str) -> list[str]:
    return [part.strip() for part in re.split(r",|\s+y\s+|\s+and\s+", answer) if part.strip()]


# =============================================================================
# Scoring Helpers
# =============================================================================

def budget_score(price: int, budget: BudgetRange) -> float:
    """
    Bonus for proximity to the budget midpoint.

    Linear falloff from MAX_BUDGET_BONUS at the midpoint to zero at 100%
    deviation.
    """
    midpoint = budget.midpoint
    if midpoint <= 0:
        return 0.0
    deviation = abs(price - midpoint) / midpoint
    return max(0.0, MAX_BUDGET_BONUS - deviation * MAX_BUDGET_BONUS)


def _item_text(item: MenuItem) -> str:
    return normalize_text(f"{item.name} {item.description}")


def violates_restrictions(item: MenuItem, restrictions: list[str]) -> bool:
    """True if the item's name/description mentions an excluded ingredient."""
    text = _item_text(item)
    for restriction in restrictions:
        restriction_key = normalize_text(restriction)
        for key, excluded in DIETARY_EXCLUSIONS.items():
            if key in restriction_key and any(word in text for word in excluded):
                return True
    return False


class RecommendationEngine:
    """
    Guided recommendation state machine.

    States: active -> completed (recommendations generated) or abandoned
    (cancelled). Every operation validates the session state first and raises
    InvalidSessionStepError instead of retrying.
    """

    def __init__(
        self,
        question_bank: list[Question] | None = None,
        max_steps: int = RECOMMENDATION_MAX_STEPS,
        top_n: int = RECOMMENDATION_TOP_N,
        budget_tolerance: float = BUDGET_TOLERANCE,
    ):
        self.question_bank = question_bank if question_bank is not None else QUESTION_BANK
        self.max_steps = max_steps
        self.top_n = top_n
        self.budget_tolerance = budget_tolerance
        self._questions_by_id = {q.id: q for q in self.question_bank}

    # =========================================================================
    # Session Lifecycle
    # =========================================================================

    def create_session(
        self,
        phone_number: str | None = None,
        branch_id: str | None = None,
        people_count: int = 1,
        session_id: str | None = None,
    ) -> RecommendationSession:
        session = RecommendationSession(
            session_id=session_id or generate_session_id(),
            phone_number=phone_number,
            branch_id=branch_id,
            people_count=max(people_count or 1, 1),
            max_steps=self.max_steps,
        )
        logger.info(
            "Created recommendation session %s for %d person(s)",
            session.session_id, session.people_count,
        )
        return session

    def cancel(self, session: RecommendationSession) -> RecommendationSession:
        """Mark an active session as abandoned."""
        self._require_active(session, "cannot cancel")
        session.status = SessionStatus.ABANDONED
        logger.info("Recommendation session %s abandoned at step %d", session.session_id, session.current_step)
        return session

    def _require_active(self, session: RecommendationSession, reason: str) -> None:
        if not session.is_active():
            logger.warning("Rejected operation on %s session %s", session.status.value, session.session_id)
            raise InvalidSessionStepError(
                session.session_id, session.status.value, session.current_step,
                f"{reason}: session is {session.status.value}",
            )

    # =========================================================================
    # Questions
    # =========================================================================

    def select_next_question(self, session: RecommendationSession) -> Question | None:
        """First unanswered question in this session's rotated sequence."""
        answered = set(session.answered_question_ids())
        sequence = [qid for qid in BASE_SEQUENCE if qid in self._questions_by_id]
        sequence += [q.id for q in self.question_bank if q.id not in sequence]

        rotation = question_rotation(session.people_count, session.session_id, len(sequence))
        rotated = sequence[rotation:] + sequence[:rotation]
        for question_id in rotated:
            if question_id not in answered:
                return self._questions_by_id[question_id]
        return None

    def question_text(self, question: Question, session: RecommendationSession) -> str:
        """Pick one of the question's phrasings for this session."""
        pool = QUESTION_TEXT_VARIANTS.get(question.id)
        if not pool:
            return question.text
        seed = session_seed(session.session_id) + (session.people_count or 1) + session.current_step
        return pool[seed % len(pool)]

    def next_question(
        self,
        session: RecommendationSession,
        menu_items: list[MenuItem] | None = None,
    ) -> QuestionPrompt | RecommendationResult:
        """
        Return the next question, or the recommendations once all steps are done.

        Args:
            session: An active session
            menu_items: Parsed branch menu; required once the last answer is in

        Raises:
            InvalidSessionStepError: session is completed or abandoned
            EmptyCandidateSetError: no menu item survives the filters
        """
        self._require_active(session, "no next question")

        question = None
        if session.current_step < session.max_steps:
            question = self.select_next_question(session)
        if question is None:
            if menu_items is None:
                raise ValueError("menu_items are required to generate recommendations")
            return self.recommend(session, menu_items)

        return QuestionPrompt(
            question_id=question.id,
            text=self.question_text(question, session),
            options=question.options,
            session_id=session.session_id,
            step=session.current_step + 1,
            total_steps=session.max_steps,
        )

    # =========================================================================
    # Answers
    # =========================================================================

    def answer(self, session: RecommendationSession, raw_answer: str) -> RecommendationSession:
        """
        Record the answer to the session's current question.

        Raises:
            InvalidSessionStepError: session is not active or already at max_steps
        """
        self._require_active(session, "cannot answer")
        if session.current_step >= session.max_steps:
            raise InvalidSessionStepError(
                session.session_id, session.status.value, session.current_step,
                "all questions already answered",
            )

        question = self.select_next_question(session)
        if question is None:
            raise InvalidSessionStepError(
                session.session_id, session.status.value, session.current_step,
                "no question available",
            )

        resolved = self.update_preferences(session.preferences, question, raw_answer)
        session.responses.append(QuestionResponse(
            question_id=question.id,
            question=question.text,
            answer=raw_answer,
            resolved_answer=resolved,
        ))
        session.current_step += 1
        logger.info(
            "Session %s answered %s (step %d/%d)",
            session.session_id, question.id, session.current_step, session.max_steps,
        )
        return session

    def update_preferences(self, preferences: Preferences, question: Question, raw_answer: str) -> str:
        """
        Fold one answer into the preferences.

        Returns:
            The resolved answer text as recorded in the session.
        """
        if question.type == "multiple_choice":
            choices = [resolve_option(question, part) for part in _split_choices(raw_answer)]
            answer_text = ", ".join(choices)
        else:
            choices = []
            answer_text = resolve_option(question, raw_answer)

        logger.debug("Mapped answer %r -> %r", raw_answer, answer_text)

        if question.id == "budget":
            preferences.budget = parse_budget_answer(answer_text)
        elif question.id == "meal_type":
            preferences.meal_type = answer_text.lower()
        elif question.id == "dietary_restrictions":
            for choice in choices:
                if normalize_text(choice) in NO_RESTRICTION_ANSWERS:
                    continue
                if choice not in preferences.dietary_restrictions:
                    preferences.dietary_restrictions.append(choice)
        elif question.id == "cuisine_preference":
            preferences.cuisine_preferences.append(answer_text)
        elif question.id == "special_occasion":
            preferences.special_occasion = answer_text.lower()

        spice = normalize_text(raw_answer)
        if "picante" in spice:
            preferences.spice_level = "sin picante" if "sin picante" in spice else "picante"

        return answer_text

    # =========================================================================
    # Filtering and Scoring
    # =========================================================================

    def filter_candidates(self, menu_items: list[MenuItem], preferences: Preferences) -> list[MenuItem]:
        """Drop items over the budget tolerance or against a dietary restriction."""
        candidates = []
        for item in menu_items:
            if preferences.budget and item.price > preferences.budget.max * self.budget_tolerance:
                continue
            if preferences.dietary_restrictions and violates_restrictions(
                item, preferences.dietary_restrictions
            ):
                continue
            candidates.append(item)
        return candidates

    def score_item(self, item: MenuItem, preferences: Preferences) -> ScoredCandidate:
        score = BASE_SCORE
        reasons = []
        name = normalize_text(item.name)

        if preferences.budget:
            if preferences.budget.midpoint > 0:
                bonus = budget_score(item.price, preferences.budget)
                if bonus > 0:
                    score += bonus
                    reasons.append("Se ajusta a tu presupuesto")
            else:
                score += 10
                reasons.append("Opción económica")

        if preferences.meal_type:
            meal_key = strip_accents(preferences.meal_type.lower())
            keywords = MEAL_TYPE_KEYWORDS.get(meal_key, [])
            if any(keyword in name for keyword in keywords):
                score += MEAL_TYPE_BONUS
                reasons.append(MEAL_TYPE_REASONS[meal_key])

        if preferences.spice_level:
            text = _item_text(item)
            if preferences.spice_level == "sin picante":
                if "picante" not in text:
                    score += SPICE_BONUS
                    reasons.append("Sin picante como prefieres")
            elif "picante" in text:
                score += SPICE_BONUS
                reasons.append("Con el nivel de picante que buscas")

        if preferences.special_occasion:
            occasion = strip_accents(preferences.special_occasion)
            if "romantica" in occasion and any(kw in name for kw in ROMANTIC_KEYWORDS):
                score += ROMANTIC_BONUS
                reasons.append("Perfecto para una cita romántica")
            if "trabajo" in occasion:
                ceiling = preferences.budget.max if preferences.budget else WORK_MEETING_PRICE_CEILING
                if item.price <= ceiling:
                    score += WORK_MEETING_BONUS
                    reasons.append("Ideal para reunión de trabajo")

        return ScoredCandidate(
            item=item,
            score=min(100.0, max(0.0, score)),
            reason=", ".join(reasons) or FALLBACK_REASON,
        )

    def score_candidates(self, candidates: list[MenuItem], preferences: Preferences) -> list[ScoredCandidate]:
        """Score and sort candidates, best first (ties keep menu order)."""
        scored = [self.score_item(item, preferences) for item in candidates]
        return sorted(scored, key=lambda c: c.score, reverse=True)

    # =========================================================================
    # Recommendations
    # =========================================================================

    def _to_recommendation(self, candidate: ScoredCandidate, people_count: int) -> Recommendation:
        item = candidate.item
        return Recommendation(
            item_id=item.id,
            name=item.name,
            display_name=item.display_name,
            price=item.price,
            quantity=people_count,
            total_price=item.price * people_count,
            category=item.category,
            reason=candidate.reason,
            confidence=round(candidate.score),
        )

    def recommend(self, session: RecommendationSession, menu_items: list[MenuItem]) -> RecommendationResult:
        """
        Generate the ranked recommendations and complete the session.

        Raises:
            InvalidSessionStepError: session is not active
            MenuUnavailableError: the branch menu has no items
            EmptyCandidateSetError: every item was filtered out
        """
        self._require_active(session, "cannot recommend")
        if not menu_items:
            raise MenuUnavailableError(session.branch_id)

        preferences = session.preferences
        candidates = self.filter_candidates(menu_items, preferences)
        logger.info(
            "Session %s: %d of %d menu items pass the filters",
            session.session_id, len(candidates), len(menu_items),
        )
        if not candidates:
            logger.warning("Session %s: no menu items match preferences %s", session.session_id, preferences)
            raise EmptyCandidateSetError(preferences, len(menu_items))

        top = self.score_candidates(candidates, preferences)[: self.top_n]
        recommendations = [self._to_recommendation(c, session.people_count) for c in top]

        session.recommendations = recommendations
        session.status = SessionStatus.COMPLETED
        session.completed_at = datetime.now(timezone.utc)
        logger.info("Session %s completed; primary recommendation %s", session.session_id, top[0].item.name)

        return RecommendationResult(
            session_id=session.session_id,
            primary=recommendations[0],
            alternatives=recommendations[1:],
            preferences=preferences,
        )
