"""
Exceptions raised by the recommendation flow.

Unparseable menu lines and unmatched order fragments are not errors; they are
dropped and reported through ParseReport / an empty OrderQuote instead.
"""


class MenuUnavailableError(Exception):
    """Raised when a branch has no menu text or nothing in it could be parsed."""

    def __init__(self, branch_id: str | None = None):
        self.branch_id = branch_id
        super().__init__(f"No parseable menu available for branch {branch_id}")


class RecommendationError(Exception):
    """Base class for recommendation session failures."""


class EmptyCandidateSetError(RecommendationError):
    """Filtering by the customer's preferences left no menu items."""

    def __init__(self, preferences, menu_size: int):
        self.preferences = preferences
        self.menu_size = menu_size
        super().__init__(
            f"No menu items match the stated preferences ({menu_size} items considered)"
        )


class InvalidSessionStepError(RecommendationError):
    """The session is not in a state that allows the requested operation."""

    def __init__(self, session_id: str, status: str, current_step: int, reason: str):
        self.session_id = session_id
        self.status = status
        self.current_step = current_step
        super().__init__(
            f"Session {session_id} (status={status}, step={current_step}): {reason}"
        )
