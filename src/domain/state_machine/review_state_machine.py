from src.domain.enums.request_status import RequestStatus
from src.domain.exceptions import ConflictError


# Mapping of valid transitions: from_status -> set of allowed to_statuses
VALID_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset(
        {RequestStatus.APPROVED, RequestStatus.REJECTED, RequestStatus.EDITED}
    ),
    # EDITED only exists inside an edit-and-approve action
    RequestStatus.EDITED: frozenset({RequestStatus.APPROVED}),
    RequestStatus.APPROVED: frozenset(),
    RequestStatus.REJECTED: frozenset(),
}


class InvalidReviewTransitionError(ConflictError):
    """Raised when a review transition is not permitted from the current status."""

    def __init__(self, from_status: RequestStatus, to_status: RequestStatus) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid transition from {from_status.value} to {to_status.value}. "
            f"Allowed transitions: {sorted(s.value for s in VALID_TRANSITIONS.get(from_status, frozenset()))}"
        )


class ReviewStateMachine:
    """
    Validates review transitions for product requests.

    Stateless, call validate_transition() with explicit statuses.
    """

    def can_transition(self, from_status: RequestStatus, to_status: RequestStatus) -> bool:
        """Return True if transitioning from_status → to_status is permitted."""
        if from_status.is_terminal:
            return False
        return to_status in VALID_TRANSITIONS.get(from_status, frozenset())

    def validate_transition(self, from_status: RequestStatus, to_status: RequestStatus) -> None:
        """Raise InvalidReviewTransitionError if the transition is not permitted."""
        if not self.can_transition(from_status, to_status):
            raise InvalidReviewTransitionError(from_status, to_status)

    def get_allowed_transitions(self, from_status: RequestStatus) -> frozenset[RequestStatus]:
        return VALID_TRANSITIONS.get(from_status, frozenset())
