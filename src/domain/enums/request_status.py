from enum import Enum


class RequestStatus(str, Enum):
    """Review states of a seller's product request."""

    PENDING = "pending"
    EDITED = "edited"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        """Terminal states cannot be transitioned out of."""
        return self in (RequestStatus.APPROVED, RequestStatus.REJECTED)
