from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    DEALER = "dealer"
    AGENT = "agent"
    USER = "user"

    @property
    def is_seller(self) -> bool:
        return self in (UserRole.DEALER, UserRole.AGENT)


class AccountStatus(str, Enum):
    """Seller account states. Only ACTIVE may submit product requests."""

    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"
    SUSPENDED = "suspended"
