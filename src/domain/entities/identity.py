from dataclasses import dataclass

from src.domain.enums.user_role import AccountStatus, UserRole


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, as asserted by the upstream auth gateway."""

    user_id: str
    role: UserRole
    name: str = ""
    account_status: AccountStatus | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN

    @property
    def can_submit_requests(self) -> bool:
        return self.role.is_seller and self.account_status is AccountStatus.ACTIVE
