"""Error taxonomy shared by every layer.

The API layer maps each family onto an HTTP status in ``src.api.errors``.
"""


class DomainError(Exception):
    """Base class for all back office errors."""


class ValidationError(DomainError):
    """Malformed or missing submission fields. No state was mutated."""


class ConflictError(DomainError):
    """Action attempted against a record in an incompatible state."""


class NotFoundError(DomainError):
    def __init__(self, entity: str, entity_id: object) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found.")


class PermissionDeniedError(DomainError):
    """The caller's identity may not perform this action."""


class UpstreamError(DomainError):
    """An external system (blob store, mailer, invoice provider) failed."""

    def __init__(self, service: str, message: str, detail: object | None = None) -> None:
        self.service = service
        self.detail = detail
        super().__init__(message)


class AllocationError(DomainError):
    """The sequence allocator could not hand out a value."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        super().__init__(f"Could not allocate sequence for '{key}': {reason}")
