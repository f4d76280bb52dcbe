class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules (self-parent, cycle)."""


class NotFoundError(DomainError):
    """Raised when a referenced employee/node does not exist."""


class InvalidStateError(DomainError):
    """Raised when an editor command is not allowed in the current editor state."""


class UnsavedChangesError(InvalidStateError):
    """Raised when leaving edit mode would silently drop pending changes."""


class NetworkError(DomainError):
    """Raised when the employee directory cannot be reached."""


class ConflictError(DomainError):
    """Raised when the stored relationships changed concurrently."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
