class DomainError(Exception):
    """Base exception for business rule violations."""

    http_status = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    http_status = 400


class InvalidTransitionError(ValidationError):
    """Raised when a status change is not declared for the caller's role."""

    def __init__(self, workflow: str, from_status: str, to_status: str, role: str):
        self.workflow = workflow
        self.from_status = from_status
        self.to_status = to_status
        self.role = role
        super().__init__(f"{workflow}: transition {from_status} -> {to_status} is not allowed for {role}")


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or the session is missing."""

    http_status = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    http_status = 403


class NotFoundError(DomainError):
    http_status = 404


class ConflictError(DomainError):
    """Raised when a conditional update lost the race against another writer."""

    http_status = 409
