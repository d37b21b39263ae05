class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is missing, malformed or violates domain rules."""


class DuplicateIdentity(DomainError):
    """Raised when a username or email is already registered."""


class DuplicateEnrollment(DomainError):
    """Raised when a roll number is already enrolled in the class."""


class NotFound(DomainError):
    """Raised for absent resources and for resources the actor may not see.

    Both cases share this type so existence cannot be inferred.
    """


class InvalidCredentials(DomainError):
    """Raised when login credentials are invalid."""


class AccessDenied(DomainError):
    """Raised when the actor knows the resource exists but lacks permission."""


class PartialBatchFailure(DomainError):
    """Raised on request when a bulk operation had failing rows."""

    def __init__(self, message: str, outcomes):
        super().__init__(message)
        self.outcomes = list(outcomes)


class ClassCodeTaken(DomainError):
    """Raised by a class repository when a join-code is already in use."""
