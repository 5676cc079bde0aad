"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Input is malformed or breaks a pricing rule"""

    pass


class DuplicateRecordError(ValidationError):
    """A unique field (phone, national ID, email) already exists"""

    pass


class PreconditionViolation(DomainException):
    """Record is not in the state the operation requires"""

    pass


class NotFoundError(DomainException):
    """Requested record does not exist"""

    pass


class AuthenticationError(DomainException):
    """Bearer token is missing, expired or rejected by the identity provider"""

    pass


class AuthorizationError(DomainException):
    """Principal's role does not allow the operation"""

    pass


class DependencyFailure(DomainException):
    """Identity provider or record store is unavailable"""

    pass
