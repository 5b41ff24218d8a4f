"""Domain-specific exceptions"""

from typing import Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    kind = "domain_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(DomainException):
    """Input could not be parsed or violates a field constraint"""

    kind = "invalid_input"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(DomainException):
    """Resource does not exist or is not visible to the caller"""

    kind = "not_found"


class ForbiddenError(DomainException):
    """Caller may not act on behalf of the requested user"""

    kind = "forbidden"


class ConflictError(DomainException):
    """Operation violates a lifecycle rule or a uniqueness constraint"""

    kind = "conflict"


class ConfigurationError(DomainException):
    """Stored data reached arithmetic that assumes an exhaustive enum"""

    kind = "configuration_error"


class UnsupportedFrequencyError(ConfigurationError):
    """Income stream frequency has no interval definition"""

    kind = "unsupported_frequency"

    def __init__(self, frequency: object):
        super().__init__(f"Unsupported income frequency: {frequency}")
        self.frequency = frequency
