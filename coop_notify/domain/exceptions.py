"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NotFoundError(DomainException):
    """Referenced notification or loan does not exist"""

    pass


class UnauthorizedError(DomainException):
    """Owner does not match the row a scoped mutation targets"""

    pass


class TransientRemoteError(DomainException):
    """Remote store query or network call failed"""

    pass


class DecodeError(DomainException):
    """Structured payload or remote row is malformed"""

    pass


class ConnectivityTimeoutError(DomainException):
    """Connectivity probe did not answer within its bound"""

    pass
