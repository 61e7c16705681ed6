"""
Exceptions raised by registry_image.
"""
import enum
from typing import Optional


class ErrorKind(enum.Enum):
    """
    Classification of a failed registry operation.
    """

    INVALID_REFERENCE = "InvalidReference"
    PUSH_FAILED = "PushFailed"
    BAD_CREDENTIALS = "BadCredentials"
    TOKEN_FETCH_FAILED = "TokenFetchFailed"
    TOKEN_PARSE_FAILED = "TokenParseFailed"
    REGISTRY_REJECTED = "RegistryRejected"
    TRANSPORT = "Transport"


class RegistryException(Exception):
    """
    Base class for all registry_image errors. None of these are retried
    internally.
    """

    kind: ErrorKind

    def __init__(
        self,
        message: str,
        *,
        registry: str = "",
        repository: str = "",
        status: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.registry = registry
        self.repository = repository
        self.status = status

    def __str__(self) -> str:
        where = "/".join(part for part in (self.registry, self.repository) if part)
        text = self.message
        if where:
            text = "{}: {}".format(where, text)
        if self.status:
            text = "{} ({})".format(text, self.status)
        return text


class InvalidReferenceError(RegistryException):
    """The image reference has a malformed digest suffix."""

    kind = ErrorKind.INVALID_REFERENCE


class PushFailedError(RegistryException):
    """The engine or registry reported an error while pushing."""

    kind = ErrorKind.PUSH_FAILED


class BadCredentialsError(RegistryException):
    """Basic auth was rejected and no bearer challenge was offered."""

    kind = ErrorKind.BAD_CREDENTIALS


class TokenFetchError(RegistryException):
    """The token endpoint did not answer with 200."""

    kind = ErrorKind.TOKEN_FETCH_FAILED


class TokenParseError(RegistryException):
    """The token endpoint answer carried no usable token."""

    kind = ErrorKind.TOKEN_PARSE_FAILED


class RegistryRejectedError(RegistryException):
    """The registry answered with an unexpected status."""

    kind = ErrorKind.REGISTRY_REJECTED


class RegistryTransportError(RegistryException):
    """The registry or engine could not be reached."""

    kind = ErrorKind.TRANSPORT
