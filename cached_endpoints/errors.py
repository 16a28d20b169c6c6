"""
The error taxonomy shared by the pipeline and the endpoint façade.

Every failure a caller can observe is an `EndpointError`. The `kind` attribute says where the failure came from, so
callers that only care about the broad category do not need to match on classes.
"""

from enum import Enum
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .model import Response


class ErrorKind(Enum):
    CONNECTIVITY = 'connectivity'
    TRANSPORT = 'transport'
    STATUS_MISMATCH = 'status_mismatch'
    MAPPING = 'mapping'
    ARGUMENT = 'argument'
    UNEXPECTED = 'unexpected'


class TransportFault(Enum):
    """
    The transport's own classification of why a request never produced a response.
    """
    CONNECT_TIMEOUT = 'connect_timeout'
    READ_TIMEOUT = 'read_timeout'
    CONNECTION = 'connection'
    TLS = 'tls'
    CANCELLED = 'cancelled'
    UNKNOWN = 'unknown'


_TRANSPORT_MESSAGES = {
    TransportFault.CONNECT_TIMEOUT: 'Connection timed out. Please check your internet connection and try again.',
    TransportFault.READ_TIMEOUT: 'Response timed out. Please check your internet connection and try again.',
    TransportFault.CONNECTION: 'Connection error. Please check your internet connection and try again.',
    TransportFault.TLS: "There was a problem with the server's security certificate. Please try again later.",
    TransportFault.CANCELLED: 'The request was cancelled.',
    TransportFault.UNKNOWN: 'An unknown error occurred. Please try again.',
}


class EndpointError(Exception):
    kind = None  # type: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def friendly_message(self) -> str:
        """
        A sentence suitable for showing to an end user.
        """
        return 'An unknown error occurred. Please try again.'


class ConnectivityError(EndpointError):
    kind = ErrorKind.CONNECTIVITY

    def __init__(self, message: str = 'Unable to connect to the internet. '
                                      'Check your internet connection and try again.') -> None:
        super().__init__(message)

    @property
    def friendly_message(self) -> str:
        return _TRANSPORT_MESSAGES[TransportFault.CONNECTION]


class TransportError(EndpointError):
    kind = ErrorKind.TRANSPORT

    def __init__(self, fault: TransportFault, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.fault = fault
        self.cause = cause

    @property
    def friendly_message(self) -> str:
        return _TRANSPORT_MESSAGES[self.fault]


class StatusMismatchError(EndpointError):
    kind = ErrorKind.STATUS_MISMATCH

    def __init__(self, expected_status_code: int, response: 'Response') -> None:
        super().__init__('Expected status {} but received {} {}'.format(
            expected_status_code, response.status, response.reason))
        self.expected_status_code = expected_status_code
        self.response = response

    @property
    def status_code(self) -> int:
        return self.response.status

    @property
    def body(self) -> bytes:
        return self.response.body

    @property
    def friendly_message(self) -> str:
        return 'The server returned an unexpected response. Please try again.'


class MappingError(EndpointError):
    """
    The request succeeded, but the caller's mapping function could not turn the payload into a value.

    No status code is attached: the response matched the expected status, so the status carries no information about
    this failure.
    """
    kind = ErrorKind.MAPPING

    def __init__(self, cause: BaseException, response: 'Response') -> None:
        super().__init__('Mapping Error: {!r}'.format(cause))
        self.cause = cause
        self.response = response

    @property
    def friendly_message(self) -> str:
        return 'The response could not be read. Please try again later.'


class UnexpectedError(EndpointError):
    """
    Something outside the known failure modes went wrong while running the request, e.g. the cache storage or the
    transport raised an error of its own.
    """
    kind = ErrorKind.UNEXPECTED

    def __init__(self, cause: BaseException) -> None:
        super().__init__('Unknown Error: {!r}'.format(cause))
        self.cause = cause


class ArgumentError(EndpointError, ValueError):
    """
    The caller broke the endpoint's contract, e.g. by leaving out a path parameter.

    This is a programming mistake, so it is raised before any I/O and is never handed to an error callback.
    """
    kind = ErrorKind.ARGUMENT
