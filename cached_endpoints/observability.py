"""
Request and response logging.

Everything here is advisory. Nothing returns a value the pipeline acts on.
"""

import logging
from typing import Any, Mapping, Optional
from urllib.parse import urlsplit

from .errors import EndpointError, MappingError, UnexpectedError
from .model import RequestDescriptor, Response


logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = frozenset({'authorization', 'proxy-authorization', 'cookie', 'x-api-key'})


def correlation_name(descriptor: RequestDescriptor) -> str:
    return '{} {}'.format(descriptor.method, urlsplit(descriptor.url).path or '/')


def redact_headers(headers: Mapping[str, str], extra_sensitive=()) -> dict:
    sensitive = SENSITIVE_HEADERS | {name.lower() for name in extra_sensitive}
    return {key: ('***' if key.lower() in sensitive else value) for key, value in headers.items()}


class RequestLogger:
    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self.log = log or logger

    def _emit(self, level: int, message: str, descriptor: RequestDescriptor, exc_info=None) -> None:
        name = correlation_name(descriptor)
        self.log.log(level, '[{}] {}'.format(name, message), extra={'correlation': name}, exc_info=exc_info)

    def _headers(self, descriptor: RequestDescriptor) -> dict:
        extra_sensitive = ()
        if descriptor.auth_policy is not None:
            extra_sensitive = descriptor.auth_policy.credentials().keys()
        return redact_headers(descriptor.headers, extra_sensitive)

    def request(self, descriptor: RequestDescriptor) -> None:
        self._emit(logging.INFO, '-> {} {}'.format(descriptor.method, descriptor.url), descriptor)
        self._emit(logging.DEBUG, 'HEADERS: {}'.format(self._headers(descriptor)), descriptor)
        self._emit(logging.DEBUG, 'QUERY PARAMETERS: {}'.format(dict(descriptor.query_parameters)), descriptor)
        if descriptor.body is not None:
            self._emit(logging.DEBUG, 'DATA: {}'.format(descriptor.body), descriptor)

    def cache_hit(self, descriptor: RequestDescriptor) -> None:
        self._emit(logging.INFO, 'Resolving request with cached response', descriptor)

    def response(self, descriptor: RequestDescriptor, response: Response) -> None:
        self._emit(logging.INFO, 'SUCCESS: {} {} ({})'.format(descriptor.method, descriptor.url, response.status),
                   descriptor)
        self._emit(logging.DEBUG, 'RAW DATA: {}'.format(response.text), descriptor)

    def error(self, descriptor: RequestDescriptor, error: EndpointError, response: Optional[Response] = None) -> None:
        self._emit(logging.WARNING, 'Request Error: {}: {}'.format(type(error).__name__, error.message), descriptor)
        if response is not None:
            self._emit(logging.DEBUG, 'REQUEST HEADERS: {}'.format(self._headers(descriptor)), descriptor)
            self._emit(logging.DEBUG, 'STATUS CODE: {}'.format(response.status), descriptor)
            self._emit(logging.DEBUG, 'RESPONSE DATA: {}'.format(response.text), descriptor)
            self._emit(logging.DEBUG, 'RESPONSE HEADERS: {}'.format(dict(response.headers)), descriptor)

    def mapped(self, descriptor: RequestDescriptor, value: Any) -> None:
        self._emit(logging.DEBUG, 'MAPPED DATA: {!r}'.format(value), descriptor)
        self._emit(logging.INFO, 'Mapping Successful', descriptor)

    def mapping_failed(self, descriptor: RequestDescriptor, error: MappingError) -> None:
        self._emit(logging.ERROR, 'Mapping Error', descriptor, exc_info=error.cause)

    def unexpected(self, descriptor: RequestDescriptor, error: UnexpectedError) -> None:
        self._emit(logging.ERROR, 'Unexpected Error: {!r}'.format(error.cause), descriptor, exc_info=error.cause)
