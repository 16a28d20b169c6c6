from abc import ABC, abstractmethod
import logging
from typing import Any, Mapping, Optional, Tuple

import requests

from .config import DEFAULT_TIMEOUTS, Timeouts
from .errors import TransportError, TransportFault
from .model import RequestDescriptor, Response


logger = logging.getLogger(__name__)


class Transport(ABC):
    """
    Performs the actual network exchange for a prepared request.
    """

    @abstractmethod
    def send(self, descriptor: RequestDescriptor, timeouts: Timeouts = DEFAULT_TIMEOUTS) -> Response:
        """
        Send a request and return whatever the server answered.

        Any status code is a response, not an error. Judging the status is the caller's business.

        @param descriptor
          The fully prepared request, credentials included.
        @param timeouts
          Connect and read timeouts for this exchange.
        @return
          The response.
        @throws TransportError
          If no response was received.
        """

    def close(self):
        """
        Close any resources associated with the transport.
        """


def classify(error: requests.RequestException) -> TransportFault:
    # Order matters: ConnectTimeout and SSLError are also ConnectionErrors.
    if isinstance(error, requests.exceptions.ConnectTimeout):
        return TransportFault.CONNECT_TIMEOUT
    if isinstance(error, requests.exceptions.Timeout):
        return TransportFault.READ_TIMEOUT
    if isinstance(error, requests.exceptions.SSLError):
        return TransportFault.TLS
    if isinstance(error, requests.exceptions.ConnectionError):
        return TransportFault.CONNECTION
    return TransportFault.UNKNOWN


def split_multipart(body: Mapping[str, Any]) -> Tuple[dict, dict]:
    """
    Separate plain form fields from file parts.

    A value is a file part when it is a tuple (`(filename, fileobj[, content_type])`, as `requests` accepts them) or
    something with a `read()` method.
    """
    fields = {}
    files = {}
    for name, value in body.items():
        if isinstance(value, tuple) or hasattr(value, 'read'):
            files[name] = value
        else:
            fields[name] = value
    return fields, files


class RequestsTransport(Transport):
    def __init__(self, session: Optional[requests.Session] = None) -> None:
        self.session = session or requests.Session()

    def _body_arguments(self, descriptor: RequestDescriptor) -> dict:
        body = descriptor.body
        if body is None:
            return {}
        if descriptor.multipart:
            fields, files = split_multipart(body)
            return {'data': fields, 'files': files}
        if isinstance(body, (bytes, bytearray, str)):
            return {'data': body}
        return {'json': body}

    def _headers(self, descriptor: RequestDescriptor) -> dict:
        headers = dict(descriptor.headers)
        if descriptor.multipart:
            # requests has to generate the content type itself so that it includes the boundary.
            for key in [k for k in headers if k.lower() == 'content-type']:
                del headers[key]
        return headers

    def send(self, descriptor: RequestDescriptor, timeouts: Timeouts = DEFAULT_TIMEOUTS) -> Response:
        try:
            requests_response = self.session.request(
                descriptor.method,
                descriptor.url,
                params=dict(descriptor.query_parameters) or None,
                headers=self._headers(descriptor),
                timeout=timeouts.as_requests_timeout(),
                allow_redirects=False,
                **self._body_arguments(descriptor))
            body = requests_response.content
        except requests.RequestException as e:
            fault = classify(e)
            logger.info('Transport fault {} for {} {}: {!r}'.format(fault.value, descriptor.method, descriptor.url, e))
            raise TransportError(fault, str(e), cause=e) from e

        return Response(status=requests_response.status_code,
                        reason=requests_response.reason or '',
                        headers=dict(requests_response.headers),
                        body=body,
                        url=requests_response.url or descriptor.url)

    def close(self):
        self.session.close()
