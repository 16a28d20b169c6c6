"""
Defines the values that flow through the request pipeline.

These types are as simple as possible in order to most conveniently consume and
produce instances of them.
"""

import base64
import json
from dataclasses import dataclass, field, replace
from datetime import timedelta
from enum import Enum
from typing import Any, Mapping, Optional, Union, TYPE_CHECKING

from .errors import EndpointError, ErrorKind

if TYPE_CHECKING:
    from .auth import AuthPolicy


@dataclass(frozen=True)
class CachePolicy:
    """
    How long a successful response for an endpoint may be served from the cache.
    """

    ttl: timedelta = timedelta(0)
    """
    The time-to-live of a cached response. Zero means responses are never cached.
    """

    @property
    def enabled(self) -> bool:
        return self.ttl > timedelta(0)

    @property
    def ttl_milliseconds(self) -> int:
        return self.ttl // timedelta(milliseconds=1)


@dataclass(frozen=True)
class RequestDescriptor:
    """
    Everything needed to dispatch one request.

    A descriptor is built once per call and never mutated afterwards. Steps that need a different request, such as
    attaching credentials, derive a new descriptor with `with_headers()`.
    """

    method: str
    """
    The HTTP method of the request. E.g., "GET".
    """

    url: str
    """
    The absolute URL with every path parameter substituted and without the query string.
    """

    url_template: str = ''
    """
    The URL as declared by the endpoint, with `{name}` placeholders still in place.
    """

    headers: Mapping[str, str] = field(default_factory=dict)
    query_parameters: Mapping[str, Any] = field(default_factory=dict)
    path_parameters: Mapping[str, Any] = field(default_factory=dict)
    body: Any = None
    cache_policy: CachePolicy = field(default_factory=CachePolicy)
    auth_policy: Optional['AuthPolicy'] = None

    expected_status_code: int = 200
    """
    The only status code treated as success. Any other status, 2xx or not, is a failure.
    """

    multipart: bool = False
    """
    Whether `body` is a mapping of form fields and files to send as multipart/form-data.
    """

    def with_headers(self, headers: Mapping[str, str]) -> 'RequestDescriptor':
        return replace(self, headers=dict(headers))


@dataclass
class Response:
    """
    Represents an arbitrary response, without any bells and whistles.

    We deliberately do not hand out `requests.Response`: a cached response never touched the network, and a plain
    value is trivial to build for one.
    """

    status: int
    """
    The status code of the response. E.g., 200 or 400.
    """

    reason: str
    """
    The reason string, which relates to the status code.
    """

    headers: Mapping[str, str]
    """
    All the headers sent with the response.
    """

    body: bytes = b''
    """
    The raw response payload.
    """

    url: str = ''

    from_cache: bool = False
    """
    True when the response was synthesized from a cache entry instead of received from the transport.
    """

    @property
    def text(self) -> str:
        return self.body.decode('utf-8', errors='replace')

    @property
    def data(self) -> Any:
        """
        The payload decoded as JSON, or as text when it is not JSON. An empty payload is `None`.
        """
        if not self.body:
            return None
        try:
            return json.loads(self.text)
        except ValueError:
            return self.text

    @property
    def is_successful(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status < 500

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500


@dataclass
class CacheEntry:
    """
    A cache entry.

    Only the payload is remembered. A hit always reports the endpoint's expected status code, so status and headers
    would never be read back.
    """

    fingerprint: str
    """
    The key the entry is stored under, as produced by `keys.derive_key()`.
    """

    written_at: float
    """
    When the entry was written, in seconds since the epoch.
    """

    payload: str
    """
    The raw, unmapped response body, base64 encoded so that any byte sequence survives storage as text.
    """

    @property
    def body(self) -> bytes:
        return base64.b64decode(self.payload, validate=True)


class PipelineState(Enum):
    """
    Where a pipeline run ended. Failures record the state they failed in.
    """
    INIT = 'init'
    CACHE_HIT = 'cache_hit'
    SENT = 'sent'
    RESPONSE_RECEIVED = 'response_received'
    DONE = 'done'


@dataclass
class Success:
    response: Response
    state: PipelineState = PipelineState.DONE

    @property
    def ok(self) -> bool:
        return True


@dataclass
class Failure:
    error: EndpointError
    state: PipelineState = PipelineState.INIT
    """
    The state the pipeline was in when it failed.
    """

    @property
    def ok(self) -> bool:
        return False

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind


PipelineResult = Union[Success, Failure]
