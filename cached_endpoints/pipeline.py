import logging
import threading
from typing import Optional

from .auth import AuthPolicy, NoAuth
from .cache import ResponseCache
from .config import DEFAULT_TIMEOUTS, Timeouts
from .connectivity import ConnectivityGate, Gate
from .errors import ConnectivityError, StatusMismatchError, TransportError, UnexpectedError
from .keys import derive_key
from .model import Failure, PipelineResult, PipelineState, RequestDescriptor, Response, Success
from .observability import RequestLogger
from .storage import MemoryStorage
from .transport import RequestsTransport, Transport


logger = logging.getLogger(__name__)


class Pipeline:
    """
    Runs one request through connectivity gating, caching, authentication and the transport, in that order.

    Steps:
    1. Probe connectivity. No path means `Failure(ConnectivityError)` before the cache or transport is touched.
    2. Unless the call ignores the cache or the TTL is zero, derive the fingerprint and look it up.
    3. On a hit, answer with the cached payload and the expected status. Auth and transport are skipped.
    4. Otherwise attach credentials, send, and let the auth policy see the response whatever its status.
    5. A response with the expected status is written to the cache (when caching applies) and returned. Any other
       status is `Failure(StatusMismatchError)`.

    Errors nothing else classifies, from the gate, the cache or the transport, become `Failure(UnexpectedError)`. A
    failed cache write is logged and the response is still returned.

    A single pipeline is safe to share between threads; the response cache is the only state it mutates.
    """

    def __init__(self,
                 transport: Optional[Transport] = None,
                 cache: Optional[ResponseCache] = None,
                 gate: Optional[Gate] = None,
                 request_logger: Optional[RequestLogger] = None,
                 timeouts: Timeouts = DEFAULT_TIMEOUTS) -> None:
        self.transport = transport or RequestsTransport()
        self.cache = cache or ResponseCache(MemoryStorage())
        self.gate = gate or ConnectivityGate()
        self.request_logger = request_logger or RequestLogger()
        self.timeouts = timeouts

    def execute(self, descriptor: RequestDescriptor, ignore_cache: bool = False) -> PipelineResult:
        try:
            connected = self.gate.check()
        except Exception as e:
            return self._unexpected(descriptor, e, PipelineState.INIT)
        if not connected:
            error = ConnectivityError()
            self.request_logger.error(descriptor, error)
            return Failure(error, PipelineState.INIT)

        policy = descriptor.cache_policy
        caching = policy.enabled and not ignore_cache
        fingerprint = None
        if caching:
            fingerprint = derive_key(descriptor)
            try:
                entry = self.cache.lookup(fingerprint, policy.ttl)
            except Exception as e:
                return self._unexpected(descriptor, e, PipelineState.INIT)
            if entry is not None:
                self.request_logger.cache_hit(descriptor)
                return Success(Response(status=descriptor.expected_status_code,
                                        reason='OK',
                                        headers={},
                                        body=entry.body,
                                        url=descriptor.url,
                                        from_cache=True),
                               PipelineState.CACHE_HIT)
        else:
            logger.info('Caching does not apply to {} {}'.format(descriptor.method, descriptor.url))

        auth = descriptor.auth_policy or NoAuth()  # type: AuthPolicy
        prepared = auth.attach(descriptor)

        self.request_logger.request(prepared)
        try:
            response = self.transport.send(prepared, self.timeouts)
        except TransportError as e:
            self.request_logger.error(prepared, e)
            return Failure(e, PipelineState.SENT)
        except Exception as e:
            return self._unexpected(prepared, e, PipelineState.SENT)

        auth.notify_if_unauthorized(response)

        if response.status != descriptor.expected_status_code:
            error = StatusMismatchError(descriptor.expected_status_code, response)
            self.request_logger.error(prepared, error, response)
            return Failure(error, PipelineState.RESPONSE_RECEIVED)

        if caching:
            try:
                self.cache.store(fingerprint, response.body)
            except Exception:
                logger.exception('Could not write cache entry {}'.format(fingerprint))

        self.request_logger.response(prepared, response)
        return Success(response, PipelineState.DONE)

    def _unexpected(self, descriptor: RequestDescriptor, cause: Exception, state: PipelineState) -> Failure:
        error = UnexpectedError(cause)
        self.request_logger.unexpected(descriptor, error)
        return Failure(error, state)

    def close(self):
        self.transport.close()
        self.gate.close()
        self.cache.close()


_default_pipeline = None  # type: Optional[Pipeline]
_default_pipeline_lock = threading.Lock()


def default_pipeline() -> Pipeline:
    """
    The pipeline shared by every endpoint that is not given one, created on first use.

    Sharing it means all those endpoints share one response cache and one HTTP session.
    """
    global _default_pipeline
    with _default_pipeline_lock:
        if _default_pipeline is None:
            _default_pipeline = Pipeline()
        return _default_pipeline
