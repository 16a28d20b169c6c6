"""
Declarative HTTP endpoints with authentication, response caching and connectivity gating.
"""

from .auth import AuthPolicy, BearerTokenAuth, CustomHeaderAuth, NoAuth
from .cache import ResponseCache
from .config import ConnectivityConfig, Timeouts
from .connectivity import AlwaysConnected, ConnectivityGate, Gate
from .endpoint import Endpoint
from .errors import (ArgumentError, ConnectivityError, EndpointError, ErrorKind, MappingError, StatusMismatchError,
                     TransportError, TransportFault, UnexpectedError)
from .keys import derive_key
from .model import CacheEntry, CachePolicy, Failure, PipelineState, RequestDescriptor, Response, Success
from .pipeline import Pipeline, default_pipeline
from .storage import FileStorage, MemoryStorage, Storage
from .transport import RequestsTransport, Transport
