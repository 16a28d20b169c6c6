"""
Authentication policies for endpoints.

A policy does two things: it attaches credentials to an outgoing request, and it is told about every response that
came back from the network so it can react when the credentials were rejected (e.g. by refreshing a token or logging
the user out). Reacting is a side effect only. Whether the call succeeded is decided by the pipeline.
"""

from abc import ABC, abstractmethod
import logging
from typing import Callable, Iterable, Mapping, Optional

from .model import RequestDescriptor, Response
from .util import merge_headers


logger = logging.getLogger(__name__)

UnauthorizedCallback = Callable[[Response], None]


def _ignore(response: Response) -> None:
    pass


class AuthPolicy(ABC):
    def __init__(self,
                 unauthorized_status_codes: Iterable[int] = (),
                 on_unauthorized: Optional[UnauthorizedCallback] = None) -> None:
        self.unauthorized_status_codes = frozenset(unauthorized_status_codes)
        self.on_unauthorized = on_unauthorized or _ignore

    @abstractmethod
    def credentials(self) -> Mapping[str, str]:
        """
        The headers that carry this policy's credentials.
        """

    def attach(self, descriptor: RequestDescriptor) -> RequestDescriptor:
        """
        Return a copy of `descriptor` with credentials added to its headers.

        Headers the caller set explicitly win over the policy's, so a request can carry its own credentials.
        """
        credentials = self.credentials()
        if not credentials:
            return descriptor
        return descriptor.with_headers(merge_headers(credentials, descriptor.headers))

    def notify_if_unauthorized(self, response: Response) -> bool:
        """
        Invoke the unauthorized callback if `response` says the credentials were rejected.

        @return
          Whether the callback was invoked.
        """
        if response.status not in self.unauthorized_status_codes:
            return False

        logger.info('Status {} signals rejected credentials. Notifying the unauthorized callback.'.format(
            response.status))
        try:
            self.on_unauthorized(response)
        except Exception:
            logger.exception('Unauthorized callback raised. The outcome of the request is unaffected.')
        return True


class NoAuth(AuthPolicy):
    def credentials(self) -> Mapping[str, str]:
        return {}

    def __repr__(self):
        return 'NoAuth()'


class BearerTokenAuth(AuthPolicy):
    def __init__(self,
                 token: str,
                 unauthorized_status_codes: Iterable[int] = (401,),
                 on_unauthorized: Optional[UnauthorizedCallback] = None) -> None:
        super().__init__(unauthorized_status_codes, on_unauthorized)
        self.token = token

    def credentials(self) -> Mapping[str, str]:
        return {'Authorization': 'Bearer {}'.format(self.token)}

    def __repr__(self):
        return 'BearerTokenAuth(token=***)'


class CustomHeaderAuth(AuthPolicy):
    def __init__(self,
                 header_name: str,
                 token: str,
                 prefix: Optional[str] = None,
                 unauthorized_status_codes: Iterable[int] = (401,),
                 on_unauthorized: Optional[UnauthorizedCallback] = None) -> None:
        """
        @param header_name
          The header that carries the token, e.g. "X-API-KEY".
        @param token
          The credential itself.
        @param prefix
          Prepended to the token verbatim, e.g. "Token ".
        """
        super().__init__(unauthorized_status_codes, on_unauthorized)
        self.header_name = header_name
        self.token = token
        self.prefix = prefix

    def credentials(self) -> Mapping[str, str]:
        return {self.header_name: '{}{}'.format(self.prefix or '', self.token)}

    def __repr__(self):
        return 'CustomHeaderAuth(header_name={!r}, token=***)'.format(self.header_name)
