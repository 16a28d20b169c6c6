import logging
import re
from typing import Any, Callable, List, Mapping, Optional

from .auth import AuthPolicy, NoAuth
from .config import DEFAULT_HEADERS
from .errors import ArgumentError, EndpointError, MappingError, UnexpectedError
from .model import CachePolicy, RequestDescriptor
from .pipeline import Pipeline, default_pipeline
from .util import merge_headers


logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r'\{([^{}]*)\}')

ErrorCallback = Callable[[EndpointError], Any]


class Endpoint:
    """
    A single API operation: a method, a URL template, and the policies that apply to it.

    Subclasses usually fix `domain_url` for a family of endpoints and pick default auth and cache policies, then
    declare the individual endpoints as instances.
    """

    domain_url = ''

    def __init__(self,
                 method: str,
                 url: str,
                 expected_status_code: int = 200,
                 cache_policy: CachePolicy = CachePolicy(),
                 auth_policy: Optional[AuthPolicy] = None,
                 pipeline: Optional[Pipeline] = None,
                 domain_url: Optional[str] = None,
                 default_headers: Optional[Mapping[str, str]] = None) -> None:
        """
        @param method
          The HTTP method, e.g. "GET".
        @param url
          The path of the endpoint relative to `domain_url`, with `{name}` placeholders for path parameters.
        @param expected_status_code
          The only status code that counts as success.
        @param pipeline
          The pipeline to run requests through. Defaults to the shared `default_pipeline()`, so endpoints built
          without one share a cache.
        """
        self.method = method.upper()
        self.url = url
        self.expected_status_code = expected_status_code
        self.cache_policy = cache_policy
        self.default_auth_policy = auth_policy or NoAuth()
        self.pipeline = pipeline or default_pipeline()
        if domain_url is not None:
            self.domain_url = domain_url
        self.default_headers = dict(default_headers or {})

    @property
    def full_url(self) -> str:
        return self.domain_url + self.url

    def placeholders(self) -> List[str]:
        """
        The names of the path parameters the URL requires, in order of first appearance.
        """
        names = []
        for name in PLACEHOLDER.findall(self.full_url):
            if name not in names:
                names.append(name)
        return names

    def resolve_url(self, path_parameters: Optional[Mapping[str, Any]] = None) -> str:
        path_parameters = path_parameters or {}
        missing = [name for name in self.placeholders() if name not in path_parameters]
        if missing:
            raise ArgumentError('This endpoint has required path parameters that were not passed: {}'.format(
                ', '.join(missing)))

        resolved = self.full_url
        for name in self.placeholders():
            resolved = resolved.replace('{' + name + '}', str(path_parameters[name]))
        return resolved

    def build(self,
              auth: Optional[AuthPolicy] = None,
              query: Optional[Mapping[str, Any]] = None,
              path_params: Optional[Mapping[str, Any]] = None,
              body: Any = None,
              headers: Optional[Mapping[str, str]] = None,
              multipart: bool = False) -> RequestDescriptor:
        """
        Build the request a call would dispatch.

        @throws ArgumentError
          If a path parameter is missing, or a multipart body is not a mapping.
        """
        url = self.resolve_url(path_params)
        if multipart and not isinstance(body, Mapping):
            raise ArgumentError('multipart is set but the body is not a mapping of form fields and files')

        return RequestDescriptor(
            method=self.method,
            url=url,
            url_template=self.full_url,
            headers=merge_headers(DEFAULT_HEADERS, self.default_headers, headers or {}),
            query_parameters=dict(query or {}),
            path_parameters=dict(path_params or {}),
            body=body,
            cache_policy=self.cache_policy,
            auth_policy=auth or self.default_auth_policy,
            expected_status_code=self.expected_status_code,
            multipart=multipart,
        )

    def call(self,
             auth: Optional[AuthPolicy] = None,
             query: Optional[Mapping[str, Any]] = None,
             path_params: Optional[Mapping[str, Any]] = None,
             body: Any = None,
             headers: Optional[Mapping[str, str]] = None,
             map_fn: Optional[Callable[[Any], Any]] = None,
             on_error: Optional[ErrorCallback] = None,
             ignore_cache: bool = False,
             null_if_error: bool = False,
             multipart: bool = False) -> Any:
        """
        Make a request to the endpoint and return the mapped response payload.

        The payload handed to `map_fn` is the response body decoded as JSON (or text, if it is not JSON).

        When the request fails, `on_error` is called with the error and `None` is returned. Without `on_error`, the
        error is raised, unless `null_if_error` asks for `None` instead.

        @throws ArgumentError
          If the call breaks the endpoint's contract. This is raised even when `on_error` is given.
        """
        descriptor = self.build(auth=auth, query=query, path_params=path_params, body=body, headers=headers,
                                multipart=multipart)

        result = self.pipeline.execute(descriptor, ignore_cache=ignore_cache)
        if not result.ok:
            return self._fail(result.error, on_error, null_if_error)

        response = result.response
        try:
            payload = response.data
            value = map_fn(payload) if map_fn is not None else payload
        except Exception as e:
            error = MappingError(e, response)
            self.pipeline.request_logger.mapping_failed(descriptor, error)
            return self._fail(error, on_error, null_if_error)

        self.pipeline.request_logger.mapped(descriptor, value)
        return value

    def _fail(self, error: EndpointError, on_error: Optional[ErrorCallback], null_if_error: bool) -> None:
        if on_error is not None:
            on_error(error)
            return None
        if null_if_error:
            logger.info('Returning None for failed {} {}: {}'.format(self.method, self.url, error.message))
            return None
        if isinstance(error, (MappingError, UnexpectedError)):
            raise error from error.cause
        raise error

    def __repr__(self):
        return '{}({} {})'.format(type(self).__name__, self.method, self.full_url)
