import hashlib
import logging

from .model import RequestDescriptor
from .util import canonical_json


logger = logging.getLogger(__name__)


def describe(descriptor: RequestDescriptor) -> str:
    """
    Build the text a fingerprint is derived from.

    One line per field, in a fixed order. The URL is taken before the query string is appended; query parameters get
    their own line so that their order never matters.
    """
    return '\n'.join([
        '{} {}'.format(descriptor.method.lower(), descriptor.url),
        'H:{}'.format(canonical_json(dict(descriptor.headers))),
        'P:{}'.format(canonical_json(dict(descriptor.path_parameters))),
        'Q:{}'.format(canonical_json(dict(descriptor.query_parameters))),
        'B:{}'.format(canonical_json(descriptor.body)),
        'C:{}'.format(descriptor.cache_policy.ttl_milliseconds),
    ])


def derive_key(descriptor: RequestDescriptor) -> str:
    """
    Derive the cache fingerprint of a request.

    @param descriptor
      The request, with headers as they were before credentials were attached.
    @return
      A hex encoded SHA-256 digest of the lower-cased request description.
    """
    description = describe(descriptor)
    fingerprint = hashlib.sha256(description.lower().encode('utf-8')).hexdigest()
    logger.debug('Derived fingerprint {} for request:\n{}'.format(fingerprint, description))
    return fingerprint
