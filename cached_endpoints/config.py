"""
Static defaults shared by every endpoint.
"""

from dataclasses import dataclass


DEFAULT_HEADERS = {
    'Accept': 'application/json',
    'Content-Type': 'application/json; charset=utf-8',
}


@dataclass(frozen=True)
class Timeouts:
    """
    Timeouts for a single transport call, in seconds.
    """

    connect: float = 30.0
    read: float = 30.0

    def as_requests_timeout(self):
        return (self.connect, self.read)


@dataclass(frozen=True)
class ConnectivityConfig:
    """
    Where and how quickly to probe for a working network path.
    """

    probe_url: str = 'https://www.google.com'
    timeout: float = 5.0


DEFAULT_TIMEOUTS = Timeouts()
DEFAULT_CONNECTIVITY = ConnectivityConfig()
