from abc import ABC, abstractmethod
import logging
from typing import Optional

import requests

from .config import ConnectivityConfig, DEFAULT_CONNECTIVITY


logger = logging.getLogger(__name__)


class Gate(ABC):
    """
    Decides, before anything else happens, whether a request is worth attempting.
    """

    @abstractmethod
    def check(self) -> bool:
        """
        @return
          `False` if there is no network path, in which case the request fails without being sent.
        """

    def close(self):
        """
        Close any resources associated with the gate.
        """


class ConnectivityGate(Gate):
    """
    A cheap pre-flight check for whether there is any network path at all.

    A positive answer is a heuristic, not a promise that the real request will succeed. A negative answer lets the
    pipeline fail at once instead of waiting out the request's own, much longer, timeouts.
    """

    def __init__(self,
                 config: ConnectivityConfig = DEFAULT_CONNECTIVITY,
                 session: Optional[requests.Session] = None) -> None:
        self.config = config
        self.session = session or requests.Session()

    def check(self) -> bool:
        try:
            response = self.session.get(self.config.probe_url, timeout=self.config.timeout)
        except requests.RequestException as e:
            logger.info('Connectivity probe to {} failed: {!r}'.format(self.config.probe_url, e))
            return False

        if response.status_code != 200:
            logger.info('Connectivity probe to {} answered {}'.format(self.config.probe_url, response.status_code))
            return False
        return True

    def close(self):
        self.session.close()


class AlwaysConnected(Gate):
    """
    A gate that never blocks a request.
    """

    def check(self) -> bool:
        return True
