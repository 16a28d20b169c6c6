"""
Example endpoint families for two hypothetical services.
"""

from datetime import timedelta
import logging
from typing import Dict, Optional

from .auth import AuthPolicy, BearerTokenAuth, CustomHeaderAuth
from .endpoint import Endpoint
from .model import CachePolicy, Response
from .pipeline import Pipeline, default_pipeline


logger = logging.getLogger(__name__)


def _log_unauthorized(response: Response) -> None:
    logger.warning('Unauthorized access detected: {} {}'.format(response.status, response.url))


class CountryStateCityApi(Endpoint):
    domain_url = 'https://api.example-country-state-city.com'

    def __init__(self,
                 method: str,
                 url: str,
                 expected_status_code: int = 200,
                 auth_policy: Optional[AuthPolicy] = None,
                 cache_policy: CachePolicy = CachePolicy(ttl=timedelta(days=28)),
                 pipeline: Optional[Pipeline] = None) -> None:
        super().__init__(method, url,
                         expected_status_code=expected_status_code,
                         cache_policy=cache_policy,
                         auth_policy=auth_policy or self.default_auth(),
                         pipeline=pipeline)

    @staticmethod
    def default_auth() -> AuthPolicy:
        return CustomHeaderAuth(header_name='X-API-KEY',
                                token='your-api-key-here',
                                unauthorized_status_codes=(401, 403),
                                on_unauthorized=_log_unauthorized)

    @classmethod
    def endpoints(cls, pipeline: Optional[Pipeline] = None) -> Dict[str, Endpoint]:
        pipeline = pipeline or default_pipeline()
        return {
            'getAllCountries': cls('GET', '/v1/countries', pipeline=pipeline),
            'getCountryDetails': cls('GET', '/v1/countries/{country_code}', pipeline=pipeline),
            'getStatesOfCountry': cls('GET', '/v1/countries/{country_code}/states', pipeline=pipeline),
            'getCitiesOfState': cls('GET', '/v1/countries/{country_code}/states/{state_code}/cities',
                                    pipeline=pipeline),
        }


class UserManagementApi(Endpoint):
    domain_url = 'https://api.example-user-management.com'

    def __init__(self,
                 method: str,
                 url: str,
                 expected_status_code: int = 200,
                 cache_policy: CachePolicy = CachePolicy(),
                 pipeline: Optional[Pipeline] = None) -> None:
        super().__init__(method, url,
                         expected_status_code=expected_status_code,
                         cache_policy=cache_policy,
                         auth_policy=self.default_auth(),
                         pipeline=pipeline)

    @staticmethod
    def default_auth() -> AuthPolicy:
        return BearerTokenAuth(token='your-bearer-token-here',
                               unauthorized_status_codes=(401,),
                               on_unauthorized=_log_unauthorized)

    @classmethod
    def endpoints(cls, pipeline: Optional[Pipeline] = None) -> Dict[str, Endpoint]:
        pipeline = pipeline or default_pipeline()
        return {
            'login': cls('POST', '/auth/login', pipeline=pipeline),
            'getUserProfile': cls('GET', '/users/profile', pipeline=pipeline),
            'updateUserProfile': cls('PUT', '/users/profile', pipeline=pipeline),
            'changePassword': cls('POST', '/users/change-password', pipeline=pipeline),
        }
