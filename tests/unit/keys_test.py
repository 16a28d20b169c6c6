from dataclasses import replace
from datetime import timedelta
import hashlib
from unittest import TestCase

from ddt import ddt, data, unpack

from cached_endpoints.auth import BearerTokenAuth, NoAuth
from cached_endpoints.keys import derive_key, describe
from cached_endpoints.model import CachePolicy, RequestDescriptor


BASE = RequestDescriptor(
    method='GET',
    url='https://api.example.com/v1/countries/US/states',
    url_template='https://api.example.com/v1/countries/{code}/states',
    headers={'Accept': 'application/json'},
    query_parameters={'page': 1, 'size': 20},
    path_parameters={'code': 'US'},
    body=None,
    cache_policy=CachePolicy(ttl=timedelta(minutes=5)),
)


@ddt
class TestDeriveKey(TestCase):
    def test_identical_descriptors_share_a_key(self):
        other = RequestDescriptor(
            method='GET',
            url='https://api.example.com/v1/countries/US/states',
            headers={'Accept': 'application/json'},
            query_parameters={'size': 20, 'page': 1},
            path_parameters={'code': 'US'},
            cache_policy=CachePolicy(ttl=timedelta(seconds=300)),
        )

        self.assertEqual(derive_key(BASE), derive_key(other))

    @data(
        ('method', 'POST'),
        ('url', 'https://api.example.com/v1/countries/CA/states'),
        ('headers', {'Accept': 'text/plain'}),
        ('query_parameters', {'page': 2, 'size': 20}),
        ('path_parameters', {'code': 'CA'}),
        ('body', {'name': 'Ohio'}),
        ('cache_policy', CachePolicy(ttl=timedelta(minutes=6))),
    )
    @unpack
    def test_changing_one_field_changes_the_key(self, field_name, value):
        changed = replace(BASE, **{field_name: value})

        self.assertNotEqual(derive_key(BASE), derive_key(changed))

    @data(
        ('url_template', 'https://api.example.com/{anything}'),
        ('auth_policy', BearerTokenAuth('abc')),
        ('expected_status_code', 201),
    )
    @unpack
    def test_ignores_fields_outside_the_request_identity(self, field_name, value):
        changed = replace(BASE, **{field_name: value})

        self.assertEqual(derive_key(BASE), derive_key(changed))

    def test_is_a_sha256_of_the_lower_cased_description(self):
        description = describe(BASE)

        self.assertEqual(hashlib.sha256(description.lower().encode('utf-8')).hexdigest(), derive_key(BASE))
        self.assertEqual([
            'get https://api.example.com/v1/countries/US/states',
            'H:{"Accept":"application/json"}',
            'P:{"code":"US"}',
            'Q:{"page":1,"size":20}',
            'B:null',
            'C:300000',
        ], description.split('\n'))

    def test_query_string_is_not_part_of_the_url_line(self):
        self.assertTrue(describe(BASE).startswith('get https://api.example.com/v1/countries/US/states\n'))

    def test_auth_policy_default_is_irrelevant(self):
        self.assertEqual(derive_key(BASE), derive_key(replace(BASE, auth_policy=NoAuth())))
