from unittest import TestCase

from ddt import ddt, data, unpack
from mockito import mock, unstub, verify, when

from cached_endpoints.auth import BearerTokenAuth, CustomHeaderAuth, NoAuth
from cached_endpoints.model import RequestDescriptor, Response


def descriptor(headers=None) -> RequestDescriptor:
    return RequestDescriptor(method='GET', url='https://api.example.com/users/profile', headers=headers or {})


def response(status: int) -> Response:
    return Response(status=status, reason='', headers={}, body=b'')


@ddt
class TestAttach(TestCase):
    @data(
        (NoAuth(), {'Accept': 'application/json'}),
        (BearerTokenAuth('abc'), {'Authorization': 'Bearer abc', 'Accept': 'application/json'}),
        (CustomHeaderAuth('X-API-KEY', 'secret'), {'X-API-KEY': 'secret', 'Accept': 'application/json'}),
        (CustomHeaderAuth('Authorization', 'secret', prefix='Token '),
         {'Authorization': 'Token secret', 'Accept': 'application/json'}),
    )
    @unpack
    def test_attaches_credentials(self, policy, expected_headers):
        original = descriptor({'Accept': 'application/json'})

        attached = policy.attach(original)

        self.assertEqual(expected_headers, dict(attached.headers))
        self.assertEqual({'Accept': 'application/json'}, dict(original.headers), 'The input must not be mutated')
        self.assertEqual(original.method, attached.method)
        self.assertEqual(original.url, attached.url)
        self.assertEqual(original.body, attached.body)

    def test_caller_supplied_header_wins(self):
        attached = BearerTokenAuth('abc').attach(descriptor({'authorization': 'Bearer mine'}))

        self.assertEqual({'authorization': 'Bearer mine'}, dict(attached.headers))


@ddt
class TestNotifyIfUnauthorized(TestCase):
    def setUp(self):
        self.__listener = mock()
        when(self.__listener).unauthorized(...).thenReturn(None)

    def tearDown(self):
        unstub()

    @data(
        (401, True),
        (403, True),
        (200, False),
        (500, False),
    )
    @unpack
    def test_invokes_callback_for_unauthorized_codes(self, status, expected):
        policy = BearerTokenAuth('abc', unauthorized_status_codes=(401, 403),
                                 on_unauthorized=self.__listener.unauthorized)
        received = response(status)

        notified = policy.notify_if_unauthorized(received)

        self.assertEqual(expected, notified)
        verify(self.__listener, times=1 if expected else 0).unauthorized(received)

    def test_no_auth_never_notifies(self):
        self.assertFalse(NoAuth().notify_if_unauthorized(response(401)))

    def test_callback_errors_do_not_escape(self):
        def explode(_):
            raise RuntimeError('boom')

        policy = CustomHeaderAuth('X-API-KEY', 'secret', on_unauthorized=explode)

        self.assertTrue(policy.notify_if_unauthorized(response(401)))
