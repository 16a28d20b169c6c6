from io import BytesIO
from unittest import TestCase

from ddt import ddt, data, unpack
from mockito import mock, unstub, verify, when
import requests
from requests.structures import CaseInsensitiveDict

from cached_endpoints.config import Timeouts
from cached_endpoints.errors import TransportError, TransportFault
from cached_endpoints.model import RequestDescriptor
from cached_endpoints.transport import RequestsTransport, classify, split_multipart


URL = 'https://api.example.com/users/profile'


def requests_response(status: int, content: bytes, reason: str = 'OK') -> requests.Response:
    result = requests.Response()
    result.status_code = status
    result.reason = reason
    result.headers = CaseInsensitiveDict({'Content-Type': 'application/json'})
    result._content = content
    result.url = URL
    return result


@ddt
class TestRequestsTransport(TestCase):
    def setUp(self):
        self.__session = mock(requests.Session)
        self.__sut = RequestsTransport(self.__session)

    def tearDown(self):
        unstub()

    def test_send_json_body(self):
        # region Set up
        descriptor = RequestDescriptor(method='POST', url=URL,
                                       headers={'Authorization': 'Bearer abc'},
                                       query_parameters={'verbose': 'true'},
                                       body={'name': 'Ada'})
        when(self.__session).request(...).thenReturn(requests_response(201, b'{"id": 7}', 'Created'))
        # endregion

        # region Exercise
        response = self.__sut.send(descriptor, Timeouts(connect=3, read=4))
        # endregion

        # region Verify
        verify(self.__session).request('POST', URL,
                                       params={'verbose': 'true'},
                                       headers={'Authorization': 'Bearer abc'},
                                       timeout=(3, 4),
                                       allow_redirects=False,
                                       json={'name': 'Ada'})
        self.assertEqual(201, response.status)
        self.assertEqual('Created', response.reason)
        self.assertEqual(b'{"id": 7}', response.body)
        self.assertEqual({'id': 7}, response.data)
        self.assertEqual('application/json', response.headers['Content-Type'])
        self.assertFalse(response.from_cache)
        # endregion

    def test_send_without_body(self):
        descriptor = RequestDescriptor(method='GET', url=URL)
        when(self.__session).request(...).thenReturn(requests_response(200, b''))

        self.__sut.send(descriptor)

        verify(self.__session).request('GET', URL, params=None, headers={}, timeout=(30.0, 30.0),
                                       allow_redirects=False)

    def test_send_multipart_drops_content_type(self):
        upload = BytesIO(b'file contents')
        descriptor = RequestDescriptor(method='POST', url=URL,
                                       headers={'Content-Type': 'application/json', 'Accept': 'application/json'},
                                       body={'title': 'avatar', 'file': ('avatar.png', upload)},
                                       multipart=True)
        when(self.__session).request(...).thenReturn(requests_response(200, b''))

        self.__sut.send(descriptor)

        verify(self.__session).request('POST', URL, params=None, headers={'Accept': 'application/json'},
                                       timeout=(30.0, 30.0), allow_redirects=False,
                                       data={'title': 'avatar'}, files={'file': ('avatar.png', upload)})

    @data(
        (requests.exceptions.ConnectTimeout('slow'), TransportFault.CONNECT_TIMEOUT),
        (requests.exceptions.ReadTimeout('slow'), TransportFault.READ_TIMEOUT),
        (requests.exceptions.SSLError('bad cert'), TransportFault.TLS),
        (requests.exceptions.ConnectionError('reset'), TransportFault.CONNECTION),
        (requests.exceptions.TooManyRedirects('loop'), TransportFault.UNKNOWN),
    )
    @unpack
    def test_faults_are_classified(self, error, expected_fault):
        when(self.__session).request(...).thenRaise(error)

        with self.assertRaises(TransportError) as context:
            self.__sut.send(RequestDescriptor(method='GET', url=URL))

        self.assertEqual(expected_fault, context.exception.fault)
        self.assertIs(error, context.exception.cause)
        self.assertEqual(expected_fault, classify(error))


class TestSplitMultipart(TestCase):
    def test_split(self):
        upload = BytesIO(b'')

        fields, files = split_multipart({'a': '1', 'b': ('b.txt', b'x'), 'c': upload})

        self.assertEqual({'a': '1'}, fields)
        self.assertEqual({'b': ('b.txt', b'x'), 'c': upload}, files)
