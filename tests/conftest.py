"""
Shared fixtures: fake requests / aiohttp sessions and daemon payloads
"""

import json

import pytest
from requests.structures import CaseInsensitiveDict

from torrentrpc.config import ConnectionConfig


DELUGE_COOKIE = '_session_id=abc123def456; Expires=Tue, 20 Oct 2026 10:00:00 GMT; Path=/json'
TRANSMISSION_TOKEN = 'rX8pAQ3wpT4dqE9h'


def deluge_status(torrent_hash='a1' * 20, name='ubuntu.iso', total_wanted=1000, total_done=500,
                  total_uploaded=250, state='Downloading', files=None):
    if files is None:
        files = [{'index': 0, 'path': 'ubuntu/ubuntu.iso', 'size': 900, 'offset': 0},
                 {'index': 1, 'path': 'ubuntu/README.txt', 'size': 100, 'offset': 900}]
    return {
        'hash': torrent_hash,
        'name': name,
        'state': state,
        'files': files,
        'eta': 60,
        'download_payload_rate': 100,
        'upload_payload_rate': 10,
        'status': state,
        'total_wanted': total_wanted,
        'total_uploaded': total_uploaded,
        'total_done': total_done,
        'error_code': 0,
    }


def transmission_torrent(hash_string='b2' * 20, name='debian.iso', status=4, size=1000,
                         completed=(300, 100), uploaded=200, error_string=''):
    files = [
        {'name': 'debian/debian.iso', 'length': 800, 'bytesCompleted': completed[0]},
        {'name': 'debian/SHA256SUMS', 'length': 200, 'bytesCompleted': completed[1]},
    ]
    return {
        'hashString': hash_string,
        'name': name,
        'sizeWhenDone': size,
        'status': status,
        'rateDownload': 50,
        'rateUpload': 5,
        'uploadedEver': uploaded,
        'files': files,
        'errorString': error_string,
    }


class FakeResponse:
    """Stands in for requests.Response"""

    def __init__(self, status=200, body='', headers=None, reason='OK'):
        self.status_code = status
        self.reason = reason
        self.headers = CaseInsensitiveDict(headers or {})
        self.content = body if isinstance(body, bytes) else body.encode('utf-8')


class FakeSession:
    """Stands in for requests.Session, answering requests from a queue"""

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True
        return False

    def request(self, method, url, **kwargs):
        self.requests.append({'method': method, 'url': url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeAsyncResponse:
    """Stands in for aiohttp.ClientResponse"""

    def __init__(self, status=200, body='', headers=None, reason='OK'):
        self.status = status
        self.reason = reason
        self.headers = CaseInsensitiveDict(headers or {})
        self._content = body if isinstance(body, bytes) else body.encode('utf-8')

    async def read(self):
        return self._content


class _RequestContext:

    def __init__(self, response):
        self.response = response

    async def __aenter__(self):
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    async def __aexit__(self, *exc_info):
        return False


class FakeAsyncSession:
    """Stands in for aiohttp.ClientSession"""

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True
        return False

    def request(self, method, url, **kwargs):
        self.requests.append({'method': method, 'url': url, **kwargs})
        return _RequestContext(self.responses.pop(0))


class SessionFactory:
    """
    Hands out one fake session per call, the way a pipeline opens a fresh
    HTTP session for every call it makes
    """

    def __init__(self, session_class, *calls):
        self.session_class = session_class
        self.calls = list(calls)
        self.sessions = []

    def __call__(self):
        session = self.session_class(self.calls.pop(0))
        self.sessions.append(session)
        return session

    @property
    def requests(self):
        return [request for session in self.sessions for request in session.requests]


def deluge_call(result, error=None, response_class=FakeResponse):
    """A handshake and RPC response pair for one Deluge call"""
    return [
        response_class(body=json.dumps({'result': True, 'error': None, 'id': 1}),
                       headers={'Set-Cookie': DELUGE_COOKIE}),
        response_class(body=json.dumps({'result': result, 'error': error, 'id': 2})),
    ]


def transmission_call(arguments=None, result='success', response_class=FakeResponse):
    """A handshake and RPC response pair for one Transmission call"""
    return [
        response_class(status=409, reason='Conflict', body='<h1>409: Conflict</h1>',
                       headers={'X-Transmission-Session-Id': TRANSMISSION_TOKEN}),
        response_class(body=json.dumps({'arguments': arguments or {}, 'result': result, 'tag': 2})),
    ]


@pytest.fixture
def deluge_config():
    return ConnectionConfig.from_args('deluge', {'host': 'localhost', 'port': 8112, 'password': 'deluge'})


@pytest.fixture
def transmission_config():
    return ConnectionConfig.from_args('transmission', {
        'host': 'http://seedbox', 'port': 9091, 'username': 'admin', 'password': 'secret'
    })
