"""
Tests for the request pipelines shared by every dialect
"""

import threading

import pytest
import requests

from conftest import FakeResponse, FakeSession, SessionFactory, deluge_call, transmission_call
from torrentrpc.clients.deluge import DelugeDialect
from torrentrpc.clients.transmission import TransmissionDialect
from torrentrpc.exceptions import ClientError
from torrentrpc.rpc import HttpResponse, RequestIdGenerator, RpcPipeline, validate_response


class TestValidateResponse:

    def test_returns_json_body(self):
        response = HttpResponse(200, 'OK', {}, '{"result": true}')
        assert validate_response('core.pause_torrent', response) == '{"result": true}'

    def test_non_200_names_method_status_and_reason(self):
        response = HttpResponse(500, 'Internal Server Error', {}, 'boom')
        with pytest.raises(ClientError) as excinfo:
            validate_response('torrent-get', response)
        message = str(excinfo.value)
        assert '"torrent-get"' in message
        assert '500' in message
        assert 'Internal Server Error' in message

    def test_non_json_body_is_echoed(self):
        response = HttpResponse(200, 'OK', {}, '<html>login</html>')
        with pytest.raises(ClientError) as excinfo:
            validate_response('torrent-get', response)
        assert '"torrent-get"' in str(excinfo.value)
        assert '<html>login</html>' in str(excinfo.value)


class TestRequestIdGenerator:

    def test_ids_increase(self):
        ids = RequestIdGenerator()
        assert [ids.next_id() for _ in range(3)] == [1, 2, 3]

    def test_ids_unique_across_threads(self):
        ids = RequestIdGenerator()
        seen = []

        def take():
            for _ in range(200):
                seen.append(ids.next_id())

        threads = [threading.Thread(target=take) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(set(seen)) == 800


class TestRpcPipeline:

    def test_fresh_session_per_call(self, deluge_config):
        factory = SessionFactory(FakeSession, deluge_call(True), deluge_call(True))
        pipeline = RpcPipeline(DelugeDialect(), deluge_config, session_factory=factory)

        pipeline.call('core.pause_torrent', [['abc']])
        pipeline.call('core.pause_torrent', [['abc']])

        assert len(factory.sessions) == 2
        assert all(session.closed for session in factory.sessions)

    def test_handshake_then_rpc(self, deluge_config):
        factory = SessionFactory(FakeSession, deluge_call(True))
        pipeline = RpcPipeline(DelugeDialect(), deluge_config, session_factory=factory)

        pipeline.call('core.pause_torrent', [['abc']])

        handshake, rpc = factory.requests
        assert b'auth.login' in handshake['data']
        assert b'core.pause_torrent' in rpc['data']
        assert handshake['timeout'] == 10
        assert rpc['timeout'] == 10

    def test_request_ids_differ_between_requests(self, deluge_config):
        factory = SessionFactory(FakeSession, deluge_call(True))
        pipeline = RpcPipeline(DelugeDialect(), deluge_config, session_factory=factory)

        pipeline.call('core.pause_torrent', [['abc']])

        handshake, rpc = factory.requests
        assert handshake['data'] != rpc['data']
        assert b'"id": 1' in handshake['data']
        assert b'"id": 2' in rpc['data']

    def test_transport_errors_become_client_errors(self, transmission_config):
        factory = SessionFactory(FakeSession, [requests.exceptions.ConnectionError('Connection refused')])
        pipeline = RpcPipeline(TransmissionDialect(), transmission_config, session_factory=factory)

        with pytest.raises(ClientError, match='Connection refused') as excinfo:
            pipeline.call('torrent-get', {})

        assert isinstance(excinfo.value.__cause__, requests.exceptions.ConnectionError)
        assert factory.sessions[0].closed

    def test_rpc_error_after_handshake(self, transmission_config):
        handshake = transmission_call()[0]
        factory = SessionFactory(FakeSession, [handshake, requests.exceptions.Timeout('read timed out')])
        pipeline = RpcPipeline(TransmissionDialect(), transmission_config, session_factory=factory)

        with pytest.raises(ClientError, match='read timed out'):
            pipeline.call('torrent-get', {})

    def test_error_status_fails_call(self, transmission_config):
        handshake = transmission_call()[0]
        factory = SessionFactory(FakeSession, [handshake, FakeResponse(status=401, reason='Unauthorized')])
        pipeline = RpcPipeline(TransmissionDialect(), transmission_config, session_factory=factory)

        with pytest.raises(ClientError, match='Unauthorized'):
            pipeline.call('torrent-get', {})
