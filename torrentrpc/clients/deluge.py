"""
Deluge dialect

Deluge's web UI speaks JSON-RPC on /json behind a cookie session: an
auth.login call sets a _session_id cookie which every other call must send.
"""

import json
import os

from torrentrpc.clients.base_client import BaseDialect
from torrentrpc.exceptions import ClientError, MalformedPayload
from torrentrpc.models import File, Torrent
from torrentrpc.payloads import (
    ActionResult,
    AddedTorrent,
    SingleTorrent,
    TorrentBatch,
    load_json,
    require_mapping,
)
from torrentrpc.rpc import HttpRequest
from torrentrpc.utils.helpers import (
    encode_torrent_file,
    extract_session_cookie,
    is_local_torrent,
    is_magnet,
)


class DelugeDialect(BaseDialect):
    """Cookie session dialect of the Deluge web UI"""

    name = 'deluge'
    rpc_path = '/json'

    METHOD_AUTH = 'auth.login'
    METHOD_GET_ALL = 'core.get_torrents_status'
    METHOD_ADD = 'core.add_torrent_url'
    METHOD_ADD_MAGNET = 'core.add_torrent_magnet'
    METHOD_ADD_FILE = 'core.add_torrent_file'
    METHOD_START = 'core.resume_torrent'
    METHOD_PAUSE = 'core.pause_torrent'
    METHOD_DELETE = 'core.remove_torrent'

    list_method = METHOD_GET_ALL

    RETURN_KEYS = [
        'name', 'state', 'files', 'eta', 'hash', 'download_payload_rate', 'status',
        'upload_payload_rate', 'total_wanted', 'total_uploaded', 'total_done', 'error_code'
    ]

    HEADERS = {'Content-Type': 'application/json; charset=utf-8'}

    def _envelope(self, config, method, params, request_id, extra_headers=None):
        headers = dict(self.HEADERS)
        headers.update(extra_headers or {})
        return HttpRequest(
            method='POST',
            url=self.rpc_url(config),
            headers=headers,
            body=json.dumps({
                'method': method,
                'params': params,
                'id': request_id
            })
        )

    def handshake_request(self, config, request_id):
        return self._envelope(config, self.METHOD_AUTH, [config.password], request_id)

    def session_headers(self, response):
        # A refused login can still hand out a cookie
        if response.status != 200:
            raise ClientError(
                f'"{self.METHOD_AUTH}" expected 200 response, got "{response.status}" instead, '
                f'reason: "{response.reason}"'
            )

        set_cookie = response.headers.get('Set-Cookie')
        if not set_cookie:
            raise ClientError("Response from torrent client did not return a Set-Cookie header")

        session_id = extract_session_cookie(set_cookie)
        if not session_id:
            raise ClientError("Set-Cookie header from torrent client did not carry a _session_id")

        return {'Cookie': f"_session_id={session_id}"}

    def rpc_request(self, config, method, params, session_headers, request_id):
        return self._envelope(config, method, params, request_id, session_headers)

    def get_torrents_call(self, ids):
        # A null filter returns every torrent
        torrent_filter = {'id': sorted(ids)} if ids else None
        return self.METHOD_GET_ALL, [torrent_filter, self.RETURN_KEYS]

    def add_torrent_call(self, path):
        if is_magnet(path):
            return self.METHOD_ADD_MAGNET, [path, {}]
        if is_local_torrent(path):
            return self.METHOD_ADD_FILE, [os.path.basename(path), encode_torrent_file(path), {}]
        return self.METHOD_ADD, [path, {}]

    def start_torrent_call(self, torrent_hash):
        return self.METHOD_START, [[torrent_hash]]

    def pause_torrent_call(self, torrent_hash):
        return self.METHOD_PAUSE, [[torrent_hash]]

    def delete_torrent_call(self, torrent_hash):
        # True also removes the downloaded data
        return self.METHOD_DELETE, [torrent_hash, True]

    def _load(self, method, body):
        data = require_mapping(method, load_json(method, body))
        if 'result' not in data:
            raise MalformedPayload(method, "missing 'result'")
        return data

    def decode_torrents(self, body):
        data = self._load(self.METHOD_GET_ALL, body)
        result = data['result']
        error = data.get('error')

        # A failed call comes back with a null result and only the error filled in
        if result is None and error:
            raise ClientError(f"Deluge could not get torrents: {render_error(error)}")

        if isinstance(result, dict) and isinstance(result.get('hash'), str):
            return SingleTorrent(result, error)
        if isinstance(result, dict):
            return TorrentBatch(list(result.values()), error)
        if isinstance(result, list):
            return TorrentBatch(result, error)

        raise MalformedPayload(self.METHOD_GET_ALL, f"unexpected result {result!r}")

    def decode_added(self, body):
        data = self._load(self.METHOD_ADD, body)
        result = data['result']

        if data.get('error'):
            raise ClientError(f"Deluge could not add torrent: {render_error(data['error'])}")
        if not isinstance(result, str):
            raise MalformedPayload(self.METHOD_ADD, f"expected a torrent hash, got {result!r}")

        return AddedTorrent(result)

    def decode_action(self, body):
        data = self._load(self.METHOD_DELETE, body)
        if data.get('error'):
            raise ClientError(f"Deluge could not delete torrent: {render_error(data['error'])}")
        return ActionResult(bool(data['result']))

    def build_torrent(self, raw, batch):
        torrent = Torrent(raw['hash'], raw['name'], raw['total_wanted'])

        torrent.download_speed = int(raw['download_payload_rate'])
        torrent.upload_speed = int(raw['upload_payload_rate'])

        # Deluge has no per-torrent error string
        torrent.error_string = render_error(batch.error)

        torrent.status = raw['state']

        for file_data in raw['files']:
            torrent.add_file(File(file_data['path'], file_data['size']))

        torrent.bytes_downloaded = raw['total_done']
        torrent.bytes_uploaded = raw['total_uploaded']

        return torrent


def render_error(error):
    """Render a Deluge call-level error the way it is shown on a torrent"""
    if error is None:
        return ''
    if isinstance(error, dict) and 'message' in error:
        return str(error['message'])
    return str(error)
