"""
Transmission dialect

Transmission rejects any RPC call without an X-Transmission-Session-Id
header and hands one out in its refusal, so a call is really: probe with
Basic auth, learn the token, then POST the call with it.
"""

import json

from torrentrpc.clients.base_client import BaseDialect
from torrentrpc.exceptions import ClientError, MalformedPayload
from torrentrpc.models import (
    STATUS_DOWNLOADING,
    STATUS_PAUSED,
    STATUS_SEEDING,
    File,
    Torrent,
)
from torrentrpc.payloads import (
    ActionResult,
    AddedTorrent,
    TorrentBatch,
    load_json,
    require_mapping,
)
from torrentrpc.rpc import HttpRequest
from torrentrpc.utils.helpers import encode_torrent_file, is_local_torrent


SESSION_HEADER = 'X-Transmission-Session-Id'

# tr_torrent_activity from libtransmission/transmission.h
STATUS_MAP = {
    0: STATUS_PAUSED,
    1: 'queued to check',
    2: 'checking',
    3: 'queued to download',
    4: STATUS_DOWNLOADING,
    5: 'queued to seed',
    6: STATUS_SEEDING,
}

STATUS_UNKNOWN = 'unknown'


def map_status(code):
    """Map a Transmission status code onto the shared status vocabulary"""
    return STATUS_MAP.get(code, STATUS_UNKNOWN)


class TransmissionDialect(BaseDialect):
    """Token session dialect of the Transmission daemon"""

    name = 'transmission'
    rpc_path = '/transmission/rpc'

    METHOD_ADD = 'torrent-add'
    METHOD_GET = 'torrent-get'
    METHOD_DELETE = 'torrent-remove'
    METHOD_START = 'torrent-start'
    METHOD_PAUSE = 'torrent-stop'

    list_method = METHOD_GET

    RETURN_FIELDS = [
        'hashString', 'name', 'sizeWhenDone', 'status', 'rateDownload', 'rateUpload',
        'uploadedEver', 'files', 'errorString'
    ]

    HEADERS = {'Content-Type': 'application/json; charset=utf-8'}

    def handshake_request(self, config, request_id):
        return HttpRequest(
            method='GET',
            url=self.rpc_url(config),
            headers=dict(self.HEADERS),
            auth=(config.username, config.password)
        )

    def session_headers(self, response):
        session_id = response.headers.get(SESSION_HEADER)
        if not session_id:
            raise ClientError(
                f"Response from torrent client did not return an {SESSION_HEADER} header "
                f"(status {response.status})"
            )
        return {SESSION_HEADER: session_id}

    def rpc_request(self, config, method, params, session_headers, request_id):
        headers = dict(self.HEADERS)
        headers.update(session_headers)

        arguments = {'fields': self.RETURN_FIELDS}
        arguments.update(params)

        return HttpRequest(
            method='POST',
            url=self.rpc_url(config),
            headers=headers,
            body=json.dumps({
                'method': method,
                'arguments': arguments,
                'tag': request_id
            }),
            auth=(config.username, config.password)
        )

    def get_torrents_call(self, ids):
        arguments = {'ids': sorted(ids)} if ids else {}
        return self.METHOD_GET, arguments

    def add_torrent_call(self, path):
        if is_local_torrent(path):
            return self.METHOD_ADD, {'metainfo': encode_torrent_file(path)}
        return self.METHOD_ADD, {'filename': path}

    def start_torrent_call(self, torrent_hash):
        return self.METHOD_START, {'ids': [torrent_hash]}

    def pause_torrent_call(self, torrent_hash):
        return self.METHOD_PAUSE, {'ids': [torrent_hash]}

    def delete_torrent_call(self, torrent_hash):
        return self.METHOD_DELETE, {'ids': [torrent_hash], 'delete-local-data': True}

    def _arguments(self, method, body):
        data = require_mapping(method, load_json(method, body))
        return data, require_mapping(method, data.get('arguments'), "'arguments'")

    def decode_torrents(self, body):
        _, arguments = self._arguments(self.METHOD_GET, body)
        torrents = arguments.get('torrents')
        if not isinstance(torrents, list):
            raise MalformedPayload(self.METHOD_GET, "expected 'arguments.torrents' to be a list")
        return TorrentBatch(torrents)

    def decode_added(self, body):
        data, arguments = self._arguments(self.METHOD_ADD, body)

        # A torrent the daemon already had is reported as a duplicate, with the same shape
        added = arguments.get('torrent-added') or arguments.get('torrent-duplicate')
        if added is None:
            if data.get('result') != 'success':
                raise ClientError(f"Transmission could not add torrent: {data.get('result')}")
            raise MalformedPayload(self.METHOD_ADD, "missing 'torrent-added'")

        try:
            return AddedTorrent(added['hashString'])
        except (KeyError, TypeError) as e:
            raise MalformedPayload(self.METHOD_ADD, "added torrent has no 'hashString'") from e

    def decode_action(self, body):
        data = require_mapping(self.METHOD_DELETE, load_json(self.METHOD_DELETE, body))
        return ActionResult(data.get('result') == 'success')

    def build_torrent(self, raw, batch):
        torrent = Torrent(raw['hashString'], raw['name'], raw['sizeWhenDone'])
        torrent.download_speed = raw['rateDownload']
        torrent.upload_speed = raw['rateUpload']
        torrent.error_string = raw['errorString']
        torrent.status = map_status(raw['status'])

        # downloadedEver is unreliable compared with the size, so sum the files instead
        bytes_downloaded = 0

        for file_data in raw['files']:
            torrent.add_file(File(file_data['name'], file_data['length']))
            bytes_downloaded += file_data['bytesCompleted']

        torrent.bytes_downloaded = bytes_downloaded
        torrent.bytes_uploaded = raw['uploadedEver']

        return torrent
