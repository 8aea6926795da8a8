"""
Exceptions raised by torrentrpc
"""


class TorrentRPCError(Exception):
    """Base class for all torrentrpc errors"""


class ClientError(TorrentRPCError):
    """
    A daemon did not answer the way a call expected: the handshake failed,
    the transport broke, or the RPC response was not a 200 JSON body.
    """


class MalformedPayload(ClientError):
    """A JSON payload did not have the shape its backend dialect documents"""

    def __init__(self, method, detail):
        super().__init__(f'"{method}" returned an unexpected payload: {detail}')
        self.method = method


class InvalidArgument(TorrentRPCError, ValueError):
    """A caller passed a value the operation cannot accept"""


class FileNotFound(TorrentRPCError, LookupError):
    """A file lookup by name on a torrent found nothing"""
