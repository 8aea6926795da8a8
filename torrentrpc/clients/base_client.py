"""
Abstract base class for daemon dialects
"""

from abc import ABC, abstractmethod

from torrentrpc.exceptions import MalformedPayload
from torrentrpc.payloads import SingleTorrent


class BaseDialect(ABC):
    """
    Everything that differs between two daemons' RPC protocols.

    A dialect is stateless. It describes the handshake, wraps method calls
    into its envelope, and turns the JSON that comes back into Torrents.
    The pipelines and adapters drive it, so the network code and the
    orchestration exist once for every daemon.
    """

    name = None
    rpc_path = None
    list_method = None

    def rpc_url(self, config):
        return f"{config.base_url}{self.rpc_path}"

    # Handshake

    @abstractmethod
    def handshake_request(self, config, request_id):
        """
        Describe the request that obtains a session credential

        Args:
            config: ConnectionConfig
            request_id: Fresh request id

        Returns:
            HttpRequest
        """
        pass

    @abstractmethod
    def session_headers(self, response):
        """
        Pull the credential out of a handshake response

        Args:
            response: HttpResponse of the handshake

        Returns:
            dict: Headers to attach to the following RPC request

        Raises:
            ClientError: The response carries no credential
        """
        pass

    @abstractmethod
    def rpc_request(self, config, method, params, session_headers, request_id):
        """Describe the authenticated request carrying an RPC call"""
        pass

    # Envelopes, each returns (method, params)

    @abstractmethod
    def get_torrents_call(self, ids):
        pass

    @abstractmethod
    def add_torrent_call(self, path):
        pass

    @abstractmethod
    def start_torrent_call(self, torrent_hash):
        pass

    @abstractmethod
    def pause_torrent_call(self, torrent_hash):
        pass

    @abstractmethod
    def delete_torrent_call(self, torrent_hash):
        pass

    # Normalization

    @abstractmethod
    def decode_torrents(self, body):
        """Decode a torrent listing into a TorrentBatch or SingleTorrent"""
        pass

    @abstractmethod
    def decode_added(self, body):
        """Decode an add response into an AddedTorrent"""
        pass

    @abstractmethod
    def decode_action(self, body):
        """Decode a delete response into an ActionResult"""
        pass

    @abstractmethod
    def build_torrent(self, raw, batch):
        """Build one Torrent from a raw mapping of the given batch"""
        pass

    def torrents(self, body):
        """
        Turn a torrent listing into new Torrent instances

        Args:
            body: Raw JSON text

        Returns:
            list: Torrent objects, in the order the daemon listed them
        """
        payload = self.decode_torrents(body)
        if isinstance(payload, SingleTorrent):
            payload = payload.as_batch()

        try:
            return [self.build_torrent(raw, payload) for raw in payload.items]
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedPayload(self.list_method, f"{type(e).__name__}: {e}") from e
