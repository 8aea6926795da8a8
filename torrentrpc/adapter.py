"""
Adapters turn transport output into Torrent objects

An adapter wraps a transport. Its operations call the transport and
normalize the JSON through the transport's dialect; anything else is
forwarded to the transport untouched.
"""

from torrentrpc.clients.deluge import DelugeDialect
from torrentrpc.clients.transmission import TransmissionDialect
from torrentrpc.exceptions import ClientError, InvalidArgument
from torrentrpc.transport import AsyncClientTransport, ClientTransport, run_call


DIALECTS = {
    'deluge': DelugeDialect,
    'transmission': TransmissionDialect,
}


class BaseAdapter:

    def __init__(self, transport):
        self.transport = transport
        self.dialect = transport.dialect
        self.logger = transport.logger

    def __getattr__(self, name):
        # Only reached for attributes the adapter does not define itself
        transport = self.__dict__.get('transport')
        if transport is None or not hasattr(transport, name):
            raise AttributeError(
                f'Undefined method: "{name}" within transport class: "{type(transport).__name__}"'
            )
        return getattr(transport, name)

    def _torrents(self, body):
        return self.dialect.torrents(body)

    def _single(self, torrents, torrent_hash):
        if not torrents:
            raise ClientError(f"Torrent {torrent_hash} was not reported by {self.dialect.name}")
        return torrents[0]

    @staticmethod
    def _hash_of(torrent, torrent_id):
        return torrent.hash_string if torrent is not None else torrent_id


class ClientAdapter(BaseAdapter):
    """Blocking adapter"""

    def get_torrents(self, torrent_id=None):
        """
        Get torrents as new Torrent objects

        Args:
            torrent_id: Hash string of a single torrent, or None for all

        Returns:
            list: Torrent objects
        """
        body = self.transport.get_torrents([torrent_id] if torrent_id else [])
        torrents = self._torrents(body)
        self.logger.debug(f"Retrieved {len(torrents)} torrents from {self.dialect.name}")
        return torrents

    def get_torrent(self, torrent_id):
        return self._single(self.get_torrents(torrent_id), torrent_id)

    def add_torrent(self, path):
        """
        Add a torrent, then fetch it back

        Args:
            path: URL, magnet link or local .torrent file

        Returns:
            Torrent: The torrent as the daemon now reports it
        """
        added = self.dialect.decode_added(self.transport.add_torrent(path))
        self.logger.info(f"Added torrent {added.hash_string} to {self.dialect.name}")
        return self.get_torrent(added.hash_string)

    def start_torrent(self, torrent=None, torrent_id=None):
        self.transport.start_torrent(torrent, torrent_id)
        return self.get_torrent(self._hash_of(torrent, torrent_id))

    def pause_torrent(self, torrent=None, torrent_id=None):
        self.transport.pause_torrent(torrent, torrent_id)
        return self.get_torrent(self._hash_of(torrent, torrent_id))

    def delete_torrent(self, torrent=None, torrent_id=None):
        """
        Delete a torrent and its data

        Returns:
            bool: True when the daemon reports success
        """
        return self.dialect.decode_action(self.transport.delete_torrent(torrent, torrent_id)).success


class AsyncClientAdapter(BaseAdapter):
    """
    Non-blocking adapter.

    Operations are coroutines. A callback, when given, receives the
    normalized result exactly once after the call succeeds.
    """

    async def get_torrents(self, torrent_id=None, callback=None):
        body = await self.transport.get_torrents([torrent_id] if torrent_id else [])
        torrents = self._torrents(body)
        self.logger.debug(f"Retrieved {len(torrents)} torrents from {self.dialect.name}")
        return _deliver(torrents, callback)

    async def get_torrent(self, torrent_id, callback=None):
        torrent = self._single(await self.get_torrents(torrent_id), torrent_id)
        return _deliver(torrent, callback)

    async def add_torrent(self, path, callback=None):
        added = self.dialect.decode_added(await self.transport.add_torrent(path))
        self.logger.info(f"Added torrent {added.hash_string} to {self.dialect.name}")
        return await self.get_torrent(added.hash_string, callback)

    async def start_torrent(self, torrent=None, torrent_id=None, callback=None):
        await self.transport.start_torrent(torrent, torrent_id)
        return await self.get_torrent(self._hash_of(torrent, torrent_id), callback)

    async def pause_torrent(self, torrent=None, torrent_id=None, callback=None):
        await self.transport.pause_torrent(torrent, torrent_id)
        return await self.get_torrent(self._hash_of(torrent, torrent_id), callback)

    async def delete_torrent(self, torrent=None, torrent_id=None, callback=None):
        body = await self.transport.delete_torrent(torrent, torrent_id)
        return _deliver(self.dialect.decode_action(body).success, callback)

    def dispatch(self, operation, *args, **kwargs):
        """Run one operation on its own event loop, see AsyncClientTransport.dispatch"""
        return run_call(getattr(self, operation), *args, **kwargs)


def _deliver(result, callback):
    if callback is not None:
        callback(result)
    return result


def create_client(config, asynchronous=False, logger=None, session_factory=None):
    """
    Build an adapter for the daemon a connection config points at

    Args:
        config: ConnectionConfig
        asynchronous: Build the non-blocking variant
        logger: Optional logger, defaults to the torrentrpc logger
        session_factory: Optional HTTP session factory, requests.Session or
            aiohttp.ClientSession by default

    Returns:
        ClientAdapter or AsyncClientAdapter
    """
    try:
        dialect = DIALECTS[config.backend.lower()]()
    except KeyError:
        raise InvalidArgument(f"Unsupported torrent client type: {config.backend}")

    if asynchronous:
        return AsyncClientAdapter(AsyncClientTransport(dialect, config, logger, session_factory))
    return ClientAdapter(ClientTransport(dialect, config, logger, session_factory))
