"""
Transports issue the RPC calls for one daemon dialect

A transport returns the daemon's raw JSON text. Turning it into Torrent
objects is the adapter's job.
"""

import asyncio
from abc import ABC, abstractmethod

from torrentrpc.exceptions import InvalidArgument
from torrentrpc.rpc import AsyncRpcPipeline, RpcPipeline
from torrentrpc.utils.logger import get_logger


class BaseTransport(ABC):
    """The operations every transport offers, whatever the daemon"""

    def __init__(self, dialect, config, logger=None):
        self.dialect = dialect
        self.config = config
        self.logger = logger or get_logger(dialect.name)

    @abstractmethod
    def get_torrents(self, ids=()):
        """
        Get torrents from the daemon

        Args:
            ids: Hash strings to fetch, empty for every torrent

        Returns:
            str: JSON response body
        """
        pass

    @abstractmethod
    def add_torrent(self, path):
        """
        Add a torrent from a URL, magnet link or local .torrent file

        Returns:
            str: JSON response body
        """
        pass

    @abstractmethod
    def start_torrent(self, torrent=None, torrent_id=None):
        pass

    @abstractmethod
    def pause_torrent(self, torrent=None, torrent_id=None):
        pass

    @abstractmethod
    def delete_torrent(self, torrent=None, torrent_id=None):
        """Delete a torrent together with its downloaded data"""
        pass

    @staticmethod
    def _torrent_ids(ids):
        if ids is None:
            return []
        if isinstance(ids, str):
            return [ids]
        return list(ids)

    @staticmethod
    def _target_hash(operation, torrent, torrent_id):
        """
        Resolve which torrent an action applies to

        Args:
            operation: Name of the calling operation, for the error message
            torrent: Torrent object or None
            torrent_id: Hash string or None

        Returns:
            str: Hash string, taken from the torrent when both are given

        Raises:
            InvalidArgument: Neither was given
        """
        if torrent is not None:
            return torrent.hash_string
        if torrent_id is not None:
            return torrent_id

        raise InvalidArgument(
            f'Method: "{operation}" expected at least a Torrent object or torrent id parameter, none given'
        )


class ClientTransport(BaseTransport):
    """Blocking transport, every operation returns once both round-trips are done"""

    def __init__(self, dialect, config, logger=None, session_factory=None):
        super().__init__(dialect, config, logger)
        self.pipeline = RpcPipeline(dialect, config, self.logger, session_factory)

    def get_torrents(self, ids=()):
        method, params = self.dialect.get_torrents_call(self._torrent_ids(ids))
        return self.pipeline.call(method, params)

    def add_torrent(self, path):
        method, params = self.dialect.add_torrent_call(path)
        return self.pipeline.call(method, params)

    def start_torrent(self, torrent=None, torrent_id=None):
        torrent_hash = self._target_hash('start_torrent', torrent, torrent_id)
        return self.pipeline.call(*self.dialect.start_torrent_call(torrent_hash))

    def pause_torrent(self, torrent=None, torrent_id=None):
        torrent_hash = self._target_hash('pause_torrent', torrent, torrent_id)
        return self.pipeline.call(*self.dialect.pause_torrent_call(torrent_hash))

    def delete_torrent(self, torrent=None, torrent_id=None):
        torrent_hash = self._target_hash('delete_torrent', torrent, torrent_id)
        self.logger.info(f"Deleting torrent {torrent_hash} from {self.dialect.name}")
        return self.pipeline.call(*self.dialect.delete_torrent_call(torrent_hash))


class AsyncClientTransport(BaseTransport):
    """
    Non-blocking transport.

    Every operation is a coroutine resolving to the JSON body. An optional
    callback is invoked exactly once with that body when the call succeeds,
    and never when it fails.
    """

    def __init__(self, dialect, config, logger=None, session_factory=None):
        super().__init__(dialect, config, logger)
        self.pipeline = AsyncRpcPipeline(dialect, config, self.logger, session_factory)

    async def _complete(self, call, callback):
        method, params = call
        payload = await self.pipeline.call(method, params)
        if callback is not None:
            callback(payload)
        return payload

    async def get_torrents(self, ids=(), callback=None):
        call = self.dialect.get_torrents_call(self._torrent_ids(ids))
        return await self._complete(call, callback)

    async def add_torrent(self, path, callback=None):
        return await self._complete(self.dialect.add_torrent_call(path), callback)

    async def start_torrent(self, torrent=None, torrent_id=None, callback=None):
        torrent_hash = self._target_hash('start_torrent', torrent, torrent_id)
        return await self._complete(self.dialect.start_torrent_call(torrent_hash), callback)

    async def pause_torrent(self, torrent=None, torrent_id=None, callback=None):
        torrent_hash = self._target_hash('pause_torrent', torrent, torrent_id)
        return await self._complete(self.dialect.pause_torrent_call(torrent_hash), callback)

    async def delete_torrent(self, torrent=None, torrent_id=None, callback=None):
        torrent_hash = self._target_hash('delete_torrent', torrent, torrent_id)
        self.logger.info(f"Deleting torrent {torrent_hash} from {self.dialect.name}")
        return await self._complete(self.dialect.delete_torrent_call(torrent_hash), callback)

    def dispatch(self, operation, *args, **kwargs):
        """
        Run one operation in its own event loop, torn down when the call ends

        Args:
            operation: Name of the operation, e.g. 'get_torrents'
            *args, **kwargs: Passed to the operation, including callback

        Returns:
            str: JSON response body
        """
        return run_call(getattr(self, operation), *args, **kwargs)


def run_call(operation, *args, **kwargs):
    """
    Drive a single call on a fresh event loop that is closed afterwards

    Args:
        operation: Coroutine function to call
        *args, **kwargs: Passed to the operation

    Raises:
        RuntimeError: Called from inside a running event loop
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(operation(*args, **kwargs))

    # Checked before the coroutine exists so nothing is left un-awaited
    raise RuntimeError(
        f'Cannot dispatch "{operation.__name__}" from inside a running event loop, await it instead'
    )
