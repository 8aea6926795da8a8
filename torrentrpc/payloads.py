"""
Shapes a daemon payload can take once decoded

Every dialect decodes raw JSON into one of these before any Torrent is
built, so normalization never has to branch on the JSON shape itself.
"""

import json
from dataclasses import dataclass, field

from torrentrpc.exceptions import MalformedPayload


@dataclass(frozen=True)
class TorrentBatch:
    """Any number of raw torrent mappings from one call"""

    items: list = field(default_factory=list)
    error: object = None


@dataclass(frozen=True)
class SingleTorrent:
    """One raw torrent mapping, returned bare instead of inside a collection"""

    item: dict
    error: object = None

    def as_batch(self):
        return TorrentBatch([self.item], self.error)


@dataclass(frozen=True)
class AddedTorrent:
    """The identity of a torrent the daemon just accepted"""

    hash_string: str


@dataclass(frozen=True)
class ActionResult:
    """Whether the daemon reports an action as done"""

    success: bool


def load_json(method, body):
    """
    Parse a response body

    Args:
        method: RPC method the body answers, used in error messages
        body: JSON text

    Returns:
        The decoded JSON value
    """
    try:
        return json.loads(body)
    except (TypeError, ValueError) as e:
        raise MalformedPayload(method, f"body is not JSON ({e})") from e


def require_mapping(method, value, label='payload'):
    if not isinstance(value, dict):
        raise MalformedPayload(method, f"expected {label} to be an object, got {type(value).__name__}")
    return value
