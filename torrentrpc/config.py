"""
Configuration management for torrent daemon connections
"""

import os
import yaml
from dataclasses import dataclass

from torrentrpc.exceptions import InvalidArgument
from torrentrpc.utils.helpers import normalize_host


# Keys each backend needs before a single request can be made
REQUIRED_ARGS = {
    'deluge': ('host', 'port', 'password'),
    'transmission': ('host', 'port', 'username', 'password'),
}

DEFAULT_TIMEOUT = 10


@dataclass(frozen=True)
class ConnectionConfig:
    """Connection parameters for one daemon, shared read-only by every call"""

    backend: str
    host: str
    port: int
    username: str = None
    password: str = None
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_args(cls, backend, arguments):
        """
        Build a validated connection config

        Args:
            backend: 'deluge' or 'transmission'
            arguments: Mapping with the connection keys the backend requires

        Returns:
            ConnectionConfig

        Raises:
            InvalidArgument: Unknown backend or missing required keys
        """
        backend = (backend or '').lower()
        if backend not in REQUIRED_ARGS:
            raise InvalidArgument(f"Unsupported torrent client type: {backend!r}")

        required = REQUIRED_ARGS[backend]
        missing = [key for key in required if arguments.get(key) is None]
        if missing:
            raise InvalidArgument(
                f"{backend} connection args require the keys {list(required)}, "
                f"missing {missing} from {sorted(arguments)}"
            )

        try:
            port = int(arguments['port'])
        except (TypeError, ValueError):
            raise InvalidArgument(f"Invalid port provided: {arguments['port']!r}")

        return cls(
            backend=backend,
            host=normalize_host(arguments['host']),
            port=port,
            username=arguments.get('username'),
            password=arguments.get('password'),
            timeout=float(arguments.get('timeout') or DEFAULT_TIMEOUT),
        )

    @property
    def base_url(self):
        return f"{self.host}:{self.port}"


@dataclass
class LoggingConfig:
    level: str
    file: str
    max_bytes: int
    backup_count: int
    console: bool


class Config:
    """Application configuration, read from YAML or the environment"""

    def __init__(self, config_file=None):
        self.download_client = None
        self.logging = None

        self._load_config(config_file)

    def _load_config(self, config_file):
        """Load configuration from file or environment variables"""

        config_file = config_file or os.getenv('CONFIG_FILE', 'config.yaml')

        if os.path.exists(config_file):
            with open(config_file, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        else:
            config_data = self._load_from_env()

        client_data = config_data.get('download_client') or {}
        client_type = client_data.get('type', os.getenv('TORRENT_CLIENT_TYPE', 'transmission'))

        self.download_client = ConnectionConfig.from_args(client_type, {
            'host': client_data.get('host', os.getenv('TORRENT_CLIENT_HOST', 'localhost')),
            'port': client_data.get('port', os.getenv('TORRENT_CLIENT_PORT')),
            'username': client_data.get('username', os.getenv('TORRENT_CLIENT_USERNAME')),
            'password': client_data.get('password', os.getenv('TORRENT_CLIENT_PASSWORD')),
            'timeout': client_data.get('timeout', os.getenv('TORRENT_CLIENT_TIMEOUT')),
        })

        logging_data = config_data.get('logging') or {}
        self.logging = LoggingConfig(
            level=logging_data.get('level', os.getenv('LOG_LEVEL', 'INFO')),
            file=logging_data.get('file'),
            max_bytes=logging_data.get('max_bytes', 10485760),
            backup_count=logging_data.get('backup_count', 5),
            console=logging_data.get('console', True)
        )

    def _load_from_env(self):
        """Create config structure from environment variables"""
        return {
            'download_client': {},
            'logging': {}
        }
