"""
Helper functions
"""

import base64
import os
import re


SESSION_COOKIE_PATTERN = re.compile(r'_session_id=([^;,\s]+)')


def normalize_host(host):
    """
    Make sure a host carries a scheme and no trailing slash

    Args:
        host: 'localhost', 'http://localhost/' or 'https://seedbox'

    Returns:
        str: Host usable as a URL prefix
    """
    host = str(host).strip().rstrip('/')
    if not re.match(r'^https?://', host, re.IGNORECASE):
        host = f"http://{host}"
    return host


def extract_session_cookie(set_cookie):
    """
    Pull the Deluge session id out of a Set-Cookie header

    Args:
        set_cookie: Raw Set-Cookie header value

    Returns:
        str or None: The '_session_id' value, if present
    """
    match = SESSION_COOKIE_PATTERN.search(set_cookie or '')
    return match.group(1) if match else None


def is_magnet(path):
    return path.lower().startswith('magnet:')


def is_local_torrent(path):
    """True when path points at a .torrent file on this machine"""
    return not is_magnet(path) and os.path.isfile(path)


def encode_torrent_file(path):
    """
    Read a local .torrent file as base64, the way both daemons accept uploads

    Args:
        path: Path to .torrent file

    Returns:
        str: Base64 encoded file content
    """
    with open(path, 'rb') as f:
        return base64.b64encode(f.read()).decode('ascii')


def basic_auth_header(username, password):
    """
    Build an Authorization header value for HTTP Basic authentication

    Args:
        username: User name
        password: Password

    Returns:
        str: 'Basic <base64 credentials>'
    """
    credentials = f"{username}:{password}".encode('utf-8')
    return f"Basic {base64.b64encode(credentials).decode('ascii')}"
