"""
Torrent and file entities shared by every backend
"""

from dataclasses import dataclass

from torrentrpc.exceptions import FileNotFound, InvalidArgument


STATUS_DOWNLOADING = 'downloading'
STATUS_SEEDING = 'seeding'
STATUS_PAUSED = 'paused'
STATUS_COMPLETE = 'complete'


def _check_count(label, value):
    """Reject anything that is not a non-negative integer"""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgument(f"Invalid {label} provided. Expected a non-negative integer, {value!r} given")
    return value


@dataclass(frozen=True, eq=False)
class File:
    """A single file within a torrent"""

    name: str
    size: int

    def __post_init__(self):
        _check_count('file size', self.size)


class Torrent:
    """
    A torrent as reported by a daemon.

    Percent complete, ETA, seed ratio and the complete status are derived
    whenever the byte counters are set, so set the rates and size-dependent
    fields first, then bytes downloaded, then bytes uploaded.
    """

    def __init__(self, hash_string, name, size):
        self.hash_string = hash_string
        self.name = name
        self._size = _check_count('torrent size', size)
        self.status = ''
        self.error_string = 'Unknown'
        self._download_speed = 0
        self._upload_speed = 0
        self._bytes_downloaded = 0
        self._bytes_uploaded = 0
        self._percent_done = 0.0
        self._seed_ratio = 0.0
        self._eta = None
        self._files = []

    def __repr__(self):
        return f"<Torrent {self.hash_string} {self.name!r} {self.status} {self._percent_done}%>"

    @property
    def size(self):
        return self._size

    @property
    def download_speed(self):
        return self._download_speed

    @download_speed.setter
    def download_speed(self, bytes_per_second):
        self._download_speed = _check_count('download speed', bytes_per_second)

    @property
    def upload_speed(self):
        return self._upload_speed

    @upload_speed.setter
    def upload_speed(self, bytes_per_second):
        self._upload_speed = _check_count('upload speed', bytes_per_second)

    @property
    def bytes_downloaded(self):
        return self._bytes_downloaded

    @bytes_downloaded.setter
    def bytes_downloaded(self, num_bytes):
        self._bytes_downloaded = _check_count('bytes downloaded', num_bytes)

        if self._size == 0:
            self._percent_done = 0.0
        else:
            self._percent_done = round(num_bytes / self._size * 100, 2)

        if num_bytes == self._size:
            self.status = STATUS_COMPLETE

        remaining = max(self._size - num_bytes, 0)
        if remaining == 0:
            self._eta = 0
        elif self._download_speed == 0:
            self._eta = None
        else:
            self._eta = int(remaining / self._download_speed)

    @property
    def bytes_uploaded(self):
        return self._bytes_uploaded

    @bytes_uploaded.setter
    def bytes_uploaded(self, num_bytes):
        self._bytes_uploaded = _check_count('bytes uploaded', num_bytes)

        if self._bytes_downloaded == 0:
            self._seed_ratio = 0.0
        else:
            self._seed_ratio = round(num_bytes / self._bytes_downloaded, 2)

    @property
    def percent_done(self):
        return self._percent_done

    @property
    def seed_ratio(self):
        return self._seed_ratio

    @property
    def eta(self):
        """Seconds until the download finishes, or None while nothing is downloading"""
        return self._eta

    @property
    def files(self):
        return list(self._files)

    @property
    def is_complete(self):
        return (self.status == STATUS_COMPLETE
                or self._percent_done == 100
                or self._bytes_downloaded == self._size)

    def add_file(self, file):
        """Append a file unless this exact object was already added"""
        if not any(existing is file for existing in self._files):
            self._files.append(file)

    def get_file(self, name):
        """
        Find a file by name, ignoring case

        Args:
            name: File name to look for

        Returns:
            File: The first matching file

        Raises:
            FileNotFound: When no file has that name
        """
        wanted = name.lower()
        for file in self._files:
            if file.name.lower() == wanted:
                return file

        raise FileNotFound(f'File with name: "{name}" not found for torrent: "{self.name}"')
