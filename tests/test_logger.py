import logging
from logging.handlers import RotatingFileHandler
from types import SimpleNamespace

from torrentrpc.config import LoggingConfig
from torrentrpc.utils.logger import get_logger, setup_logger


def make_config(**overrides):
    values = dict(level='debug', file=None, max_bytes=1024, backup_count=1, console=True)
    values.update(overrides)
    return SimpleNamespace(logging=LoggingConfig(**values))


def test_console_logger():
    logger = setup_logger(make_config())

    assert logger.name == 'torrentrpc'
    assert logger.level == logging.DEBUG
    assert [type(h) for h in logger.handlers] == [logging.StreamHandler]


def test_file_logger_creates_directory(tmp_path):
    log_file = tmp_path / 'logs' / 'torrentrpc.log'

    logger = setup_logger(make_config(file=str(log_file), console=False))

    assert log_file.parent.is_dir()
    assert [type(h) for h in logger.handlers] == [RotatingFileHandler]
    for handler in logger.handlers:
        handler.close()


def test_setup_twice_does_not_duplicate_handlers():
    setup_logger(make_config())
    logger = setup_logger(make_config())

    assert len(logger.handlers) == 1


def test_dialect_loggers_are_children():
    root = get_logger()
    assert get_logger('deluge').parent is root
