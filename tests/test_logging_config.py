"""
Tests for logging configuration.
"""
import logging
import logging.handlers

from consul_catalog.runtime.logging_config import setup_logging


def test_setup_logging_console_only(restore_root_logger):
    """Test console logging without a log directory."""
    root_logger = setup_logging(log_level="DEBUG")

    assert root_logger.level == logging.DEBUG
    assert len(root_logger.handlers) == 1
    assert isinstance(root_logger.handlers[0], logging.StreamHandler)
    assert logging.getLogger("urllib3").level == logging.INFO


def test_setup_logging_size_rotation(restore_root_logger, tmp_path):
    """Test size-based file rotation."""
    root_logger = setup_logging(log_dir=str(tmp_path), max_bytes=1024, backup_count=2)

    file_handlers = [
        handler for handler in root_logger.handlers
        if isinstance(handler, logging.handlers.RotatingFileHandler)
    ]
    assert len(file_handlers) == 2
    assert file_handlers[0].maxBytes == 1024
    assert file_handlers[0].backupCount == 2
    assert file_handlers[1].level == logging.ERROR
    assert (tmp_path / "consul-catalog.log").exists()
    assert (tmp_path / "consul-catalog_errors.log").exists()


def test_setup_logging_time_rotation(restore_root_logger, tmp_path):
    """Test time-based file rotation."""
    root_logger = setup_logging(
        log_dir=str(tmp_path), service_name="watch", rotation_strategy="time", enable_console=False
    )

    assert len(root_logger.handlers) == 2
    assert all(
        isinstance(handler, logging.handlers.TimedRotatingFileHandler)
        for handler in root_logger.handlers
    )
    assert (tmp_path / "watch.log").exists()


def test_setup_logging_file_disabled(restore_root_logger, tmp_path):
    """Test that no files are written when file logging is disabled."""
    setup_logging(log_dir=str(tmp_path), enable_file=False)
    assert list(tmp_path.iterdir()) == []


def test_setup_logging_zero_backups(restore_root_logger, tmp_path):
    """Test that an explicit backup count of 0 is kept."""
    root_logger = setup_logging(log_dir=str(tmp_path), backup_count=0, enable_console=False)

    assert [handler.backupCount for handler in root_logger.handlers] == [0, 0]
