"""Tests for logging module."""
import pytest
import logging

from pipestore import setup_logging
from pipestore.core.logging import PACKAGE_LOGGERS, get_logger


@pytest.fixture(autouse=True)
def restore_levels():
    """Restore pipestore logger levels after each test."""
    names = set(PACKAGE_LOGGERS).union(
        name for name in logging.Logger.manager.loggerDict if name.startswith('pipestore.')
    )
    loggers = [logging.getLogger(name) for name in names]
    levels = [logger.level for logger in loggers]
    yield
    for logger, level in zip(loggers, levels):
        logger.setLevel(level)


class TestGetLogger:
    """Test suite for get_logger function."""

    def test_returns_named_logger(self):
        """Test getting logger with name."""
        logger = get_logger('pipestore.test_module')

        assert isinstance(logger, logging.Logger)
        assert logger.name == 'pipestore.test_module'

    def test_propagates(self):
        """Test records propagate to the root logger."""
        logger = get_logger('pipestore.test_propagation')
        logger.propagate = False

        assert get_logger('pipestore.test_propagation').propagate

    def test_default_level_without_root_handlers(self, monkeypatch):
        """Test WARNING is set when basicConfig was not called."""
        root = logging.getLogger()
        monkeypatch.setattr(root, 'handlers', [])

        logger = get_logger('pipestore.test_default_level')

        assert logger.level == logging.WARNING

    def test_level_untouched_with_root_handlers(self, monkeypatch):
        root = logging.getLogger()
        monkeypatch.setattr(root, 'handlers', [logging.NullHandler()])
        logging.getLogger('pipestore.test_configured').setLevel(logging.NOTSET)

        logger = get_logger('pipestore.test_configured')

        assert logger.level == logging.NOTSET


class TestSetupLogging:
    """Test suite for setup_logging function."""

    def test_default_level(self):
        setup_logging()

        for name in PACKAGE_LOGGERS:
            assert logging.getLogger(name).level == logging.INFO

    def test_custom_level(self):
        """Test configure with specific level."""
        setup_logging(logging.DEBUG)

        assert logging.getLogger('pipestore.pipeline').level == logging.DEBUG
        assert logging.getLogger('pipestore.pipeline').propagate

    def test_records_are_captured(self, caplog):
        """Test pipestore records reach caplog through propagation."""
        setup_logging(logging.WARNING)

        with caplog.at_level(logging.WARNING, logger='pipestore'):
            get_logger('pipestore').warning('visible')

        assert 'visible' in caplog.text

    def test_module_loggers(self, monkeypatch):
        """Test loggers created with a WARNING default follow setup_logging."""
        monkeypatch.setattr(logging.getLogger(), 'handlers', [])
        logger = get_logger('pipestore.adapters.test_module')

        setup_logging(logging.DEBUG)

        assert logger.level == logging.DEBUG
