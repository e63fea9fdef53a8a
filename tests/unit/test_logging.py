"""Tests for logging setup."""
import logging

from megagate import setup_logging


class TestSetupLogging:
    """Test suite for setup_logging."""

    def test_sets_existing_loggers(self):
        child = logging.getLogger('megagate.tests.child')
        child.setLevel(logging.ERROR)
        child.propagate = False

        setup_logging(logging.DEBUG)

        assert child.level == logging.DEBUG
        assert child.propagate is True
        assert logging.getLogger('megagate').level == logging.DEBUG

    def test_leaves_other_loggers(self):
        other = logging.getLogger('somethingelse')
        other.setLevel(logging.ERROR)

        setup_logging(logging.DEBUG)

        assert other.level == logging.ERROR
