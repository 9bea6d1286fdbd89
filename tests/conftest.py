import logging
import os

import pytest

# Set test-friendly defaults for constants that affect test performance
os.environ.setdefault("IRC_CONNECT_BACKOFF_MAX", "0")
os.environ.setdefault("IRC_CONNECT_TIMEOUT", "2")


@pytest.fixture(autouse=True)
def _quiet_ircplug_logger():
    """Keep the client logger at INFO so DEBUG event formatting is skipped."""
    ircplug_logger = logging.getLogger("ircplug")
    previous = ircplug_logger.level
    ircplug_logger.setLevel(logging.INFO)
    yield
    ircplug_logger.setLevel(previous)
