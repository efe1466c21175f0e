import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from message_channel.log import configure_logging


def pytest_configure(config):
    # Keep structlog off stdout so sink/CLI output can be asserted
    configure_logging("CRITICAL")
