import os
import sys

import pytest

# Make the package importable without installing it.
project_root = os.path.abspath(os.path.join(os.path.dirname(os.path.abspath(__file__)), '../../'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from fragmentbridge.config import BridgeConfig
from fragmentbridge.relay import TokenRelay
from fragmentbridge.session import SessionController


class _DebugMessages(list):
    def __call__(self, msg):
        self.append(msg)

    def __bool__(self):
        # Stay truthy when empty so `print_debug_fn or default` picks it up.
        return True

    def contains(self, text):
        return any(text in m for m in self)


@pytest.fixture
def debug_messages():
    """Collects messages, usable directly as a print_debug_fn."""
    return _DebugMessages()


@pytest.fixture
def relay():
    return TokenRelay()


@pytest.fixture
def session(relay):
    """A running session on an ephemeral port, stopped after the test."""
    controller = SessionController(relay=relay, config=BridgeConfig(port=0, timeout=30))
    info = controller.start()
    yield controller, info
    controller.stop()
    controller.wait(timeout=5)
