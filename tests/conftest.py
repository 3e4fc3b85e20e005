"""
Shared test fixtures and configuration for pytest.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import Mock

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fren.core.types import Configuration
from fren.host.dialogs import HostDialogs
from fren.providers.base import AIProvider
from fren.storage import InMemoryBlobStore, StateStore


logger = logging.getLogger(__name__)


# ============================================================================
# Pytest hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (touch the filesystem or a database)")


# ============================================================================
# Stubs
# ============================================================================

class RecordingProvider(AIProvider):
    """
    Provider stub that records every call.

    Attributes:
        vectors: Fixed embeddings by text; unknown text falls back to ``default_vector``
        reply: What ``chat`` returns (a callable receives the messages)
        embed_calls: (api_key, text) for every embed call
        chat_calls: (api_key, messages) for every chat call
        close_calls: Number of times the dispatcher released the provider
    """

    name = "recording"

    def __init__(self):
        self.vectors: Dict[str, Any] = {}
        self.default_vector: Any = [0.0, 0.0]
        self.reply: Any = {"role": "assistant", "content": "stub reply"}
        self.embed_calls: List[tuple] = []
        self.chat_calls: List[tuple] = []
        self.close_calls = 0

    def embed(self, api_key: str, text: str) -> Any:
        self.embed_calls.append((api_key, text))
        return self.vectors.get(text, self.default_vector)

    def chat(self, api_key: str, messages: List[Dict[str, str]]) -> Any:
        self.chat_calls.append((api_key, [dict(m) for m in messages]))
        if callable(self.reply):
            return self.reply(messages)
        return self.reply

    def close(self) -> None:
        self.close_calls += 1


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def state_store() -> StateStore:
    """Fresh state store over an in-memory blob."""
    return StateStore(InMemoryBlobStore())


@pytest.fixture
def dialogs() -> Mock:
    """Dialog collaborator that accepts every confirmation."""
    mock_dialogs = Mock(spec=HostDialogs)
    mock_dialogs.confirm.return_value = True
    return mock_dialogs


@pytest.fixture
def provider() -> RecordingProvider:
    return RecordingProvider()


@pytest.fixture
def configuration() -> Configuration:
    return Configuration(type="openai", api_key="sk-test", organization="org-test")


@pytest.fixture
def configuration_dict() -> Dict[str, str]:
    return {"type": "openai", "apiKey": "sk-test", "organization": "org-test"}


@pytest.fixture
def sample_chat() -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": "You are a helpful assistant."},
        {"role": "user", "content": "Hi!"},
        {"role": "assistant", "content": "Hello! How can I help?"},
        {"role": "user", "content": "Tell me about cats."},
    ]


@pytest.fixture
def reset_fren_logging():
    """Restore the ``fren`` logger's handlers and level after a test."""
    fren_logger = logging.getLogger("fren")
    handlers = list(fren_logger.handlers)
    level = fren_logger.level
    yield fren_logger
    for handler in list(fren_logger.handlers):
        if handler not in handlers:
            fren_logger.removeHandler(handler)
    for handler in handlers:
        if handler not in fren_logger.handlers:
            fren_logger.addHandler(handler)
    fren_logger.setLevel(level)
