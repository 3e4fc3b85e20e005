"""
Unit tests for provider adapters and the provider registry.

HTTP is mocked at the requests.Session level.
"""

from unittest.mock import Mock

import pytest
import requests

from fren.core.exceptions import InvalidProviderResponse, ProviderError
from fren.core.types import Configuration
from fren.providers import (
    OllamaProvider,
    OpenAIProvider,
    ProviderRegistry,
    ProviderSettings,
    create_provider,
)


def make_response(body=None, status_code=200, text=""):
    response = Mock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.text = text
    response.json.return_value = body
    return response


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


class TestOpenAIProvider:
    """Tests for OpenAIProvider."""

    def test_chat_request_shape(self, session):
        """Test the chat call posts model and messages with auth headers."""
        session.post.return_value = make_response(
            {"choices": [{"message": {"role": "assistant", "content": "Hi there"}}]}
        )
        provider = OpenAIProvider(organization="org-1", session=session)
        messages = [{"role": "user", "content": "Hi"}]

        reply = provider.chat("sk-test", messages)

        assert reply == {"role": "assistant", "content": "Hi there"}
        args, kwargs = session.post.call_args
        assert args[0] == "https://api.openai.com/v1/chat/completions"
        assert kwargs["json"] == {"model": "gpt-3.5-turbo", "messages": messages}
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
        assert kwargs["headers"]["OpenAI-Organization"] == "org-1"
        assert kwargs["timeout"] == 120

    def test_chat_without_choices(self, session):
        """Test a reply without choices is an invalid response."""
        session.post.return_value = make_response({"choices": []})
        with pytest.raises(InvalidProviderResponse):
            OpenAIProvider(session=session).chat("k", [])

    def test_embed(self, session):
        """Test the embeddings call and result extraction."""
        session.post.return_value = make_response({"data": [{"embedding": [0.1, 0.2]}]})
        provider = OpenAIProvider(
            settings=ProviderSettings(embedding_model="text-embedding-3-small"),
            session=session,
        )

        assert provider.embed("k", "hello") == [0.1, 0.2]
        assert session.post.call_args[1]["json"] == {"model": "text-embedding-3-small", "input": "hello"}

    def test_embed_missing_data(self, session):
        """Test a reply without data yields None for the caller to reject."""
        session.post.return_value = make_response({"object": "list"})
        assert OpenAIProvider(session=session).embed("k", "hello") is None

    def test_from_configuration(self):
        """Test base path and organization come from the configuration."""
        provider = OpenAIProvider.from_configuration(
            Configuration(type="openai", api_key="k", organization="org", base_path="https://proxy.example/v1/"),
            ProviderSettings(timeout_seconds=5),
        )
        assert provider.base_url == "https://proxy.example/v1"
        assert provider.organization == "org"
        assert provider.timeout == 5


class TestOllamaProvider:
    """Tests for OllamaProvider."""

    def test_chat(self, session):
        """Test the native chat endpoint, non-streaming."""
        session.post.return_value = make_response(
            {"message": {"role": "assistant", "content": "Hello"}, "done": True}
        )
        provider = OllamaProvider(session=session)

        assert provider.chat("", [{"role": "user", "content": "Hi"}]) == {"role": "assistant", "content": "Hello"}
        args, kwargs = session.post.call_args
        assert args[0] == "http://localhost:11434/api/chat"
        assert kwargs["json"]["stream"] is False
        assert "Authorization" not in kwargs["headers"]

    def test_chat_without_message(self, session):
        """Test a reply without a message is an invalid response."""
        session.post.return_value = make_response({"done": True})
        with pytest.raises(InvalidProviderResponse):
            OllamaProvider(session=session).chat("", [])

    def test_embed(self, session):
        """Test the embeddings endpoint uses 'prompt'."""
        session.post.return_value = make_response({"embedding": [1.0, 2.0]})
        provider = OllamaProvider(session=session)

        assert provider.embed("", "text") == [1.0, 2.0]
        assert session.post.call_args[1]["json"] == {"model": "nomic-embed-text", "prompt": "text"}


class TestHttpErrors:
    """Tests for HTTP error mapping."""

    def test_http_error_status(self, session):
        """Test non-2xx responses become ProviderError with the status code."""
        session.post.return_value = make_response(status_code=401, text="invalid api key")

        with pytest.raises(ProviderError) as exc_info:
            OpenAIProvider(session=session).chat("bad", [])

        assert exc_info.value.status_code == 401
        assert exc_info.value.provider == "openai"
        assert "invalid api key" in str(exc_info.value)

    def test_timeout(self, session):
        """Test timeouts become ProviderError."""
        session.post.side_effect = requests.Timeout("read timed out")
        with pytest.raises(ProviderError, match="timed out"):
            OllamaProvider(session=session).embed("", "x")

    def test_connection_error(self, session):
        """Test connection failures become ProviderError."""
        session.post.side_effect = requests.ConnectionError("refused")
        with pytest.raises(ProviderError, match="Failed to connect"):
            OllamaProvider(session=session).embed("", "x")

    def test_invalid_json(self, session):
        """Test an undecodable body becomes ProviderError."""
        response = make_response()
        response.json.side_effect = ValueError("Expecting value")
        session.post.return_value = response

        with pytest.raises(ProviderError, match="Invalid JSON"):
            OpenAIProvider(session=session).embed("k", "x")

    def test_non_object_body(self, session):
        """Test a JSON body that is not an object becomes ProviderError."""
        session.post.return_value = make_response([1, 2, 3])
        with pytest.raises(ProviderError):
            OpenAIProvider(session=session).embed("k", "x")


class TestProviderRegistry:
    """Tests for ProviderRegistry."""

    def test_builtin_types(self):
        """Test the built-in adapters are registered."""
        assert set(ProviderRegistry().list_types()) >= {"openai", "ollama"}

    @pytest.mark.parametrize("provider_type,expected", [
        ("openai", OpenAIProvider),
        ("OpenAI", OpenAIProvider),
        ("ollama", OllamaProvider),
    ])
    def test_create(self, provider_type, expected):
        """Test lookup is case-insensitive."""
        provider = ProviderRegistry().create(Configuration(type=provider_type, api_key="k"))
        assert isinstance(provider, expected)

    def test_unknown_type(self):
        """Test unknown provider types are rejected."""
        with pytest.raises(ProviderError, match="Unsupported provider type"):
            ProviderRegistry().create(Configuration(type="mystery", api_key="k"))

    def test_register_custom(self, provider):
        """Test custom factories can be registered."""
        registry = ProviderRegistry()
        registry.register("Recording", lambda configuration, settings: provider)

        assert registry.create(Configuration(type="recording", api_key="k")) is provider

    def test_create_provider_applies_settings(self):
        """Test the module-level helper passes settings through."""
        provider = create_provider(
            Configuration(type="ollama", api_key=""),
            ProviderSettings(chat_model="mistral"),
        )
        assert provider.chat_model == "mistral"


class TestProviderClose:
    """Tests for releasing adapter sessions."""

    def test_closes_own_session(self):
        """Test an adapter closes the session it created."""
        provider = OpenAIProvider()
        provider.session = Mock(spec=requests.Session)

        provider.close()

        provider.session.close.assert_called_once()

    def test_leaves_injected_session_open(self, session):
        """Test a caller-supplied session stays open."""
        OllamaProvider(session=session).close()
        session.close.assert_not_called()
