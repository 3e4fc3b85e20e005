"""
Unit tests for the request dispatcher.

Tests for:
- Method lookup and params validation
- Authorization ordering (validation, provider, grant)
- Every built-in method end to end against a recording provider
- Failed responses and propagation of unexpected errors
"""

import logging

import pytest

from fren.core.exceptions import (
    ConsentDenied,
    InvalidProviderResponse,
    MethodNotImplemented,
    NoProviderConfigured,
    ProviderError,
    Unauthorized,
    UnknownMethod,
    ValidationError,
)
from fren.core.types import CONFIG_KEY, EMBEDDINGS_INDEX_KEY, HELLO_KEY, permission_key
from fren.runners.dispatcher import RequestDispatcher


ORIGIN = "https://site.example"
OTHER = "https://other.example"


@pytest.fixture
def dispatcher(state_store, dialogs, provider):
    return RequestDispatcher(state_store, dialogs, provider_factory=lambda configuration: provider)


@pytest.fixture
def granted(dispatcher, configuration_dict):
    """Dispatcher with a provider configured and ORIGIN granted."""
    dispatcher.dispatch(ORIGIN, "set_config", configuration_dict)
    dispatcher.dispatch(ORIGIN, "ai_permission")
    return dispatcher


class TestRouting:
    """Tests for method lookup and validation ordering."""

    def test_unknown_method(self, dispatcher):
        """Test unknown methods fail."""
        with pytest.raises(UnknownMethod, match="Method not found"):
            dispatcher.dispatch(ORIGIN, "eth_accounts")

    def test_validation_before_authorization(self, dispatcher, dialogs):
        """Test bad params fail with ValidationError even without a provider."""
        with pytest.raises(ValidationError):
            dispatcher.dispatch(ORIGIN, "informed_query", {"chat": []})

        dialogs.alert.assert_not_called()

    def test_privileged_without_provider(self, dispatcher, dialogs, sample_chat):
        """Test privileged calls fail cleanly before any provider exists."""
        with pytest.raises(NoProviderConfigured):
            dispatcher.dispatch(ORIGIN, "informed_query", {"chat": sample_chat})

        dialogs.alert.assert_called_once()

    def test_privileged_without_grant(self, dispatcher, configuration_dict, provider):
        """Test an ungranted origin is refused without a provider call."""
        dispatcher.dispatch(ORIGIN, "set_config", configuration_dict)

        with pytest.raises(Unauthorized):
            dispatcher.dispatch(ORIGIN, "load_document_into_embeddings", {"doc": "text"})

        assert provider.embed_calls == []

    def test_nested_params_rejected(self, dispatcher, configuration_dict):
        """Test params must be flat."""
        with pytest.raises(ValidationError):
            dispatcher.dispatch(ORIGIN, "set_config", {"params": configuration_dict})


class TestConfigurationFlow:
    """Tests for set_config and ai_permission."""

    def test_set_config(self, dispatcher, state_store, configuration_dict):
        """Test an accepted configuration is stored."""
        assert dispatcher.dispatch(ORIGIN, "set_config", configuration_dict) is True
        assert state_store.get(CONFIG_KEY) == configuration_dict

    def test_set_config_declined(self, dispatcher, dialogs, state_store, configuration_dict):
        """Test a declined configuration stores nothing."""
        dialogs.confirm.return_value = False

        with pytest.raises(ConsentDenied):
            dispatcher.dispatch(ORIGIN, "set_config", configuration_dict)
        assert state_store.get_all() == {}

    def test_invalid_set_config_keeps_prior(self, dispatcher, state_store, dialogs, configuration_dict):
        """Test a malformed configuration fails without touching the stored one."""
        dispatcher.dispatch(ORIGIN, "set_config", configuration_dict)
        dialogs.confirm.reset_mock()

        result = dispatcher.handle(OTHER, {"method": "set_config", "params": {"type": 1, "apiKey": "x"}})

        assert result.to_dict()["error"]["type"] == "ValidationError"
        dialogs.confirm.assert_not_called()
        assert state_store.get(CONFIG_KEY) == configuration_dict

    def test_declined_set_config_keeps_prior(self, dispatcher, state_store, dialogs, configuration_dict):
        """Test declining a replacement configuration keeps the stored one."""
        dispatcher.dispatch(ORIGIN, "set_config", configuration_dict)
        dialogs.confirm.return_value = False

        with pytest.raises(ConsentDenied):
            dispatcher.dispatch(OTHER, "set_config", {"type": "ollama", "apiKey": "other"})

        assert state_store.get(CONFIG_KEY) == configuration_dict

    def test_ai_permission_requires_provider(self, dispatcher, dialogs):
        """Test permission cannot be granted before a provider exists."""
        with pytest.raises(NoProviderConfigured):
            dispatcher.dispatch(ORIGIN, "ai_permission")
        dialogs.confirm.assert_not_called()

    def test_grant_is_per_origin(self, granted, state_store, sample_chat):
        """Test a grant for one origin does not authorize another."""
        assert state_store.get(permission_key(ORIGIN)) is True

        with pytest.raises(Unauthorized):
            granted.dispatch(OTHER, "informed_query", {"chat": sample_chat})

    def test_grant_survives_new_configuration(self, granted, sample_chat):
        """Test replacing the configuration keeps existing grants."""
        granted.dispatch(OTHER, "set_config", {"type": "ollama", "apiKey": ""})
        assert granted.dispatch(ORIGIN, "ai_request", {"method": "chat", "chat": sample_chat})


class TestAiRequest:
    """Tests for ai_request."""

    def test_chat(self, granted, provider, sample_chat):
        """Test chat passes through with the stored api key."""
        result = granted.dispatch(ORIGIN, "ai_request", {"method": "chat", "chat": sample_chat})

        assert result == {"role": "assistant", "content": "stub reply"}
        assert provider.chat_calls == [("sk-test", sample_chat)]

    def test_embeddings(self, granted, provider):
        """Test embeddings return the provider vector."""
        provider.vectors["hello"] = [0.5, 0.25]
        assert granted.dispatch(ORIGIN, "ai_request", {"method": "embeddings", "embeddings": "hello"}) == [0.5, 0.25]

    def test_embeddings_input_alias(self, granted, provider):
        """Test 'input' is accepted for the text to embed."""
        granted.dispatch(ORIGIN, "ai_request", {"method": "embeddings", "input": "hi"})
        assert provider.embed_calls == [("sk-test", "hi")]

    @pytest.mark.parametrize("method", ["completions", "edits"])
    def test_not_implemented(self, granted, method):
        """Test completions and edits are refused."""
        with pytest.raises(MethodNotImplemented) as exc_info:
            granted.dispatch(ORIGIN, "ai_request", {"method": method})
        assert exc_info.value.code == 4200

    def test_embeddings_null_falls_back_to_input(self, granted, provider):
        """Test an explicit null under 'embeddings' does not hide 'input'."""
        granted.dispatch(ORIGIN, "ai_request", {"method": "embeddings", "embeddings": None, "input": "hi"})
        assert provider.embed_calls == [("sk-test", "hi")]

    def test_invalid_reply(self, granted, provider, sample_chat):
        """Test a malformed provider reply fails the request."""
        provider.reply = {"content": "no role"}
        result = granted.handle(ORIGIN, {"method": "ai_request", "params": {"method": "chat", "chat": sample_chat}})

        assert result.to_dict()["error"]["type"] == "InvalidProviderResponse"


class TestEmbeddingsFlow:
    """Tests for load_document_into_embeddings, informed_query and clear_embeddings."""

    def test_load_then_informed_query(self, granted, provider, sample_chat):
        """Test the nearest document grounds the answer."""
        provider.vectors = {
            "Cats purr.": [1.0, 0.0],
            "Dogs bark.": [0.0, 1.0],
            "Tell me about cats.": [0.8, 0.1],
        }
        assert granted.dispatch(ORIGIN, "load_document_into_embeddings", {"doc": "Cats purr."}) is True
        assert granted.dispatch(ORIGIN, "load_document_into_embeddings", {"doc": "Dogs bark."}) is True

        reply = granted.dispatch(ORIGIN, "informed_query", {"chat": sample_chat})

        assert reply == {"role": "assistant", "content": "stub reply"}
        sent = provider.chat_calls[-1][1]
        assert sent[-2] == {"role": "system", "content": "Cats purr."}
        assert sent[-1] == sample_chat[-1]

    def test_informed_query_empty_index(self, granted, provider, sample_chat):
        """Test an empty index sends the chat unchanged."""
        granted.dispatch(ORIGIN, "informed_query", {"chat": sample_chat})
        assert provider.chat_calls[-1][1] == sample_chat

    def test_clear_embeddings_needs_no_grant(self, granted, state_store):
        """Test any origin may clear the index."""
        granted.dispatch(ORIGIN, "load_document_into_embeddings", {"doc": "doc"})

        assert granted.dispatch(OTHER, "clear_embeddings") is True
        assert state_store.get(EMBEDDINGS_INDEX_KEY) == {}

    def test_provider_failure_leaves_index(self, granted, provider, state_store):
        """Test a failing embed call stores nothing."""
        def broken(api_key, text):
            raise ConnectionError("offline")

        provider.embed = broken

        with pytest.raises(ProviderError):
            granted.dispatch(ORIGIN, "load_document_into_embeddings", {"doc": "doc"})
        assert not state_store.contains(EMBEDDINGS_INDEX_KEY)


class TestProviderLifecycle:
    """Tests for releasing the provider built for each privileged call."""

    def test_closed_after_each_call(self, granted, provider, sample_chat):
        """Test every provider-backed call closes its provider."""
        granted.dispatch(ORIGIN, "ai_request", {"method": "chat", "chat": sample_chat})
        granted.dispatch(ORIGIN, "load_document_into_embeddings", {"doc": "doc"})
        granted.dispatch(ORIGIN, "informed_query", {"chat": sample_chat})

        assert provider.close_calls == 3

    def test_closed_when_call_fails(self, granted, provider, sample_chat):
        """Test the provider is closed even when the call raises."""
        provider.reply = {"content": "no role"}

        with pytest.raises(InvalidProviderResponse):
            granted.dispatch(ORIGIN, "ai_request", {"method": "chat", "chat": sample_chat})

        assert provider.close_calls == 1

    def test_not_built_for_unprivileged_calls(self, granted, provider):
        """Test methods that never reach the provider do not build one."""
        granted.dispatch(ORIGIN, "clear_embeddings")
        granted.dispatch(ORIGIN, "hello")

        assert provider.close_calls == 0


class TestHello:
    """Tests for hello."""

    def test_hello_counts(self, dispatcher, dialogs, state_store):
        """Test hello increments the counter and returns the user's answer."""
        assert dispatcher.dispatch(ORIGIN, "hello") is True
        dialogs.confirm.return_value = False
        assert dispatcher.dispatch(ORIGIN, "hello") is False

        assert state_store.get(HELLO_KEY) == 2
        assert dialogs.confirm.call_args[0][0].lines[-1] == "You've said hello 1 times."


class TestHandle:
    """Tests for the raw request entry point."""

    def test_success(self, dispatcher):
        """Test a successful request."""
        assert dispatcher.handle(ORIGIN, {"method": "hello"}).to_dict() == {"result": True}

    def test_typed_error(self, dispatcher):
        """Test typed errors become failed responses."""
        result = dispatcher.handle(ORIGIN, {"method": "nope"})

        assert not result.ok
        assert result.to_dict()["error"]["code"] == -32601

    def test_validation_details(self, dispatcher):
        """Test validation errors carry their details."""
        error = dispatcher.handle(ORIGIN, {"method": "set_config", "params": {"type": "openai"}}).to_dict()["error"]

        assert error["type"] == "ValidationError"
        assert error["data"]["validation_errors"] == ["Missing required field: apiKey"]

    @pytest.mark.parametrize("request_obj", [None, [], {"params": {}}, {"method": 7}])
    def test_malformed_request(self, dispatcher, request_obj):
        """Test requests without a string method are validation failures."""
        assert dispatcher.handle(ORIGIN, request_obj).to_dict()["error"]["type"] == "ValidationError"

    def test_unexpected_errors_propagate(self, state_store, dialogs, configuration_dict, caplog):
        """Test non-typed errors are logged and re-raised."""
        def broken_factory(configuration):
            raise KeyError("factory bug")

        dispatcher = RequestDispatcher(state_store, dialogs, provider_factory=broken_factory)
        dispatcher.dispatch(ORIGIN, "set_config", configuration_dict)
        dispatcher.dispatch(ORIGIN, "ai_permission")

        with caplog.at_level(logging.ERROR, logger="fren"):
            with pytest.raises(KeyError):
                dispatcher.handle(ORIGIN, {"method": "load_document_into_embeddings", "params": {"doc": "x"}})

        assert any("Unexpected error" in record.getMessage() for record in caplog.records)
