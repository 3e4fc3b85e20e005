"""
Ollama provider adapter.

Uses Ollama's native ``/api/chat`` and ``/api/embeddings`` endpoints,
non-streaming.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.exceptions import InvalidProviderResponse
from ..core.types import Configuration
from .base import HttpProvider, ProviderSettings


logger = logging.getLogger(__name__)


class OllamaProvider(HttpProvider):
    """
    Adapter for a local or remote Ollama server.

    Ollama does not need an API key; one is still sent as a bearer token
    when configured, for servers sitting behind an authenticating proxy.
    """

    name = "ollama"
    default_base_url = "http://localhost:11434"
    default_chat_model = "llama3.2"
    default_embedding_model = "nomic-embed-text"

    @classmethod
    def from_configuration(
        cls,
        configuration: Configuration,
        settings: Optional[ProviderSettings] = None,
    ) -> "OllamaProvider":
        return cls(base_url=configuration.base_path, settings=settings)

    def chat(self, api_key: str, messages: List[Dict[str, str]]) -> Any:
        result = self._post_json(
            "/api/chat",
            {"model": self.chat_model, "messages": messages, "stream": False},
            api_key,
        )
        if "message" not in result:
            raise InvalidProviderResponse("Chat response contains no message")
        return result["message"]

    def embed(self, api_key: str, text: str) -> Any:
        result = self._post_json(
            "/api/embeddings",
            {"model": self.embedding_model, "prompt": text},
            api_key,
        )
        return result.get("embedding")
