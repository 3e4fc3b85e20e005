"""
OpenAI-compatible provider adapter.

Talks to ``/chat/completions`` and ``/embeddings`` of any server speaking
the OpenAI REST API.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from ..core.exceptions import InvalidProviderResponse
from ..core.types import Configuration
from .base import HttpProvider, ProviderSettings


logger = logging.getLogger(__name__)


class OpenAIProvider(HttpProvider):
    """
    Adapter for the OpenAI REST API.

    Example:
        >>> provider = OpenAIProvider()
        >>> provider.chat("sk-...", [{"role": "user", "content": "Hi"}])
        {'role': 'assistant', 'content': 'Hello!'}
    """

    name = "openai"
    default_base_url = "https://api.openai.com/v1"
    default_chat_model = "gpt-3.5-turbo"
    default_embedding_model = "text-embedding-ada-002"

    def __init__(
        self,
        base_url: Optional[str] = None,
        settings: Optional[ProviderSettings] = None,
        organization: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(base_url=base_url, settings=settings, session=session)
        self.organization = organization

    @classmethod
    def from_configuration(
        cls,
        configuration: Configuration,
        settings: Optional[ProviderSettings] = None,
    ) -> "OpenAIProvider":
        return cls(
            base_url=configuration.base_path,
            settings=settings,
            organization=configuration.organization,
        )

    def _headers(self, api_key: str) -> Dict[str, str]:
        headers = super()._headers(api_key)
        if self.organization:
            headers["OpenAI-Organization"] = self.organization
        return headers

    def chat(self, api_key: str, messages: List[Dict[str, str]]) -> Any:
        result = self._post_json(
            "/chat/completions",
            {"model": self.chat_model, "messages": messages},
            api_key,
        )
        choices = result.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise InvalidProviderResponse("Chat response contains no choices")
        return choices[0].get("message")

    def embed(self, api_key: str, text: str) -> Any:
        result = self._post_json(
            "/embeddings",
            {"model": self.embedding_model, "input": text},
            api_key,
        )
        data = result.get("data")
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            return None
        return data[0].get("embedding")
