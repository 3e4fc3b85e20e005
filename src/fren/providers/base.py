"""
Provider capability - the two calls the core makes to an AI provider.

The core depends only on ``AIProvider.embed`` and ``AIProvider.chat``.
Concrete adapters speak HTTP; tests inject stubs.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from ..core.exceptions import ProviderError


logger = logging.getLogger(__name__)


@dataclass
class ProviderSettings:
    """
    Host-level settings shared by provider adapters.

    Attributes:
        timeout_seconds: HTTP request timeout
        chat_model: Chat model override (None uses the adapter's default)
        embedding_model: Embedding model override (None uses the adapter's default)
    """
    timeout_seconds: int = 120
    chat_model: Optional[str] = None
    embedding_model: Optional[str] = None


class AIProvider(ABC):
    """
    Embedding and chat capability of an AI provider.

    Both methods return the provider's raw answer; the caller validates it.
    Neither retries.
    """

    name = "provider"

    @abstractmethod
    def embed(self, api_key: str, text: str) -> Any:
        """
        Compute the embedding of ``text``.

        Returns:
            The embedding vector as returned by the provider

        Raises:
            ProviderError: If the call fails
        """
        pass

    @abstractmethod
    def chat(self, api_key: str, messages: List[Dict[str, str]]) -> Any:
        """
        Get the provider's reply to a conversation.

        Args:
            api_key: Provider credential
            messages: Conversation as ``{"role", "content"}`` dicts, oldest first

        Returns:
            The reply message as returned by the provider

        Raises:
            ProviderError: If the call fails
        """
        pass

    def close(self) -> None:
        """Release any resources held by the adapter. Optional."""
        pass


class HttpProvider(AIProvider):
    """Shared HTTP plumbing for JSON-over-HTTP providers."""

    default_base_url = ""
    default_chat_model = ""
    default_embedding_model = ""

    def __init__(
        self,
        base_url: Optional[str] = None,
        settings: Optional[ProviderSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        settings = settings or ProviderSettings()
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self.timeout = settings.timeout_seconds
        self.chat_model = settings.chat_model or self.default_chat_model
        self.embedding_model = settings.embedding_model or self.default_embedding_model
        self._owns_session = session is None
        self.session = session or requests.Session()

        logger.debug(
            f"Initialized {type(self).__name__}: base_url={self.base_url}, "
            f"chat_model={self.chat_model}, embedding_model={self.embedding_model}"
        )

    def close(self) -> None:
        """Close the HTTP session if this adapter created it."""
        if self._owns_session:
            self.session.close()

    def _headers(self, api_key: str) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        return headers

    def _post_json(self, path: str, payload: Dict[str, Any], api_key: str) -> Dict[str, Any]:
        """
        POST a JSON payload and return the decoded JSON object.

        Raises:
            ProviderError: On connection failure, timeout, non-2xx status or
                a body that is not a JSON object
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"Making request to {url}")

        try:
            response = self.session.post(
                url,
                json=payload,
                headers=self._headers(api_key),
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            logger.error(f"Timed out calling {self.name}: {e}")
            raise ProviderError(f"Request to {url} timed out", provider=self.name) from e
        except requests.RequestException as e:
            logger.error(f"Failed to connect to {self.name}: {e}")
            raise ProviderError(f"Failed to connect to {self.name} at {self.base_url}: {e}", provider=self.name) from e

        if not response.ok:
            logger.error(f"HTTP error from {self.name}: {response.status_code} - {response.text[:500]}")
            raise ProviderError(
                f"{self.name} API error: {response.status_code} - {response.text[:500]}",
                provider=self.name,
                status_code=response.status_code,
            )

        try:
            result = response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON response from {self.name}: {e}")
            raise ProviderError(f"Invalid JSON response from {self.name}: {e}", provider=self.name) from e

        if not isinstance(result, dict):
            raise ProviderError(f"Unexpected response body from {self.name}", provider=self.name)
        return result
