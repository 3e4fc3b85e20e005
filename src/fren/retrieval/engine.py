"""
Retrieval Engine - informed queries grounded on the closest stored document.

An informed query embeds the active turn (the last message), finds the
nearest stored document and splices it in as a system message right
before the active turn:

    chat[:-1] + [system(document)] + [chat[-1]]

With an empty index the chat is passed through unchanged.
"""

import logging
from typing import Any, Callable

from ..contracts.request_contracts import parse_chat_reply, to_vector, validate_vector
from ..core.exceptions import FrenError, ProviderError
from ..core.types import Chat, ChatMessage, Vector, chat_to_dicts
from ..providers.base import AIProvider
from .index import EmbeddingIndex


logger = logging.getLogger(__name__)


def _call_provider(operation: str, call: Callable[[], Any]) -> Any:
    """Run a provider call, surfacing any failure as ProviderError."""
    try:
        return call()
    except FrenError:
        raise
    except Exception as e:
        logger.error(f"Provider {operation} call failed: {e}")
        raise ProviderError(f"Provider {operation} call failed: {e}") from e


class RetrievalEngine:
    """
    Composes the embedding index with the provider's embed/chat calls.

    Also serves the validated pass-through calls used by ``ai_request``.
    """

    def __init__(self, index: EmbeddingIndex, provider: AIProvider):
        self.index = index
        self.provider = provider

    def embed(self, api_key: str, text: str) -> Vector:
        """
        Embed ``text`` with the provider.

        Raises:
            ProviderError: If the call fails or the reply is not a numeric sequence
        """
        raw = _call_provider("embed", lambda: self.provider.embed(api_key, text))
        errors = validate_vector(raw)
        if errors:
            raise ProviderError(
                f"Invalid embedding from provider: {'; '.join(errors)}",
                provider=self.provider.name,
            )
        return to_vector(raw)

    def chat(self, api_key: str, chat: Chat) -> ChatMessage:
        """
        Send ``chat`` to the provider and validate the reply.

        Raises:
            ProviderError: If the call fails
            InvalidProviderResponse: If the reply is not a ChatMessage
        """
        reply = _call_provider("chat", lambda: self.provider.chat(api_key, chat_to_dicts(chat)))
        return parse_chat_reply(reply)

    def load_document(self, api_key: str, document: str) -> Vector:
        """Embed ``document`` and store it in the index."""
        return self.index.insert(document, lambda text: self.embed(api_key, text))

    def augment(self, chat: Chat, document: str) -> Chat:
        """Insert ``document`` as a system message just before the active turn."""
        return list(chat[:-1]) + [ChatMessage.system(document), chat[-1]]

    def informed_query(self, api_key: str, chat: Chat) -> ChatMessage:
        """
        Answer ``chat`` grounded on the stored document closest to its last message.

        Args:
            api_key: Provider credential
            chat: Non-empty conversation, oldest first

        Returns:
            The provider's validated reply

        Raises:
            ValueError: If ``chat`` is empty
            ProviderError: If a provider call fails
            InvalidProviderResponse: If the reply is not a ChatMessage
            DimensionMismatch: If the query and stored embeddings differ in length
        """
        if not chat:
            raise ValueError("chat must contain at least one message")

        query_vector = self.embed(api_key, chat[-1].content)
        nearest = self.index.nearest(query_vector)

        if nearest is None:
            logger.info("Embeddings index is empty; sending chat unmodified")
            return self.chat(api_key, chat)

        logger.info(f"Informed query grounded on document at distance {nearest.distance:.6f}")
        return self.chat(api_key, self.augment(chat, nearest.document))
