"""
Providers subpackage: the embed/chat capability and its HTTP adapters.
"""

from .base import AIProvider, HttpProvider, ProviderSettings
from .ollama_client import OllamaProvider
from .openai_client import OpenAIProvider
from .registry import ProviderRegistry, create_provider, get_provider_registry

__all__ = [
    "AIProvider",
    "HttpProvider",
    "ProviderSettings",
    "OllamaProvider",
    "OpenAIProvider",
    "ProviderRegistry",
    "create_provider",
    "get_provider_registry",
]
