"""
Provider Registry - maps ``Configuration.type`` to a provider adapter.
"""

import logging
from typing import Callable, Dict, List, Optional

from ..core.exceptions import ProviderError
from ..core.types import Configuration
from .base import AIProvider, ProviderSettings
from .ollama_client import OllamaProvider
from .openai_client import OpenAIProvider


logger = logging.getLogger(__name__)

ProviderFactory = Callable[[Configuration, Optional[ProviderSettings]], AIProvider]


class ProviderRegistry:
    """
    Registry of provider factories keyed by configuration type.

    Example:
        >>> registry = ProviderRegistry()
        >>> provider = registry.create(Configuration(type="openai", api_key="sk-..."))
    """

    def __init__(self):
        self._factories: Dict[str, ProviderFactory] = {}
        self._loaded = False

    def register(self, provider_type: str, factory: ProviderFactory) -> None:
        """Register a factory for ``provider_type`` (case-insensitive)."""
        key = provider_type.lower()
        if key in self._factories:
            logger.warning(f"Overwriting existing provider factory: {key}")
        self._factories[key] = factory
        logger.debug(f"Registered provider type: {key}")

    def list_types(self) -> List[str]:
        if not self._loaded:
            self._load_builtins()
        return list(self._factories.keys())

    def create(
        self,
        configuration: Configuration,
        settings: Optional[ProviderSettings] = None,
    ) -> AIProvider:
        """
        Build the provider adapter for ``configuration``.

        Raises:
            ProviderError: If the configuration's type has no registered adapter
        """
        if not self._loaded:
            self._load_builtins()

        factory = self._factories.get(configuration.type.lower())
        if factory is None:
            raise ProviderError(
                f"Unsupported provider type: {configuration.type!r}. "
                f"Supported types: {self.list_types()}",
                provider=configuration.type,
            )
        return factory(configuration, settings)

    def _load_builtins(self) -> None:
        """Load built-in provider adapters."""
        if self._loaded:
            return
        self._loaded = True
        self.register("openai", OpenAIProvider.from_configuration)
        self.register("ollama", OllamaProvider.from_configuration)


# Global registry instance
_registry: Optional[ProviderRegistry] = None


def get_provider_registry() -> ProviderRegistry:
    """Get the global provider registry."""
    global _registry
    if _registry is None:
        _registry = ProviderRegistry()
    return _registry


def create_provider(
    configuration: Configuration,
    settings: Optional[ProviderSettings] = None,
) -> AIProvider:
    """
    Build the provider adapter for ``configuration``.

    Convenience function that uses the global registry.
    """
    return get_provider_registry().create(configuration, settings)
