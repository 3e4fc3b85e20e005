"""
Method Registry - the dispatcher's method table.

Each method definition names:
- the params parser (schema check)
- the authorization requirement checked before the handler runs
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional

from ..contracts.request_contracts import PARAMS_PARSERS, ParseResult


logger = logging.getLogger(__name__)


class AuthRequirement(str, Enum):
    """What must hold before a method's handler runs."""
    NONE = "none"                # no check (consent, if any, happens inside the handler)
    PROVIDER = "provider"        # a Configuration must exist
    GRANT = "grant"              # a Configuration must exist and the origin must hold a grant


@dataclass(frozen=True)
class MethodDefinition:
    """
    Definition of one request method.

    Attributes:
        method: Method name as sent by the caller
        parse: Params parser returning a ParseResult
        auth: Authorization requirement
        description: What the method does
    """
    method: str
    parse: Callable[[Any], ParseResult]
    auth: AuthRequirement = AuthRequirement.NONE
    description: Optional[str] = None

    @property
    def privileged(self) -> bool:
        return self.auth == AuthRequirement.GRANT


class MethodRegistry:
    """
    Registry of method definitions.

    Example:
        >>> registry = MethodRegistry()
        >>> registry.get("informed_query").auth
        <AuthRequirement.GRANT: 'grant'>
    """

    def __init__(self):
        self._definitions = {}
        self._loaded = False

    def register(self, definition: MethodDefinition) -> None:
        if definition.method in self._definitions:
            logger.warning(f"Overwriting existing method definition: {definition.method}")
        self._definitions[definition.method] = definition
        logger.debug(f"Registered method: {definition.method}")

    def get(self, method: str) -> Optional[MethodDefinition]:
        """Get a method definition, or None for unknown methods."""
        if not self._loaded:
            self._load_builtins()
        return self._definitions.get(method)

    def list_methods(self) -> List[str]:
        if not self._loaded:
            self._load_builtins()
        return list(self._definitions.keys())

    def list_definitions(self) -> List[MethodDefinition]:
        if not self._loaded:
            self._load_builtins()
        return list(self._definitions.values())

    def _load_builtins(self) -> None:
        """Load the built-in method table."""
        if self._loaded:
            return
        self._loaded = True

        builtins = [
            ("set_config", AuthRequirement.NONE,
             "Install an AI provider configuration, after user confirmation."),
            ("ai_permission", AuthRequirement.PROVIDER,
             "Ask the user to let the calling origin use the configured provider."),
            ("ai_request", AuthRequirement.GRANT,
             "Pass a chat or embeddings call through to the provider."),
            ("load_document_into_embeddings", AuthRequirement.GRANT,
             "Embed a document and store it in the embeddings index."),
            ("informed_query", AuthRequirement.GRANT,
             "Answer a chat grounded on the closest stored document."),
            ("clear_embeddings", AuthRequirement.NONE,
             "Remove every document from the embeddings index."),
            ("hello", AuthRequirement.NONE,
             "Count a hello and greet the calling origin."),
        ]
        for method, auth, description in builtins:
            self.register(MethodDefinition(
                method=method,
                parse=PARAMS_PARSERS[method],
                auth=auth,
                description=description,
            ))

        logger.debug(f"Loaded {len(self._definitions)} built-in method definitions")


# Global registry instance
_registry: Optional[MethodRegistry] = None


def get_method_registry() -> MethodRegistry:
    """Get the global method registry."""
    global _registry
    if _registry is None:
        _registry = MethodRegistry()
    return _registry
