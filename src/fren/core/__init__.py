"""
Core subpackage for the Fren core.

Contains types, exceptions, and logging utilities.
"""

from .types import (
    Chat,
    ChatMessage,
    ChatRole,
    Configuration,
    Vector,
)
from .exceptions import (
    FrenError,
    ValidationError,
    ConsentDenied,
    Unauthorized,
    NoProviderConfigured,
    MethodNotImplemented,
    UnknownMethod,
    DimensionMismatch,
    ProviderError,
    InvalidProviderResponse,
    StorageError,
    SettingsError,
)

__all__ = [
    # Types
    "Chat",
    "ChatMessage",
    "ChatRole",
    "Configuration",
    "Vector",
    # Exceptions
    "FrenError",
    "ValidationError",
    "ConsentDenied",
    "Unauthorized",
    "NoProviderConfigured",
    "MethodNotImplemented",
    "UnknownMethod",
    "DimensionMismatch",
    "ProviderError",
    "InvalidProviderResponse",
    "StorageError",
    "SettingsError",
]
