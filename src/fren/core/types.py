"""
Core data types for the Fren core.

Uses dataclasses with explicit to_dict/from_dict converters. Persisted and
wire shapes use the camelCase keys of the host protocol (``apiKey``,
``basePath``); Python attributes use snake_case.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


# Top-level keys of the persisted state blob
CONFIG_KEY = "config"
PERMISSION_KEY_PREFIX = "ai_permission:"
EMBEDDINGS_INDEX_KEY = "embeddingsIndex"
HELLO_KEY = "hello"

Vector = List[float]


def permission_key(origin: str) -> str:
    """State key holding the permission grant for ``origin``."""
    return f"{PERMISSION_KEY_PREFIX}{origin}"


class ChatRole(str, Enum):
    """Role of a chat message author."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"

    @classmethod
    def values(cls) -> List[str]:
        return [role.value for role in cls]


@dataclass(frozen=True)
class ChatMessage:
    """
    A single turn of a conversation.

    Attributes:
        role: Who authored the message
        content: Message text
    """
    role: ChatRole
    content: str

    def to_dict(self) -> Dict[str, str]:
        """Convert to the wire shape ``{"role", "content"}``."""
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatMessage":
        """Create from an already validated dictionary."""
        return cls(role=ChatRole(data["role"]), content=data["content"])

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(role=ChatRole.SYSTEM, content=content)


Chat = List[ChatMessage]


def chat_to_dicts(chat: Chat) -> List[Dict[str, str]]:
    """Convert a chat to the list-of-dicts shape providers consume."""
    return [message.to_dict() for message in chat]


# (python attribute, wire key) for every Configuration field
CONFIGURATION_FIELDS = (
    ("type", "type"),
    ("api_key", "apiKey"),
    ("organization", "organization"),
    ("username", "username"),
    ("password", "password"),
    ("access_token", "accessToken"),
    ("base_path", "basePath"),
    ("base_options", "baseOptions"),
)

REQUIRED_CONFIGURATION_KEYS = ("type", "apiKey")

SECRET_CONFIGURATION_KEYS = ("apiKey", "password", "accessToken")


@dataclass(frozen=True)
class Configuration:
    """
    The single AI-provider configuration record for a user.

    Overwritten, never versioned. Created by ``set_config`` and read by
    every privileged operation.

    Attributes:
        type: Provider type (e.g. 'openai', 'ollama')
        api_key: Credential passed to every provider call
        organization: Optional provider organization identifier
        username: Optional basic-auth username
        password: Optional basic-auth password
        access_token: Optional bearer token
        base_path: Optional override of the provider base URL
        base_options: Optional opaque provider options string
    """
    type: str
    api_key: str
    organization: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    access_token: Optional[str] = None
    base_path: Optional[str] = None
    base_options: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        """Convert to the persisted shape, omitting unset optional fields."""
        result = {}
        for attr, key in CONFIGURATION_FIELDS:
            value = getattr(self, attr)
            if value is not None:
                result[key] = value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Configuration":
        """Create from an already validated dictionary."""
        return cls(**{attr: data.get(key) for attr, key in CONFIGURATION_FIELDS})

    def redacted(self) -> Dict[str, str]:
        """Persisted shape with secrets masked, safe to log."""
        result = self.to_dict()
        for key in SECRET_CONFIGURATION_KEYS:
            if key in result:
                result[key] = "***"
        return result
