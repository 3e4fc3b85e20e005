"""
Request Contracts - typed parsing of inbound request params.

Every method's params are parsed once, at the dispatcher boundary, into a
typed request object. Parsers never raise: they return a ``ParseResult``
that is either ``ok`` (carrying the request) or ``err`` (carrying a
``ValidationError``), so all methods consume validation uniformly.

Params are flat: ``{"doc": ...}`` and ``{"chat": [...]}``, never wrapped in
an extra ``params`` object.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..core.exceptions import InvalidProviderResponse, ValidationError
from ..core.types import (
    Chat,
    ChatMessage,
    ChatRole,
    Configuration,
    CONFIGURATION_FIELDS,
    REQUIRED_CONFIGURATION_KEYS,
    Vector,
)


class AiRequestKind(str, Enum):
    """Pass-through AI methods accepted by ``ai_request``."""
    CHAT = "chat"
    EMBEDDINGS = "embeddings"
    COMPLETIONS = "completions"
    EDITS = "edits"


# ============================================================================
# Typed requests
# ============================================================================

@dataclass(frozen=True)
class SetConfigRequest:
    configuration: Configuration


@dataclass(frozen=True)
class AiPermissionRequest:
    pass


@dataclass(frozen=True)
class AiRequest:
    """
    A pass-through AI call.

    Attributes:
        kind: Which provider capability to call
        chat: Conversation for ``chat`` requests
        text: Input text for ``embeddings`` requests
    """
    kind: AiRequestKind
    chat: Optional[Chat] = None
    text: Optional[str] = None


@dataclass(frozen=True)
class LoadDocumentRequest:
    doc: str


@dataclass(frozen=True)
class InformedQueryRequest:
    chat: Chat


@dataclass(frozen=True)
class ClearEmbeddingsRequest:
    pass


@dataclass(frozen=True)
class HelloRequest:
    pass


@dataclass
class ParseResult:
    """
    Outcome of parsing a method's params.

    Attributes:
        request: The typed request (when parsing succeeded)
        error: The validation error (when parsing failed)
    """
    request: Any = None
    error: Optional[ValidationError] = None

    @classmethod
    def ok(cls, request: Any) -> "ParseResult":
        return cls(request=request)

    @classmethod
    def err(cls, message: str, validation_errors: Optional[List[str]] = None) -> "ParseResult":
        return cls(error=ValidationError(message, validation_errors))

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the request, raising the validation error if parsing failed."""
        if self.error is not None:
            raise self.error
        return self.request


# ============================================================================
# Shape validators
# ============================================================================

def validate_configuration(data: Any) -> List[str]:
    """
    Validate a candidate Configuration record.

    ``type`` and ``apiKey`` are required strings; every other known field is
    an optional string. Unknown keys are ignored.

    Returns:
        List of validation error messages (empty if valid)
    """
    if not isinstance(data, dict):
        return ["configuration must be an object"]

    errors = []
    for key in REQUIRED_CONFIGURATION_KEYS:
        if key not in data:
            errors.append(f"Missing required field: {key}")

    for _, key in CONFIGURATION_FIELDS:
        if key in data and not isinstance(data[key], str):
            errors.append(f"Field '{key}' must be a string")

    return errors


def validate_chat_message(data: Any, path: str = "message") -> List[str]:
    """
    Validate a single ChatMessage ``{"role", "content"}``.

    Returns:
        List of validation error messages (empty if valid)
    """
    if not isinstance(data, dict):
        return [f"{path} must be an object"]

    errors = []
    role = data.get("role")
    if not isinstance(role, str):
        errors.append(f"{path}.role must be a string")
    elif role not in ChatRole.values():
        errors.append(f"{path}.role must be one of {ChatRole.values()}, got '{role}'")

    if not isinstance(data.get("content"), str):
        errors.append(f"{path}.content must be a string")

    return errors


def validate_chat(data: Any, require_non_empty: bool = False) -> List[str]:
    """
    Validate a Chat (ordered list of ChatMessage, oldest first).

    Returns:
        List of validation error messages (empty if valid)
    """
    if not isinstance(data, list):
        return ["chat must be a list of messages"]

    if require_non_empty and not data:
        return ["chat must contain at least one message"]

    errors = []
    for i, message in enumerate(data):
        errors.extend(validate_chat_message(message, path=f"chat[{i}]"))
    return errors


def parse_configuration(data: Any) -> Configuration:
    """
    Parse a candidate Configuration.

    Raises:
        ValidationError: If required fields are missing or mistyped
    """
    errors = validate_configuration(data)
    if errors:
        raise ValidationError("Invalid configuration", errors)
    return Configuration.from_dict(data)


def parse_chat_reply(data: Any) -> ChatMessage:
    """
    Parse a provider's chat reply.

    Raises:
        InvalidProviderResponse: If the reply lacks a recognised role/content
    """
    errors = validate_chat_message(data, path="reply")
    if errors:
        raise InvalidProviderResponse(f"Invalid chat response: {'; '.join(errors)}")
    return ChatMessage.from_dict(data)


def validate_vector(data: Any) -> List[str]:
    """
    Validate an embedding vector: a non-empty sequence of finite numbers.

    Booleans are rejected even though they are ints in Python.

    Returns:
        List of validation error messages (empty if valid)
    """
    if not isinstance(data, (list, tuple)):
        return [f"embedding must be a list of numbers, got {type(data).__name__}"]
    if not data:
        return ["embedding must not be empty"]

    for i, value in enumerate(data):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return [f"embedding[{i}] is not a number"]
        if not math.isfinite(value):
            return [f"embedding[{i}] is not finite"]
    return []


def to_vector(data: Any) -> Vector:
    """Convert an already validated embedding to a list of floats."""
    return [float(value) for value in data]


# ============================================================================
# Per-method params parsers
# ============================================================================

def _parse_chat_list(data: Any, require_non_empty: bool) -> ParseResult:
    errors = validate_chat(data, require_non_empty=require_non_empty)
    if errors:
        return ParseResult.err("Invalid chat", errors)
    return ParseResult.ok([ChatMessage.from_dict(message) for message in data])


def parse_set_config_params(params: Any) -> ParseResult:
    errors = validate_configuration(params)
    if errors:
        return ParseResult.err("Invalid configuration", errors)
    return ParseResult.ok(SetConfigRequest(configuration=Configuration.from_dict(params)))


def parse_ai_request_params(params: Any) -> ParseResult:
    """
    Parse ``ai_request`` params ``{"method": <kind>, ...}``.

    ``chat`` requires a ``chat`` list; ``embeddings`` requires a string under
    ``embeddings`` (``input`` is used when ``embeddings`` is absent or null).
    ``completions`` and ``edits`` parse successfully and are rejected later.
    """
    if not isinstance(params, dict):
        return ParseResult.err("ai_request params must be an object")

    method = params.get("method")
    if method not in [kind.value for kind in AiRequestKind]:
        return ParseResult.err(
            "Invalid ai_request method",
            [f"method must be one of {[kind.value for kind in AiRequestKind]}, got {method!r}"],
        )
    kind = AiRequestKind(method)

    if kind == AiRequestKind.CHAT:
        chat = _parse_chat_list(params.get("chat"), require_non_empty=False)
        if not chat.is_ok:
            return chat
        return ParseResult.ok(AiRequest(kind=kind, chat=chat.request))

    if kind == AiRequestKind.EMBEDDINGS:
        text = params.get("embeddings")
        if text is None:
            text = params.get("input")
        if not isinstance(text, str):
            return ParseResult.err("Invalid embeddings request", ["embeddings must be a string"])
        return ParseResult.ok(AiRequest(kind=kind, text=text))

    return ParseResult.ok(AiRequest(kind=kind))


def parse_load_document_params(params: Any) -> ParseResult:
    if not isinstance(params, dict):
        return ParseResult.err("load_document_into_embeddings params must be an object")
    doc = params.get("doc")
    if not isinstance(doc, str):
        return ParseResult.err("Invalid document", ["doc must be a string"])
    return ParseResult.ok(LoadDocumentRequest(doc=doc))


def parse_informed_query_params(params: Any) -> ParseResult:
    if not isinstance(params, dict):
        return ParseResult.err("informed_query params must be an object")
    chat = _parse_chat_list(params.get("chat"), require_non_empty=True)
    if not chat.is_ok:
        return chat
    return ParseResult.ok(InformedQueryRequest(chat=chat.request))


def _no_params(request_type: type) -> Callable[[Any], ParseResult]:
    """Parser for methods that ignore their params."""
    def parse(params: Any) -> ParseResult:
        return ParseResult.ok(request_type())
    return parse


PARAMS_PARSERS: Dict[str, Callable[[Any], ParseResult]] = {
    "set_config": parse_set_config_params,
    "ai_permission": _no_params(AiPermissionRequest),
    "ai_request": parse_ai_request_params,
    "load_document_into_embeddings": parse_load_document_params,
    "informed_query": parse_informed_query_params,
    "clear_embeddings": _no_params(ClearEmbeddingsRequest),
    "hello": _no_params(HelloRequest),
}
