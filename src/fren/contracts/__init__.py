"""
Contracts subpackage: typed parsing of request params and provider replies.
"""

from .request_contracts import (
    AiRequestKind,
    SetConfigRequest,
    AiPermissionRequest,
    AiRequest,
    LoadDocumentRequest,
    InformedQueryRequest,
    ClearEmbeddingsRequest,
    HelloRequest,
    ParseResult,
    PARAMS_PARSERS,
    parse_configuration,
    parse_chat_reply,
    validate_configuration,
    validate_chat,
    validate_vector,
    to_vector,
)

__all__ = [
    "AiRequestKind",
    "SetConfigRequest",
    "AiPermissionRequest",
    "AiRequest",
    "LoadDocumentRequest",
    "InformedQueryRequest",
    "ClearEmbeddingsRequest",
    "HelloRequest",
    "ParseResult",
    "PARAMS_PARSERS",
    "parse_configuration",
    "parse_chat_reply",
    "validate_configuration",
    "validate_chat",
    "validate_vector",
    "to_vector",
]
