"""
Custom exceptions for the Fren core.

Every error is terminal for the request that raised it. Each class carries
a stable ``error_type`` and a JSON-RPC style ``code`` used when the
dispatcher turns the error into a failed response.
"""

from typing import Any, Dict, List, Optional


class FrenError(Exception):
    """Base exception for all Fren core errors."""

    error_type = "FrenError"
    code = -32603

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the ``error`` member of a failed response."""
        return {
            "code": self.code,
            "type": self.error_type,
            "message": str(self),
        }


class ValidationError(FrenError):
    """
    Request params do not match the method's schema.

    Raised before any authorization check and before anything is persisted.
    """

    error_type = "ValidationError"
    code = -32602

    def __init__(self, message: str, validation_errors: Optional[List[str]] = None):
        super().__init__(message)
        self.validation_errors = validation_errors or []

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.validation_errors:
            result["data"] = {"validation_errors": list(self.validation_errors)}
        return result


class ConsentDenied(FrenError):
    """The user declined a confirmation dialog."""

    error_type = "ConsentDenied"
    code = 4001


class Unauthorized(FrenError):
    """The calling origin has no cached permission grant."""

    error_type = "Unauthorized"
    code = 4100

    def __init__(self, message: str, origin: Optional[str] = None):
        super().__init__(message)
        self.origin = origin


class NoProviderConfigured(FrenError):
    """A privileged operation was attempted before any provider was configured."""

    error_type = "NoProviderConfigured"
    code = 4900


class MethodNotImplemented(FrenError):
    """The requested AI method is recognised but not supported (completions, edits)."""

    error_type = "NotImplemented"
    code = 4200


class UnknownMethod(FrenError):
    """The request names a method this core does not serve."""

    error_type = "UnknownMethod"
    code = -32601


class DimensionMismatch(FrenError):
    """
    Embedding vectors of different lengths met inside the index.

    Raised instead of truncating or padding, so distances are never
    computed over mixed dimensionalities.
    """

    error_type = "DimensionMismatch"
    code = -32000

    def __init__(
        self,
        message: str,
        expected: Optional[int] = None,
        actual: Optional[int] = None,
        document: Optional[str] = None,
    ):
        super().__init__(message)
        self.expected = expected
        self.actual = actual
        self.document = document


class ProviderError(FrenError):
    """
    Error communicating with the embedding/chat provider.

    Raised when:
    - Provider is unreachable or times out
    - Provider returns an error response
    - Provider returns something that is not a usable embedding
    """

    error_type = "ProviderError"
    code = -32001

    def __init__(self, message: str, provider: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class InvalidProviderResponse(FrenError):
    """The provider answered, but not with a recognised chat message shape."""

    error_type = "InvalidProviderResponse"
    code = -32002


class StorageError(FrenError):
    """
    Error reading or writing the persisted state blob.

    Raised when:
    - The backing file or database cannot be read or written
    - The stored blob is not a JSON object
    """

    error_type = "StorageError"
    code = -32003


class SettingsError(FrenError):
    """Host runtime settings are missing or invalid."""

    error_type = "SettingsError"
    code = -32004
