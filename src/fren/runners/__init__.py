"""
Runners subpackage: the request dispatcher and its method table.
"""

from .context import DispatchResult, RequestContext, RequestState
from .methods import AuthRequirement, MethodDefinition, MethodRegistry, get_method_registry
from .dispatcher import RequestDispatcher

__all__ = [
    "DispatchResult",
    "RequestContext",
    "RequestState",
    "AuthRequirement",
    "MethodDefinition",
    "MethodRegistry",
    "get_method_registry",
    "RequestDispatcher",
]
