"""
Permissions subpackage: per-origin consent grants.
"""

from .gate import PermissionGate

__all__ = ["PermissionGate"]
