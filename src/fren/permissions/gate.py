"""
Permission Gate - per-origin consent grants.

A grant is a capability cache: once the user allows an origin, every later
privileged call from that origin is checked against the cached grant, not
re-negotiated. A missing grant reads exactly like a denied one.
"""

import logging

from ..config.config_manager import ConfigManager
from ..core.exceptions import ConsentDenied, Unauthorized
from ..core.types import permission_key
from ..host.dialogs import HostDialogs
from ..host.messages import ai_permission_prompt
from ..storage.state_store import StateStore


logger = logging.getLogger(__name__)


class PermissionGate:
    """Owns ``ai_permission:<origin>`` grants in the state store."""

    def __init__(self, state: StateStore, config_manager: ConfigManager, dialogs: HostDialogs):
        self.state = state
        self.config_manager = config_manager
        self.dialogs = dialogs

    def request_permission(self, origin: str) -> bool:
        """
        Ask the user to let ``origin`` use the configured provider.

        Returns:
            True once the grant is persisted

        Raises:
            NoProviderConfigured: If no provider is configured (after a notice)
            ConsentDenied: If the user declines (no grant is persisted)
        """
        self.config_manager.require_config(origin)

        if not self.dialogs.confirm(ai_permission_prompt(origin)):
            logger.info(f"User declined AI permission for {origin}")
            raise ConsentDenied(f"User declined AI permission for {origin}")

        self.state.set(permission_key(origin), True)
        logger.info(f"Granted AI permission to {origin}")
        return True

    def is_granted(self, origin: str) -> bool:
        """True only if a grant for ``origin`` is stored and is exactly ``True``."""
        return self.state.get(permission_key(origin)) is True

    def require_grant(self, origin: str) -> None:
        """
        Raises:
            Unauthorized: If ``origin`` has no grant
        """
        if not self.is_granted(origin):
            logger.warning(f"Rejected privileged call from ungranted origin {origin}")
            raise Unauthorized(f"{origin} has not been granted access to the AI provider", origin=origin)
