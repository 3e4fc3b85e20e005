"""
Config Manager - owns the single AI-provider configuration record.
"""

import logging
from typing import Any, Dict, Optional, Union

from ..contracts.request_contracts import parse_configuration, validate_configuration
from ..core.exceptions import ConsentDenied, NoProviderConfigured
from ..core.types import CONFIG_KEY, Configuration
from ..host.dialogs import HostDialogs
from ..host.messages import no_provider_notice, set_config_prompt
from ..storage.state_store import StateStore


logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Validates, confirms and persists the provider Configuration.

    There is exactly one Configuration per user. Installing a new one
    overwrites the old one; nothing ever deletes it implicitly.
    """

    def __init__(self, state: StateStore, dialogs: HostDialogs):
        self.state = state
        self.dialogs = dialogs

    def set_config(self, origin: str, candidate: Union[Configuration, Dict[str, Any]]) -> bool:
        """
        Install a provider configuration offered by ``origin``.

        Args:
            origin: The calling origin
            candidate: Configuration, or its persisted dict shape

        Returns:
            True once the configuration is persisted

        Raises:
            ValidationError: If the candidate is malformed (nothing is persisted)
            ConsentDenied: If the user declines (nothing is persisted)
        """
        if isinstance(candidate, Configuration):
            configuration = candidate
        else:
            configuration = parse_configuration(candidate)

        if not self.dialogs.confirm(set_config_prompt(origin)):
            logger.info(f"User declined provider configuration from {origin}")
            raise ConsentDenied(f"User declined the AI provider offered by {origin}")

        self.state.set(CONFIG_KEY, configuration.to_dict())
        logger.info(f"Installed provider configuration from {origin}: {configuration.redacted()}")
        return True

    def get_config(self) -> Optional[Configuration]:
        """
        Read the stored configuration.

        An invalid stored record is treated as absent.
        """
        stored = self.state.get(CONFIG_KEY)
        if stored is None:
            return None

        errors = validate_configuration(stored)
        if errors:
            logger.warning(f"Ignoring invalid stored configuration: {errors}")
            return None
        return Configuration.from_dict(stored)

    def has_config(self) -> bool:
        return self.get_config() is not None

    def require_config(self, origin: str) -> Configuration:
        """
        Return the configuration or fail for a privileged call from ``origin``.

        Raises:
            NoProviderConfigured: After showing an informational notice
        """
        configuration = self.get_config()
        if configuration is None:
            self.dialogs.alert(no_provider_notice(origin))
            raise NoProviderConfigured(
                f"No AI provider is configured; {origin} cannot use it"
            )
        return configuration
