"""
Host subpackage: the dialog collaborator interface and dialog copy.
"""

from .dialogs import HostDialogs, FixedDecisionDialogs, ConsoleDialogs
from .messages import (
    DialogContent,
    set_config_prompt,
    ai_permission_prompt,
    no_provider_notice,
    hello_prompt,
)

__all__ = [
    "HostDialogs",
    "FixedDecisionDialogs",
    "ConsoleDialogs",
    "DialogContent",
    "set_config_prompt",
    "ai_permission_prompt",
    "no_provider_notice",
    "hello_prompt",
]
