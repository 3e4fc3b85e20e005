"""
Dialog copy shown to the user by the host's confirmation UI.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class DialogContent:
    """
    Content of a host dialog: an ordered list of text lines.

    Lines may use ``**bold**`` markup; hosts that cannot render it show it
    verbatim.
    """
    lines: List[str] = field(default_factory=list)

    def render(self) -> str:
        """Plain-text rendering, one line per paragraph."""
        return "\n".join(self.lines)


def set_config_prompt(origin: str) -> DialogContent:
    return DialogContent([
        f"The site at **{origin}** wants to provide you with an AI provider.",
        "This provider will be trusted to provide you with AI services, and will "
        "have access to any information you grant to your AI agent.",
    ])


def ai_permission_prompt(origin: str) -> DialogContent:
    return DialogContent([
        f"The site at **{origin}** wants to use your AI provider.",
        "This provider will be trusted to interact with your AI agent, and will "
        "have access to any information you grant to your AI agent.",
        "This may also incur charges related to your AI service provider.",
        "Do you want to allow this site to use your AI provider?",
    ])


def no_provider_notice(origin: str) -> DialogContent:
    return DialogContent([
        f"The site at **{origin}** wants to use your AI provider, "
        "but no AI provider has been configured yet.",
        "Visit a site that offers an AI provider and accept it first.",
    ])


def hello_prompt(origin: str, times: int) -> DialogContent:
    return DialogContent([
        f"Hello, **{origin}**!",
        "This custom confirmation is just for display purposes.",
        f"You've said hello {times} times.",
    ])
