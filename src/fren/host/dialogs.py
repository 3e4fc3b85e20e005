"""
Host dialog collaborators.

The core never renders UI itself. It asks a ``HostDialogs`` implementation
to show a confirmation (and wait for the user's decision) or an
informational notice.
"""

import logging
import sys
from abc import ABC, abstractmethod
from typing import Callable, Optional, TextIO

from .messages import DialogContent


logger = logging.getLogger(__name__)


class HostDialogs(ABC):
    """Interface to the host's dialog UI."""

    @abstractmethod
    def confirm(self, content: DialogContent) -> bool:
        """
        Show a confirmation dialog and block until the user decides.

        Returns:
            True if the user accepted, False if they declined
        """
        pass

    @abstractmethod
    def alert(self, content: DialogContent) -> None:
        """Show an informational dialog."""
        pass


class FixedDecisionDialogs(HostDialogs):
    """
    Dialogs that answer every confirmation with a fixed decision.

    Used by non-interactive hosts (``--approve`` / ``--deny``).
    """

    def __init__(self, decision: bool):
        self.decision = decision

    def confirm(self, content: DialogContent) -> bool:
        logger.info(f"Auto-{'approving' if self.decision else 'denying'} confirmation: {content.lines[0] if content.lines else ''}")
        return self.decision

    def alert(self, content: DialogContent) -> None:
        logger.info(f"Alert: {content.render()}")


class ConsoleDialogs(HostDialogs):
    """Dialogs rendered on a terminal, answered with y/N."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output: Optional[TextIO] = None,
    ):
        self.input_func = input_func
        self.output = output or sys.stderr

    def confirm(self, content: DialogContent) -> bool:
        print(content.render(), file=self.output)
        try:
            answer = self.input_func("Approve? [y/N] ")
        except EOFError:
            answer = ""
        return answer.strip().lower() in ("y", "yes")

    def alert(self, content: DialogContent) -> None:
        print(content.render(), file=self.output)
