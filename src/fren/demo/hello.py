"""
Hello counter - a demo method unrelated to the AI subsystem.
"""

import logging

from ..core.types import HELLO_KEY
from ..host.dialogs import HostDialogs
from ..host.messages import hello_prompt
from ..storage.state_store import State, StateStore


logger = logging.getLogger(__name__)


class HelloCounter:
    """Counts hellos and greets the calling origin."""

    def __init__(self, state: StateStore, dialogs: HostDialogs):
        self.state = state
        self.dialogs = dialogs

    def times(self) -> int:
        """Stored count; anything that is not an integer reads as 0."""
        return self._coerce(self.state.get(HELLO_KEY))

    @staticmethod
    def _coerce(value) -> int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return 0

    def say_hello(self, origin: str) -> bool:
        """
        Increment the counter, then show a greeting with the previous count.

        Returns:
            The user's answer to the confirmation
        """
        def _increment(state: State) -> int:
            previous = self._coerce(state.get(HELLO_KEY))
            state[HELLO_KEY] = previous + 1
            return previous

        previous = self.state.update(_increment)
        logger.debug(f"Hello #{previous + 1} from {origin}")
        return self.dialogs.confirm(hello_prompt(origin, previous))
