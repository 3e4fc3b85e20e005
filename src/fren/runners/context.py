"""
Request context and dispatch results.

This module provides the per-request types used by the dispatcher:
- RequestState: States of the request-handling state machine
- RequestContext: Identity and state of one request while it is handled
- DispatchResult: Structured response returned to the host
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from ..core.exceptions import FrenError


logger = logging.getLogger(__name__)


class RequestState(str, Enum):
    """
    States of a request.

    RECEIVED → VALIDATED → AUTHORIZED → EXECUTED → RESPONDED, with FAILED
    reachable from every state before RESPONDED.
    """
    RECEIVED = "received"
    VALIDATED = "validated"
    AUTHORIZED = "authorized"
    EXECUTED = "executed"
    RESPONDED = "responded"
    FAILED = "failed"


_TRANSITIONS = {
    RequestState.RECEIVED: (RequestState.VALIDATED, RequestState.FAILED),
    RequestState.VALIDATED: (RequestState.AUTHORIZED, RequestState.FAILED),
    RequestState.AUTHORIZED: (RequestState.EXECUTED, RequestState.FAILED),
    RequestState.EXECUTED: (RequestState.RESPONDED, RequestState.FAILED),
    RequestState.RESPONDED: (),
    RequestState.FAILED: (),
}


@dataclass
class RequestContext:
    """
    Execution context for one request.

    Attributes:
        request_id: Unique identifier for this request
        origin: The calling origin
        method: The requested method name
        received_at: When the request was received
        state: Current state-machine state
        history: Every state the request has been in, in order
    """
    request_id: str
    origin: str
    method: str
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    state: RequestState = RequestState.RECEIVED
    history: List[RequestState] = field(default_factory=lambda: [RequestState.RECEIVED])

    @classmethod
    def create(cls, origin: str, method: str) -> "RequestContext":
        """Create a new context with a generated request id."""
        return cls(request_id=str(uuid.uuid4()), origin=origin, method=method)

    def transition(self, new_state: RequestState) -> None:
        """
        Move to ``new_state``.

        Raises:
            RuntimeError: If the transition is not allowed from the current state
        """
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal request transition: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)
        logger.debug(
            f"Request {self.request_id} -> {new_state.value}",
            extra={**self.get_log_context(), "state": new_state.value},
        )

    def get_log_context(self) -> Dict[str, Any]:
        """Context fields for structured logging."""
        return {
            "request_id": self.request_id,
            "origin": self.origin,
            "method": self.method,
        }


@dataclass
class DispatchResult:
    """
    Response to a request, as handed back to the host.

    Attributes:
        ok: Whether the request succeeded
        result: The method's result (if successful)
        error: The error that ended the request (if failed)
    """
    ok: bool
    result: Any = None
    error: Optional[FrenError] = None

    @classmethod
    def success(cls, result: Any) -> "DispatchResult":
        return cls(ok=True, result=result)

    @classmethod
    def failure(cls, error: FrenError) -> "DispatchResult":
        return cls(ok=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """``{"result": ...}`` on success, ``{"error": {...}}`` on failure."""
        if self.ok:
            return {"result": self.result}
        return {"error": self.error.to_dict()}
