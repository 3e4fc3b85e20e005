"""
Request Dispatcher - routes and executes requests by method.

For every (origin, method, params) triple the dispatcher:
1. Resolves the method definition (unknown methods fail)
2. Parses params into a typed request (schema failures stop here)
3. Checks the method's authorization requirement
4. Invokes the method handler
5. Returns the result, or surfaces a typed error

No state is kept between requests; everything durable goes through the
StateStore.
"""

import logging
from typing import Any, Callable, Dict, Optional

from ..config.config_manager import ConfigManager
from ..contracts.request_contracts import (
    AiRequest,
    AiRequestKind,
    HelloRequest,
    InformedQueryRequest,
    LoadDocumentRequest,
    SetConfigRequest,
)
from ..core.exceptions import FrenError, MethodNotImplemented, UnknownMethod, ValidationError
from ..core.logging import CorrelationContext, log_with_context
from ..core.types import Configuration
from ..demo.hello import HelloCounter
from ..host.dialogs import HostDialogs
from ..permissions.gate import PermissionGate
from ..providers.base import AIProvider, ProviderSettings
from ..providers.registry import create_provider
from ..retrieval.engine import RetrievalEngine
from ..retrieval.index import EmbeddingIndex
from ..storage.state_store import StateStore
from .context import DispatchResult, RequestContext, RequestState
from .methods import AuthRequirement, MethodRegistry, get_method_registry


logger = logging.getLogger(__name__)

Handler = Callable[[RequestContext, Any, Optional[Configuration]], Any]
ProviderFactory = Callable[[Configuration], AIProvider]


class RequestDispatcher:
    """
    Request dispatcher that routes requests to handlers by method.

    Example:
        >>> dispatcher = RequestDispatcher(StateStore(), FixedDecisionDialogs(True))
        >>> dispatcher.dispatch("https://example.org", "hello")
        True
    """

    def __init__(
        self,
        state: StateStore,
        dialogs: HostDialogs,
        provider_factory: Optional[ProviderFactory] = None,
        provider_settings: Optional[ProviderSettings] = None,
        registry: Optional[MethodRegistry] = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            state: State handle shared by every component
            dialogs: Host dialog collaborator
            provider_factory: Builds the provider for the stored Configuration
                (defaults to the provider registry)
            provider_settings: Settings passed to the default provider factory
            registry: Method table (defaults to the global registry)
        """
        self.state = state
        self.dialogs = dialogs
        self.registry = registry or get_method_registry()
        self.provider_factory = provider_factory or (
            lambda configuration: create_provider(configuration, provider_settings)
        )

        self.config_manager = ConfigManager(state, dialogs)
        self.permission_gate = PermissionGate(state, self.config_manager, dialogs)
        self.index = EmbeddingIndex(state)
        self.hello_counter = HelloCounter(state, dialogs)

        self._handlers: Dict[str, Handler] = {}
        self.register_handler("set_config", self._handle_set_config)
        self.register_handler("ai_permission", self._handle_ai_permission)
        self.register_handler("ai_request", self._handle_ai_request)
        self.register_handler("load_document_into_embeddings", self._handle_load_document)
        self.register_handler("informed_query", self._handle_informed_query)
        self.register_handler("clear_embeddings", self._handle_clear_embeddings)
        self.register_handler("hello", self._handle_hello)

        logger.debug(f"RequestDispatcher initialized with methods: {self.registry.list_methods()}")

    def register_handler(self, method: str, handler: Handler) -> None:
        """
        Register the handler callable for a method.

        Args:
            method: Method name
            handler: Callable taking (context, typed request, configuration)
        """
        self._handlers[method] = handler
        logger.debug(f"Registered handler for method: {method}")

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def handle(self, origin: str, request: Any) -> DispatchResult:
        """
        Handle a raw request object ``{"method": ..., "params": ...}``.

        Typed errors become a failed DispatchResult; anything else propagates.
        """
        if not isinstance(request, dict) or not isinstance(request.get("method"), str):
            return DispatchResult.failure(
                ValidationError("Request must be an object with a string 'method'")
            )

        try:
            result = self.dispatch(origin, request["method"], request.get("params"))
        except FrenError as e:
            return DispatchResult.failure(e)
        return DispatchResult.success(result)

    def dispatch(self, origin: str, method: str, params: Any = None) -> Any:
        """
        Process one request start to finish.

        Returns:
            The method's JSON-ready result

        Raises:
            FrenError: The typed error that ended the request
        """
        ctx = RequestContext.create(origin, method)

        with CorrelationContext(**ctx.get_log_context()):
            log_with_context(logger, logging.DEBUG, f"Received {method} request")
            try:
                result = self._run(ctx, params)
            except FrenError as e:
                ctx.transition(RequestState.FAILED)
                log_with_context(logger, logging.WARNING, f"Request failed with {e.error_type}: {e}")
                raise
            except Exception:
                ctx.transition(RequestState.FAILED)
                logger.exception(f"Unexpected error handling {method} request from {origin}")
                raise

            log_with_context(logger, logging.INFO, f"Request {method} completed")
            return result

    def _run(self, ctx: RequestContext, params: Any) -> Any:
        definition = self.registry.get(ctx.method)
        handler = self._handlers.get(ctx.method)
        if definition is None or handler is None:
            raise UnknownMethod(f"Method not found: {ctx.method}")

        request = definition.parse(params).unwrap()
        ctx.transition(RequestState.VALIDATED)

        configuration = self._authorize(ctx, definition.auth)
        ctx.transition(RequestState.AUTHORIZED)

        result = handler(ctx, request, configuration)
        ctx.transition(RequestState.EXECUTED)
        ctx.transition(RequestState.RESPONDED)
        return result

    def _authorize(self, ctx: RequestContext, auth: AuthRequirement) -> Optional[Configuration]:
        """
        Enforce ``auth`` for the calling origin.

        Returns:
            The stored Configuration when the requirement needs one

        Raises:
            NoProviderConfigured: If a Configuration is required but absent
            Unauthorized: If a grant is required but the origin holds none
        """
        if auth == AuthRequirement.NONE:
            return None

        configuration = self.config_manager.require_config(ctx.origin)
        if auth == AuthRequirement.GRANT:
            self.permission_gate.require_grant(ctx.origin)
        return configuration

    def _with_engine(self, configuration: Configuration, call: Callable[[RetrievalEngine], Any]) -> Any:
        """Run ``call`` against a freshly built provider, closing it afterwards."""
        provider = self.provider_factory(configuration)
        try:
            return call(RetrievalEngine(self.index, provider))
        finally:
            provider.close()

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _handle_set_config(self, ctx: RequestContext, request: SetConfigRequest, configuration) -> bool:
        return self.config_manager.set_config(ctx.origin, request.configuration)

    def _handle_ai_permission(self, ctx: RequestContext, request, configuration) -> bool:
        return self.permission_gate.request_permission(ctx.origin)

    def _handle_ai_request(self, ctx: RequestContext, request: AiRequest, configuration: Configuration) -> Any:
        if request.kind == AiRequestKind.CHAT:
            reply = self._with_engine(configuration, lambda engine: engine.chat(configuration.api_key, request.chat))
            return reply.to_dict()

        if request.kind == AiRequestKind.EMBEDDINGS:
            return self._with_engine(configuration, lambda engine: engine.embed(configuration.api_key, request.text))

        raise MethodNotImplemented(f"ai_request method '{request.kind.value}' is not implemented")

    def _handle_load_document(
        self, ctx: RequestContext, request: LoadDocumentRequest, configuration: Configuration
    ) -> bool:
        self._with_engine(configuration, lambda engine: engine.load_document(configuration.api_key, request.doc))
        return True

    def _handle_informed_query(
        self, ctx: RequestContext, request: InformedQueryRequest, configuration: Configuration
    ) -> Dict[str, str]:
        reply = self._with_engine(
            configuration, lambda engine: engine.informed_query(configuration.api_key, request.chat)
        )
        return reply.to_dict()

    def _handle_clear_embeddings(self, ctx: RequestContext, request, configuration) -> bool:
        self.index.clear()
        return True

    def _handle_hello(self, ctx: RequestContext, request: HelloRequest, configuration) -> bool:
        return self.hello_counter.say_hello(ctx.origin)
