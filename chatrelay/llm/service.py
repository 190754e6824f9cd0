"""Request-to-relay adapter.

Architectural role:
    Provides the canonical entrypoint used by the HTTP and CLI layers. It bridges
    the request contracts (`core.request_types`) to the upstream transport
    (`llm.client`).

Call flow:
    model resolution -> prompt extraction -> `LambdaChatClient.open_relay`.

Validation order:
    Resolution and prompt extraction do no I/O. An unknown model or an unusable
    message list fails before any upstream call is attempted.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from chatrelay.core.request_types import ChatMessage
from chatrelay.llm.client import LambdaChatClient, TokenRelay
from chatrelay.llm.model_resolver import ModelResolver, default_resolver
from chatrelay.llm.provider_config import DEBUG
from chatrelay.prompting.prompt_builder import extract_prompt


logger = logging.getLogger(__name__)


@dataclass
class RelayedChat:
    model: str
    tokens: TokenRelay


class RelayService:
    """Resolve, validate and open one upstream chat per call.

    Attributes:
        resolver: Model resolver (process-wide default tables unless injected).
        client_factory: Builds a fresh `LambdaChatClient` per request.
    """

    def __init__(
        self,
        resolver: Optional[ModelResolver] = None,
        client_factory: Callable[[], LambdaChatClient] = LambdaChatClient,
    ) -> None:
        self.resolver = resolver or default_resolver
        self.client_factory = client_factory

    def list_models(self) -> list:
        return self.resolver.model_cards()

    async def open_chat(
        self,
        messages: Sequence[ChatMessage],
        requested_model: Optional[str] = None,
    ) -> RelayedChat:
        """Open an upstream chat for the last user message.

        Args:
            messages: Validated request messages.
            requested_model: Raw requested model id or alias.

        Returns:
            Resolved model name and the token relay. The caller must consume or
            `aclose()` the relay.

        Raises:
            UnknownModel, InvalidInput: Before any upstream call.
            ProtocolMismatch, UpstreamUnavailable: From the bootstrap.
        """
        model = self.resolver.resolve(requested_model)
        prompt = extract_prompt(messages)

        if DEBUG:
            logger.debug("Relaying prompt to %s: %.200r", model, prompt)

        client = self.client_factory()
        relay = await client.open_relay(model, prompt)
        return RelayedChat(model=model, tokens=relay)


default_service = RelayService()
