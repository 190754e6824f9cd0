"""Lambda Chat transport client and token relay.

Architectural role:
    Owns the per-request `httpx.AsyncClient`, runs `llm.session` bootstrap on it,
    and turns the submitted turn's response body into a lazy token sequence.

Relay flow:
    `aiter_bytes()` -> incremental UTF-8 decode -> `FrameExtractor.feed` ->
    `classify_frame` -> yield token / skip / stop on final answer.

Retry behavior:
    No retry loop is implemented. Each upstream call is attempted once.

Resource model:
    One client, one session token and one scan state per request; nothing is
    shared across requests. The response and the client are released on every
    exit path: exhaustion, final answer, consumer `aclose()`, cancellation and
    errors.

Failure handling model:
    Bootstrap failures propagate as `RelayError` subclasses before any token is
    produced. Transport failures while reading the body raise
    `UpstreamUnavailable` to the consumer mid-stream.
"""

import codecs
import logging
import uuid
from typing import AsyncIterator, Awaitable, Callable, List, Optional, Tuple

import httpx

from chatrelay.core.errors import UpstreamUnavailable
from chatrelay.llm.provider_config import SESSION_COOKIE_NAME, UpstreamConfig
from chatrelay.llm.session import SessionBootstrap, SessionState
from chatrelay.stream.events import EventKind, classify_frame
from chatrelay.stream.framing import FrameExtractor


logger = logging.getLogger(__name__)


class TokenRelay:
    """Single-consumption async iterable of output tokens.

    Example:
        relay = await client.open_relay("deepseek-r1", "hello")
        async for token in relay:
            print(token, end="")
    """

    def __init__(
        self,
        response: httpx.Response,
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
    ) -> None:
        self._response = response
        self._on_close = on_close
        self._iterator: Optional[AsyncIterator[str]] = None
        self._released = False
        self.finished = False

    def __aiter__(self) -> AsyncIterator[str]:
        if self._iterator is not None:
            raise RuntimeError("TokenRelay can only be consumed once")
        self._iterator = self._tokens()
        return self._iterator

    async def collect(self) -> str:
        """Drain the relay and return the concatenated reply."""
        return "".join([token async for token in self])

    async def aclose(self) -> None:
        """Stop production and release the upstream connection. Idempotent."""
        iterator = self._iterator
        if iterator is not None and not getattr(iterator, "ag_running", False):
            await iterator.aclose()
        await self._release()

    async def _tokens(self) -> AsyncIterator[str]:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        extractor = FrameExtractor()

        try:
            async for chunk in self._response.aiter_bytes():
                tokens, done = self._drain(extractor.feed(decoder.decode(chunk)))
                for token in tokens:
                    yield token
                if done:
                    return

            tokens, _ = self._drain(extractor.feed(decoder.decode(b"", final=True)))
            for token in tokens:
                yield token
            if extractor.pending:
                logger.debug("Upstream ended inside a frame (%d chars dropped)", len(extractor.pending))
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(f"Upstream stream failed: {exc}") from exc
        finally:
            self.finished = True
            await self._release()

    @staticmethod
    def _drain(frames: List[str]) -> Tuple[List[str], bool]:
        """Classify frames in order; stop at the first final answer."""
        tokens = []
        for frame in frames:
            event = classify_frame(frame)
            if event.is_terminal:
                return tokens, True
            if event.produces_output:
                tokens.append(event.text)
            elif event.kind is not EventKind.TOKEN:
                logger.debug("Ignoring upstream event: %s", event.kind.value)
        return tokens, False

    async def _release(self) -> None:
        if self._released:
            return
        self._released = True
        try:
            await self._response.aclose()
        finally:
            if self._on_close is not None:
                await self._on_close()


class LambdaChatClient:
    """Per-request Lambda Chat client.

    Attributes:
        config: Upstream endpoint and identity settings.
        session_token: Value of the session cookie (fresh `uuid4` by default).
        bootstrapper: Bootstrap state machine bound to this client.
    """

    def __init__(
        self,
        config: Optional[UpstreamConfig] = None,
        session_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or UpstreamConfig()
        self.session_token = session_token or str(uuid.uuid4())
        self._http = httpx.AsyncClient(
            base_url=self.config.base_url,
            headers=self.config.default_headers(),
            cookies={SESSION_COOKIE_NAME: self.session_token},
            timeout=self.config.timeout_seconds,
            follow_redirects=True,
            transport=transport,
        )
        self.bootstrapper = SessionBootstrap(self._http, self.session_token)

    async def open_relay(self, model_id: str, prompt: str) -> TokenRelay:
        """Bootstrap a session, submit `prompt` and return its token relay.

        Ownership of this client passes to the returned relay, which closes it.
        On failure the client is closed before the error propagates.
        """
        try:
            session = await self.bootstrapper.bootstrap(model_id)
            response = await self.bootstrapper.submit(session, prompt)
        except BaseException:
            await self.aclose()
            raise

        self.bootstrapper.state = SessionState.STREAMING
        return TokenRelay(response, on_close=self.aclose)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "LambdaChatClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()
