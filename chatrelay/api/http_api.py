"""
HTTP API adapter for the Lambda Chat relay.

Architectural role:
- Expose OpenAI-compatible HTTP interfaces.
- Enforce adapter-level input validation.
- Delegate model resolution, prompt extraction and upstream work to
  `chatrelay.llm.service.RelayService`.
- Render relay output to response transport contracts (JSON or SSE).

Endpoint responsibilities:
- `GET /`: liveness and endpoint listing.
- `GET /v1/models`: expose the canonical Lambda Chat model catalogue.
- `POST /v1/chat/completions`: validate input, open the upstream relay and
  format completion output.

API request lifecycle (`POST /v1/chat/completions`):
1. Parse request JSON and validate it against `ChatCompletionRequest`.
2. Resolve the model and extract the last user message (no I/O yet).
3. Bootstrap the upstream session and submit the turn.
4. Render tokens as one completion (aggregate) or as SSE chunks (stream).

Error handling strategy:
- `RelayError` subclasses map to their status code and the
  `{"error": {"message", "type"}}` envelope.
- Routing errors (404/405) are re-shaped into the same envelope.
- Unexpected exceptions are logged and returned as 500 `server_error`.
- Errors before the first streamed byte are regular JSON responses in both modes.
- Mid-stream upstream failures are logged and re-raised inside the SSE generator,
  aborting the response without the terminal chunk or `[DONE]`.

Side effects:
- One upstream session per chat request; nothing is cached across requests.
- Request previews are logged only when `DEBUG == "true"`.

Determinism considerations:
- IDs and timestamps are generated per response (`uuid`, `time.time()`).
- Alias resolution may pick among several candidates at random.
"""

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from chatrelay.api.translator import (
    DONE_EVENT,
    CompletionContext,
    format_sse,
    render_chunks,
    render_completion,
)
from chatrelay.core.errors import InvalidInput, RelayError
from chatrelay.core.request_types import ChatCompletionRequest
from chatrelay.llm.client import TokenRelay
from chatrelay.llm.provider_config import DEBUG
from chatrelay.llm.service import RelayService, default_service


logger = logging.getLogger(__name__)

app = FastAPI(title="chatrelay")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def get_relay_service() -> RelayService:
    """FastAPI dependency providing the process-wide relay service."""
    return default_service


# ============================================================
# Error Envelopes
# ============================================================

def error_response(status_code: int, message: str, error_type: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"message": message, "type": error_type}},
    )


@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError):
    if exc.status_code >= 500:
        logger.error("Upstream failure on %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        message = f"Path {request.url.path} not found"
    else:
        message = str(exc.detail)
    return error_response(exc.status_code, message, "invalid_request_error")


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Handler error on %s", request.url.path)
    return error_response(500, "Internal server error", "server_error")


# ============================================================
# Status and Model Listing
# ============================================================

@app.get("/")
def root():
    return {
        "status": "ok",
        "message": "Lambda Chat OpenAI-compatible proxy is running",
        "endpoints": ["/v1/models", "/v1/chat/completions"],
    }


@app.get("/v1/models")
def list_models(service: RelayService = Depends(get_relay_service)):
    """
    Return the canonical model ids as OpenAI-style model metadata.

    Response formatting:
    - `object: "list"`
    - `data[]` entries with `id`, `object`, `created`, `owned_by`
    """
    return {"object": "list", "data": service.list_models()}


# ============================================================
# OpenAI-Compatible Chat Completions
# ============================================================

def _parse_chat_request(body) -> ChatCompletionRequest:
    try:
        return ChatCompletionRequest.model_validate(body)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or "body"
        if location == "messages":
            raise InvalidInput("Messages must be a non-empty array") from exc
        raise InvalidInput(f"Invalid request field '{location}': {first.get('msg')}") from exc


async def _event_stream(request: Request, context: CompletionContext, tokens: TokenRelay):
    """
    Yield SSE frames matching OpenAI chunk semantics.

    Side effects:
    - Checks client connection state between chunks and stops on disconnect.
    - Always closes the relay, releasing the upstream connection.

    Error handling:
    - `RelayError` after streaming started is logged and re-raised so the
      response ends abnormally instead of looking complete.
    """
    chunks = render_chunks(context, tokens)
    try:
        async for chunk in chunks:
            if await request.is_disconnected():
                logger.warning("Client disconnected during stream %s", context.completion_id)
                return
            yield format_sse(chunk)
        yield DONE_EVENT
    except RelayError as exc:
        logger.error("Stream %s aborted: %s", context.completion_id, exc.message)
        raise
    finally:
        await chunks.aclose()
        await tokens.aclose()


@app.post("/v1/chat/completions")
async def chat_completions(request: Request, service: RelayService = Depends(get_relay_service)):
    """
    OpenAI-compatible chat completions endpoint.

    Input validation behavior:
    - HTTP 400 for a non-JSON body, a malformed or empty `messages` array, or
      no extractable user text.
    - HTTP 400 for an unknown model/alias.

    Upstream failures:
    - HTTP 502 when the bootstrap fails or the upstream shape is unexpected.
    """
    try:
        body = await request.json()
    except ValueError as exc:
        raise InvalidInput("Invalid JSON body") from exc

    chat_request = _parse_chat_request(body)

    if DEBUG:
        logger.debug(
            "Chat request: model=%r stream=%s messages=%d",
            chat_request.model,
            chat_request.stream,
            len(chat_request.messages),
        )

    chat = await service.open_chat(chat_request.messages, chat_request.model)
    context = CompletionContext(model=chat.model)

    if chat_request.stream:
        return StreamingResponse(
            _event_stream(request, context, chat.tokens),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    try:
        return await render_completion(context, chat.tokens)
    finally:
        await chat.tokens.aclose()
