"""OpenAI chat-completion rendering.

Architectural role:
    Turns the relay's token sequence into OpenAI-compatible envelopes, either one
    aggregated `chat.completion` or a series of `chat.completion.chunk` objects.

Response formatting:
    - Aggregate: full text in `choices[0].message`, `finish_reason: "stop"`,
      zeroed `usage` (the upstream reports no token accounting).
    - Incremental: one chunk per token with `delta.content`, then one terminal
      chunk with an empty delta and `finish_reason: "stop"`. `format_sse` frames
      each chunk and `DONE_EVENT` ends the stream.

Determinism:
    All envelopes of one response share the id and timestamp held by its
    `CompletionContext`.
"""

import json
import time
import uuid
from dataclasses import dataclass, field
from typing import AsyncIterable, AsyncIterator


DONE_EVENT = "data: [DONE]\n\n"


def _new_completion_id() -> str:
    return f"chatcmpl-{uuid.uuid4().hex}"


def _now() -> int:
    return int(time.time())


@dataclass(frozen=True)
class CompletionContext:
    model: str
    completion_id: str = field(default_factory=_new_completion_id)
    created: int = field(default_factory=_now)


def completion_envelope(context: CompletionContext, content: str) -> dict:
    return {
        "id": context.completion_id,
        "object": "chat.completion",
        "created": context.created,
        "model": context.model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {
            "prompt_tokens": 0,
            "completion_tokens": 0,
            "total_tokens": 0,
        },
    }


def chunk_envelope(context: CompletionContext, delta: dict, finish_reason=None) -> dict:
    return {
        "id": context.completion_id,
        "object": "chat.completion.chunk",
        "created": context.created,
        "model": context.model,
        "choices": [
            {
                "index": 0,
                "delta": delta,
                "finish_reason": finish_reason,
            }
        ],
    }


async def render_completion(context: CompletionContext, tokens: AsyncIterable[str]) -> dict:
    """Aggregate mode: consume every token, then build one envelope."""
    parts = []
    async for token in tokens:
        parts.append(token)
    return completion_envelope(context, "".join(parts))


async def render_chunks(context: CompletionContext, tokens: AsyncIterable[str]) -> AsyncIterator[dict]:
    """Incremental mode: one chunk per token, then the terminal chunk."""
    async for token in tokens:
        yield chunk_envelope(context, {"content": token})
    yield chunk_envelope(context, {}, finish_reason="stop")


def format_sse(payload: dict) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"
