"""Prompt extraction from OpenAI-style message lists.

This module is intentionally narrow: it only selects and flattens the text that
is relayed upstream. Model resolution, validation of the request envelope and
upstream invocation happen outside this module.

Design constraints:
    - Only the last `user` message is used; sessions are single-turn upstream.
    - Deterministic for identical inputs, no I/O, no global state.

Content handling:
    - `str` content is used verbatim.
    - List content is a sequence of parts; each part contributes its string `text`
      field, concatenated in order. Parts without text (images, ...) are skipped.
    - `None` content counts as empty.
"""

from typing import Any, Sequence

from chatrelay.core.errors import InvalidInput
from chatrelay.core.request_types import ChatMessage


def flatten_content(content: Any) -> str:
    """Return the text carried by one message `content` value."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            part["text"]
            for part in content
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
    return str(content)


def extract_prompt(messages: Sequence[ChatMessage]) -> str:
    """Select the prompt text relayed upstream.

    Args:
        messages: Validated request messages.

    Returns:
        Text of the last `user` message.

    Raises:
        InvalidInput: Empty message list, no `user` message, or a last user
            message without extractable text.
    """
    if not messages:
        raise InvalidInput("Messages must be a non-empty array")

    last_user = None
    for message in reversed(messages):
        if message.role == "user":
            last_user = message
            break

    if last_user is None:
        raise InvalidInput("No user message provided")

    prompt = flatten_content(last_user.content)
    if not prompt.strip():
        raise InvalidInput("No user message provided")
    return prompt
