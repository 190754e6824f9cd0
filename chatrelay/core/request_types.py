"""Inbound request data contracts for `/v1/chat/completions`.

Architectural role:
    Defines the minimal OpenAI-compatible request schema validated by the HTTP
    adapter before any prompt extraction or upstream call happens.

Validation model:
    - Unknown top-level fields (temperature, top_p, ...) are accepted and ignored.
    - `content` is either plain text, a list of content parts, or `null`.
    - Content parts are kept as loose dicts; only their `text` field is read by
      `prompting.prompt_builder`.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """One message of the OpenAI `messages` array."""

    model_config = ConfigDict(extra="allow")

    role: str
    content: Union[str, List[Dict[str, Any]], None] = None


class ChatCompletionRequest(BaseModel):
    """Chat-completion request body.

    Attributes:
        model: Requested model id or alias; empty/absent selects the default.
        messages: Conversation turns; only the last `user` turn is relayed.
        stream: Incremental (SSE) rendering when true.
    """

    model_config = ConfigDict(extra="allow")

    model: Optional[str] = None
    messages: List[ChatMessage] = Field(min_length=1)
    stream: bool = False
