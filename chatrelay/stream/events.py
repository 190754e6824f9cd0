"""Upstream event classification.

Architectural role:
    Maps one parsed Lambda Chat frame to a normalized `UpstreamEvent`. The token
    relay only needs two decisions per frame: does it produce output, and does it
    end the stream.

Vocabulary:
    - `stream` + string `token` -> TOKEN (NUL characters removed)
    - `status` + `keepAlive`    -> KEEPALIVE
    - `title`                   -> TITLE
    - `reasoning`               -> REASONING
    - `finalAnswer`             -> FINAL_ANSWER (terminal)
    - anything else             -> UNKNOWN

Failure handling:
    The vocabulary is open-ended. Unrecognized or malformed frames become UNKNOWN
    and are ignored; classification never raises.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any


logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    TOKEN = "token"
    KEEPALIVE = "keepalive"
    TITLE = "title"
    REASONING = "reasoning"
    FINAL_ANSWER = "final_answer"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class UpstreamEvent:
    kind: EventKind
    text: str = ""

    @property
    def produces_output(self) -> bool:
        return self.kind is EventKind.TOKEN and bool(self.text)

    @property
    def is_terminal(self) -> bool:
        return self.kind is EventKind.FINAL_ANSWER


UNKNOWN_EVENT = UpstreamEvent(EventKind.UNKNOWN)


def classify(obj: Any) -> UpstreamEvent:
    """Classify one parsed frame.

    Args:
        obj: Decoded JSON value of a frame.

    Returns:
        Normalized event. Empty tokens (after NUL stripping) are TOKEN events
        with empty text, which `produces_output` reports as no-ops.
    """
    if not isinstance(obj, dict):
        return UNKNOWN_EVENT

    event_type = obj.get("type")

    if event_type == "stream":
        token = obj.get("token")
        if isinstance(token, str):
            return UpstreamEvent(EventKind.TOKEN, token.replace("\x00", ""))
        return UNKNOWN_EVENT

    if event_type == "status":
        if obj.get("status") == "keepAlive":
            return UpstreamEvent(EventKind.KEEPALIVE)
        return UNKNOWN_EVENT

    if event_type == "title":
        return UpstreamEvent(EventKind.TITLE)

    if event_type == "reasoning":
        return UpstreamEvent(EventKind.REASONING)

    if event_type == "finalAnswer":
        return UpstreamEvent(EventKind.FINAL_ANSWER)

    return UNKNOWN_EVENT


def classify_frame(frame: str) -> UpstreamEvent:
    """Parse and classify a frame string; unparseable frames are UNKNOWN."""
    try:
        obj = json.loads(frame)
    except ValueError:
        logger.debug("Skipping malformed frame: %.120r", frame)
        return UNKNOWN_EVENT
    return classify(obj)
