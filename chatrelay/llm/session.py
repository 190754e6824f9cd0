"""Lambda Chat session bootstrap.

Architectural role:
    Performs the three upstream round trips that must complete before any token
    can flow, and hands the opened streaming response to `llm.client`.

Bootstrap flow:
    1. `POST /conversation` with `{"model": ...}` -> `conversationId`.
    2. `GET /conversation/{id}/__data.json` -> seed message id
       (structured search over line-delimited JSON, then UUID regex fallback).
    3. `POST /conversation/{id}` multipart `data` part -> streaming response.

State machine:
    CREATED -> CONVERSATION_OPENED -> MESSAGE_ID_RESOLVED -> MESSAGE_SUBMITTED
    -> STREAMING. Steps are strictly sequential and never retried.

Failure handling:
    - Non-success status or transport error -> `UpstreamUnavailable`.
    - Unexpected response shape -> `ProtocolMismatch`.
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import httpx

from chatrelay.core.errors import ProtocolMismatch, UpstreamUnavailable


logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)

# Query flag the page-data endpoint expects to return fresh node data.
PAGE_DATA_PARAMS = {"x-sveltekit-invalidated": "11"}


class SessionState(str, Enum):
    CREATED = "created"
    CONVERSATION_OPENED = "conversation_opened"
    MESSAGE_ID_RESOLVED = "message_id_resolved"
    MESSAGE_SUBMITTED = "message_submitted"
    STREAMING = "streaming"


@dataclass(frozen=True)
class Session:
    session_token: str
    conversation_id: str
    seed_message_id: str


# =========================================================
# SEED MESSAGE ID EXTRACTION
# =========================================================

def _find_system_entry_id(value: Any) -> Optional[str]:
    """Depth-first search for an entry with `from == "system"` and a string id."""
    if isinstance(value, dict):
        entry_id = value.get("id")
        if value.get("from") == "system" and isinstance(entry_id, str) and entry_id:
            return entry_id
        children = value.values()
    elif isinstance(value, list):
        children = value
    else:
        return None

    for child in children:
        if isinstance(child, (dict, list)):
            found = _find_system_entry_id(child)
            if found:
                return found
    return None


def extract_seed_message_id(text: str) -> Optional[str]:
    """Extract the seed message id from a page-data document.

    Args:
        text: Raw response body; each non-blank line is an independent JSON value.

    Returns:
        The `id` of the first `from == "system"` entry, else the first UUID found
        anywhere in the raw text, else `None`.
    """
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            parsed = json.loads(line)
        except ValueError:
            continue
        found = _find_system_entry_id(parsed)
        if found:
            return found

    match = UUID_PATTERN.search(text)
    if match:
        logger.warning("Seed message id resolved by UUID fallback")
        return match.group(0)
    return None


def build_submit_payload(prompt: str, seed_message_id: str) -> dict:
    """JSON payload of the multipart `data` part for a single-turn session."""
    return {
        "inputs": prompt,
        "id": seed_message_id,
        "is_retry": False,
        "is_continue": False,
        "web_search": False,
        "tools": [],
    }


# =========================================================
# BOOTSTRAP
# =========================================================

class SessionBootstrap:
    """Run the bootstrap sequence on a caller-owned `httpx.AsyncClient`.

    The client must already carry base URL, default headers and the session
    cookie. One instance serves exactly one request.
    """

    def __init__(self, http: httpx.AsyncClient, session_token: str) -> None:
        self._http = http
        self.session_token = session_token
        self.state = SessionState.CREATED
        self.conversation_id: Optional[str] = None
        self.seed_message_id: Optional[str] = None

    async def bootstrap(self, model_id: str) -> Session:
        """Open a conversation and resolve its seed message id.

        Args:
            model_id: Resolved internal model id.

        Returns:
            Session ready for `submit`.
        """
        self.conversation_id = await self.create_conversation(model_id)
        self.seed_message_id = await self.fetch_seed_message_id(self.conversation_id)
        return Session(
            session_token=self.session_token,
            conversation_id=self.conversation_id,
            seed_message_id=self.seed_message_id,
        )

    async def create_conversation(self, model_id: str) -> str:
        response = await self._request("POST", "/conversation", json={"model": model_id})
        try:
            conversation_id = response.json().get("conversationId")
        except (ValueError, AttributeError) as exc:
            raise ProtocolMismatch("Conversation response is not a JSON object") from exc
        if not conversation_id:
            raise ProtocolMismatch("conversationId not found")

        self.state = SessionState.CONVERSATION_OPENED
        logger.info("Opened conversation %s (model=%s)", conversation_id, model_id)
        return str(conversation_id)

    async def fetch_seed_message_id(self, conversation_id: str) -> str:
        response = await self._request(
            "GET",
            f"/conversation/{conversation_id}/__data.json",
            params=PAGE_DATA_PARAMS,
        )
        seed_message_id = extract_seed_message_id(response.text)
        if not seed_message_id:
            raise ProtocolMismatch("Could not extract message id")

        self.state = SessionState.MESSAGE_ID_RESOLVED
        logger.info("Resolved seed message %s", seed_message_id)
        return seed_message_id

    async def submit(self, session: Session, prompt: str) -> httpx.Response:
        """Submit the user turn and return the opened streaming response.

        The caller owns the returned response and must close it.

        Raises:
            UpstreamUnavailable: Non-success status (body attached as detail) or
                transport failure.
        """
        payload = json.dumps(build_submit_payload(prompt, session.seed_message_id))
        # No explicit Content-Type: httpx generates the multipart boundary.
        request = self._http.build_request(
            "POST",
            f"/conversation/{session.conversation_id}",
            files={"data": ("blob", payload.encode("utf-8"), "application/json")},
        )
        try:
            response = await self._http.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(f"Chat request failed: {exc}") from exc

        if not response.is_success:
            try:
                detail = (await response.aread()).decode("utf-8", errors="replace")
            finally:
                await response.aclose()
            raise UpstreamUnavailable(
                f"Chat request failed: {response.status_code} {detail}",
                status=response.status_code,
                detail=detail,
            )

        self.state = SessionState.MESSAGE_SUBMITTED
        return response

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(f"{method} {url} failed: {exc}") from exc

        if not response.is_success:
            raise UpstreamUnavailable(
                f"{method} {url} failed: {response.status_code} {response.text}",
                status=response.status_code,
                detail=response.text,
            )
        return response
