"""Upstream/runtime configuration for the relay.

Architectural role:
    Centralizes the Lambda Chat endpoint, browser-like request identity, model
    tables and process settings consumed by `llm.session`, `llm.client`,
    `llm.model_resolver` and the API entrypoints.

Determinism:
    Deterministic for a fixed process environment. Values are resolved at import
    time after `load_dotenv()` has merged an optional `.env` file.

Immutability:
    Model catalogue and alias table are read-only (`tuple` / `MappingProxyType`).
    They are loaded once per process and never mutated at runtime.
"""

import logging
import os
from dataclasses import dataclass
from types import MappingProxyType

from dotenv import load_dotenv

load_dotenv()


# =========================================================
# UPSTREAM ENDPOINT
# =========================================================

LAMBDA_BASE_URL = os.getenv("LAMBDA_BASE_URL", "https://lambda.chat").rstrip("/")

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/135.0.0.0 Safari/537.36"
)

# Cookie carrying the per-request session token.
SESSION_COOKIE_NAME = "hf-chat"


@dataclass(frozen=True)
class UpstreamConfig:
    """Runtime configuration for `LambdaChatClient`.

    Relevant environment variables:
        - `LAMBDA_BASE_URL`
        - `LAMBDA_TIMEOUT_SECONDS`
        - `LAMBDA_USER_AGENT`
        - `LAMBDA_ACCEPT_LANGUAGE`
    """

    base_url: str = LAMBDA_BASE_URL
    timeout_seconds: float = float(os.getenv("LAMBDA_TIMEOUT_SECONDS", "120"))
    user_agent: str = os.getenv("LAMBDA_USER_AGENT", DEFAULT_USER_AGENT).strip()
    accept_language: str = os.getenv("LAMBDA_ACCEPT_LANGUAGE", "en-US,en;q=0.9").strip()

    def default_headers(self) -> dict:
        """Headers sent with every upstream call.

        No `Content-Type` here: JSON and multipart bodies set their own, and the
        multipart boundary must be generated by the transport.
        """
        return {
            "Origin": self.base_url,
            "Referer": self.base_url,
            "User-Agent": self.user_agent,
            "Accept": "*/*",
            "Accept-Language": self.accept_language,
            "Pragma": "no-cache",
            "Cache-Control": "no-cache",
        }


# =========================================================
# MODEL TABLES
# =========================================================

AVAILABLE_MODELS = tuple(dict.fromkeys((
    "deepseek-llama3.3-70b",
    "deepseek-r1",
    "deepseek-r1-0528",
    "apriel-5b-instruct",
    "hermes-3-llama-3.1-405b-fp8",
    "hermes3-405b-fp8-128k",
    "llama3.1-nemotron-70b-instruct",
    "lfm-40b",
    "llama3.3-70b-instruct-fp8",
    "qwen25-coder-32b-instruct",
    "deepseek-v3-0324",
    "llama-4-maverick-17b-128e-instruct-fp8",
    "llama-4-scout-17b-16e-instruct",
    "qwen3-32b-fp8",
)))

# Every alias maps to a tuple of candidates; one is picked per call.
MODEL_ALIASES = MappingProxyType({
    "hermes-3": ("hermes3-405b-fp8-128k",),
    "hermes-3-405b": ("hermes3-405b-fp8-128k", "hermes-3-llama-3.1-405b-fp8"),
    "nemotron-70b": ("llama3.1-nemotron-70b-instruct",),
    "llama-3.3-70b": ("llama3.3-70b-instruct-fp8",),
    "qwen-2.5-coder-32b": ("qwen25-coder-32b-instruct",),
    "llama-4-maverick": ("llama-4-maverick-17b-128e-instruct-fp8",),
    "llama-4-scout": ("llama-4-scout-17b-16e-instruct",),
    "qwen-3-32b": ("qwen3-32b-fp8",),
})

DEFAULT_MODEL = os.getenv("DEFAULT_MODEL", "deepseek-r1").strip()

MODEL_OWNER = "lambda.chat"


# =========================================================
# PROCESS SETTINGS
# =========================================================

RELAY_HOST = os.getenv("RELAY_HOST", "0.0.0.0")
# Platform-provided PORT wins over the relay-specific variable.
RELAY_PORT = int(os.getenv("PORT") or os.getenv("RELAY_PORT", "8000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Request/response previews are logged only when explicitly enabled.
DEBUG = os.getenv("DEBUG") == "true"


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging for server and CLI entrypoints."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
