"""chatrelay: OpenAI-compatible relay for the Lambda Chat web backend.

Architectural role:
    Drives Lambda Chat's private conversation flow over HTTP and re-exposes the
    resulting token stream through `/v1/models` and `/v1/chat/completions`.

Package split:
    - `stream`: pure frame extraction and upstream event classification.
    - `llm`: configuration, model resolution, session bootstrap and token relay.
    - `prompting`: prompt extraction from OpenAI-style message lists.
    - `core`: error taxonomy and request data contracts.
    - `api`: FastAPI adapter, response rendering, server and CLI entrypoints.
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
