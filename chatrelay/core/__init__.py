"""Core contracts package.

Architectural role:
    Holds the data contracts and error taxonomy shared by the API adapter, the
    prompting helpers and the upstream relay.

Composition:
    - `errors`: `RelayError` hierarchy with HTTP status mapping.
    - `request_types`: pydantic schema for inbound chat-completion requests.

Determinism and side effects:
    Package import is deterministic and side-effect free.
"""
