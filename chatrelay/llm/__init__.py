"""Upstream access package.

Architectural role:
    Provides configuration, model resolution, session bootstrap and the token
    relay used by the API layer to drive the Lambda Chat backend.

Module split:
    - `provider_config`: environment-driven endpoint, identity and model tables.
    - `model_resolver`: requested id / alias -> internal model id.
    - `session`: three-step bootstrap state machine.
    - `client`: per-request HTTP client and streaming token relay.
    - `service`: canonical request-to-relay adapter.
"""
