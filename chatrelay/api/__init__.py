"""chatrelay API adapter package.

Architectural role:
- Defines the external interaction boundary for HTTP and CLI interfaces.
- Performs transport-level validation and response shaping.
- Delegates upstream work to `chatrelay.llm.service`.

Scope:
- Request lifecycle control for adapter concerns only.
- No direct upstream protocol logic is implemented in this package.
"""
