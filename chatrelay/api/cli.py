"""
Interactive terminal client for the Lambda Chat relay.

Architectural role:
- Exposes the relay without the HTTP layer, for operators and quick checks.
- Delegates all upstream work to `chatrelay.llm.service.RelayService`.

Request lifecycle (per user turn, CLI):
1. Read stdin.
2. Handle local control commands (`exit`/`quit`, `/model`, `/models`).
3. Relay normal text as a fresh single-turn upstream session.
4. Print tokens as they arrive.

Input validation behavior:
- Empty input is ignored.
- `/model` validates the requested id or alias before switching.

Error handling strategy:
- `RelayError` failures print a one-line message and keep the loop alive.
- EOF and keyboard interrupts terminate the loop without traceback output.

Side effects:
- One upstream session per question; nothing is remembered between turns.
"""

import asyncio
import sys
from typing import Callable, Optional

from chatrelay.core.errors import RelayError
from chatrelay.core.request_types import ChatMessage
from chatrelay.llm.provider_config import DEFAULT_MODEL, setup_logging
from chatrelay.llm.service import RelayService, default_service


# =========================================================
# UTF-8 SAFE OUTPUT
# =========================================================

def _configure_stdout() -> None:
    if hasattr(sys.stdout, "reconfigure"):
        try:
            sys.stdout.reconfigure(encoding="utf-8", errors="ignore")
        except (OSError, ValueError):
            pass


# =========================================================
# RELAY
# =========================================================

async def relay_question(
    service: RelayService,
    question: str,
    model: Optional[str] = None,
    write: Optional[Callable[[str], None]] = None,
) -> str:
    """Relay one question and stream its tokens to `write`.

    Returns:
        Full reply text.
    """
    write = write or (lambda text: print(text, end="", flush=True))
    chat = await service.open_chat([ChatMessage(role="user", content=question)], model)
    parts = []
    try:
        async for token in chat.tokens:
            write(token)
            parts.append(token)
    finally:
        await chat.tokens.aclose()
    return "".join(parts)


def switch_model(service: RelayService, requested: str) -> Optional[str]:
    """Return the resolved model for `/model <id>`, or `None` if unknown."""
    try:
        service.resolver.resolve(requested)
    except RelayError:
        return None
    return requested


# =========================================================
# MAIN
# =========================================================

def main(service: RelayService = default_service):
    """Run the interactive loop until `exit`, EOF or interrupt."""
    setup_logging("WARNING")
    _configure_stdout()

    current_model = DEFAULT_MODEL

    print("Lambda Chat relay CLI. (Type 'exit' to quit)")
    print(f"Active model: {current_model}\n")
    print("-" * 60)

    while True:

        try:
            question = input("Question: ").strip()

        except EOFError:
            print()
            break

        except KeyboardInterrupt:
            print("\nOperation cancelled by user.")
            break

        if not question:
            continue

        if question.lower() in ("exit", "quit"):
            print("Shutting down.")
            break

        if question.lower() == "/models":
            for model_id in service.resolver.models:
                marker = " (active)" if model_id == current_model else ""
                print(f" - {model_id}{marker}")
            continue

        if question.lower().startswith("/model"):
            parts = question.split()
            if len(parts) == 1:
                print(f"\nUsage: /model <id or alias>\nCurrent model: {current_model}\n")
                continue

            if switch_model(service, parts[1]):
                current_model = parts[1]
                print(f"\nSwitched to model: {current_model}\n")
            else:
                print(f"\nModel '{parts[1]}' not found.\n")
            continue

        print("\nResponse:\n")

        try:
            asyncio.run(relay_question(service, question, current_model))
            print()
        except RelayError as exc:
            print(f"\nRelay error: {exc.message}")

        print("\n" + "-" * 60 + "\n")


if __name__ == "__main__":
    main()
