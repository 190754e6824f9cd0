"""Model id resolution and model catalogue.

Architectural role:
    Maps a requested OpenAI `model` field to the internal Lambda Chat model id
    and renders the `/v1/models` catalogue.

Resolution order:
    1. Empty/absent input -> configured default.
    2. Canonical id -> itself.
    3. Alias -> its single candidate, or one candidate chosen uniformly at random.
    4. Anything else -> `UnknownModel`.

Determinism:
    Deterministic except for multi-candidate aliases. The random source can be
    injected for tests.
"""

import random
import time
from typing import Iterable, Mapping, Optional, Sequence

from chatrelay.core.errors import UnknownModel
from chatrelay.llm.provider_config import (
    AVAILABLE_MODELS,
    DEFAULT_MODEL,
    MODEL_ALIASES,
    MODEL_OWNER,
)


class ModelResolver:
    """Resolve requested model ids against immutable model tables."""

    def __init__(
        self,
        models: Iterable[str] = AVAILABLE_MODELS,
        aliases: Mapping[str, Sequence[str]] = MODEL_ALIASES,
        default: str = DEFAULT_MODEL,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.models = tuple(dict.fromkeys(models))
        self.aliases = aliases
        self.default = default
        self._rng = rng or random.Random()
        # Catalogue timestamp is fixed at load time.
        self.created = int(time.time())

    def resolve(self, requested: Optional[str] = None) -> str:
        """Return the internal model id for a requested id or alias.

        Args:
            requested: Raw `model` value from the request, possibly `None`.

        Returns:
            Canonical model id.

        Raises:
            UnknownModel: Non-empty input matching neither table.
        """
        model = (requested or "").strip()
        if not model:
            return self.default

        if model in self.models:
            return model

        candidates = self.aliases.get(model)
        if candidates:
            if len(candidates) == 1:
                return candidates[0]
            return self._rng.choice(list(candidates))

        raise UnknownModel(f"Model '{requested}' not found")

    def model_cards(self) -> list:
        """Return OpenAI-style model metadata for every canonical id."""
        return [
            {
                "id": model_id,
                "object": "model",
                "created": self.created,
                "owned_by": MODEL_OWNER,
            }
            for model_id in self.models
        ]


default_resolver = ModelResolver()


def resolve_model(requested: Optional[str] = None) -> str:
    """Resolve with the process-wide default tables."""
    return default_resolver.resolve(requested)
