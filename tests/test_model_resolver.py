import random

import pytest

from chatrelay.core.errors import UnknownModel
from chatrelay.llm.model_resolver import ModelResolver, resolve_model
from chatrelay.llm.provider_config import AVAILABLE_MODELS, DEFAULT_MODEL, MODEL_ALIASES


def test_single_alias_is_deterministic():
    for _ in range(20):
        assert resolve_model("llama-3.3-70b") == "llama3.3-70b-instruct-fp8"


def test_multi_candidate_alias_picks_both():
    candidates = {"hermes3-405b-fp8-128k", "hermes-3-llama-3.1-405b-fp8"}
    seen = {resolve_model("hermes-3-405b") for _ in range(200)}
    assert seen == candidates


def test_injected_rng_controls_choice():
    first = ModelResolver(rng=random.Random(7)).resolve("hermes-3-405b")
    second = ModelResolver(rng=random.Random(7)).resolve("hermes-3-405b")
    assert first == second


def test_canonical_id_and_whitespace():
    assert resolve_model("qwen3-32b-fp8") == "qwen3-32b-fp8"
    assert resolve_model("  nemotron-70b ") == "llama3.1-nemotron-70b-instruct"


@pytest.mark.parametrize("requested", [None, "", "   "])
def test_absent_model_uses_default(requested):
    assert resolve_model(requested) == DEFAULT_MODEL


def test_unknown_model():
    with pytest.raises(UnknownModel) as info:
        resolve_model("gpt-4o")
    assert "gpt-4o" in info.value.message
    assert info.value.status_code == 400


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        MODEL_ALIASES["new"] = ("x",)
    assert isinstance(AVAILABLE_MODELS, tuple)


def test_model_cards_are_unique():
    cards = ModelResolver().model_cards()
    ids = [card["id"] for card in cards]
    assert len(ids) == len(set(ids))
    assert "llama3.3-70b-instruct-fp8" in ids
    assert all(card["object"] == "model" and card["owned_by"] == "lambda.chat" for card in cards)
    assert len({card["created"] for card in cards}) == 1
