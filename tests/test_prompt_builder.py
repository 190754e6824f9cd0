import pytest

from chatrelay.core.errors import InvalidInput
from chatrelay.core.request_types import ChatMessage
from chatrelay.prompting.prompt_builder import extract_prompt, flatten_content


def messages(*pairs):
    return [ChatMessage(role=role, content=content) for role, content in pairs]


def test_last_user_message_wins():
    prompt = extract_prompt(messages(
        ("system", "be brief"),
        ("user", "first"),
        ("assistant", "answer"),
        ("user", "second"),
        ("assistant", "pending"),
    ))
    assert prompt == "second"


def test_content_parts_are_concatenated():
    content = [
        {"type": "text", "text": "Describe "},
        {"type": "image_url", "image_url": {"url": "https://example.com/cat.png"}},
        {"type": "text", "text": "this image"},
    ]
    assert extract_prompt(messages(("user", content))) == "Describe this image"


def test_flatten_content_edge_cases():
    assert flatten_content(None) == ""
    assert flatten_content([]) == ""
    assert flatten_content([{"text": 3}, "loose"]) == ""


def test_no_user_message():
    with pytest.raises(InvalidInput):
        extract_prompt(messages(("system", "x"), ("assistant", "y")))


def test_empty_messages():
    with pytest.raises(InvalidInput):
        extract_prompt([])


def test_blank_user_message():
    with pytest.raises(InvalidInput):
        extract_prompt(messages(("user", "   ")))
