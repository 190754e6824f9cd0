import pytest

from chatrelay.stream.events import EventKind, classify, classify_frame


def test_stream_token():
    event = classify({"type": "stream", "token": "hello"})
    assert event.kind is EventKind.TOKEN
    assert event.text == "hello"
    assert event.produces_output
    assert not event.is_terminal


def test_nul_characters_are_stripped():
    event = classify_frame('{"type":"stream","token":"to\\u0000ken"}')
    assert event.text == "token"


def test_token_empty_after_stripping_is_noop():
    event = classify({"type": "stream", "token": "\x00\x00"})
    assert event.kind is EventKind.TOKEN
    assert not event.produces_output


@pytest.mark.parametrize(
    "obj, kind",
    [
        ({"type": "status", "status": "keepAlive"}, EventKind.KEEPALIVE),
        ({"type": "title", "title": "Greeting"}, EventKind.TITLE),
        ({"type": "reasoning", "subtype": "stream", "token": "hmm"}, EventKind.REASONING),
        ({"type": "finalAnswer", "text": "hello"}, EventKind.FINAL_ANSWER),
        ({"type": "status", "status": "started"}, EventKind.UNKNOWN),
        ({"type": "stream", "token": 42}, EventKind.UNKNOWN),
        ({"type": "webSearch"}, EventKind.UNKNOWN),
        ({"token": "no type"}, EventKind.UNKNOWN),
        (["not", "an", "object"], EventKind.UNKNOWN),
    ],
)
def test_event_vocabulary(obj, kind):
    event = classify(obj)
    assert event.kind is kind
    assert not event.produces_output


def test_final_answer_is_terminal():
    assert classify({"type": "finalAnswer"}).is_terminal


def test_malformed_frame_is_unknown():
    event = classify_frame('{"type":"stream","token":}')
    assert event.kind is EventKind.UNKNOWN
