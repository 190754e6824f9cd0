import asyncio
import json

from chatrelay.api import cli
from tests.fakes import stream_frames


def test_relay_question_streams_tokens(fake_upstream):
    fake = fake_upstream(chunks=[stream_frames(
        {"type": "stream", "token": "Hi"},
        {"type": "stream", "token": " there"},
        {"type": "finalAnswer"},
    )])
    written = []

    reply = asyncio.run(cli.relay_question(fake.service(), "hello", "qwen-3-32b", written.append))

    assert reply == "Hi there"
    assert written == ["Hi", " there"]
    assert fake.stream.closed


def test_switch_model(fake_upstream):
    service = fake_upstream().service()
    assert cli.switch_model(service, "hermes-3") == "hermes-3"
    assert cli.switch_model(service, "nope") is None


def test_main_loop(monkeypatch, capsys, fake_upstream):
    fake = fake_upstream(chunks=[stream_frames({"type": "stream", "token": "pong"})])
    answers = iter(["", "/model nope", "/model hermes-3", "ping", "exit"])
    monkeypatch.setattr("builtins.input", lambda _prompt: next(answers))

    cli.main(fake.service())

    out = capsys.readouterr().out
    assert "Model 'nope' not found." in out
    assert "Switched to model: hermes-3" in out
    assert "pong" in out
    assert "Shutting down." in out
    assert json.loads(fake.requests[0].content) == {"model": "hermes3-405b-fp8-128k"}
