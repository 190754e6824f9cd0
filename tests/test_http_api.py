import json

import pytest
from fastapi.testclient import TestClient

from chatrelay.api.http_api import app, get_relay_service
from tests.fakes import stream_frames


client = TestClient(app)

UPSTREAM_BODY = stream_frames(
    {"type": "status", "status": "started"},
    {"type": "stream", "token": "Hel"},
    {"type": "status", "status": "keepAlive"},
    {"type": "stream", "token": "lo"},
    {"type": "title", "title": "Hi"},
    {"type": "finalAnswer", "text": "Hello"},
)


@pytest.fixture
def upstream(fake_upstream):
    fake = fake_upstream(chunks=[UPSTREAM_BODY[:40], UPSTREAM_BODY[40:]])
    app.dependency_overrides[get_relay_service] = fake.service
    yield fake
    app.dependency_overrides.clear()


def chat(payload):
    return client.post("/v1/chat/completions", json=payload)


def sse_events(text):
    return [line[len("data: "):] for line in text.split("\n\n") if line.startswith("data: ")]


def test_root():
    res = client.get("/")
    assert res.status_code == 200
    assert res.json()["endpoints"] == ["/v1/models", "/v1/chat/completions"]


def test_list_models(upstream):
    res = client.get("/v1/models")
    assert res.status_code == 200
    body = res.json()
    assert body["object"] == "list"
    assert {"id", "object", "created", "owned_by"} <= set(body["data"][0])
    assert "deepseek-r1" in [card["id"] for card in body["data"]]


def test_aggregate_completion(upstream):
    res = chat({"model": "llama-3.3-70b", "messages": [{"role": "user", "content": "hi"}]})
    assert res.status_code == 200
    body = res.json()
    assert body["object"] == "chat.completion"
    assert body["model"] == "llama3.3-70b-instruct-fp8"
    assert body["choices"][0]["message"] == {"role": "assistant", "content": "Hello"}
    assert body["choices"][0]["finish_reason"] == "stop"
    assert json.loads(upstream.requests[0].content) == {"model": "llama3.3-70b-instruct-fp8"}
    assert upstream.stream.closed


def test_streaming_completion(upstream):
    res = chat({"messages": [{"role": "user", "content": "hi"}], "stream": True})
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/event-stream")
    assert res.headers["cache-control"] == "no-cache"

    events = sse_events(res.text)
    assert events[-1] == "[DONE]"
    chunks = [json.loads(event) for event in events[:-1]]
    assert [chunk["choices"][0]["delta"] for chunk in chunks] == [
        {"content": "Hel"},
        {"content": "lo"},
        {},
    ]
    assert chunks[-1]["choices"][0]["finish_reason"] == "stop"
    assert len({chunk["id"] for chunk in chunks}) == 1
    assert {chunk["model"] for chunk in chunks} == {"deepseek-r1"}
    assert upstream.stream.closed


def test_stream_and_aggregate_agree(fake_upstream):
    texts = []
    for stream in (False, True):
        fake = fake_upstream(chunks=[UPSTREAM_BODY])
        app.dependency_overrides[get_relay_service] = fake.service
        try:
            res = chat({"messages": [{"role": "user", "content": "hi"}], "stream": stream})
        finally:
            app.dependency_overrides.clear()
        if stream:
            chunks = [json.loads(event) for event in sse_events(res.text)[:-1]]
            texts.append("".join(chunk["choices"][0]["delta"].get("content", "") for chunk in chunks))
        else:
            texts.append(res.json()["choices"][0]["message"]["content"])
    assert texts[0] == texts[1] == "Hello"


def test_no_user_message_fails_before_upstream(upstream):
    res = chat({"messages": [{"role": "system", "content": "be brief"}]})
    assert res.status_code == 400
    assert res.json()["error"]["type"] == "invalid_request_error"
    assert upstream.requests == []


@pytest.mark.parametrize(
    "payload",
    [
        {"messages": []},
        {"model": "deepseek-r1"},
        {"messages": "hello"},
        {"messages": [{"content": "no role"}]},
        ["not", "an", "object"],
    ],
)
def test_malformed_requests(upstream, payload):
    res = chat(payload)
    assert res.status_code == 400
    assert set(res.json()["error"]) == {"message", "type"}
    assert upstream.requests == []


def test_invalid_json_body(upstream):
    res = client.post(
        "/v1/chat/completions",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Invalid JSON body"


def test_unknown_model(upstream):
    res = chat({"model": "gpt-4o", "messages": [{"role": "user", "content": "hi"}]})
    assert res.status_code == 400
    assert "gpt-4o" in res.json()["error"]["message"]
    assert upstream.requests == []


def test_upstream_failure_is_502(fake_upstream):
    fake = fake_upstream(create_status=503)
    app.dependency_overrides[get_relay_service] = fake.service
    try:
        res = chat({"messages": [{"role": "user", "content": "hi"}], "stream": True})
    finally:
        app.dependency_overrides.clear()
    assert res.status_code == 502
    assert res.json()["error"]["type"] == "upstream_error"


def test_protocol_mismatch_is_502(fake_upstream):
    fake = fake_upstream(page_data="no ids here")
    app.dependency_overrides[get_relay_service] = fake.service
    try:
        res = chat({"messages": [{"role": "user", "content": "hi"}]})
    finally:
        app.dependency_overrides.clear()
    assert res.status_code == 502
    assert res.json()["error"]["message"] == "Could not extract message id"


def test_unknown_path_uses_error_envelope():
    res = client.get("/v2/nothing")
    assert res.status_code == 404
    assert res.json() == {
        "error": {"message": "Path /v2/nothing not found", "type": "invalid_request_error"}
    }


def test_wrong_method_uses_error_envelope():
    res = client.get("/v1/chat/completions")
    assert res.status_code == 405
    assert "error" in res.json()


def test_cors_headers():
    res = client.get("/v1/models", headers={"Origin": "https://ui.example"})
    assert res.headers["access-control-allow-origin"] == "*"

    preflight = client.options(
        "/v1/chat/completions",
        headers={
            "Origin": "https://ui.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert preflight.status_code == 200
    assert "POST" in preflight.headers["access-control-allow-methods"]
