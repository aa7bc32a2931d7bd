from __future__ import annotations

import pytest
import requests

from app.services import deepseek_client
from app.services.deepseek_client import AIServiceNotConfigured, DeepSeekClient, DeepSeekError, extract_json_text


class _FakeResponse:
    def __init__(self, status_code: int, body=None, headers=None, reason: str = "") -> None:
        self.status_code = status_code
        self._body = body
        self.headers = headers or {}
        self.reason = reason
        self.text = "" if body is None else str(body)

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


def _completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture()
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    waits: list[float] = []
    monkeypatch.setattr(deepseek_client.time, "sleep", waits.append)
    return waits


def test_extract_json_text_prefers_fenced_block() -> None:
    text = 'Aquí tienes:\n```json\n{"a": 1}\n```\nSaludos'
    assert extract_json_text(text) == '{"a": 1}'
    assert extract_json_text('prefix [1, 2] suffix') == "[1, 2]"
    assert extract_json_text('x {"a": [1]} y') == '{"a": [1]}'
    assert extract_json_text("plain") == "plain"


def test_chat_requires_api_key() -> None:
    client = DeepSeekClient(api_key="")
    assert client.is_configured is False
    with pytest.raises(AIServiceNotConfigured):
        client.complete("hola")


def test_generate_json_parses_model_reply(monkeypatch: pytest.MonkeyPatch, no_sleep) -> None:
    seen: dict = {}

    def fake_post(url, json=None, headers=None, timeout=None):
        seen["url"] = url
        seen["payload"] = json
        seen["headers"] = headers
        return _FakeResponse(200, _completion('```json\n[{"title": "Riesgo"}]\n```'))

    monkeypatch.setattr(deepseek_client.requests, "post", fake_post)
    client = DeepSeekClient(api_key="k-test", base_url="https://llm.test/v1/")

    result = client.generate_json("Dame riesgos", "Eres un experto")

    assert result == [{"title": "Riesgo"}]
    assert seen["url"] == "https://llm.test/v1/chat/completions"
    assert seen["headers"]["Authorization"] == "Bearer k-test"
    messages = seen["payload"]["messages"]
    assert messages[0]["role"] == "system"
    assert messages[0]["content"].startswith("Eres un experto")
    assert "valid JSON" in messages[0]["content"]
    assert messages[1] == {"role": "user", "content": "Dame riesgos"}
    assert no_sleep == []


def test_generate_json_rejects_unparseable_reply(monkeypatch: pytest.MonkeyPatch, no_sleep) -> None:
    monkeypatch.setattr(
        deepseek_client.requests,
        "post",
        lambda *a, **kw: _FakeResponse(200, _completion("{not json")),
    )
    with pytest.raises(DeepSeekError):
        DeepSeekClient(api_key="k").generate_json("x")


def test_retries_transient_errors_then_succeeds(monkeypatch: pytest.MonkeyPatch, no_sleep) -> None:
    responses = [
        _FakeResponse(429, {"error": {"message": "rate limited"}}, headers={"Retry-After": "2"}),
        _FakeResponse(503, None, reason="Service Unavailable"),
        _FakeResponse(200, _completion("ok")),
    ]
    monkeypatch.setattr(deepseek_client.requests, "post", lambda *a, **kw: responses.pop(0))

    assert DeepSeekClient(api_key="k", max_attempts=3).complete("hola") == "ok"
    assert len(no_sleep) == 2
    assert no_sleep[0] >= 2


def test_client_errors_are_not_retried(monkeypatch: pytest.MonkeyPatch, no_sleep) -> None:
    calls: list[int] = []

    def fake_post(*args, **kwargs):
        calls.append(1)
        return _FakeResponse(401, {"error": {"message": "bad key"}})

    monkeypatch.setattr(deepseek_client.requests, "post", fake_post)
    with pytest.raises(DeepSeekError, match="bad key"):
        DeepSeekClient(api_key="k", max_attempts=3).complete("hola")
    assert calls == [1]
    assert no_sleep == []


def test_transport_errors_exhaust_attempts(monkeypatch: pytest.MonkeyPatch, no_sleep) -> None:
    def fake_post(*args, **kwargs):
        raise requests.ConnectionError("boom")

    monkeypatch.setattr(deepseek_client.requests, "post", fake_post)
    with pytest.raises(DeepSeekError, match="after retries"):
        DeepSeekClient(api_key="k", max_attempts=2).complete("hola")
    assert len(no_sleep) == 1


def test_empty_choices_is_an_error(monkeypatch: pytest.MonkeyPatch, no_sleep) -> None:
    monkeypatch.setattr(deepseek_client.requests, "post", lambda *a, **kw: _FakeResponse(200, {"choices": []}))
    with pytest.raises(DeepSeekError, match="No response"):
        DeepSeekClient(api_key="k").complete("hola")
