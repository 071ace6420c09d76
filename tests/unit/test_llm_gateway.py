import json

import pytest
from pydantic import BaseModel

from config import LlmRoute
from llm_gateway import LlmGatewayError, LlmModelUnsupported, LlmOutputInvalid, call


class Reply(BaseModel):
    score: float
    feedback: str


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text or (json.dumps(body) if body is not None else "")

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class FakeClient:
    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def post(self, url, *, json, headers, timeout):
        self.requests.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        return self.responses.pop(0)


def _content(text):
    return FakeResponse(body={"choices": [{"message": {"content": text}}]})


ROUTE = LlmRoute(name="primary", base_url="http://llm.local", model="model-a", max_retries=1)


def test_parses_fenced_json():
    client = FakeClient([_content('```json\n{"score": 7, "feedback": "solid"}\n```')])
    result = call("score this", Reply, cfg=ROUTE, client=client, options={"temperature": 0.1})
    assert result == Reply(score=7, feedback="solid")
    payload = client.requests[0]["json"]
    assert payload["model"] == "model-a"
    assert payload["temperature"] == 0.1
    assert payload["messages"][0]["role"] == "system"
    assert client.requests[0]["url"] == "http://llm.local/v1/chat/completions"


def test_retries_with_hint_then_succeeds():
    client = FakeClient([_content("not json"), _content('{"score": 3, "feedback": "ok"}')])
    result = call("score this", Reply, cfg=ROUTE, client=client)
    assert result.score == 3
    hint = client.requests[1]["json"]["messages"][-1]
    assert hint["role"] == "system"
    assert "failed validation" in hint["content"]


def test_invalid_output_after_retries():
    client = FakeClient([_content('{"score": "high"}'), _content('{"feedback": 1}')])
    with pytest.raises(LlmOutputInvalid):
        call("score this", Reply, cfg=ROUTE, client=client)
    assert len(client.requests) == 2


def test_missing_model_is_unsupported():
    client = FakeClient([FakeResponse(status_code=404, text="not found")])
    with pytest.raises(LlmModelUnsupported) as info:
        call("score this", Reply, cfg=ROUTE, client=client)
    assert info.value.model == "model-a"


def test_bad_request_naming_model_is_unsupported():
    client = FakeClient([FakeResponse(status_code=400, text='{"error": "model_not_found"}')])
    with pytest.raises(LlmModelUnsupported):
        call("score this", Reply, cfg=ROUTE, client=client)


def test_server_error_is_not_unsupported():
    client = FakeClient([FakeResponse(status_code=500, text="boom")])
    with pytest.raises(LlmGatewayError) as info:
        call("score this", Reply, cfg=ROUTE, client=client)
    assert not isinstance(info.value, LlmModelUnsupported)


def test_api_key_header_from_env(monkeypatch):
    monkeypatch.setenv("TEST_LLM_KEY", "secret")
    route = ROUTE.model_copy(update={"api_key_env": "TEST_LLM_KEY"})
    client = FakeClient([_content('{"score": 1, "feedback": "x"}')])
    call("score this", Reply, cfg=route, client=client)
    assert client.requests[0]["headers"]["Authorization"] == "Bearer secret"
