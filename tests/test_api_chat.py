"""Tests for the chat completions HTTP surface"""
import json

import httpx
import pytest
import respx

from tests.conftest import TARGET_URL, backend_reply


def _sse_payloads(body: str) -> list:
    events = [event for event in body.split("\n\n") if event]
    return [json.loads(event[len("data: "):]) for event in events]


@pytest.mark.integration
class TestBufferedChat:

    @respx.mock
    def test_success(self, app_client, text_request):
        route = respx.post(TARGET_URL).mock(
            return_value=httpx.Response(200, json=backend_reply("Hi! How can I help you today?"))
        )

        response = app_client.post("/v1/chat/completions", json=text_request)

        assert response.status_code == 200
        data = response.json()
        assert data["object"] == "chat.completion"
        assert data["model"] == "deepseek-chat"
        assert data["choices"][0]["message"] == {"role": "assistant", "content": "Hi! How can I help you today?"}
        assert data["choices"][0]["finish_reason"] == "stop"
        assert data["usage"]["completion_tokens"] == 7
        assert data["usage"]["total_tokens"] == 20

        sent = json.loads(route.calls.last.request.content)
        assert sent["serviceName"] == "deepseek-v3"
        assert sent["agentId"] == "agent-123"
        assert sent["secretKey"] == "secret-456"
        assert sent["stream"] is False
        assert [m["role"] for m in sent["messages"]] == ["system", "user"]
        assert sent["messages"][1]["content"] == [{"type": "text", "text": "Hello"}]

    @respx.mock
    def test_bare_path_is_served(self, app_client, text_request):
        respx.post(TARGET_URL).mock(return_value=httpx.Response(200, json=backend_reply("ok")))
        response = app_client.post("/chat/completions", json=text_request)
        assert response.status_code == 200
        assert response.json()["choices"][0]["message"]["content"] == "ok"

    @respx.mock
    def test_image_request_forwarded(self, app_client, image_request):
        route = respx.post(TARGET_URL).mock(return_value=httpx.Response(200, json=backend_reply("a cat")))

        response = app_client.post("/v1/chat/completions", json=image_request)

        assert response.status_code == 200
        sent = json.loads(route.calls.last.request.content)
        assert sent["messages"][0]["content"][1] == {"type": "image_url", "image_url": {"url": "https://img.test/cat.png"}}

    @respx.mock
    def test_backend_status_is_passed_through(self, app_client, text_request):
        respx.post(TARGET_URL).mock(return_value=httpx.Response(503, text="backend overloaded"))

        response = app_client.post("/v1/chat/completions", json=text_request)

        assert response.status_code == 503
        assert response.text == "backend overloaded"
        assert response.headers["access-control-allow-origin"] == "*"

    @respx.mock
    def test_backend_unreachable(self, app_client, text_request):
        respx.post(TARGET_URL).mock(side_effect=httpx.ConnectError("connection refused"))

        response = app_client.post("/v1/chat/completions", json=text_request)

        assert response.status_code == 502
        assert response.headers["content-type"].startswith("text/plain")

    @respx.mock
    def test_malformed_backend_reply(self, app_client, text_request):
        respx.post(TARGET_URL).mock(return_value=httpx.Response(200, text="<html>oops</html>"))

        response = app_client.post("/v1/chat/completions", json=text_request)

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("text/plain")


@pytest.mark.integration
class TestInboundValidation:

    @respx.mock(assert_all_called=False)
    def test_invalid_json_body(self, app_client):
        route = respx.post(TARGET_URL)
        response = app_client.post(
            "/v1/chat/completions",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.headers["content-type"].startswith("text/plain")
        assert not route.called

    @respx.mock(assert_all_called=False)
    def test_non_object_body(self, app_client):
        route = respx.post(TARGET_URL)
        response = app_client.post("/v1/chat/completions", json=[1, 2, 3])
        assert response.status_code == 400
        assert not route.called

    @respx.mock(assert_all_called=False)
    def test_empty_message_list(self, app_client):
        route = respx.post(TARGET_URL)
        response = app_client.post("/v1/chat/completions", json={"model": "gpt-4o", "messages": [], "stream": False})
        assert response.status_code == 400
        assert "输入内容为空" in response.text
        assert not route.called

    @respx.mock(assert_all_called=False)
    def test_unsupported_content(self, app_client):
        route = respx.post(TARGET_URL)
        response = app_client.post(
            "/v1/chat/completions",
            json={"model": "gpt-4o", "messages": [{"role": "user", "content": 42}]},
        )
        assert response.status_code == 400
        assert "不支持的消息内容格式" in response.text
        assert not route.called

    @respx.mock(assert_all_called=False)
    def test_null_messages_is_empty_message_list(self, app_client):
        route = respx.post(TARGET_URL)
        response = app_client.post("/v1/chat/completions", json={"model": "gpt-4o", "messages": None})
        assert response.status_code == 400
        assert "输入内容为空" in response.text
        assert not route.called

    @respx.mock
    def test_null_stream_and_model_are_zero_values(self, app_client):
        route = respx.post(TARGET_URL).mock(return_value=httpx.Response(200, json=backend_reply("ok")))
        response = app_client.post(
            "/v1/chat/completions",
            json={"model": None, "messages": [{"role": "user", "content": "hi"}], "stream": None},
        )
        assert response.status_code == 200
        assert response.json()["object"] == "chat.completion"
        sent = json.loads(route.calls.last.request.content)
        assert sent["stream"] is False
        assert sent["serviceName"] == ""


@pytest.mark.integration
class TestStreamingChat:

    @respx.mock
    def test_stream_chunks(self, app_client, text_request):
        frames = [backend_reply(text) for text in ["Hel", "lo", "!"]]
        body = "".join(f"data:{json.dumps(frame)}\n\n" for frame in frames)
        body = ": keep-alive\n\n" + body
        body += "data:{broken\n\n"
        route = respx.post(TARGET_URL).mock(
            return_value=httpx.Response(200, content=body.encode("utf-8"), headers={"Content-Type": "text/event-stream"})
        )

        response = app_client.post("/v1/chat/completions", json={**text_request, "stream": True})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["connection"] == "keep-alive"
        assert response.headers["access-control-allow-origin"] == "*"

        chunks = _sse_payloads(response.text)
        assert [c["choices"][0]["delta"]["content"] for c in chunks] == ["Hel", "lo", "!"]
        assert len({c["id"] for c in chunks}) == 1
        assert "[DONE]" not in response.text
        assert json.loads(route.calls.last.request.content)["stream"] is True

    @respx.mock
    def test_stream_backend_error_status(self, app_client, text_request):
        respx.post(TARGET_URL).mock(return_value=httpx.Response(401, text='{"code":401,"msg":"bad secret"}'))

        response = app_client.post("/v1/chat/completions", json={**text_request, "stream": True})

        assert response.status_code == 401
        assert response.text == '{"code":401,"msg":"bad secret"}'

    @respx.mock
    def test_stream_backend_unreachable(self, app_client, text_request):
        respx.post(TARGET_URL).mock(side_effect=httpx.ConnectTimeout("timed out"))

        response = app_client.post("/v1/chat/completions", json={**text_request, "stream": True})

        assert response.status_code == 502


@pytest.mark.integration
class TestHttpSurface:

    def test_preflight(self, app_client):
        response = app_client.options("/v1/chat/completions")
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"
        assert response.headers["access-control-allow-headers"] == "Content-Type, Authorization"

    def test_method_not_allowed(self, app_client):
        response = app_client.get("/v1/chat/completions")
        assert response.status_code == 405
        assert response.headers["content-type"].startswith("text/plain")
        assert response.headers["access-control-allow-origin"] == "*"

    def test_models_lists_model_map(self, app_client):
        response = app_client.get("/v1/models")
        assert response.status_code == 200
        data = response.json()
        assert data["object"] == "list"
        assert {m["id"] for m in data["data"]} == {"gpt-4o", "gpt-4o-mini"}

    def test_health(self, app_client):
        assert app_client.get("/health").json() == {"status": "healthy"}
