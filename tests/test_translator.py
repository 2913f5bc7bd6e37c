"""Tests for OpenAI -> backend request translation"""
import pytest

from aibrain2api.exceptions import EmptyMessageList, TranslationError, UnsupportedContentFormat
from aibrain2api.models.schemas import (
    BackendMultiModalRequest,
    BackendTextRequest,
    ChatCompletionRequest,
)
from aibrain2api.services.translator import translate_request


def _request(messages, model="gpt-4o", stream=False) -> ChatCompletionRequest:
    return ChatCompletionRequest.model_validate({"model": model, "messages": messages, "stream": stream})


@pytest.mark.unit
class TestTranslateRequest:

    def test_mapped_model_name(self, test_settings):
        result = translate_request(_request([{"role": "user", "content": "hi"}]), test_settings)
        assert result.service_name == "deepseek-v3"

    def test_unmapped_model_name_used_verbatim(self, test_settings):
        result = translate_request(_request([{"role": "user", "content": "hi"}], model="custom-svc"), test_settings)
        assert result.service_name == "custom-svc"

    def test_credentials_and_stream_flag(self, test_settings):
        result = translate_request(_request([{"role": "user", "content": "hi"}], stream=True), test_settings)
        assert result.agent_id == "agent-123"
        assert result.secret_key == "secret-456"
        assert result.stream is True

    def test_text_only_selects_text_shape(self, test_settings, text_request):
        result = translate_request(ChatCompletionRequest.model_validate(text_request), test_settings)
        assert isinstance(result, BackendTextRequest)
        assert result.kind == "text"

    def test_image_selects_multimodal_shape(self, test_settings, image_request):
        result = translate_request(ChatCompletionRequest.model_validate(image_request), test_settings)
        assert isinstance(result, BackendMultiModalRequest)
        assert result.kind == "multimodal"

    def test_order_and_roles_preserved(self, test_settings):
        messages = [
            {"role": "system", "content": "s"},
            {"role": "user", "content": "u1"},
            {"role": "assistant", "content": "a1"},
            {"role": "user", "content": "u1"},
        ]
        result = translate_request(_request(messages), test_settings)
        assert [m.role for m in result.messages] == ["system", "user", "assistant", "user"]
        assert [m.content[0].text for m in result.messages] == ["s", "u1", "a1", "u1"]

    @pytest.mark.parametrize("stream", [False, True])
    def test_empty_message_list(self, test_settings, stream):
        with pytest.raises(EmptyMessageList):
            translate_request(_request([], stream=stream), test_settings)

    def test_unsupported_content(self, test_settings):
        with pytest.raises(UnsupportedContentFormat):
            translate_request(_request([{"role": "user", "content": 42}]), test_settings)

    def test_first_failure_aborts(self, test_settings):
        messages = [
            {"role": "user", "content": "fine"},
            {"role": "user", "content": None},
            {"role": "user", "content": "also fine"},
        ]
        with pytest.raises(TranslationError):
            translate_request(_request(messages), test_settings)

    def test_payload_wire_shape(self, test_settings, image_request):
        payload = translate_request(ChatCompletionRequest.model_validate(image_request), test_settings).to_payload()
        assert payload == {
            "agentId": "agent-123",
            "secretKey": "secret-456",
            "serviceName": "deepseek-v3",
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": "What is in this picture?"},
                        {"type": "image_url", "image_url": {"url": "https://img.test/cat.png"}},
                    ],
                }
            ],
            "stream": False,
        }
