"""Shared test fixtures and configuration"""
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from aibrain2api.api.dependencies import get_settings
from aibrain2api.config import Settings
from aibrain2api.main import app

TARGET_URL = "https://aibrain.test/run"


@pytest.fixture
def test_settings() -> Settings:
    """Settings instance pointing at a mocked backend"""
    return Settings(
        target_base_url=TARGET_URL,
        default_agent_id="agent-123",
        default_secret_key="secret-456",
        model_map={"gpt-4o": "deepseek-v3", "gpt-4o-mini": "qwen-plus"},
        log_file=None,
    )


@pytest.fixture
def app_client(test_settings: Settings) -> Generator[TestClient, None, None]:
    """FastAPI test client with settings overridden"""
    app.dependency_overrides[get_settings] = lambda: test_settings
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def text_request() -> dict:
    return {
        "model": "gpt-4o",
        "messages": [
            {"role": "system", "content": "You are helpful."},
            {"role": "user", "content": "Hello"},
        ],
        "stream": False,
    }


@pytest.fixture
def image_request() -> dict:
    return {
        "model": "gpt-4o",
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


def backend_reply(message: str, **overrides) -> dict:
    """Build a backend reply / frame body"""
    reply = {
        "success": True,
        "code": 200,
        "errorMessage": None,
        "errorDetail": None,
        "requestId": "req-1",
        "responseId": "resp-1",
        "responseMessage": message,
        "data": None,
    }
    reply.update(overrides)
    return reply
