"""
API v1 路由模块（OpenAI 兼容的 /v1 前缀）

/chat/completions 同时在根路径注册，见 aibrain2api.main
"""
from fastapi import APIRouter

from . import chat, models

router = APIRouter(prefix="/v1")
router.include_router(chat.router)
router.include_router(models.router)

__all__ = ["router", "chat", "models"]
