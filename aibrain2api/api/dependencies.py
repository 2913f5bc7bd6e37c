"""
API 依赖项
"""
from fastapi import Depends

from aibrain2api.config import Settings, settings
from aibrain2api.services.chat_service import ChatService


def get_settings() -> Settings:
    """
    返回进程启动时加载的配置

    配置加载后不可变，可被并发请求安全读取；测试中可通过
    app.dependency_overrides 替换。
    """
    return settings


def get_chat_service(app_settings: Settings = Depends(get_settings)) -> ChatService:
    """为每个请求创建聊天服务"""
    return ChatService(app_settings)
