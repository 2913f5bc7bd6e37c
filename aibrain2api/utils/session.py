"""
单次响应的会话上下文
"""
import time
import uuid
from dataclasses import dataclass, field


@dataclass(frozen=True)
class SessionContext:
    """
    一次响应共享的 ID 与创建时间

    流式响应的所有 chunk 复用同一个上下文；
    生命周期仅限一次请求/响应，不做持久化，也不跨请求复用。
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created: int = field(default_factory=lambda: int(time.time()))

    @classmethod
    def new(cls) -> "SessionContext":
        return cls()
