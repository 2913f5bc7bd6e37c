"""
聊天服务：处理聊天完成业务逻辑
请求转换 -> 转发到私有 API -> 响应转换
"""
from typing import AsyncIterator

from aibrain2api.config import Settings
from aibrain2api.models.schemas import ChatCompletionRequest, ChatCompletionResponse
from aibrain2api.services.relay import build_completion, parse_backend_reply, relay_stream
from aibrain2api.services.translator import BackendRequestType, translate_request
from aibrain2api.utils.http_client import iter_stream_lines, open_stream, post_json
from aibrain2api.utils.logger import get_logger
from aibrain2api.utils.session import SessionContext

logger = get_logger(__name__)


class ChatService:
    """聊天服务类，每个请求一个实例，只读共享配置"""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _translate(self, request: ChatCompletionRequest) -> BackendRequestType:
        logger.info(f"收到请求消息: model='{request.model}', stream={request.stream}, messages={request.messages}")
        backend_request = translate_request(request, self.settings)
        logger.info(
            f"转发到私有API: service='{backend_request.service_name}', "
            f"shape={backend_request.kind}, messages={len(backend_request.messages)}"
        )
        return backend_request

    async def chat_completion(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        """
        执行非流式聊天完成

        Raises:
            TranslationError: 请求转换失败
            BackendUnreachable: 连接目标服务失败
            BackendNonSuccessStatus: 目标服务返回非 200 状态
            MalformedBackendReply: 目标响应无法解析
        """
        backend_request = self._translate(request)
        body = await post_json(self.settings, backend_request.to_payload())

        reply = parse_backend_reply(body)
        logger.info(f"完整响应消息: {reply.response_message}")
        return build_completion(reply, self.settings)

    async def stream_chat_completion(self, request: ChatCompletionRequest) -> AsyncIterator[str]:
        """
        打开到私有 API 的流式连接，返回 SSE 事件迭代器

        连接与状态码校验在返回前完成，失败时直接抛出异常，
        此时尚未向调用方发送任何响应头。
        """
        backend_request = self._translate(request)
        response = await open_stream(self.settings, backend_request.to_payload())

        session = SessionContext.new()
        logger.info(f"开始流式转发: id={session.id}")
        return relay_stream(iter_stream_lines(response), self.settings, session=session)
