"""
响应转换：私有 API 响应 -> OpenAI 响应

非流式：完整响应体解析失败直接报错
流式：单个数据帧解析失败只跳过该帧，不中断整个流
"""
import json
from typing import AsyncIterator, Optional

from pydantic import ValidationError

from aibrain2api.config import Settings
from aibrain2api.exceptions import MalformedBackendReply
from aibrain2api.models.schemas import (
    AssistantMessage,
    BackendReply,
    ChatCompletionChunk,
    ChatCompletionResponse,
    ChunkChoice,
    CompletionChoice,
    Delta,
    PromptTokensDetails,
    Usage,
)
from aibrain2api.utils.logger import get_logger
from aibrain2api.utils.session import SessionContext
from aibrain2api.utils.stream_parser import parse_backend_frame

logger = get_logger(__name__)

# 占位的提示词 token 数：本服务不对输入做分词，固定返回该值
PLACEHOLDER_PROMPT_TOKENS = 13

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def count_completion_tokens(text: str) -> int:
    """按空白字符切分估算 token 数（粗略估算，并非真实分词），空字符串为 0"""
    return len(text.split())


def build_usage(text: str) -> Usage:
    """
    构造估算的用量统计

    prompt_tokens 为固定占位值，completion_tokens 为回复文本按空白切分后的片段数，
    缓存命中恒为 0，缓存未命中等于 prompt_tokens。
    """
    prompt_tokens = PLACEHOLDER_PROMPT_TOKENS
    completion_tokens = count_completion_tokens(text)
    return Usage(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=prompt_tokens + completion_tokens,
        prompt_tokens_details=PromptTokensDetails(cached_tokens=0),
        prompt_cache_hit_tokens=0,
        prompt_cache_miss_tokens=prompt_tokens,
    )


def parse_backend_reply(body: str) -> BackendReply:
    """
    解析非流式响应体

    Raises:
        MalformedBackendReply: 响应体不是合法的 BackendReply
    """
    try:
        return BackendReply.model_validate_json(body)
    except ValidationError as e:
        logger.error(f"解析私有API响应失败: {e} | body={body[:200]}")
        raise MalformedBackendReply() from e


def build_completion(
    reply: BackendReply,
    settings: Settings,
    session: Optional[SessionContext] = None,
) -> ChatCompletionResponse:
    """将完整的私有 API 响应包装为 chat.completion"""
    session = session or SessionContext.new()
    if not reply.success:
        logger.warning(
            f"私有API返回失败标记: code={reply.code}, "
            f"errorMessage={reply.error_message}, errorDetail={reply.error_detail}"
        )
    return ChatCompletionResponse(
        id=session.id,
        created=session.created,
        model=settings.response_model_label,
        system_fingerprint=settings.system_fingerprint,
        choices=[
            CompletionChoice(
                index=0,
                message=AssistantMessage(content=reply.response_message),
                finish_reason="stop",
            )
        ],
        usage=build_usage(reply.response_message),
    )


def build_chunk(content: str, session: SessionContext, settings: Settings) -> ChatCompletionChunk:
    """构造只携带增量内容的流式响应块"""
    return ChatCompletionChunk(
        id=session.id,
        created=session.created,
        model=settings.response_model_label,
        system_fingerprint=settings.system_fingerprint,
        choices=[ChunkChoice(index=0, delta=Delta(content=content))],
    )


def format_sse_event(chunk: ChatCompletionChunk) -> str:
    """序列化为一个以空行结尾的 SSE 数据事件"""
    return f"data: {json.dumps(chunk.model_dump(), ensure_ascii=False)}\n\n"


async def relay_stream(
    lines: AsyncIterator[str],
    settings: Settings,
    session: Optional[SessionContext] = None,
) -> AsyncIterator[str]:
    """
    将私有 API 的逐行数据帧转换为 OpenAI 流式响应

    - 每个成功解析的数据帧对应且仅对应一个输出块，顺序不变
    - 所有块共享同一个会话 ID 与创建时间
    - 空行、非数据行、解析失败的数据帧被跳过
    - 输入结束即结束，不发送 [DONE] 标记

    Args:
        lines: 私有 API 响应行
        settings: 应用配置
        session: 会话上下文，未提供时新建

    Yields:
        SSE 格式的数据事件
    """
    session = session or SessionContext.new()
    full_response = []
    chunk_count = 0

    async for line in lines:
        if not line:
            continue

        frame = parse_backend_frame(line)
        if frame is None:
            continue

        if not frame.success and frame.error_message:
            logger.warning(f"私有API数据帧返回失败标记: code={frame.code}, errorMessage={frame.error_message}")

        full_response.append(frame.response_message)
        chunk_count += 1
        yield format_sse_event(build_chunk(frame.response_message, session, settings))

    if full_response:
        logger.info(f"完整流式响应: {''.join(full_response)}")
    logger.info(f"SSE代理连接关闭: id={session.id}, chunks={chunk_count}")
