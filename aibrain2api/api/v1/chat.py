"""
聊天相关 API 路由
"""
import json

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError
from starlette.requests import ClientDisconnect

from aibrain2api.api.dependencies import get_chat_service
from aibrain2api.exceptions import InvalidInboundBody, ResponseSerializationError
from aibrain2api.models.schemas import ChatCompletionRequest
from aibrain2api.services.chat_service import ChatService
from aibrain2api.services.relay import SSE_HEADERS
from aibrain2api.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["chat"])


async def parse_chat_request(request: Request) -> ChatCompletionRequest:
    """
    读取并解析原始请求体

    Raises:
        InvalidInboundBody: 请求体无法读取、不是 JSON 对象或字段不合法
    """
    try:
        body = await request.body()
    except ClientDisconnect as e:
        logger.error(f"读取请求体失败: {e}")
        raise InvalidInboundBody("无法读取请求") from e

    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error(f"解析OpenAI请求失败: {e}")
        raise InvalidInboundBody() from e

    if not isinstance(payload, dict):
        logger.error(f"解析OpenAI请求失败: 请求体不是 JSON 对象 ({type(payload).__name__})")
        raise InvalidInboundBody()

    try:
        return ChatCompletionRequest.model_validate(payload)
    except ValidationError as e:
        logger.error(f"解析OpenAI请求失败: {e}")
        raise InvalidInboundBody() from e


@router.post("/chat/completions")
async def chat_completions(
    request: Request,
    chat_service: ChatService = Depends(get_chat_service),
):
    """
    Chat completions endpoint compatible with OpenAI API format.
    将请求转换为私有 API 格式转发，并把响应转换回 OpenAI 格式。
    """
    chat_request = await parse_chat_request(request)

    if chat_request.stream:
        events = await chat_service.stream_chat_completion(chat_request)
        return StreamingResponse(
            events,
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    completion = await chat_service.chat_completion(chat_request)
    try:
        return JSONResponse(content=completion.model_dump())
    except (TypeError, ValueError) as e:
        logger.error(f"序列化响应失败: {e}", exc_info=True)
        raise ResponseSerializationError() from e
