"""
请求转换：OpenAI 请求 -> 私有 API 请求
"""
from typing import List, Union

from aibrain2api.config import Settings
from aibrain2api.exceptions import EmptyMessageList
from aibrain2api.models.schemas import (
    BackendMessage,
    BackendMultiModalRequest,
    BackendTextRequest,
    ChatCompletionRequest,
    NormalizedMessage,
)
from aibrain2api.utils.content import contains_image, normalize_content
from aibrain2api.utils.logger import get_logger

logger = get_logger(__name__)

BackendRequestType = Union[BackendTextRequest, BackendMultiModalRequest]


def normalize_messages(request: ChatCompletionRequest) -> List[NormalizedMessage]:
    """规范化全部消息，保持顺序与角色；第一条失败即中止"""
    if not request.messages:
        raise EmptyMessageList()
    return [
        NormalizedMessage(role=message.role, content=normalize_content(message.content))
        for message in request.messages
    ]


def translate_request(request: ChatCompletionRequest, settings: Settings) -> BackendRequestType:
    """
    将 OpenAI 请求转换为私有 API 请求

    - 模型名通过 model_map 映射为服务名，未配置时原样使用
    - 任意消息包含图片时使用多模态请求，否则使用文本请求
    - 凭证对来自配置，stream 来自原请求

    Raises:
        EmptyMessageList: 消息列表为空
        UnsupportedContentFormat: 消息内容格式不支持
    """
    service_name = settings.resolve_service_name(request.model)
    normalized = normalize_messages(request)

    request_cls = BackendMultiModalRequest if contains_image(normalized) else BackendTextRequest
    backend_request = request_cls(
        agent_id=settings.default_agent_id,
        secret_key=settings.default_secret_key,
        service_name=service_name,
        messages=[
            BackendMessage(
                role=message.role,
                content=[item.to_backend() for item in message.content],
            )
            for message in normalized
        ],
        stream=request.stream,
    )

    logger.debug(
        f"请求转换完成: model='{request.model}', service='{service_name}', "
        f"shape={backend_request.kind}, messages={len(normalized)}"
    )
    return backend_request
