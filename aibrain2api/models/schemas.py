"""
Pydantic 数据模型定义

入站：OpenAI 兼容的聊天请求
出站：AIBrain 私有 API 的请求体
回传：私有 API 的响应帧，以及转换后的 OpenAI 响应
"""
from typing import Any, ClassVar, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ============================================================================
# 入站请求（OpenAI 格式）
# ============================================================================

class ChatMessage(BaseModel):
    """聊天消息模型"""
    role: str = Field(min_length=1)
    # 字符串或内容数组，由 utils.content.normalize_content 统一规范化
    content: Any = None


class ChatCompletionRequest(BaseModel):
    """聊天完成请求模型"""
    model: str = ""
    messages: List[ChatMessage] = Field(default_factory=list)
    stream: bool = False

    @field_validator("model", "messages", "stream", mode="before")
    @classmethod
    def null_as_zero_value(cls, v, info):
        # 字段为 null 时按零值处理，空消息列表由请求转换阶段报错
        if v is None:
            return {"model": "", "messages": [], "stream": False}[info.field_name]
        return v


# ============================================================================
# 规范化后的内容项
# ============================================================================

class ContentItem(BaseModel):
    """规范化后的内容项，创建后不可变"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["text", "image"]
    text: Optional[str] = None
    image_url: Optional[str] = None

    @model_validator(mode="after")
    def check_kind_fields(self):
        # text 与 image_url 有且只有一个，并与 kind 一致
        if self.kind == "image":
            if not self.image_url or self.text is not None:
                raise ValueError("image 内容项必须且只能携带 image_url")
        elif self.text is None or self.image_url is not None:
            raise ValueError("text 内容项必须且只能携带 text")
        return self

    def to_backend(self) -> "BackendContentItem":
        if self.kind == "image":
            return BackendContentItem(type="image_url", image_url=BackendImageURL(url=self.image_url))
        return BackendContentItem(type="text", text=self.text or "")


class NormalizedMessage(BaseModel):
    """规范化后的消息"""
    model_config = ConfigDict(frozen=True)

    role: str
    content: List[ContentItem]


# ============================================================================
# 出站请求（私有 API 格式）
# ============================================================================

class BackendImageURL(BaseModel):
    url: str


class BackendContentItem(BaseModel):
    type: str
    text: Optional[str] = None
    image_url: Optional[BackendImageURL] = None


class BackendMessage(BaseModel):
    role: str
    content: List[BackendContentItem]


class BackendRequest(BaseModel):
    """私有 API 请求基类，两种请求形状携带相同的消息结构"""
    model_config = ConfigDict(populate_by_name=True)

    kind: ClassVar[str] = ""

    agent_id: str = Field(alias="agentId")
    secret_key: str = Field(alias="secretKey")
    service_name: str = Field(alias="serviceName")
    messages: List[BackendMessage]
    stream: bool = False

    def to_payload(self) -> dict:
        """序列化为私有 API 请求体"""
        return self.model_dump(by_alias=True, exclude_none=True)


class BackendTextRequest(BackendRequest):
    """私有 API 请求 - 文本请求"""
    kind: ClassVar[str] = "text"


class BackendMultiModalRequest(BackendRequest):
    """私有 API 请求 - 多模态请求"""
    kind: ClassVar[str] = "multimodal"


# ============================================================================
# 私有 API 响应
# ============================================================================

class BackendReply(BaseModel):
    """私有 API 响应（非流式为完整响应，流式为单个数据帧）"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool = False
    code: int = 0
    error_message: Optional[str] = Field(default=None, alias="errorMessage")
    error_detail: Optional[str] = Field(default=None, alias="errorDetail")
    request_id: Optional[str] = Field(default=None, alias="requestId")
    response_id: Optional[str] = Field(default=None, alias="responseId")
    response_message: str = Field(default="", alias="responseMessage")
    data: Any = None

    @field_validator("success", "code", "response_message", mode="before")
    @classmethod
    def null_as_zero_value(cls, v, info):
        # 私有 API 可能对这些字段返回 null，按零值处理
        if v is None:
            return {"success": False, "code": 0}.get(info.field_name, "")
        return v


# 流式帧与完整响应结构一致
BackendFrame = BackendReply


# ============================================================================
# 回传响应（OpenAI 格式）
# ============================================================================

class PromptTokensDetails(BaseModel):
    cached_tokens: int = 0


class Usage(BaseModel):
    """用量统计（估算值，见 services.relay.build_usage）"""
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    prompt_tokens_details: PromptTokensDetails = Field(default_factory=PromptTokensDetails)
    prompt_cache_hit_tokens: int = 0
    prompt_cache_miss_tokens: int = 0


class AssistantMessage(BaseModel):
    role: str = "assistant"
    content: str


class Delta(BaseModel):
    content: str


class CompletionChoice(BaseModel):
    index: int = 0
    message: AssistantMessage
    logprobs: Optional[Any] = None
    finish_reason: Optional[str] = "stop"


class ChunkChoice(BaseModel):
    index: int = 0
    delta: Delta
    logprobs: Optional[Any] = None
    finish_reason: Optional[str] = None


class ChatCompletionResponse(BaseModel):
    """聊天完成响应模型"""
    id: str
    object: str = "chat.completion"
    created: int
    model: str
    system_fingerprint: str
    choices: List[CompletionChoice]
    usage: Usage


class ChatCompletionChunk(BaseModel):
    """流式响应块，不携带 usage"""
    id: str
    object: str = "chat.completion.chunk"
    created: int
    model: str
    system_fingerprint: str
    choices: List[ChunkChoice]


class ModelInfo(BaseModel):
    """模型信息模型"""
    id: str
    object: str = "model"
    created: int
    owned_by: str


class ModelsResponse(BaseModel):
    """模型列表响应模型"""
    object: str = "list"
    data: List[ModelInfo]
