"""
网关异常定义

每个异常携带返回给调用方的 HTTP 状态码和纯文本错误信息，
由 aibrain2api.main 中注册的异常处理器统一渲染。
"""


class GatewayError(Exception):
    """网关错误基类"""

    status_code: int = 500
    default_message: str = "内部服务器错误"

    def __init__(self, message=None, status_code=None):
        self.message = self.default_message if message is None else message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class InvalidInboundBody(GatewayError):
    """请求体无法读取或不是合法的 JSON"""

    status_code = 400
    default_message = "无效的请求格式"


class TranslationError(GatewayError):
    """请求转换失败"""

    status_code = 400
    default_message = "转换请求失败"


class UnsupportedContentFormat(TranslationError):
    """不支持的消息内容格式"""

    default_message = "不支持的消息内容格式"


class EmptyMessageList(TranslationError):
    """输入消息为空"""

    default_message = "输入内容为空"


class BackendUnreachable(GatewayError):
    """无法连接到目标服务"""

    status_code = 502
    default_message = "连接到目标服务失败"


class BackendNonSuccessStatus(GatewayError):
    """目标服务返回非 200 状态，状态码与响应体原样透传"""

    def __init__(self, status_code: int, body: str):
        self.body = body
        super().__init__(message=body, status_code=status_code)

    def __str__(self) -> str:
        return f"目标返回状态 {self.status_code}: {self.body[:200]}"


class MalformedBackendReply(GatewayError):
    """目标服务响应无法解析"""

    status_code = 500
    default_message = "解析响应失败"


class ResponseSerializationError(GatewayError):
    """构建返回给调用方的响应失败"""

    status_code = 500
    default_message = "内部服务器错误"
