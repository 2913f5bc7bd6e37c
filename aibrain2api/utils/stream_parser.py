"""
流式响应解析工具
解析私有 API 以 "data:" 为前缀的逐行数据帧
"""
from typing import Optional

from pydantic import ValidationError

from aibrain2api.models.schemas import BackendFrame
from aibrain2api.utils.logger import get_logger

logger = get_logger(__name__)

DATA_PREFIX = "data:"


def extract_data_payload(line: str) -> Optional[str]:
    """
    提取数据帧的负载部分

    Args:
        line: 流式响应中的一行

    Returns:
        去掉 "data:" 前缀后的内容；空行或非数据行（如注释、keep-alive）返回 None
    """
    if not line or not line.startswith(DATA_PREFIX):
        return None
    return line[len(DATA_PREFIX):]


def parse_backend_frame(line: str) -> Optional[BackendFrame]:
    """
    解析一行流式数据为 BackendFrame

    非数据行与解析失败的数据帧都返回 None，解析失败会记录日志，
    调用方跳过该帧继续处理后续数据。
    """
    payload = extract_data_payload(line)
    if payload is None:
        return None

    try:
        return BackendFrame.model_validate_json(payload.strip())
    except ValidationError as e:
        logger.warning(f"解析私有API响应失败: {e.errors()[0].get('msg', e)} | line={line[:100]}")
        return None
