"""
消息内容规范化工具

OpenAI 消息的 content 字段可能是字符串，也可能是内容项数组（文本 + 图片）。
这里在边界处一次性消除歧义，统一转换为 ContentItem 列表。
"""
from typing import Any, Iterable, List, Mapping, Optional

from aibrain2api.exceptions import UnsupportedContentFormat
from aibrain2api.models.schemas import ContentItem, NormalizedMessage

# 视为图片的内容项类型（Chat Completions 与 Responses 两种写法）
IMAGE_CONTENT_TYPES = frozenset({"image_url", "input_image"})


def _extract_image_url(item: Mapping[str, Any]) -> Optional[str]:
    """
    提取图片内容项中的 URL

    支持两种结构:
    1. {"type": "image_url", "image_url": {"url": "..."}}
    2. {"type": "input_image", "image_url": "..."}
    """
    image_url = item.get("image_url")
    if isinstance(image_url, Mapping):
        image_url = image_url.get("url")
    if isinstance(image_url, str) and image_url:
        return image_url
    return None


def _normalize_item(index: int, item: Any) -> ContentItem:
    if not isinstance(item, Mapping):
        raise UnsupportedContentFormat(f"不支持的消息内容格式: content[{index}] 不是对象")

    item_type = item.get("type")
    if not isinstance(item_type, str) or not item_type:
        raise UnsupportedContentFormat(f"不支持的消息内容格式: content[{index}] 缺少 type 字段")

    if item_type in IMAGE_CONTENT_TYPES:
        url = _extract_image_url(item)
        if url is None:
            raise UnsupportedContentFormat(f"不支持的消息内容格式: content[{index}] 图片缺少 url")
        return ContentItem(kind="image", image_url=url)

    # 其余类型一律按文本处理，缺少 text 时为空字符串
    text = item.get("text")
    return ContentItem(kind="text", text=text if isinstance(text, str) else "")


def normalize_content(raw: Any) -> List[ContentItem]:
    """
    将消息的原始 content 转换为有序的 ContentItem 列表

    Args:
        raw: 字符串或内容项数组

    Returns:
        规范化后的内容项列表（非空）

    Raises:
        UnsupportedContentFormat: content 既不是字符串也不是非空数组，
            或数组中存在无法识别的内容项
    """
    if isinstance(raw, str):
        return [ContentItem(kind="text", text=raw)]

    if isinstance(raw, list):
        if not raw:
            raise UnsupportedContentFormat("不支持的消息内容格式: content 为空数组")
        return [_normalize_item(index, item) for index, item in enumerate(raw)]

    raise UnsupportedContentFormat(
        f"不支持的消息内容格式: {type(raw).__name__}"
    )


def contains_image(messages: Iterable[NormalizedMessage]) -> bool:
    """判断规范化后的消息中是否包含图片内容项，命中第一个即返回"""
    return any(
        item.kind == "image"
        for message in messages
        for item in message.content
    )
