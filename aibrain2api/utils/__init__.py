"""
工具函数模块
"""
from .logger import get_logger, configure_root_logger
from .content import normalize_content, contains_image
from .session import SessionContext
from .stream_parser import extract_data_payload, parse_backend_frame
from .http_client import build_headers, post_json, open_stream, iter_stream_lines

__all__ = [
    'get_logger',
    'configure_root_logger',
    'normalize_content',
    'contains_image',
    'SessionContext',
    'extract_data_payload',
    'parse_backend_frame',
    'build_headers',
    'post_json',
    'open_stream',
    'iter_stream_lines',
]
