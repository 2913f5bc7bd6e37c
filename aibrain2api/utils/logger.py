"""
统一日志处理模块，支持彩色控制台输出和追加写入的日志文件
"""
import logging
import os
import sys
from typing import Optional, Union

DEFAULT_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
DEFAULT_DATEFMT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """彩色日志格式化器"""

    # ANSI 颜色代码
    COLORS = {
        'DEBUG': '\033[36m',      # 青色
        'INFO': '\033[32m',       # 绿色
        'WARNING': '\033[33m',    # 黄色
        'ERROR': '\033[31m',      # 红色
        'CRITICAL': '\033[35m',   # 紫色
        'RESET': '\033[0m',       # 重置
    }

    def __init__(self, use_color: bool = True, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.use_color = use_color and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """格式化日志记录，只给级别名称着色"""
        if not self.use_color:
            return super().format(record)

        original_levelname = record.levelname
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        record.levelname = f"{color}{record.levelname}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            # 恢复原始值（避免影响文件处理器）
            record.levelname = original_levelname


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    获取日志记录器

    不单独添加处理器，日志统一传播到根日志记录器处理，避免重复输出。
    """
    return logging.getLogger(name)


def configure_root_logger(
    level: Union[int, str] = logging.INFO,
    use_color: bool = True,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> None:
    """
    配置根日志记录器

    Args:
        level: 日志级别，默认为 INFO
        use_color: 控制台是否使用彩色输出
        log_file: 日志文件路径，以追加模式写入；为空时只输出到控制台
        format_string: 自定义格式字符串，如果为 None 则使用默认格式
    """
    if format_string is None:
        format_string = DEFAULT_FORMAT

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # 清除现有的处理器
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(ColoredFormatter(
        use_color=use_color,
        fmt=format_string,
        datefmt=DEFAULT_DATEFMT
    ))
    root_logger.addHandler(console_handler)

    # 日志文件：多个请求并发写入时，每条记录由处理器锁保证完整写入
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(fmt=format_string, datefmt=DEFAULT_DATEFMT))
        root_logger.addHandler(file_handler)

    # 设置第三方库的日志级别
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
