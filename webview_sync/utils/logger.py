import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO

from ..core.exceptions import ConfigError

LOGGER_NAME = "webview_sync"


class ColoredFormatter(logging.Formatter):
    """带颜色的日志格式化器
    支持颜色：
    - 警告: 黄色
    - 错误: 红色
    - 调试: 灰色
    仅在终端输出时着色，构建日志中保持纯文本
    """
    COLORS = {
        'DEBUG': '\033[90m',
        'WARNING': '\033[93m',
        'ERROR': '\033[91m',
        'CRITICAL': '\033[91m',
        'ENDC': '\033[0m'
    }

    def __init__(self, fmt=None, use_color=False):
        super().__init__(fmt)
        self.use_color = use_color

    def format(self, record):
        message = super().format(record)
        color = self.COLORS.get(record.levelname, '')
        if not self.use_color or not color:
            return message
        return f"{color}{message}{self.COLORS['ENDC']}"


def _is_tty(stream) -> bool:
    isatty = getattr(stream, 'isatty', None)
    try:
        return bool(isatty and isatty())
    except ValueError:
        # closed stream
        return False


def setup_logger(prog: str = "webview-sync",
                 level: int = logging.INFO,
                 log_file: Optional[Path] = None,
                 stream: Optional[TextIO] = None) -> logging.Logger:
    """配置工具日志

    控制台输出写到 stderr，每条消息带有程序名前缀；
    指定 log_file 时额外写入滚动日志文件。
    重复调用会替换已有的处理器。
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream = stream if stream is not None else sys.stderr
    console_handler = logging.StreamHandler(stream)
    console_handler.setFormatter(ColoredFormatter(f"{prog}: %(message)s", use_color=_is_tty(stream)))
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
        except OSError as e:
            # 控制台处理器已就绪，调用方可以输出错误
            raise ConfigError(f"无法打开日志文件 {log_file}: {e.strerror or e}") from e
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s'
        ))
        logger.addHandler(file_handler)

    return logger


def get_logger(name=None):
    """获取配置好的日志记录器"""
    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)
