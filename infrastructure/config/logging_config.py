"""
日志配置

根据 Settings 配置根日志记录器：控制台输出，log_file 非空时追加滚动文件输出。
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from infrastructure.config.settings import Settings, get_settings


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_LOG_SIZE = 10 * 1024 * 1024
BACKUP_COUNT = 5

# 协议库的调试输出包含完整的命令交互
_NOISY_LOGGERS = ("aiosmtplib",)


def configure_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """
    配置根日志记录器

    重复调用会替换之前安装的处理器。

    Args:
        settings: 应用配置，默认使用全局配置

    Returns:
        根日志记录器
    """
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=MAX_LOG_SIZE,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.debug(f"Logging configured: level={logging.getLevelName(level)}, file={settings.log_file or '-'}")
    return root_logger
