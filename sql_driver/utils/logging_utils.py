"""
日志配置模块

sql_driver 的所有模块都通过 get_logger(__name__) 取得 "sql_driver.*" 下的 logger，
调用 setup_logging() 为包级 logger 挂上输出即可统一收集：
- 滚动日志文件，默认位于用户配置目录的 logs/ 下
- 标准输出（可选）

自动重连在后台线程中记录日志，默认格式带有线程名，便于区分。
"""

import logging
import logging.handlers
import sys
from pathlib import Path

from .path_utils import PathHelper

DEFAULT_LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [%(threadName)s] %(message)s"
)

LOG_LEVELS = {
    name: getattr(logging, name)
    for name in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
}

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5


def setup_logging(
    app_name: str = "sql_driver",
    level: str = "INFO",
    log_to_console: bool = False,
    log_to_file: bool = True,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    log_format: str | None = None,
    log_dir: str | None = None,
) -> logging.Logger:
    """
    为名为 app_name 的 logger 配置输出，重复调用会替换之前的 handler

    Args:
        app_name: logger 名称，同时作为日志文件名和默认配置目录名
        level: 日志级别名称，不区分大小写
        log_to_console: 是否输出到标准输出
        log_to_file: 是否写入滚动日志文件
        max_file_size: 单个日志文件的最大字节数
        backup_count: 保留的历史日志文件个数
        log_format: 日志格式，None 时使用 DEFAULT_LOG_FORMAT
        log_dir: 日志目录，None 时使用 <用户配置目录>/logs

    Returns:
        logging.Logger: 配置好的 logger

    Raises:
        ValueError: 当日志级别无效或两种输出都未启用时
        OSError: 当日志目录或文件无法创建时

    Example:
        >>> setup_logging(level="DEBUG", log_to_console=True, log_to_file=False)
        >>> get_logger("sql_driver.core.driver").debug("可以看到驱动的调试日志了")
    """
    log_level = _parse_level(level)
    if not (log_to_console or log_to_file):
        raise ValueError("至少需要启用一种日志输出方式（控制台或文件）")

    handlers: list[logging.Handler] = []
    log_file = None
    if log_to_file:
        directory = (
            Path(log_dir)
            if log_dir is not None
            else PathHelper.get_user_config_dir(app_name) / "logs"
        )
        log_file = directory / f"{app_name}.log"
        handlers.append(
            _rotating_file_handler(log_file, max_file_size, backup_count)
        )
    if log_to_console:
        handlers.append(logging.StreamHandler(sys.stdout))

    formatter = logging.Formatter(log_format or DEFAULT_LOG_FORMAT)
    logger = logging.getLogger(app_name)
    logger.setLevel(log_level)

    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        logger.addHandler(handler)

    logger.debug(f"日志已配置: 级别={level.upper()}, 文件={log_file or '无'}")
    return logger


def _rotating_file_handler(
    log_file: Path, max_file_size: int, backup_count: int
) -> logging.handlers.RotatingFileHandler:
    """创建滚动日志文件 handler，目录不存在时自动创建"""
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        return logging.handlers.RotatingFileHandler(
            filename=str(log_file),
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        raise OSError(f"无法创建日志文件 {log_file}: {str(e)}") from e


def _parse_level(level: str) -> int:
    try:
        return LOG_LEVELS[level.upper()]
    except (KeyError, AttributeError):
        raise ValueError(
            f"无效的日志级别: {level!r}，有效值为: {', '.join(LOG_LEVELS)}"
        ) from None


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_log_level(logger_name: str, level: str) -> None:
    """
    运行中调整 logger 及其 handler 的级别

    Example:
        >>> set_log_level("sql_driver.core.reconnect", "DEBUG")
    """
    log_level = _parse_level(level)
    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)
    for handler in logger.handlers:
        handler.setLevel(log_level)
