"""
数据库驱动工具模块

提供日志管理和路径处理等通用工具功能。

使用示例：
    >>> from sql_driver.utils import get_logger, setup_logging
    >>>
    >>> # 初始化日志系统
    >>> setup_logging(level="INFO", log_to_console=True, log_to_file=False)
    >>>
    >>> # 获取模块日志器
    >>> logger = get_logger(__name__)
    >>> logger.info("数据库驱动初始化完成")
"""

from .logging_utils import get_logger, set_log_level, setup_logging
from .path_utils import PathHelper

__all__ = [
    # ==================== 日志管理模块 ====================
    "setup_logging",
    "get_logger",
    "set_log_level",
    # ==================== 路径处理模块 ====================
    "PathHelper",
]
