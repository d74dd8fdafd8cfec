"""
SQL Driver - 单连接数据库驱动封装
==================================

为 MariaDB、MySQL、PostgreSQL、SQLite 提供统一的连接构建与生命周期管理。

主要特性:
- 流式构建器，设置参数时立即校验
- 幂等的 connect / disconnect / is_connected，连接错误以返回值报告
- 后台自动重连，可配置最大尝试次数和间隔
- 可切换的客户端实现（SQLAlchemy 或 JDBC）
- 加密保存的命名连接档案和命令行工具

使用示例:
    >>> from sql_driver import ConnectionConfigBuilder, DatabaseType, Driver
    >>> builder = (
    ...     ConnectionConfigBuilder.with_type(DatabaseType.MARIADB)
    ...     .with_host("localhost")
    ...     .with_port(3306)
    ...     .with_database("shop")
    ...     .with_username("app")
    ...     .with_password("secret")
    ... )
    >>> driver = Driver(builder)
    >>> driver.set_auto_reconnect_settings(5, 10.0)
    >>> driver.set_auto_reconnect(True)
    >>> driver.connect()
"""

__version__ = "0.1.0"
__author__ = "wangquanqing <wangquanqing1636@sina.com>"
__license__ = "MIT"

from .core.config import ConnectionConfig, ConnectionConfigBuilder
from .core.database_type import DatabaseType, get_supported_databases
from .core.driver import Driver
from .core.exceptions import (
    ConfigError,
    ConnectionError,
    CryptoError,
    DatabaseError,
    DriverError,
    SQLDriverError,
)
from .core.profiles import ProfileStore
from .core.reconnect import ReconnectSupervisor, SupervisorState
from .drivers import JDBCClient, SQLAlchemyClient

__all__ = [
    # 配置
    "DatabaseType",
    "ConnectionConfig",
    "ConnectionConfigBuilder",
    # 驱动
    "Driver",
    "ReconnectSupervisor",
    "SupervisorState",
    # 客户端
    "SQLAlchemyClient",
    "JDBCClient",
    # 档案
    "ProfileStore",
    # 异常类
    "SQLDriverError",
    "ConfigError",
    "CryptoError",
    "DatabaseError",
    "ConnectionError",
    "DriverError",
    # 工具函数
    "get_supported_databases",
    "get_version",
]


def get_version() -> str:
    """
    获取当前模块版本号

    Returns:
        str: 版本号字符串，格式为 'x.y.z'
    """
    return __version__
