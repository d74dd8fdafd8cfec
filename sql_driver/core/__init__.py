"""
数据库驱动核心模块

主要功能模块：
- DatabaseType: 支持的数据库类型及其连接目标模板
- ConnectionConfig / ConnectionConfigBuilder: 连接配置与流式构建器
- Driver: 单连接生命周期管理与自动重连
- ProfileStore: 加密保存的命名连接档案
- 异常处理: 统一的异常体系

使用示例：
    >>> from sql_driver.core import ConnectionConfigBuilder, DatabaseType, Driver
    >>>
    >>> builder = ConnectionConfigBuilder.with_type(DatabaseType.SQLITE).with_database(":memory:")
    >>> driver = Driver(builder)
    >>> driver.connect()
    True
    >>> driver.disconnect()
    True
"""

from .exceptions import (
    ConfigError,
    ConnectionError,
    CryptoError,
    DatabaseError,
    DriverError,
    SQLDriverError,
)
from .database_type import DatabaseType, get_supported_databases
from .config import ConnectionConfig, ConnectionConfigBuilder
from .reconnect import ReconnectSupervisor, SupervisorState
from .driver import Driver
from .crypto import CryptoManager
from .profiles import ProfileStore

__all__ = [
    # ==================== 配置模块 ====================
    "DatabaseType",
    "ConnectionConfig",
    "ConnectionConfigBuilder",
    "get_supported_databases",
    # ==================== 连接管理模块 ====================
    "Driver",
    "ReconnectSupervisor",
    "SupervisorState",
    # ==================== 档案管理模块 ====================
    "ProfileStore",
    "CryptoManager",
    # ==================== 异常处理体系 ====================
    "SQLDriverError",
    "ConfigError",
    "CryptoError",
    "DatabaseError",
    "ConnectionError",
    "DriverError",
]
