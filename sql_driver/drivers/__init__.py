"""
数据库客户端模块包

Driver 通过客户端适配器访问底层数据库客户端库：

- SQLAlchemyClient: 默认实现，基于 SQLAlchemy 引擎和各数据库的 DB-API 模块
- JDBCClient: 基于 JayDeBeApi 调用 JDBC 驱动

使用示例：
    >>> from sql_driver.drivers import JDBCClient
    >>> client = JDBCClient(jars=["/opt/jdbc/postgresql-42.7.4.jar"])
    >>> driver = Driver(config, client=client)
"""

from .base import ClientAdapter, ConnectionHandle, mask_url
from .jdbc_client import JDBCClient, JDBCHandle
from .sqlalchemy_client import SQLAlchemyClient, SQLAlchemyHandle

__all__ = [
    # ==================== 抽象接口 ====================
    "ClientAdapter",
    "ConnectionHandle",
    # ==================== SQLAlchemy客户端 ====================
    "SQLAlchemyClient",
    "SQLAlchemyHandle",
    # ==================== JDBC客户端 ====================
    "JDBCClient",
    "JDBCHandle",
    # ==================== 工具函数 ====================
    "mask_url",
]
