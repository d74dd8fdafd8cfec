"""
SQLAlchemy 数据库客户端模块

默认的客户端实现，基于 SQLAlchemy 引擎访问各数据库的 DB-API 模块：
- MariaDB / MySQL: PyMySQL
- PostgreSQL: psycopg
- SQLite: 标准库 sqlite3

每个句柄持有一个独立引擎（NullPool，不做连接池）和一个连接，
关闭句柄时同时释放引擎。
"""

import importlib
import threading
from typing import Any, Dict, Optional, Set

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.pool import NullPool

from ..core.config import ConnectionConfig
from ..core.database_type import DatabaseType
from ..core.exceptions import ConnectionError, DriverError
from ..utils.logging_utils import get_logger
from .base import ClientAdapter, ConnectionHandle, mask_url

logger = get_logger(__name__)


class SQLAlchemyHandle(ConnectionHandle):
    """
    SQLAlchemy 连接句柄

    Attributes:
        engine (Engine): 该连接专用的引擎
        connection (Connection): SQLAlchemy 连接对象
    """

    def __init__(self, engine: Engine, connection: Connection) -> None:
        self.engine = engine
        self.connection = connection

    @property
    def raw(self) -> Connection:
        return self.connection

    @property
    def closed(self) -> bool:
        return self.connection.closed

    def is_valid(self, timeout: float = 0) -> bool:
        """
        检测连接有效性

        已关闭或已失效的连接直接返回 False，否则在 DB-API 连接上调用方言的 ping
        （与 pool_pre_ping 相同的检测），不读取也不结束 SQLAlchemy 层的事务。
        SQLAlchemy 没有通用的检测超时参数，timeout 仅为接口保持一致。

        Raises:
            ConnectionError: 当检测失败时
        """
        if self.connection.closed or self.connection.invalidated:
            return False

        dialect = self.connection.dialect
        try:
            dbapi_connection = self.connection.connection.dbapi_connection
            return bool(dialect.do_ping(dbapi_connection))
        except (SQLAlchemyError, dialect.loaded_dbapi.Error) as e:
            raise ConnectionError(
                f"连接有效性检测失败: {e.__class__.__name__}: {str(e)}",
                operation="probe",
            )

    def close(self) -> None:
        try:
            if not self.connection.closed:
                self.connection.close()
        except SQLAlchemyError as e:
            raise ConnectionError(
                f"数据库连接关闭失败: {e.__class__.__name__}: {str(e)}",
                operation="close",
            )
        finally:
            self.engine.dispose()

    def execute(self, command: str) -> None:
        if not command or not command.strip():
            raise ValueError("命令语句不能为空")

        try:
            self.connection.execute(text(command))
            self.connection.commit()
        except SQLAlchemyError as e:
            raise ConnectionError(
                f"初始化命令执行失败: {e.__class__.__name__}: {str(e)}",
                operation="execute",
            )


class SQLAlchemyClient(ClientAdapter):
    """
    基于 SQLAlchemy 的客户端适配器

    Attributes:
        engine_options (Dict[str, Any]): 透传给 create_engine 的额外参数

    Example:
        >>> client = SQLAlchemyClient()
        >>> client.ensure_capability(DatabaseType.SQLITE)
        >>> handle = client.open("sqlite:///:memory:")
        >>> handle.is_valid(0)
        True
        >>> handle.close()
    """

    name = "sqlalchemy"

    def __init__(self, **engine_options: Any) -> None:
        self.engine_options: Dict[str, Any] = engine_options
        self._loaded: Set[str] = set()
        self._lock = threading.Lock()

    def build_url(self, config: ConnectionConfig) -> str:
        return config.url

    def ensure_capability(self, database_type: DatabaseType) -> None:
        """
        导入数据库类型对应的 DB-API 模块，成功后缓存结果

        Raises:
            DriverError: 当模块无法导入时
        """
        module_name = database_type.client_module
        with self._lock:
            if module_name in self._loaded:
                return

            try:
                importlib.import_module(module_name)
            except ImportError as e:
                raise DriverError(
                    f"无法加载数据库客户端 {module_name}，请先安装: {str(e)}",
                    database_type=database_type.label,
                    driver_name=module_name,
                )

            self._loaded.add(module_name)
            logger.debug(f"数据库客户端已加载: {module_name}")

    def open(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> SQLAlchemyHandle:
        """
        创建引擎并建立连接

        凭据通过 URL 对象合并，特殊字符无需手工编码。

        Raises:
            ConnectionError: 当URL无效或连接建立失败时
        """
        try:
            url_object = make_url(url)
            if username is not None:
                url_object = url_object.set(username=username)
            if password is not None:
                url_object = url_object.set(password=password)
        except ArgumentError as e:
            raise ConnectionError(
                f"无效的连接目标: {str(e)}", operation="connect", url=mask_url(url)
            )

        engine_kwargs: Dict[str, Any] = dict(self.engine_options)
        if url_object.get_backend_name() == "sqlite":
            # 自动重连线程会在其他线程上检测同一个连接
            connect_args = dict(engine_kwargs.get("connect_args", {}))
            connect_args.setdefault("check_same_thread", False)
            engine_kwargs["connect_args"] = connect_args

        engine: Optional[Engine] = None
        try:
            engine = create_engine(url_object, poolclass=NullPool, **engine_kwargs)
            connection = engine.connect()
        except SQLAlchemyError as e:
            if engine is not None:
                engine.dispose()
            raise ConnectionError(
                f"数据库连接建立失败: {e.__class__.__name__}: {str(e)}",
                operation="connect",
                url=mask_url(url),
            )

        logger.debug(f"数据库连接已打开: {mask_url(url)}")
        return SQLAlchemyHandle(engine, connection)
