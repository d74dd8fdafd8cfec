"""
数据库驱动模块

Driver 管理单个数据库连接的完整生命周期：
- connect / disconnect / is_connected，均为幂等操作，运行期错误只记录日志并返回 False
- 嵌入式数据库（SQLite）连接后执行初始化命令，默认开启外键约束
- 可选的后台自动重连线程（ReconnectSupervisor）

设计原则：
- 每个 Driver 实例只持有一个连接，不做连接池、语句缓存和事务管理
- 配置期错误（ConfigError、DriverError）在构造时抛出
- 连接句柄的切换由可重入锁保护，不会同时存在两个活跃连接，也不会重复关闭
"""

import threading
from typing import Any, Dict, Optional, Sequence, Union

from ..drivers.base import ClientAdapter, ConnectionHandle, mask_url
from ..drivers.sqlalchemy_client import SQLAlchemyClient
from ..utils.logging_utils import get_logger
from .config import ConnectionConfig, ConnectionConfigBuilder
from .database_type import DatabaseType
from .exceptions import ConfigError
from .reconnect import ReconnectSupervisor, SupervisorState

# 获取模块级别的日志记录器
logger = get_logger(__name__)

# 嵌入式数据库连接后的默认初始化命令
DEFAULT_EMBEDDED_INIT_COMMANDS = ("PRAGMA foreign_keys = ON",)

# 默认自动重连参数
DEFAULT_MAX_RECONNECT_ATTEMPTS = 0  # 0 表示不限次数
DEFAULT_RECONNECT_DELAY = 1.0  # 秒


class Driver:
    """
    数据库驱动类

    持有一个数据库连接，提供连接、断开、状态检测和自动重连功能。
    应用代码需要检查 connect()/disconnect() 的返回值，连接错误不会以异常形式抛出。

    Attributes:
        config (ConnectionConfig): 连接配置
        url (str): 连接目标字符串，构造时生成一次
        client (ClientAdapter): 底层客户端适配器

    Example:
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
        True
    """

    def __init__(
        self,
        config: Union[ConnectionConfig, ConnectionConfigBuilder],
        client: Optional[ClientAdapter] = None,
    ) -> None:
        """
        初始化数据库驱动

        Args:
            config: 连接配置，传入构建器时自动调用 build()
            client: 客户端适配器，默认使用 SQLAlchemyClient

        Raises:
            ConfigError: 当连接配置不合法时
            DriverError: 当客户端不支持该数据库类型时

        Note:
            构造时不会建立连接，需要显式调用 connect()
        """
        if isinstance(config, ConnectionConfigBuilder):
            config = config.build()
        if not isinstance(config, ConnectionConfig):
            raise ConfigError("连接配置必须是 ConnectionConfig 或 ConnectionConfigBuilder")

        self.config = config
        self.client = client or SQLAlchemyClient()
        self.url = self.client.build_url(config)

        self._connection: Optional[ConnectionHandle] = None
        self._lock = threading.RLock()

        self._auto_reconnect = False
        self._max_reconnect_attempts = DEFAULT_MAX_RECONNECT_ATTEMPTS
        self._reconnect_delay = DEFAULT_RECONNECT_DELAY
        self._supervisor: Optional[ReconnectSupervisor] = None

        logger.debug(
            f"数据库驱动初始化成功: {config.database_type.label} ({mask_url(self.url)})"
        )

    @property
    def database_type(self) -> DatabaseType:
        return self.config.database_type

    def connect(self, init_commands: Optional[Sequence[str]] = None) -> bool:
        """
        建立数据库连接

        Args:
            init_commands: 嵌入式数据库连接后依次执行的初始化命令，
                为 None 时执行默认命令（开启外键约束）；网络型数据库忽略此参数

        Returns:
            bool: 连接建立且有效时返回 True，否则返回 False

        Process:
            1. 已连接则直接返回 True
            2. 丢弃已失效的旧连接
            3. 检查客户端能力并打开新连接
            4. 嵌入式数据库执行初始化命令
            5. 零超时检测连接有效性

        Example:
            >>> driver.connect()
            True
            >>> sqlite_driver.connect(["PRAGMA foreign_keys = ON", "PRAGMA journal_mode = WAL"])
            True
        """
        with self._lock:
            try:
                if self.is_connected():
                    return True

                self._discard_connection()

                self.client.ensure_capability(self.database_type)
                self._connection = self.client.open(
                    self.url, self.config.username, self.config.password
                )

                if self.database_type.embedded:
                    commands = (
                        DEFAULT_EMBEDDED_INIT_COMMANDS
                        if init_commands is None
                        else init_commands
                    )
                    for command in commands:
                        self._connection.execute(command)

                connected = self._connection.is_valid(0)
                if connected:
                    logger.info(f"数据库连接已建立: {mask_url(self.url)}")
                else:
                    logger.warning(f"数据库连接建立后检测无效: {mask_url(self.url)}")
                return connected

            except Exception as e:
                logger.error(
                    f"数据库连接失败 {mask_url(self.url)}: "
                    f"{e.__class__.__name__}: {str(e)}"
                )
                self._discard_connection()
                return False

    def disconnect(self) -> bool:
        """
        断开数据库连接

        Returns:
            bool: 连接已不存在或已关闭时返回 True，关闭失败返回 False

        Note:
            未连接时直接返回 True；已失效的连接会被静默丢弃
        """
        with self._lock:
            handle = self._connection
            if handle is None:
                return True

            try:
                if not self.is_connected():
                    self._discard_connection()
                    return True

                handle.close()
                closed = handle.closed
                if closed:
                    self._connection = None
                    logger.info(f"数据库连接已断开: {mask_url(self.url)}")
                return closed

            except Exception as e:
                logger.error(f"数据库连接断开失败: {e.__class__.__name__}: {str(e)}")
                return False

    def is_connected(self) -> bool:
        """
        检查数据库连接是否有效

        Returns:
            bool: 存在连接且零超时有效性检测通过时返回 True；检测出错视为 False
        """
        with self._lock:
            handle = self._connection
            if handle is None:
                return False

            try:
                return handle.is_valid(0)
            except Exception as e:
                logger.warning(f"连接状态检查失败: {e.__class__.__name__}: {str(e)}")
                return False

    def _discard_connection(self) -> None:
        """关闭并丢弃当前句柄，忽略关闭错误"""
        handle = self._connection
        self._connection = None
        if handle is None:
            return

        try:
            handle.close()
        except Exception as e:
            logger.debug(f"丢弃失效连接时关闭失败: {str(e)}")

    def get_connection(self) -> Any:
        """
        获取底层原始连接对象

        Returns:
            原始连接（SQLAlchemy Connection 或 JayDeBeApi Connection），未连接时为 None

        Note:
            连接归 Driver 所有，调用方不应自行关闭，需要断开时调用 disconnect()
        """
        handle = self._connection
        return handle.raw if handle is not None else None

    @property
    def connection(self) -> Any:
        return self.get_connection()

    # ==================== 自动重连 ====================

    @property
    def auto_reconnect(self) -> bool:
        return self._auto_reconnect

    @property
    def max_reconnect_attempts(self) -> int:
        return self._max_reconnect_attempts

    @property
    def reconnect_delay(self) -> float:
        return self._reconnect_delay

    @property
    def supervisor(self) -> Optional[ReconnectSupervisor]:
        return self._supervisor

    def set_auto_reconnect(self, enabled: bool) -> None:
        """
        开启或关闭自动重连

        Args:
            enabled: True 开启，启动后台重连线程；False 关闭，通知线程退出

        Note:
            已有存活的重连线程时再次开启不会启动第二个线程
        """
        with self._lock:
            self._auto_reconnect = bool(enabled)

            if enabled:
                supervisor = self._supervisor
                if (
                    supervisor is not None
                    and supervisor.is_alive()
                    and not supervisor.stop_requested
                    and supervisor.state is not SupervisorState.STOPPED
                ):
                    logger.debug("自动重连线程已在运行")
                    return

                self._supervisor = ReconnectSupervisor(self, lock=self._lock)
                self._supervisor.start()
            elif self._supervisor is not None:
                self._supervisor.stop()
                logger.info("自动重连已关闭")

    def set_auto_reconnect_settings(self, max_attempts: int, delay: float) -> None:
        """
        设置自动重连参数，运行中的重连线程下一轮即生效

        Args:
            max_attempts: 最大连续重连次数，0 表示不限
            delay: 每轮检测之间的等待时间（秒）

        Raises:
            ValueError: 当参数为负数或类型不正确时

        Example:
            >>> driver.set_auto_reconnect_settings(5, 10.0)  # 最多5次，间隔10秒
        """
        if isinstance(max_attempts, bool) or not isinstance(max_attempts, int):
            raise ValueError("最大重连次数必须是整数")
        if max_attempts < 0:
            raise ValueError("最大重连次数不能为负数")
        if isinstance(delay, bool) or not isinstance(delay, (int, float)):
            raise ValueError("重连间隔必须是数字")
        if delay < 0:
            raise ValueError("重连间隔不能为负数")

        self._max_reconnect_attempts = max_attempts
        self._reconnect_delay = float(delay)
        logger.debug(f"自动重连参数已更新: 最大次数={max_attempts}, 间隔={delay}秒")

    def join_supervisor(self, timeout: Optional[float] = None) -> bool:
        """
        等待自动重连线程退出

        Args:
            timeout: 最长等待时间（秒），None 表示一直等待

        Returns:
            bool: 等待结束时没有存活的重连线程返回 True
        """
        supervisor = self._supervisor
        if supervisor is None:
            return True
        supervisor.join(timeout)
        return not supervisor.is_alive()

    def close(self, timeout: Optional[float] = None) -> bool:
        """
        关闭自动重连并断开连接

        Args:
            timeout: 等待重连线程退出的最长时间（秒）

        Returns:
            bool: 断开连接的结果
        """
        self.set_auto_reconnect(False)
        if not self.join_supervisor(timeout):
            logger.warning("自动重连线程未在超时时间内退出")
        return self.disconnect()

    def get_connection_info(self) -> Dict[str, Any]:
        """
        获取连接信息

        Returns:
            Dict[str, Any]: 连接信息字典，用户名掩码处理，不包含密码

        Example:
            >>> info = driver.get_connection_info()
            >>> print(f"连接到 {info['database_type']} 数据库")
        """
        config = self.config
        info: Dict[str, Any] = {
            "database_type": config.database_type.label,
            "client": self.client.name,
            "host": config.host,
            "port": config.port,
            "database": config.database,
            "username": "***" if config.username else None,
            "is_connected": self.is_connected(),
            "auto_reconnect": self._auto_reconnect,
            "max_reconnect_attempts": self._max_reconnect_attempts,
            "reconnect_delay": self._reconnect_delay,
        }
        return {k: v for k, v in info.items() if v is not None}

    def __enter__(self) -> "Driver":
        """
        上下文管理器入口，建立连接

        Note:
            连接失败不会抛出异常，可通过 is_connected() 检查
        """
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        has_connection = self._connection is not None
        return (
            f"Driver(type={self.database_type.label!r}, url={mask_url(self.url)!r}, "
            f"connected={has_connection!r}, "
            f"auto_reconnect={self._auto_reconnect!r})"
        )
