"""
JDBC 数据库客户端模块

通过 JayDeBeApi 调用 JDBC 驱动访问数据库，适用于只提供 JDBC 驱动的环境。
需要本机安装 JDK，并通过 jars 参数或 CLASSPATH 提供驱动 jar 包。

JDBC URL 与驱动类：
- MariaDB:    jdbc:mariadb://{host}:{port}/{database}     org.mariadb.jdbc.Driver
- MySQL:      jdbc:mysql://{host}:{port}/{database}       com.mysql.cj.jdbc.Driver
- PostgreSQL: jdbc:postgresql://{host}:{port}/{database}  org.postgresql.Driver
- SQLite:     jdbc:sqlite:{database}                      org.sqlite.JDBC
"""

import threading
from typing import Any, Dict, List, Optional, Sequence, Set

from ..core.config import ConnectionConfig
from ..core.database_type import DatabaseType
from ..core.exceptions import ConnectionError, DriverError
from ..utils.logging_utils import get_logger
from .base import ClientAdapter, ConnectionHandle

logger = get_logger(__name__)

# 数据库类型到 JDBC URL 模板的映射
JDBC_URL_TEMPLATES: Dict[DatabaseType, str] = {
    DatabaseType.MARIADB: "jdbc:mariadb://{host}:{port}/{database}",
    DatabaseType.MYSQL: "jdbc:mysql://{host}:{port}/{database}",
    DatabaseType.POSTGRESQL: "jdbc:postgresql://{host}:{port}/{database}",
    DatabaseType.SQLITE: "jdbc:sqlite:{database}",
}

# 数据库类型到 JDBC 驱动类的映射
JDBC_DRIVER_CLASSES: Dict[DatabaseType, str] = {
    DatabaseType.MARIADB: "org.mariadb.jdbc.Driver",
    DatabaseType.MYSQL: "com.mysql.cj.jdbc.Driver",
    DatabaseType.POSTGRESQL: "org.postgresql.Driver",
    DatabaseType.SQLITE: "org.sqlite.JDBC",
}


def _import_jaydebeapi() -> Any:
    try:
        import jaydebeapi
    except ImportError as e:
        raise DriverError(
            f"JDBC 客户端需要 JayDeBeApi，请安装: pip install JayDeBeApi ({str(e)})",
            driver_name="jaydebeapi",
        )
    return jaydebeapi


class JDBCHandle(ConnectionHandle):
    """
    JayDeBeApi 连接句柄

    有效性检测直接调用 java.sql.Connection.isValid(timeout)。
    """

    def __init__(self, connection: Any) -> None:
        self.connection = connection

    @property
    def raw(self) -> Any:
        return self.connection

    @property
    def closed(self) -> bool:
        if getattr(self.connection, "_closed", False):
            return True
        try:
            return bool(self.connection.jconn.isClosed())
        except Exception as e:
            raise ConnectionError(f"无法读取JDBC连接状态: {str(e)}", operation="probe")

    def is_valid(self, timeout: float = 0) -> bool:
        if getattr(self.connection, "_closed", False):
            return False
        try:
            return bool(self.connection.jconn.isValid(int(timeout)))
        except Exception as e:
            raise ConnectionError(
                f"JDBC连接有效性检测失败: {e.__class__.__name__}: {str(e)}",
                operation="probe",
            )

    def close(self) -> None:
        if getattr(self.connection, "_closed", False):
            return
        try:
            self.connection.close()
        except Exception as e:
            raise ConnectionError(
                f"JDBC连接关闭失败: {e.__class__.__name__}: {str(e)}",
                operation="close",
            )

    def execute(self, command: str) -> None:
        if not command or not command.strip():
            raise ValueError("命令语句不能为空")

        cursor = self.connection.cursor()
        try:
            cursor.execute(command)
        except Exception as e:
            raise ConnectionError(
                f"初始化命令执行失败: {e.__class__.__name__}: {str(e)}",
                operation="execute",
            )
        finally:
            cursor.close()


class JDBCClient(ClientAdapter):
    """
    基于 JayDeBeApi 的 JDBC 客户端适配器

    Attributes:
        jars (List[str]): JDBC 驱动 jar 包路径列表
        driver_classes (Dict[DatabaseType, str]): 数据库类型到驱动类的映射，可覆盖

    Example:
        >>> client = JDBCClient(jars=["/opt/jdbc/mariadb-java-client-3.4.1.jar"])
        >>> driver = Driver(config, client=client)
    """

    name = "jdbc"

    def __init__(
        self,
        jars: Optional[Sequence[str]] = None,
        driver_classes: Optional[Dict[DatabaseType, str]] = None,
    ) -> None:
        self.jars: List[str] = list(jars or [])
        self.driver_classes: Dict[DatabaseType, str] = {
            **JDBC_DRIVER_CLASSES,
            **(driver_classes or {}),
        }
        self._checked: Set[DatabaseType] = set()
        self._lock = threading.Lock()

    def build_url(self, config: ConnectionConfig) -> str:
        template = JDBC_URL_TEMPLATES.get(config.database_type)
        if template is None:
            raise DriverError(
                f"JDBC 客户端不支持的数据库类型: {config.database_type.label}",
                database_type=config.database_type.label,
            )
        return template.format(
            host=config.host, port=config.port, database=config.database
        )

    def _driver_class_for_url(self, url: str) -> str:
        for database_type, template in JDBC_URL_TEMPLATES.items():
            prefix = template.split("{", 1)[0]
            if url.startswith(prefix):
                return self.driver_classes[database_type]
        raise ConnectionError(f"无法识别的JDBC连接目标: {url}", operation="connect")

    def ensure_capability(self, database_type: DatabaseType) -> None:
        """
        确认 JayDeBeApi 可用；JVM 已启动时额外确认驱动类可加载

        JVM 尚未启动时驱动类在首次 connect 时随 jars 一起加载。

        Raises:
            DriverError: 当 JayDeBeApi 缺失或驱动类无法加载时
        """
        with self._lock:
            if database_type in self._checked:
                return

            _import_jaydebeapi()
            driver_class = self.driver_classes.get(database_type)
            if driver_class is None:
                raise DriverError(
                    f"未配置JDBC驱动类: {database_type.label}",
                    database_type=database_type.label,
                )

            import jpype

            if jpype.isJVMStarted():
                try:
                    jpype.JClass(driver_class)
                except Exception as e:
                    raise DriverError(
                        f"无法加载JDBC驱动类 {driver_class}: {str(e)}",
                        database_type=database_type.label,
                        driver_name=driver_class,
                    )

            self._checked.add(database_type)
            logger.debug(f"JDBC驱动已就绪: {driver_class}")

    def open(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> JDBCHandle:
        jaydebeapi = _import_jaydebeapi()
        driver_class = self._driver_class_for_url(url)

        driver_args: Optional[List[str]] = None
        if username is not None and password is not None:
            driver_args = [username, password]

        try:
            connection = jaydebeapi.connect(
                driver_class, url, driver_args, self.jars or None
            )
        except Exception as e:
            raise ConnectionError(
                f"JDBC连接建立失败: {e.__class__.__name__}: {str(e)}",
                operation="connect",
                url=url,
            )

        logger.debug(f"JDBC连接已打开: {url}")
        return JDBCHandle(connection)
