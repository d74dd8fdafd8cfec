"""
连接配置模块

提供不可变的连接配置值对象 ConnectionConfig 与流式构建器 ConnectionConfigBuilder。

校验规则：
- 网络型数据库（MariaDB、MySQL、PostgreSQL）必须提供主机、端口、数据库名、用户名、密码
- 嵌入式数据库（SQLite）只需数据库名（文件路径或 :memory:），不允许设置主机、端口和凭据
- 每个 with_* 方法在设置时立即校验，build() 时对完整参数集再次校验
"""

from typing import Any, Dict, Mapping, Optional

from ..utils.logging_utils import get_logger
from .database_type import DatabaseType
from .exceptions import ConfigError

logger = get_logger(__name__)

MIN_PORT = 1
MAX_PORT = 65535

# 字段校验顺序，build() 报告第一个不合法的字段
FIELD_ORDER = ("database", "host", "port", "username", "password")
NETWORK_ONLY_FIELDS = ("host", "port", "username", "password")
CONFIG_KEYS = {"type", *FIELD_ORDER}

ERROR_INVALID_FIELD = "无效的{}"
ERROR_EMBEDDED_FIELD = "{}数据库不支持设置{}"

FIELD_LABELS: Dict[str, str] = {
    "database": "数据库名",
    "host": "主机地址",
    "port": "端口号",
    "username": "用户名",
    "password": "密码",
}


def _is_blank(value: Any) -> bool:
    return value is None or not isinstance(value, str) or not value.strip()


def _is_valid_port(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return MIN_PORT <= value <= MAX_PORT


def _check_field(name: str, value: Any) -> None:
    """校验单个字段的取值"""
    valid = _is_valid_port(value) if name == "port" else not _is_blank(value)
    if not valid:
        raise ConfigError(ERROR_INVALID_FIELD.format(FIELD_LABELS[name]), config_key=name)


class ConnectionConfig:
    """
    连接配置值对象

    创建后不可修改，由 ConnectionConfigBuilder.build() 生成。

    Attributes:
        database_type (DatabaseType): 数据库类型
        host (Optional[str]): 主机地址
        port (Optional[int]): 端口号
        database (str): 数据库名或嵌入式数据库存储位置
        username (Optional[str]): 用户名
        password (Optional[str]): 密码

    Example:
        >>> config = (
        ...     ConnectionConfigBuilder.with_type(DatabaseType.POSTGRESQL)
        ...     .with_host("localhost")
        ...     .with_port(5432)
        ...     .with_database("shop")
        ...     .with_username("app")
        ...     .with_password("secret")
        ...     .build()
        ... )
        >>> config.url
        'postgresql+psycopg://localhost:5432/shop'
    """

    __slots__ = ("_database_type", "_host", "_port", "_database", "_username", "_password")

    def __init__(
        self,
        database_type: DatabaseType,
        database: str,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        self._database_type = DatabaseType.parse(database_type)
        self._database = database
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._validate()

    def _validate(self) -> None:
        """
        按数据库类型校验完整参数集

        Raises:
            ConfigError: 报告第一个不合法的字段
        """
        values = self._values()
        for name in FIELD_ORDER:
            value = values[name]
            if self._database_type.embedded and name in NETWORK_ONLY_FIELDS:
                if value is not None:
                    raise ConfigError(
                        ERROR_EMBEDDED_FIELD.format(
                            self._database_type.name, FIELD_LABELS[name]
                        ),
                        config_key=name,
                    )
                continue
            _check_field(name, value)

    def _values(self) -> Dict[str, Any]:
        return {
            "database": self._database,
            "host": self._host,
            "port": self._port,
            "username": self._username,
            "password": self._password,
        }

    @property
    def database_type(self) -> DatabaseType:
        return self._database_type

    @property
    def host(self) -> Optional[str]:
        return self._host

    @property
    def port(self) -> Optional[int]:
        return self._port

    @property
    def database(self) -> str:
        return self._database

    @property
    def username(self) -> Optional[str]:
        return self._username

    @property
    def password(self) -> Optional[str]:
        return self._password

    @property
    def url(self) -> str:
        """按数据库类型模板生成的连接目标字符串（不含凭据）"""
        return self._database_type.format_url(self._host, self._port, self._database)

    def to_dict(self) -> Dict[str, Any]:
        """
        转换为普通字典，仅包含已设置的字段

        Returns:
            Dict[str, Any]: 包含 type 及已设置字段的字典
        """
        result: Dict[str, Any] = {"type": self._database_type.label}
        for key, value in self._values().items():
            if value is not None:
                result[key] = value
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConnectionConfig":
        """
        从字典创建连接配置

        字典通过构建器逐字段设置，因此与手工构建享有相同的校验。

        Args:
            data: 包含 type、database 以及可选 host、port、username、password 的映射

        Returns:
            ConnectionConfig: 校验通过的连接配置

        Raises:
            ConfigError: 当缺少类型、存在未知字段或字段不合法时

        Example:
            >>> ConnectionConfig.from_dict({"type": "sqlite", "database": ":memory:"})
            ConnectionConfig(type='sqlite', database=':memory:')
        """
        if not data or not isinstance(data, Mapping):
            raise ConfigError("连接配置不能为空且必须是字典")

        unknown_keys = sorted(set(data) - CONFIG_KEYS)
        if unknown_keys:
            raise ConfigError(f"未知的连接参数: {', '.join(unknown_keys)}")

        if "type" not in data:
            raise ConfigError("缺少数据库类型", config_key="type")

        builder = ConnectionConfigBuilder.with_type(data["type"])
        setters = {
            "host": builder.with_host,
            "port": builder.with_port,
            "database": builder.with_database,
            "username": builder.with_username,
            "password": builder.with_password,
        }
        for key in FIELD_ORDER:
            if key in data:
                setters[key](data[key])
        return builder.build()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConnectionConfig):
            return NotImplemented
        return (
            self._database_type is other._database_type
            and self._values() == other._values()
        )

    def __hash__(self) -> int:
        return hash((self._database_type, *self._values().values()))

    def __repr__(self) -> str:
        """返回配置的字符串表示，密码做掩码处理"""
        parts = [f"type={self._database_type.label!r}"]
        for key, value in self._values().items():
            if value is None:
                continue
            if key == "password":
                value = "***"
            parts.append(f"{key}={value!r}")
        return f"ConnectionConfig({', '.join(parts)})"


class ConnectionConfigBuilder:
    """
    连接配置流式构建器

    每个 with_* 方法立即校验参数并返回构建器自身，
    错误在引入它的调用处即被发现，而不是延迟到连接建立时。

    Example:
        >>> builder = ConnectionConfigBuilder.with_type("sqlite").with_database("app.db")
        >>> config = builder.build()
    """

    def __init__(self, database_type: DatabaseType) -> None:
        self.database_type = database_type
        self._fields: Dict[str, Any] = {}

    @classmethod
    def with_type(cls, database_type: "DatabaseType | str") -> "ConnectionConfigBuilder":
        """
        以数据库类型创建构建器

        Args:
            database_type: DatabaseType 实例或类型名称

        Returns:
            ConnectionConfigBuilder: 新的构建器

        Raises:
            ConfigError: 当数据库类型为空时
            DriverError: 当数据库类型未知时
        """
        if database_type is None:
            raise ConfigError("数据库类型不能为空", config_key="type")
        return cls(DatabaseType.parse(database_type))

    def _set(self, name: str, value: Any) -> "ConnectionConfigBuilder":
        if self.database_type.embedded and name in NETWORK_ONLY_FIELDS:
            raise ConfigError(
                ERROR_EMBEDDED_FIELD.format(self.database_type.name, FIELD_LABELS[name]),
                config_key=name,
            )
        _check_field(name, value)
        self._fields[name] = value
        return self

    def with_host(self, host: str) -> "ConnectionConfigBuilder":
        return self._set("host", host)

    def with_port(self, port: int) -> "ConnectionConfigBuilder":
        return self._set("port", port)

    def with_database(self, database: str) -> "ConnectionConfigBuilder":
        return self._set("database", database)

    def with_username(self, username: str) -> "ConnectionConfigBuilder":
        return self._set("username", username)

    def with_password(self, password: str) -> "ConnectionConfigBuilder":
        return self._set("password", password)

    def build(self) -> ConnectionConfig:
        """
        校验完整参数集并生成连接配置

        Returns:
            ConnectionConfig: 不可变的连接配置

        Raises:
            ConfigError: 报告第一个缺失或不合法的字段
        """
        config = ConnectionConfig(
            self.database_type,
            database=self._fields.get("database"),
            host=self._fields.get("host"),
            port=self._fields.get("port"),
            username=self._fields.get("username"),
            password=self._fields.get("password"),
        )
        logger.debug(f"连接配置构建成功: {config!r}")
        return config

    def __repr__(self) -> str:
        return (
            f"ConnectionConfigBuilder(type={self.database_type.label!r}, "
            f"fields={sorted(self._fields)!r})"
        )
