"""
数据库类型定义模块

以封闭枚举描述支持的数据库类型及其元数据：
- 连接目标模板（网络型: scheme://{host}:{port}/{database}，嵌入型: scheme:{database}）
- 客户端能力标识（对应的 DB-API 模块名）
- 是否为嵌入式数据库、默认端口

枚举定义时不加载任何客户端模块，客户端能力由驱动在 connect() 时按需检查。
"""

from enum import Enum
from typing import Dict, Optional

from .exceptions import DriverError

# 类型名称别名
_ALIASES: Dict[str, str] = {
    "postgres": "postgresql",
    "pg": "postgresql",
    "sqlite3": "sqlite",
}


class DatabaseType(Enum):
    """
    数据库类型枚举

    Attributes:
        url_template (str): 连接目标模板
        client_module (str): 客户端能力标识（DB-API 模块名）
        embedded (bool): 是否为嵌入式数据库（无需主机、端口、凭据）
        default_port (Optional[int]): 默认端口，嵌入式数据库为 None

    Example:
        >>> DatabaseType.MARIADB.format_url("localhost", 3306, "shop")
        'mariadb+pymysql://localhost:3306/shop'
        >>> DatabaseType.SQLITE.format_url(database=":memory:")
        'sqlite:///:memory:'
    """

    MARIADB = ("mariadb+pymysql://{host}:{port}/{database}", "pymysql", False, 3306)
    MYSQL = ("mysql+pymysql://{host}:{port}/{database}", "pymysql", False, 3306)
    POSTGRESQL = (
        "postgresql+psycopg://{host}:{port}/{database}",
        "psycopg",
        False,
        5432,
    )
    SQLITE = ("sqlite:///{database}", "sqlite3", True, None)

    def __init__(
        self,
        url_template: str,
        client_module: str,
        embedded: bool,
        default_port: Optional[int],
    ) -> None:
        self.url_template = url_template
        self.client_module = client_module
        self.embedded = embedded
        self.default_port = default_port

    @property
    def label(self) -> str:
        """小写类型名，用于配置文件和命令行"""
        return self.name.lower()

    def format_url(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        database: str = "",
    ) -> str:
        """
        按模板生成连接目标字符串

        Args:
            host: 主机地址（嵌入式数据库忽略）
            port: 端口号（嵌入式数据库忽略）
            database: 数据库名或嵌入式数据库的存储位置

        Returns:
            str: 连接目标字符串（不含凭据）
        """
        if self.embedded:
            return self.url_template.format(database=database)
        return self.url_template.format(host=host, port=port, database=database)

    @classmethod
    def parse(cls, value: "DatabaseType | str") -> "DatabaseType":
        """
        将类型名称解析为枚举成员（不区分大小写）

        Args:
            value: DatabaseType 实例或类型名称，如 "mariadb"、"PostgreSQL"、"postgres"

        Returns:
            DatabaseType: 对应的枚举成员

        Raises:
            DriverError: 当类型名称未知时
        """
        if isinstance(value, cls):
            return value

        if not isinstance(value, str) or not value.strip():
            raise DriverError(f"不支持的数据库类型: {value!r}")

        name = value.strip().lower()
        name = _ALIASES.get(name, name)
        for member in cls:
            if member.label == name:
                return member

        supported_types = ", ".join(member.label for member in cls)
        raise DriverError(
            f"不支持的数据库类型: {value}，支持的类型: {supported_types}",
            database_type=value,
        )


def get_supported_databases() -> list[str]:
    """
    获取支持的数据库类型列表

    Returns:
        list[str]: 小写的数据库类型名称列表
    """
    return [member.label for member in DatabaseType]
