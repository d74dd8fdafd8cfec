"""
数据库客户端抽象接口

Driver 通过 ClientAdapter 访问底层客户端库，不直接依赖 SQLAlchemy 或 JDBC：
- ensure_capability: 确认指定数据库类型的客户端实现可用
- build_url: 生成连接目标字符串
- open: 使用目标字符串和凭据打开连接，返回 ConnectionHandle

ConnectionHandle 封装一个原始连接，提供有效性检测、关闭和执行初始化命令的能力。
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Optional

from ..core.config import ConnectionConfig
from ..core.database_type import DatabaseType


def mask_url(url: str) -> str:
    """
    掩码连接URL中的密码部分

    Args:
        url: 原始连接URL

    Returns:
        str: 密码部分替换为***的URL
    """
    return re.sub(r"://([^:/@]+):([^@]+)@", r"://\1:***@", url)


class ConnectionHandle(ABC):
    """
    单个数据库连接的句柄

    句柄由 Driver 独占，调用方通过 Driver.get_connection() 拿到的 raw 连接不应自行关闭。
    """

    @property
    @abstractmethod
    def raw(self) -> Any:
        """底层客户端库的原始连接对象"""

    @property
    @abstractmethod
    def closed(self) -> bool:
        """连接是否已关闭"""

    @abstractmethod
    def is_valid(self, timeout: float = 0) -> bool:
        """
        检测连接是否仍然可用

        Args:
            timeout: 检测超时时间（秒），0 表示不设置超时

        Raises:
            ConnectionError: 当检测过程本身失败时
        """

    @abstractmethod
    def close(self) -> None:
        """关闭连接，重复调用不报错"""

    @abstractmethod
    def execute(self, command: str) -> None:
        """执行一条不返回结果的命令（用于连接后的初始化）"""


class ClientAdapter(ABC):
    """
    数据库客户端适配器基类

    子类需要实现 URL 生成、客户端能力检查和打开连接。
    """

    name: str = "client"

    @abstractmethod
    def build_url(self, config: ConnectionConfig) -> str:
        """
        生成连接目标字符串（不含凭据）

        Raises:
            DriverError: 当该客户端不支持此数据库类型时
        """

    @abstractmethod
    def ensure_capability(self, database_type: DatabaseType) -> None:
        """
        确认数据库类型对应的客户端实现可用，可重复调用

        Raises:
            DriverError: 当客户端实现无法加载时
        """

    @abstractmethod
    def open(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> ConnectionHandle:
        """
        打开一个新连接

        Raises:
            ConnectionError: 当连接无法建立时
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
