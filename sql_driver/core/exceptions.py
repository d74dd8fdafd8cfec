"""
数据库驱动自定义异常模块

提供项目专用的异常类层次结构，区分配置期错误与运行期连接错误：
- 配置期错误（ConfigError、DriverError）直接抛给调用方
- 运行期连接错误（ConnectionError）由驱动内部捕获、记录日志并转换为布尔返回值
"""

from typing import Any, Dict, Optional


class SQLDriverError(Exception):
    """
    数据库驱动基础异常类

    所有自定义异常的基类，提供统一的异常处理接口。

    Attributes:
        message (str): 异常描述信息
        error_code (Optional[str]): 错误代码，用于错误分类
        details (Dict[str, Any]): 详细的错误信息
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        """返回异常的字符串表示"""
        base_str = f"{self.__class__.__name__}: {self.message}"
        if self.error_code:
            base_str += f" (错误代码: {self.error_code})"
        return base_str

    def to_dict(self) -> Dict[str, Any]:
        """
        将异常信息转换为字典格式

        Returns:
            包含异常信息的字典
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ConfigError(SQLDriverError):
    """
    配置相关异常

    连接参数校验失败、配置文件读取或解析失败时抛出。
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        config_key: Optional[str] = None,
        config_file: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        初始化配置异常

        Args:
            message: 异常描述信息
            error_code: 错误代码
            config_key: 校验失败的配置键（如 host、port）
            config_file: 相关的配置文件路径
            details: 详细的错误信息
        """
        super().__init__(message, error_code, details)
        self.config_key = config_key
        self.config_file = config_file

        # 自动填充详细信息
        if config_key:
            self.details["config_key"] = config_key
        if config_file:
            self.details["config_file"] = config_file


class CryptoError(SQLDriverError):
    """
    加密解密相关异常

    处理密钥派生、连接档案加密、解密过程中出现的错误。
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, error_code, details)
        self.operation = operation

        if operation:
            self.details["operation"] = operation


class DatabaseError(SQLDriverError):
    """
    数据库操作基础异常

    处理所有数据库相关操作的通用错误。
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        database_type: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        初始化数据库异常

        Args:
            message: 异常描述信息
            error_code: 错误代码
            database_type: 数据库类型（如：mysql, postgresql, sqlite等）
            operation: 数据库操作类型（如：connect, disconnect, probe等）
            details: 详细的错误信息
        """
        super().__init__(message, error_code, details)
        self.database_type = database_type
        self.operation = operation

        # 自动填充详细信息
        if database_type:
            self.details["database_type"] = database_type
        if operation:
            self.details["operation"] = operation


class ConnectionError(DatabaseError):
    """
    数据库连接异常

    连接建立、断开、有效性检测失败时由客户端层抛出，
    驱动层捕获后转换为 False 返回值，不会传播给应用代码。
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        database_type: Optional[str] = None,
        operation: Optional[str] = None,
        url: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, error_code, database_type, operation, details)
        self.url = url

        # 连接URL在抛出前已掩码处理
        if url:
            self.details["url"] = url


class DriverError(DatabaseError):
    """
    数据库客户端能力异常

    当数据库类型未知，或对应的客户端实现（DB-API 模块、JDBC 驱动类）
    无法加载时抛出。
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        database_type: Optional[str] = None,
        driver_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        初始化驱动异常

        Args:
            message: 异常描述信息
            error_code: 错误代码
            database_type: 数据库类型
            driver_name: 无法加载的驱动名称（模块名或JDBC驱动类名）
            details: 详细的错误信息
        """
        super().__init__(message, error_code, database_type, "load_driver", details)
        self.driver_name = driver_name

        if driver_name:
            self.details["driver_name"] = driver_name
