"""
路径处理工具模块

提供跨平台的用户配置目录获取功能，连接档案、加密密钥和日志文件都保存在该目录下。
支持 Windows、macOS 和 Linux 系统。
"""

import os
import platform
from pathlib import Path


class PathHelper:
    """
    路径辅助类

    所有方法均为静态方法，无需实例化即可使用。

    Example:
        >>> config_dir = PathHelper.get_user_config_dir("sql_driver")
    """

    @staticmethod
    def get_user_config_dir(app_name: str = "sql_driver") -> Path:
        """
        获取用户配置目录路径

        根据操作系统类型获取标准的用户配置目录，并创建应用特定的子目录。
        设置了 SQL_DRIVER_CONFIG_DIR 环境变量时优先使用该目录。
        标准目录创建失败时回退到当前工作目录下的隐藏目录。

        Args:
            app_name (str): 应用名称，默认为"sql_driver"

        Returns:
            Path: 配置目录的Path对象

        Raises:
            ValueError: 当应用名称为空或不是字符串时
            OSError: 当回退方案也无法创建目录时

        Note:
            - Windows: %APPDATA%\\{app_name}
            - macOS: ~/Library/Application Support/{app_name}
            - Linux: $XDG_CONFIG_HOME/{app_name} 或 ~/.config/{app_name}
        """
        if not app_name or not isinstance(app_name, str):
            raise ValueError("应用名称不能为空且必须是字符串")

        override = os.environ.get("SQL_DRIVER_CONFIG_DIR")
        system = platform.system().lower()

        try:
            if override:
                config_dir = Path(override) / app_name
            else:
                if system == "windows":
                    base_dir = Path(os.environ.get("APPDATA", Path.home()))
                elif system == "darwin":
                    base_dir = Path.home() / "Library" / "Application Support"
                else:
                    base_dir = Path(
                        os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
                    )
                config_dir = base_dir / app_name

            config_dir.mkdir(parents=True, exist_ok=True)
            return config_dir

        except OSError as e:
            fallback_dir = Path.cwd() / f".{app_name}"
            try:
                fallback_dir.mkdir(exist_ok=True)
                return fallback_dir
            except OSError:
                raise OSError(f"无法创建配置目录: {str(e)}")
