"""
连接档案管理模块

使用 TOML 格式保存命名的连接配置（档案），所有字段加密存储。
档案读取时经 ConnectionConfig.from_dict() 重新校验，得到可直接交给 Driver 的配置。

文件结构：
    version = "1.0.0"
    app_name = "sql_driver"

    [metadata]
    created = "..."
    last_modified = "..."

    [profiles.shop]
    type = "<密文>"
    host = "<密文>"
    ...
"""

import json
import tomllib
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import tomli_w

from ..utils.logging_utils import get_logger
from ..utils.path_utils import PathHelper
from .config import ConnectionConfig
from .crypto import CryptoManager
from .exceptions import ConfigError, CryptoError

logger = get_logger(__name__)

# 支持的档案文件版本
SUPPORTED_VERSIONS = ["1.0.0"]
CURRENT_VERSION = "1.0.0"

KEY_FILE_NAME = "encryption.key"

# 错误消息常量
ERROR_EMPTY_PROFILE_NAME = "档案名称不能为空且必须是字符串"
PROFILE_NOT_FOUND_MSG = "连接档案不存在: {}"
PROFILE_ALREADY_EXISTS_MSG = "连接档案已存在: {}"


def _now() -> str:
    return datetime.now().astimezone().isoformat()


class ProfileStore:
    """
    连接档案存储类

    Attributes:
        app_name (str): 应用名称，用于确定配置目录
        config_file (str): 档案文件名
        config_dir (Path): 配置目录
        config_path (Path): 档案文件完整路径
        crypto (CryptoManager): 加密管理器

    Example:
        >>> store = ProfileStore()
        >>> store.add_profile("local", ConnectionConfig.from_dict(
        ...     {"type": "sqlite", "database": "app.db"}
        ... ))
        >>> driver = Driver(store.get_profile("local"))
    """

    def __init__(
        self,
        app_name: str = "sql_driver",
        config_file: str = "profiles.toml",
        config_dir: Optional[Path] = None,
        iterations: int = CryptoManager.DEFAULT_ITERATIONS,
    ) -> None:
        """
        初始化档案存储

        Args:
            app_name: 应用名称，用于确定配置目录
            config_file: 档案文件名，默认为"profiles.toml"
            config_dir: 配置目录，为None时使用用户配置目录
            iterations: 新建密钥时使用的PBKDF2迭代次数

        Raises:
            ConfigError: 当档案文件或密钥文件初始化失败时
        """
        self.app_name = app_name
        self.config_file = config_file
        self.config_dir = (
            Path(config_dir)
            if config_dir is not None
            else PathHelper.get_user_config_dir(app_name)
        )
        self.config_path = self.config_dir / config_file
        self._iterations = iterations
        self.crypto = self._load_or_create_crypto_key()
        self._ensure_config_exists()

    def _ensure_config_exists(self) -> None:
        """确保档案文件存在，不存在时创建空档案"""
        if self.config_path.exists():
            return

        timestamp = _now()
        self._save_config(
            {
                "version": CURRENT_VERSION,
                "app_name": self.app_name,
                "metadata": {"created": timestamp, "last_modified": timestamp},
                "profiles": {},
            }
        )
        logger.info(f"创建档案文件: {self.config_path}")

    def _load_or_create_crypto_key(self) -> CryptoManager:
        """加载或创建加密密钥"""
        key_file = self.config_dir / KEY_FILE_NAME

        if key_file.exists():
            try:
                with open(key_file, "rb") as f:
                    key_data = tomllib.load(f)
                if "password" not in key_data or "salt" not in key_data:
                    raise ConfigError("密钥文件格式无效", config_file=str(key_file))
                return CryptoManager.from_saved_key(
                    key_data["password"],
                    key_data["salt"],
                    key_data.get("iterations", CryptoManager.DEFAULT_ITERATIONS),
                )
            except ConfigError:
                raise
            except (OSError, tomllib.TOMLDecodeError, CryptoError, ValueError) as e:
                logger.error(f"加载加密密钥失败: {str(e)}")
                raise ConfigError(
                    f"加密密钥加载失败: {str(e)}", config_file=str(key_file)
                )

        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            crypto = CryptoManager(iterations=self._iterations)
            with open(key_file, "wb") as f:
                f.write(tomli_w.dumps(crypto.get_key_info()).encode("utf-8"))
            logger.info("新加密密钥创建成功")
            return crypto
        except (OSError, CryptoError) as e:
            logger.error(f"创建加密密钥失败: {str(e)}")
            raise ConfigError(f"加密密钥创建失败: {str(e)}", config_file=str(key_file))

    def _load_config(self) -> Dict[str, Any]:
        """
        加载并验证档案文件

        Raises:
            ConfigError: 当文件格式无效或版本不支持时
        """
        try:
            with open(self.config_path, "rb") as f:
                config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            logger.error(f"档案文件TOML格式错误: {str(e)}")
            raise ConfigError(
                f"档案文件格式无效: {str(e)}", config_file=str(self.config_path)
            )
        except OSError as e:
            raise ConfigError(
                f"档案文件读取失败: {str(e)}", config_file=str(self.config_path)
            )

        self._validate_config(config)
        return config

    def _validate_config(self, config: Dict[str, Any]) -> None:
        for field in ("version", "app_name", "metadata", "profiles"):
            if field not in config:
                raise ConfigError(
                    f"档案文件缺少必需字段: {field}", config_file=str(self.config_path)
                )

        if config["version"] not in SUPPORTED_VERSIONS:
            raise ConfigError(
                f"不支持的档案文件版本: {config['version']}",
                config_file=str(self.config_path),
            )

    def _save_config(self, config: Dict[str, Any]) -> None:
        config["metadata"]["last_modified"] = _now()
        self._validate_config(config)

        try:
            with open(self.config_path, "wb") as f:
                f.write(tomli_w.dumps(config).encode("utf-8"))
        except OSError as e:
            logger.error(f"保存档案文件失败: {str(e)}")
            raise ConfigError(
                f"档案文件保存失败: {str(e)}", config_file=str(self.config_path)
            )

        logger.debug(f"档案文件已保存: {self.config_path}")

    def _encrypt_value(self, value: Any) -> str:
        """序列化（保留数据类型）后加密"""
        return self.crypto.encrypt(json.dumps({"value": value}, ensure_ascii=False))

    def _decrypt_value(self, token: str) -> Any:
        try:
            return json.loads(self.crypto.decrypt(token))["value"]
        except CryptoError as e:
            raise ConfigError(f"档案字段解密失败: {e.message}")
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise ConfigError(f"档案字段格式无效: {str(e)}")

    @staticmethod
    def _check_name(name: str) -> None:
        if not name or not isinstance(name, str) or not name.strip():
            raise ValueError(ERROR_EMPTY_PROFILE_NAME)

    def add_profile(
        self, name: str, config: ConnectionConfig, overwrite: bool = False
    ) -> None:
        """
        保存连接档案

        Args:
            name: 档案名称
            config: 已校验的连接配置
            overwrite: 档案已存在时是否覆盖

        Raises:
            ValueError: 当档案名称为空时
            ConfigError: 当档案已存在（且不覆盖）或保存失败时
        """
        self._check_name(name)
        if not isinstance(config, ConnectionConfig):
            raise ConfigError("档案内容必须是 ConnectionConfig")

        data = self._load_config()
        if name in data["profiles"] and not overwrite:
            raise ConfigError(PROFILE_ALREADY_EXISTS_MSG.format(name))

        data["profiles"][name] = {
            key: self._encrypt_value(value) for key, value in config.to_dict().items()
        }
        self._save_config(data)
        logger.info(f"连接档案已保存: {name}")

    def get_profile(self, name: str) -> ConnectionConfig:
        """
        读取并解密连接档案

        Args:
            name: 档案名称

        Returns:
            ConnectionConfig: 重新校验后的连接配置

        Raises:
            ValueError: 当档案名称为空时
            ConfigError: 当档案不存在、解密失败或内容不合法时
        """
        self._check_name(name)
        data = self._load_config()
        if name not in data["profiles"]:
            raise ConfigError(PROFILE_NOT_FOUND_MSG.format(name))

        decrypted = {
            key: self._decrypt_value(token)
            for key, token in data["profiles"][name].items()
        }
        logger.debug(f"连接档案已读取: {name}")
        return ConnectionConfig.from_dict(decrypted)

    def list_profiles(self) -> List[str]:
        """列出所有档案名称"""
        return list(self._load_config()["profiles"].keys())

    def profile_exists(self, name: str) -> bool:
        try:
            return name in self._load_config()["profiles"]
        except ConfigError:
            return False

    def remove_profile(self, name: str) -> None:
        """
        删除连接档案

        Raises:
            ValueError: 当档案名称为空时
            ConfigError: 当档案不存在时
        """
        self._check_name(name)
        data = self._load_config()
        if name not in data["profiles"]:
            raise ConfigError(PROFILE_NOT_FOUND_MSG.format(name))

        del data["profiles"][name]
        self._save_config(data)
        logger.info(f"连接档案已删除: {name}")

    def __repr__(self) -> str:
        return (
            f"ProfileStore(app_name='{self.app_name}', "
            f"config_path='{self.config_path}')"
        )
