"""
加密管理模块

使用 cryptography.fernet 进行对称加密，保护保存在本地的连接档案（主机、凭据等）。
密钥由随机密码经 PBKDF2 派生，密码与盐值保存在独立的密钥文件中。
"""

import base64
import secrets
from typing import Any, Dict, Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..utils.logging_utils import get_logger
from .exceptions import CryptoError

logger = get_logger(__name__)


class CryptoManager:
    """
    加密管理器类

    提供基于Fernet的对称加密功能，使用PBKDF2进行密钥派生。

    Example:
        >>> crypto = CryptoManager()
        >>> token = crypto.encrypt("secret")
        >>> crypto.decrypt(token)
        'secret'
    """

    DEFAULT_SALT_LENGTH = 16
    DEFAULT_PASSWORD_LENGTH = 32
    DEFAULT_ITERATIONS = 480000  # OWASP推荐的迭代次数

    def __init__(
        self,
        password: Optional[str] = None,
        salt: Optional[bytes] = None,
        iterations: int = DEFAULT_ITERATIONS,
    ) -> None:
        """
        初始化加密管理器

        Args:
            password: 加密密码，为None时自动生成安全的随机密码
            salt: 盐值，为None时自动生成安全的随机盐值
            iterations: PBKDF2迭代次数

        Raises:
            CryptoError: 当密钥派生失败时
        """
        self.password = password or base64.urlsafe_b64encode(
            secrets.token_bytes(self.DEFAULT_PASSWORD_LENGTH)
        ).decode("utf-8")
        self.salt = salt or secrets.token_bytes(self.DEFAULT_SALT_LENGTH)
        self.iterations = iterations
        self.fernet = self._create_fernet_instance()

    def _create_fernet_instance(self) -> Fernet:
        try:
            kdf = PBKDF2HMAC(
                algorithm=hashes.SHA256(),
                length=32,
                salt=self.salt,
                iterations=self.iterations,
            )
            key_material = kdf.derive(self.password.encode("utf-8"))
            return Fernet(base64.urlsafe_b64encode(key_material))
        except Exception as e:
            logger.error(f"Fernet实例创建失败: {str(e)}")
            raise CryptoError(f"加密密钥派生失败: {str(e)}", operation="derive_key")

    def encrypt(self, data: str) -> str:
        """
        加密字符串数据

        Args:
            data: 要加密的明文字符串

        Returns:
            str: Fernet令牌字符串

        Raises:
            ValueError: 当输入数据为空或不是字符串时
            CryptoError: 当加密过程失败时
        """
        if not data or not isinstance(data, str):
            raise ValueError("加密数据不能为空且必须是字符串")

        try:
            return self.fernet.encrypt(data.encode("utf-8")).decode("utf-8")
        except Exception as e:
            logger.error(f"数据加密失败: {str(e)}")
            raise CryptoError(f"加密失败: {str(e)}", operation="encrypt")

    def decrypt(self, token: str) -> str:
        """
        解密Fernet令牌

        Args:
            token: encrypt() 生成的令牌字符串

        Returns:
            str: 解密后的明文

        Raises:
            ValueError: 当输入为空或不是字符串时
            CryptoError: 当令牌被篡改或密钥不匹配时
        """
        if not token or not isinstance(token, str):
            raise ValueError("加密数据不能为空且必须是字符串")

        try:
            return self.fernet.decrypt(token.encode("utf-8")).decode("utf-8")
        except InvalidToken:
            logger.error("解密令牌无效")
            raise CryptoError(
                "解密失败: 加密数据可能被篡改或密钥不匹配", operation="decrypt"
            )

    def get_key_info(self) -> Dict[str, Any]:
        """
        获取密钥信息（用于持久化存储）

        Returns:
            Dict[str, Any]: 包含密码、盐值和迭代次数的字典
        """
        return {
            "salt": base64.urlsafe_b64encode(self.salt).decode("utf-8"),
            "password": self.password,
            "iterations": self.iterations,
        }

    @classmethod
    def from_saved_key(
        cls, password: str, salt: str, iterations: int = DEFAULT_ITERATIONS
    ) -> "CryptoManager":
        """
        从保存的密钥信息恢复加密管理器

        Args:
            password: 之前保存的密码
            salt: base64编码的盐值字符串
            iterations: PBKDF2迭代次数

        Raises:
            ValueError: 当密码或盐值为空时
            CryptoError: 当盐值格式无效时
        """
        if not password or not salt:
            raise ValueError("密码和盐值不能为空")

        try:
            salt_bytes = base64.urlsafe_b64decode(salt.encode("utf-8"))
        except Exception as e:
            raise CryptoError(f"密钥恢复失败: {str(e)}", operation="load_key")
        return cls(password, salt_bytes, iterations)

    def __repr__(self) -> str:
        return f"CryptoManager(password='***', iterations={self.iterations})"
