"""
加密模块测试
"""

import pytest

from sql_driver.core.crypto import CryptoManager
from sql_driver.core.exceptions import CryptoError

# 测试中使用较少的迭代次数以加快密钥派生
TEST_ITERATIONS = 1000


class TestCryptoManager:
    """CryptoManager测试类"""

    def setup_method(self):
        """测试方法 setup"""
        self.crypto = CryptoManager(iterations=TEST_ITERATIONS)

    def test_encrypt_decrypt(self):
        """测试加密解密功能"""
        test_data = "这是一个测试字符串"

        encrypted = self.crypto.encrypt(test_data)
        decrypted = self.crypto.decrypt(encrypted)

        assert decrypted == test_data
        assert encrypted != test_data

    def test_special_characters(self):
        """测试特殊字符"""
        test_data = '特殊字符!@#$%^&*()_+{}[]|:;"<>,.?/'
        assert self.crypto.decrypt(self.crypto.encrypt(test_data)) == test_data

    def test_empty_input(self):
        """测试空输入"""
        with pytest.raises(ValueError):
            self.crypto.encrypt("")

        with pytest.raises(ValueError):
            self.crypto.decrypt("")

    def test_different_keys(self):
        """测试不同密钥无法解密"""
        other = CryptoManager(iterations=TEST_ITERATIONS)
        token = self.crypto.encrypt("secret")

        with pytest.raises(CryptoError) as exc_info:
            other.decrypt(token)
        assert exc_info.value.operation == "decrypt"

    def test_tampered_token(self):
        """测试被篡改的令牌"""
        token = self.crypto.encrypt("secret")
        tampered = token[:-4] + ("AAAA" if not token.endswith("AAAA") else "BBBB")

        with pytest.raises(CryptoError):
            self.crypto.decrypt(tampered)

    def test_saved_key_roundtrip(self):
        """测试从保存的密钥恢复"""
        key_info = self.crypto.get_key_info()
        restored = CryptoManager.from_saved_key(
            key_info["password"], key_info["salt"], key_info["iterations"]
        )

        token = self.crypto.encrypt("secret")
        assert restored.decrypt(token) == "secret"

    def test_from_saved_key_empty(self):
        """测试空的密钥信息"""
        with pytest.raises(ValueError):
            CryptoManager.from_saved_key("", "c2FsdA==")

    def test_repr_hides_password(self):
        """测试字符串表示不泄露密码"""
        assert self.crypto.password not in repr(self.crypto)
