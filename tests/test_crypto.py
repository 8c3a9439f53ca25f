"""
加密模块测试
"""

import pytest

from database_connector.core.crypto import CryptoManager
from database_connector.core.exceptions import CryptoError


class TestCryptoManager:
    """CryptoManager测试类"""

    def setup_method(self):
        """测试方法 setup"""
        self.crypto = CryptoManager("测试口令")

    def test_encrypt_decrypt(self):
        """测试加密解密功能"""
        test_data = "这是一个测试字符串"

        encrypted = self.crypto.encrypt(test_data)

        assert encrypted != test_data
        assert "$" in encrypted
        assert self.crypto.decrypt(encrypted) == test_data

    def test_random_salt(self):
        """测试相同明文每次加密结果不同"""
        assert self.crypto.encrypt("abc") != self.crypto.encrypt("abc")

    def test_special_characters(self):
        """测试特殊字符"""
        test_data = '特殊字符!@#$%^&*()_+{}[]|:;"<>,.?/'
        assert self.crypto.decrypt(self.crypto.encrypt(test_data)) == test_data

    def test_empty_string(self):
        """测试空字符串处理"""
        with pytest.raises(ValueError):
            self.crypto.encrypt("")

    def test_empty_passphrase(self):
        """测试空口令"""
        with pytest.raises(CryptoError):
            CryptoManager("")

    def test_decrypt_invalid_data(self):
        """测试解密无效数据"""
        with pytest.raises(CryptoError):
            self.crypto.decrypt("invalid_encrypted_data")

    def test_wrong_passphrase(self):
        """测试口令不匹配"""
        token = self.crypto.encrypt("secret")
        with pytest.raises(CryptoError) as exc_info:
            CryptoManager("另一个口令").decrypt(token)
        assert exc_info.value.operation == "decrypt"

    def test_from_environment(self, monkeypatch):
        """测试从环境变量创建"""
        with pytest.raises(CryptoError):
            CryptoManager.from_environment()

        monkeypatch.setenv("DATABASECONNECTOR_SECRET", "测试口令")
        token = CryptoManager.from_environment().encrypt("abc")
        assert self.crypto.decrypt(token) == "abc"

    def test_repr_hides_passphrase(self):
        """测试表示中不包含口令"""
        assert "测试口令" not in repr(self.crypto)


if __name__ == "__main__":
    pytest.main()
