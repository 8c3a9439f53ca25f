"""
凭据提供者与连接参数测试
"""

import pytest

from database_connector.core import credentials as credentials_module
from database_connector.core.credentials import (
    CallableCredential,
    EncryptedCredential,
    EnvCredential,
    PromptCredential,
    StaticCredential,
    as_provider,
)
from database_connector.core.crypto import CryptoManager
from database_connector.core.details import create_connection_details
from database_connector.core.dialects import Dialect
from database_connector.core.exceptions import ConfigError, CryptoError, DriverError


class TestCredentialProviders:
    """凭据提供者测试类"""

    def test_static(self):
        """测试固定值"""
        assert StaticCredential("x").resolve() == "x"
        assert "x" not in repr(StaticCredential("x"))

    def test_callable(self):
        """测试无参函数"""
        assert CallableCredential(lambda: "y").resolve() == "y"
        with pytest.raises(ConfigError):
            CallableCredential("not callable")

    def test_env(self, monkeypatch):
        """测试环境变量"""
        monkeypatch.setenv("DB_TEST_PASSWORD", "from-env")
        assert EnvCredential("DB_TEST_PASSWORD").resolve() == "from-env"

        monkeypatch.delenv("DB_TEST_PASSWORD")
        with pytest.raises(ConfigError):
            EnvCredential("DB_TEST_PASSWORD").resolve()
        assert EnvCredential("DB_TEST_PASSWORD", required=False).resolve() is None

    def test_prompt(self, monkeypatch):
        """测试交互式输入"""
        monkeypatch.setattr(credentials_module.getpass, "getpass", lambda prompt: "typed")
        assert PromptCredential().resolve() == "typed"

    def test_encrypted(self, monkeypatch):
        """测试加密令牌"""
        token = CryptoManager("passphrase").encrypt("db-secret")

        assert EncryptedCredential(token, CryptoManager("passphrase")).resolve() == "db-secret"

        monkeypatch.setenv("DATABASECONNECTOR_SECRET", "passphrase")
        assert EncryptedCredential(token).resolve() == "db-secret"
        assert "db-secret" not in repr(EncryptedCredential(token))

    def test_encrypted_without_secret(self):
        """测试未设置口令"""
        with pytest.raises(CryptoError):
            EncryptedCredential("salt$token").resolve()

    def test_as_provider(self):
        """测试统一转换"""
        provider = StaticCredential(1)
        assert as_provider(provider) is provider
        assert isinstance(as_provider(lambda: 1), CallableCredential)
        assert isinstance(as_provider("v"), StaticCredential)
        assert as_provider(None).resolve() is None


class TestCreateConnectionDetails:
    """连接参数创建测试类"""

    def test_deferred_evaluation(self, jar_folder):
        """测试创建时不求值凭据"""
        calls = []

        def password():
            calls.append(1)
            return "pw"

        details = create_connection_details(
            "postgresql", user="u", password=password, server="h/d", path_to_driver=str(jar_folder)
        )
        assert calls == []
        assert details.dialect is Dialect.POSTGRESQL

        resolved = details.resolve()
        assert resolved.password == "pw"
        assert resolved.user == "u"
        assert resolved.port is None
        assert calls == [1]

    def test_unknown_dialect(self):
        """测试不支持的方言"""
        with pytest.raises(ConfigError):
            create_connection_details("access", server="x")

    def test_invalid_oracle_driver(self, jar_folder):
        """测试无效的 Oracle 驱动类型"""
        with pytest.raises(ConfigError) as exc_info:
            create_connection_details("oracle", server="x", oracle_driver="odbc", path_to_driver=str(jar_folder))
        assert exc_info.value.config_key == "oracle_driver"

    def test_missing_driver_path(self, tmp_path):
        """测试驱动路径不存在"""
        with pytest.raises(DriverError):
            create_connection_details("postgresql", server="h/d", path_to_driver=str(tmp_path / "none"))

    def test_driver_path_from_environment(self, monkeypatch, jar_folder):
        """测试从环境变量读取驱动目录"""
        monkeypatch.setenv("DATABASECONNECTOR_JAR_FOLDER", str(jar_folder))
        details = create_connection_details("postgresql", server="h/d")
        assert details.path_to_driver == str(jar_folder)

    def test_sqlite_needs_no_driver_path(self):
        """测试 SQLite 不需要驱动路径"""
        details = create_connection_details("sqlite", server=":memory:")
        assert details.path_to_driver == ""

    def test_details_are_immutable(self):
        """测试连接参数不可修改"""
        details = create_connection_details("sqlite", server=":memory:")
        with pytest.raises(AttributeError):
            details.extra_settings = "x"


if __name__ == "__main__":
    pytest.main()
