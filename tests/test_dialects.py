"""
方言注册表测试
"""

import pytest

from database_connector.core.dialects import (
    REGISTRY,
    Dialect,
    lookup,
    supported_dialects,
)
from database_connector.core.exceptions import ConfigError, ConfigurationError

ALL_DIALECTS = [
    "oracle",
    "hive",
    "postgresql",
    "redshift",
    "sql server",
    "pdw",
    "netezza",
    "impala",
    "bigquery",
    "sqlite",
    "sqlite extended",
    "spark",
    "snowflake",
    "synapse",
]


class TestDialectRegistry:
    """方言注册表测试类"""

    def test_all_dialects_registered(self):
        """测试所有方言都有规则"""
        assert sorted(supported_dialects()) == sorted(ALL_DIALECTS)
        for dialect in Dialect:
            assert REGISTRY[dialect].dialect is dialect

    @pytest.mark.parametrize("dialect_id", ALL_DIALECTS)
    def test_lookup_by_id(self, dialect_id):
        """测试按标识查找"""
        assert lookup(dialect_id).id == dialect_id

    def test_lookup_by_enum(self):
        """测试按枚举查找"""
        assert lookup(Dialect.SQL_SERVER).id == "sql server"

    def test_unknown_dialect_lists_all_valid_ids(self):
        """测试不支持的方言错误中列出全部方言"""
        with pytest.raises(ConfigError) as exc_info:
            lookup("mysql")

        error = exc_info.value
        assert "mysql" in error.message
        for dialect_id in ALL_DIALECTS:
            assert f"'{dialect_id}'" in error.message
        assert error.details["supported"] == supported_dialects()

    def test_configuration_error_alias(self):
        """测试错误分类别名"""
        with pytest.raises(ConfigurationError):
            lookup("db2")

    def test_redshift_driver_depends_on_jar(self):
        """测试 Redshift 驱动类按 jar 文件名选择"""
        rule = lookup("redshift")
        assert rule.driver_class_for("RedshiftJDBC42-2.1.0.jar") == "com.amazon.redshift.jdbc42.Driver"
        assert rule.driver_class_for("RedshiftJDBC4-1.2.jar") == "com.amazon.redshift.jdbc4.Driver"

    def test_sql_server_family_shares_driver(self):
        """测试 SQL Server、PDW、Synapse 使用同一驱动"""
        classes = {lookup(d).driver_class_for("mssql-jdbc.jar") for d in ("sql server", "pdw", "synapse")}
        assert classes == {"com.microsoft.sqlserver.jdbc.SQLServerDriver"}
        assert all(lookup(d).supports_integrated_security for d in ("sql server", "pdw", "synapse"))
        assert not lookup("postgresql").supports_integrated_security

    def test_default_ports(self):
        """测试默认端口"""
        assert lookup("oracle").default_port == "1521"
        assert lookup("postgresql").default_port == "5432"
        assert lookup("redshift").default_port == "5439"
        assert lookup("netezza").default_port == "5480"
        assert lookup("impala").default_port == "21050"
        assert lookup("sql server").default_port is None

    def test_fixed_connection_properties(self):
        """测试固定连接属性"""
        assert dict(lookup("oracle").connection_properties) == {
            "oracle.jdbc.mapDateToTimestamp": "false"
        }
        assert dict(lookup("snowflake").connection_properties) == {
            "CLIENT_RESULT_COLUMN_CASE_INSENSITIVE": "true"
        }
        assert dict(lookup("postgresql").connection_properties) == {}

    def test_connection_string_required(self):
        """测试 Spark 与 Snowflake 必须提供连接字符串"""
        assert lookup("spark").requires_connection_string
        assert lookup("snowflake").requires_connection_string
        assert not lookup("postgresql").requires_connection_string

    def test_quotes(self):
        """测试引用字符"""
        assert lookup("sql server").identifier_quote == "'"
        assert lookup("sql server").string_quote == "'"
        assert lookup("postgresql").identifier_quote == '"'
        assert lookup("hive").identifier_quote == "`"

    def test_native_kind(self):
        """测试原生层类型"""
        assert not lookup("sqlite").is_jdbc
        assert not lookup("sqlite extended").is_jdbc
        assert lookup("oracle").is_jdbc
        assert lookup("oracle").date_as_timestamp
        assert lookup("bigquery").classpath_from_folder


if __name__ == "__main__":
    pytest.main()
