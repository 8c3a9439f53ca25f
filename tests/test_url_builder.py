"""
连接字符串构造测试
"""

import pytest

from database_connector.core.dialects import lookup
from database_connector.core.exceptions import ConfigError
from database_connector.core.url_builder import (
    build_connection_string,
    build_oracle_tns_url,
    split_server,
)


def build(dialect, server=None, port=None, extra=None, **kwargs):
    return build_connection_string(lookup(dialect), server, port, extra, **kwargs)


class TestConnectionStringBuilder:
    """连接字符串构造测试类"""

    def test_postgresql_default_port(self):
        """测试 PostgreSQL 缺省端口"""
        assert build("postgresql", "h/d") == "jdbc:postgresql://h:5432/d"

    def test_postgresql_port_and_extra(self):
        """测试端口与附加设置"""
        assert (
            build("postgresql", "db.example.com/cdm", 5433, "ssl=true")
            == "jdbc:postgresql://db.example.com:5433/cdm?ssl=true"
        )

    @pytest.mark.parametrize("dialect", ["postgresql", "redshift", "netezza"])
    def test_missing_database_name(self, dialect):
        """测试缺少数据库名"""
        with pytest.raises(ConfigError) as exc_info:
            build(dialect, "localhost")
        assert "<host>/<database>" in exc_info.value.message
        assert exc_info.value.error_code == "DATABASE_NAME_REQUIRED"

    def test_redshift_and_netezza(self):
        """测试 Redshift 与 Netezza"""
        assert build("redshift", "cluster/dev") == "jdbc:redshift://cluster:5439/dev"
        assert build("netezza", "nz/db", extra="a=b") == "jdbc:netezza://nz:5480/db?a=b"

    def test_sql_server(self):
        """测试 SQL Server 用户名认证"""
        assert build("sql server", "myserver") == "jdbc:sqlserver://myserver"
        assert (
            build("sql server", "myserver", 1433, "database=cdm")
            == "jdbc:sqlserver://myserver;port=1433;database=cdm"
        )

    def test_sql_server_integrated_security(self):
        """测试 SQL Server 集成认证"""
        assert (
            build("synapse", "myserver", integrated_security=True)
            == "jdbc:sqlserver://myserver;integratedSecurity=true"
        )

    def test_pdw(self):
        """测试 PDW 总是声明集成认证开关"""
        assert build("pdw", "pdw01") == "jdbc:sqlserver://pdw01;integratedSecurity=false"
        assert (
            build("pdw", "pdw01", 17001, integrated_security=True)
            == "jdbc:sqlserver://pdw01;integratedSecurity=true;port=17001"
        )

    def test_oracle_thin(self):
        """测试 Oracle thin 直接寻址"""
        assert build("oracle", "orcl") == "jdbc:oracle:thin:@127.0.0.1:1521:orcl"
        assert build("oracle", "dbhost/xe", 1522) == "jdbc:oracle:thin:@dbhost:1522:xe"
        assert build("oracle", "dbhost/xe", extra="?x=1") == "jdbc:oracle:thin:@dbhost:1521:xe?x=1"

    def test_oracle_oci_and_tns(self):
        """测试 Oracle OCI 与 TNS 名称"""
        assert build("oracle", "PROD", oracle_driver="oci") == "jdbc:oracle:oci8:@PROD"
        assert build_oracle_tns_url("PROD") == "jdbc:oracle:thin:@PROD"

    def test_impala_hive_bigquery(self):
        """测试 Impala、Hive、BigQuery"""
        assert build("impala", "imp") == "jdbc:impala://imp:21050"
        assert build("impala", "imp", extra="AuthMech=3") == "jdbc:impala://imp:21050;AuthMech=3"
        assert build("hive", "hv", 10001) == "jdbc:hive2://hv:10001/"
        assert build("hive", "hv", extra="ssl=1") == "jdbc:hive2://hv:10000/;ssl=1"
        assert build("bigquery", "https://www.googleapis.com") == "jdbc:BQDriver:https://www.googleapis.com"
        assert build("bigquery", "srv", extra="ProjectId=p") == "jdbc:BQDriver:srv?ProjectId=p"

    def test_sqlite(self):
        """测试 SQLite 地址"""
        assert build("sqlite", ":memory:") == "sqlite:///:memory:"
        assert build("sqlite") == "sqlite:///:memory:"
        assert build("sqlite extended", "/tmp/a.db") == "sqlite:////tmp/a.db"

    @pytest.mark.parametrize("dialect", ["spark", "snowflake"])
    def test_connection_string_required(self, dialect):
        """测试没有构造规则的方言"""
        with pytest.raises(ConfigError) as exc_info:
            build(dialect, "server")
        assert exc_info.value.error_code == "CONNECTION_STRING_REQUIRED"

    def test_split_server(self):
        """测试拆分 server"""
        assert split_server("host/db", "PostgreSQL") == ("host", "db")
        assert split_server("host/db/extra", "PostgreSQL") == ("host", "db/extra")


if __name__ == "__main__":
    pytest.main()
