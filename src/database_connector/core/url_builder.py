"""
连接字符串构造

按方言语法把 server / port / extra_settings 拼接为原生连接字符串。
所有构造函数的签名一致：

    builder(server, port, extra_settings, *, integrated_security, oracle_driver) -> str

端口缺省时由 build_connection_string 替换为方言默认端口；
extra_settings 缺省时整体省略，不会留下多余的分隔符。
"""

from typing import TYPE_CHECKING, Tuple

from .exceptions import ConfigError

if TYPE_CHECKING:
    from .dialects import DialectRule

ORACLE_THIN = "thin"
ORACLE_OCI = "oci"
ORACLE_DEFAULT_HOST = "127.0.0.1"


def split_server(server: str | None, dialect_name: str) -> Tuple[str, str]:
    """
    将 "<host>/<database>" 形式的 server 拆分为主机和数据库名

    Raises:
        ConfigError: 当 server 中不包含数据库名时
    """
    if not server or "/" not in server:
        raise ConfigError(
            f"server 中未包含数据库名，连接 {dialect_name} 时必须提供，"
            "请按 <host>/<database> 格式指定 server",
            error_code="DATABASE_NAME_REQUIRED",
            dialect=dialect_name,
            config_key="server",
        )
    host, database = server.split("/", 1)
    return host, database


def _append(url: str, separator: str, value: str | None) -> str:
    if value is None or value == "":
        return url
    return f"{url}{separator}{value}"


def build_sql_server_url(server, port, extra_settings, *, integrated_security=False, **_):
    url = f"jdbc:sqlserver://{server}"
    if integrated_security:
        url += ";integratedSecurity=true"
    url = _append(url, ";port=", port)
    return _append(url, ";", extra_settings)


def build_pdw_url(server, port, extra_settings, *, integrated_security=False, **_):
    flag = "true" if integrated_security else "false"
    url = f"jdbc:sqlserver://{server};integratedSecurity={flag}"
    url = _append(url, ";port=", port)
    return _append(url, ";", extra_settings)


def build_oracle_url(server, port, extra_settings, *, oracle_driver=ORACLE_THIN, **_):
    """
    Oracle 连接字符串

    thin 驱动使用 host:port:sid 直接寻址，server 中没有 "/" 时主机默认为
    127.0.0.1，整个 server 作为 SID；oci 驱动直接使用 server。
    """
    if oracle_driver == ORACLE_OCI:
        return f"jdbc:oracle:oci8:@{server}"

    host = ORACLE_DEFAULT_HOST
    sid = server
    if server and "/" in server:
        host, sid = server.split("/", 1)
    url = f"jdbc:oracle:thin:@{host}:{port}:{sid}"
    return _append(url, "", extra_settings)


def build_oracle_tns_url(server: str | None) -> str:
    """Oracle TNS 名称形式的连接字符串，直接寻址失败时使用"""
    return f"jdbc:oracle:thin:@{server}"


def _host_database_url(protocol: str, dialect_name: str):
    def builder(server, port, extra_settings, **_):
        host, database = split_server(server, dialect_name)
        url = f"jdbc:{protocol}://{host}:{port}/{database}"
        return _append(url, "?", extra_settings)

    builder.__name__ = f"build_{protocol}_url"
    return builder


build_postgresql_url = _host_database_url("postgresql", "PostgreSQL")
build_redshift_url = _host_database_url("redshift", "Redshift")
build_netezza_url = _host_database_url("netezza", "Netezza")


def build_impala_url(server, port, extra_settings, **_):
    return _append(f"jdbc:impala://{server}:{port}", ";", extra_settings)


def build_hive_url(server, port, extra_settings, **_):
    return _append(f"jdbc:hive2://{server}:{port}/", ";", extra_settings)


def build_bigquery_url(server, port, extra_settings, **_):
    return _append(f"jdbc:BQDriver:{server}", "?", extra_settings)


def build_sqlite_url(server, port, extra_settings, **_):
    """SQLAlchemy 形式的 SQLite 地址，未指定 server 时使用内存数据库"""
    return f"sqlite:///{server or ':memory:'}"


def build_connection_string(
    rule: "DialectRule",
    server: str | None,
    port: str | int | None,
    extra_settings: str | None,
    *,
    integrated_security: bool = False,
    oracle_driver: str = ORACLE_THIN,
) -> str:
    """
    按方言规则构造连接字符串

    Args:
        rule: 方言规则
        server: 服务器地址，部分方言要求 <host>/<database> 格式
        port: 端口，为 None 时使用方言默认端口（没有默认端口时省略）
        extra_settings: 附加设置，原样追加
        integrated_security: 是否使用 Windows 集成认证（SQL Server 系列）
        oracle_driver: Oracle 驱动类型，"thin" 或 "oci"

    Returns:
        str: 原生连接字符串

    Raises:
        ConfigError: 当方言没有构造规则（必须显式提供连接字符串）
            或缺少必需的数据库名时
    """
    if rule.url_builder is None:
        raise ConfigError(
            f"连接 {rule.display_name} 时必须提供连接字符串",
            error_code="CONNECTION_STRING_REQUIRED",
            dialect=rule.id,
            config_key="connection_string",
        )

    effective_port = str(port) if port is not None and port != "" else rule.default_port
    return rule.url_builder(
        server,
        effective_port,
        extra_settings,
        integrated_security=integrated_security,
        oracle_driver=oracle_driver,
    )
