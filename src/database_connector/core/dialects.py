"""
数据库方言注册表

集中维护所有支持的数据库方言及其连接规则：驱动 jar 文件名模式、
驱动类名、默认端口、连接字符串构造函数、引用字符以及固定连接属性。

注册表在导入时构建完成，之后只读。

Example:
    >>> rule = lookup("postgresql")
    >>> rule.driver_class_for("postgresql-42.7.3.jar")
    'org.postgresql.Driver'
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Callable, Dict, Mapping

from . import url_builder
from .exceptions import ConfigError

NATIVE_JDBC = "jdbc"
NATIVE_SQLITE = "sqlite"

SQL_SERVER_JAR_PATTERN = r"^mssql-jdbc.*.jar$|^sqljdbc.*\.jar$"
SQL_SERVER_DRIVER = "com.microsoft.sqlserver.jdbc.SQLServerDriver"


class Dialect(str, Enum):
    """支持的数据库方言，枚举值即方言标识"""

    ORACLE = "oracle"
    HIVE = "hive"
    POSTGRESQL = "postgresql"
    REDSHIFT = "redshift"
    SQL_SERVER = "sql server"
    PDW = "pdw"
    NETEZZA = "netezza"
    IMPALA = "impala"
    BIGQUERY = "bigquery"
    SQLITE = "sqlite"
    SQLITE_EXTENDED = "sqlite extended"
    SPARK = "spark"
    SNOWFLAKE = "snowflake"
    SYNAPSE = "synapse"

    def __str__(self) -> str:
        return self.value


def _redshift_driver(jar_name: str) -> str:
    if "RedshiftJDBC42" in jar_name:
        return "com.amazon.redshift.jdbc42.Driver"
    return "com.amazon.redshift.jdbc4.Driver"


@dataclass(frozen=True)
class DialectRule:
    """
    单个方言的连接规则

    Attributes:
        dialect (Dialect): 方言标识
        display_name (str): 日志中使用的驱动显示名称
        native_kind (str): 原生层类型，"jdbc" 或 "sqlite"
        jar_pattern (str | None): 驱动 jar 文件名的正则表达式
        driver_class (str | Callable[[str], str] | None): 驱动类名，
            或根据 jar 文件名返回类名的函数
        default_port (str | None): 默认端口，None 表示省略端口
        url_builder (Callable | None): 连接字符串构造函数，
            None 表示必须显式提供连接字符串
        identifier_quote (str): 标识符引用字符
        string_quote (str): 字符串字面量引用字符
        connection_properties (Mapping[str, str]): 每次连接都附加的固定属性
        supports_integrated_security (bool): 未提供用户名时是否使用 Windows 集成认证
        date_as_timestamp (bool): DATE 值是否按午夜时间戳返回
        classpath_from_folder (bool): 是否将驱动目录中的全部 jar 加入类路径
    """

    dialect: Dialect
    display_name: str
    native_kind: str = NATIVE_JDBC
    jar_pattern: str | None = None
    driver_class: str | Callable[[str], str] | None = None
    default_port: str | None = None
    url_builder: Callable[..., str] | None = None
    identifier_quote: str = "'"
    string_quote: str = "'"
    connection_properties: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )
    supports_integrated_security: bool = False
    date_as_timestamp: bool = False
    classpath_from_folder: bool = False

    @property
    def id(self) -> str:
        return self.dialect.value

    @property
    def is_jdbc(self) -> bool:
        return self.native_kind == NATIVE_JDBC

    @property
    def requires_connection_string(self) -> bool:
        return self.url_builder is None

    def driver_class_for(self, jar_name: str) -> str:
        """根据解析到的 jar 文件名返回驱动类名"""
        if callable(self.driver_class):
            return self.driver_class(jar_name)
        return self.driver_class or ""


def _properties(**values: str) -> Mapping[str, str]:
    return MappingProxyType(dict(values))


def _sql_server_rule(dialect: Dialect) -> DialectRule:
    builder = (
        url_builder.build_pdw_url
        if dialect is Dialect.PDW
        else url_builder.build_sql_server_url
    )
    return DialectRule(
        dialect=dialect,
        display_name="SQL Server",
        jar_pattern=SQL_SERVER_JAR_PATTERN,
        driver_class=SQL_SERVER_DRIVER,
        url_builder=builder,
        supports_integrated_security=True,
    )


_RULES: Dict[Dialect, DialectRule] = {
    Dialect.ORACLE: DialectRule(
        dialect=Dialect.ORACLE,
        display_name="Oracle",
        jar_pattern=r"^ojdbc.*\.jar$",
        driver_class="oracle.jdbc.driver.OracleDriver",
        default_port="1521",
        url_builder=url_builder.build_oracle_url,
        identifier_quote='"',
        connection_properties=_properties(
            **{"oracle.jdbc.mapDateToTimestamp": "false"}
        ),
        date_as_timestamp=True,
    ),
    Dialect.HIVE: DialectRule(
        dialect=Dialect.HIVE,
        display_name="Hive",
        jar_pattern=r"^hive-jdbc-([.0-9]+-)*standalone\.jar$",
        driver_class="org.apache.hive.jdbc.HiveDriver",
        default_port="10000",
        url_builder=url_builder.build_hive_url,
        identifier_quote="`",
    ),
    Dialect.POSTGRESQL: DialectRule(
        dialect=Dialect.POSTGRESQL,
        display_name="PostgreSQL",
        jar_pattern=r"^postgresql-.*\.jar$",
        driver_class="org.postgresql.Driver",
        default_port="5432",
        url_builder=url_builder.build_postgresql_url,
        identifier_quote='"',
    ),
    Dialect.REDSHIFT: DialectRule(
        dialect=Dialect.REDSHIFT,
        display_name="Redshift",
        jar_pattern=r"^RedshiftJDBC.*\.jar$",
        driver_class=_redshift_driver,
        default_port="5439",
        url_builder=url_builder.build_redshift_url,
        identifier_quote='"',
    ),
    Dialect.SQL_SERVER: _sql_server_rule(Dialect.SQL_SERVER),
    Dialect.PDW: _sql_server_rule(Dialect.PDW),
    Dialect.SYNAPSE: _sql_server_rule(Dialect.SYNAPSE),
    Dialect.NETEZZA: DialectRule(
        dialect=Dialect.NETEZZA,
        display_name="Netezza",
        jar_pattern=r"^nzjdbc\.jar$",
        driver_class="org.netezza.Driver",
        default_port="5480",
        url_builder=url_builder.build_netezza_url,
        identifier_quote='"',
    ),
    Dialect.IMPALA: DialectRule(
        dialect=Dialect.IMPALA,
        display_name="Impala",
        jar_pattern=r"^ImpalaJDBC42\.jar$",
        driver_class="com.cloudera.impala.jdbc.Driver",
        default_port="21050",
        url_builder=url_builder.build_impala_url,
        identifier_quote="`",
    ),
    Dialect.BIGQUERY: DialectRule(
        dialect=Dialect.BIGQUERY,
        display_name="BigQuery",
        jar_pattern=r"^GoogleBigQueryJDBC42\.jar$",
        driver_class="com.simba.googlebigquery.jdbc42.Driver",
        url_builder=url_builder.build_bigquery_url,
        identifier_quote="`",
        classpath_from_folder=True,
    ),
    Dialect.SQLITE: DialectRule(
        dialect=Dialect.SQLITE,
        display_name="SQLite",
        native_kind=NATIVE_SQLITE,
        url_builder=url_builder.build_sqlite_url,
    ),
    Dialect.SQLITE_EXTENDED: DialectRule(
        dialect=Dialect.SQLITE_EXTENDED,
        display_name="SQLite",
        native_kind=NATIVE_SQLITE,
        url_builder=url_builder.build_sqlite_url,
    ),
    Dialect.SPARK: DialectRule(
        dialect=Dialect.SPARK,
        display_name="Spark",
        jar_pattern=r"^SparkJDBC42\.jar$",
        driver_class="com.simba.spark.jdbc.Driver",
        identifier_quote="`",
    ),
    Dialect.SNOWFLAKE: DialectRule(
        dialect=Dialect.SNOWFLAKE,
        display_name="Snowflake",
        jar_pattern=r"^snowflake-jdbc-.*\.jar$",
        driver_class="net.snowflake.client.jdbc.SnowflakeDriver",
        identifier_quote='"',
        connection_properties=_properties(CLIENT_RESULT_COLUMN_CASE_INSENSITIVE="true"),
    ),
}

# 注册表对外只读
REGISTRY: Mapping[Dialect, DialectRule] = MappingProxyType(_RULES)


def supported_dialects() -> list:
    """返回所有支持的方言标识，顺序与 Dialect 枚举一致"""
    return [dialect.value for dialect in Dialect]


def lookup(dialect_id: str | Dialect) -> DialectRule:
    """
    查找方言规则

    Args:
        dialect_id: 方言标识（如 "sql server"），或 Dialect 枚举成员

    Returns:
        DialectRule: 对应的方言规则

    Raises:
        ConfigError: 当方言不受支持时，错误信息中列出全部可用方言
    """
    try:
        dialect = Dialect(dialect_id)
    except ValueError as e:
        valid = "', '".join(supported_dialects())
        raise ConfigError(
            f"不支持的数据库类型 '{dialect_id}'，请使用以下值之一: '{valid}'",
            error_code="DIALECT_UNSUPPORTED",
            dialect=str(dialect_id),
            details={"supported": supported_dialects()},
        ) from e
    return REGISTRY[dialect]
