"""
连接调度器

根据 ConnectionDetails 选择方言规则、获取驱动、构造连接字符串并打开
原生连接，最后包装为 ConnectionHandle。

处理流程：
    校验方言 -> 求值凭据 -> 构造连接字符串 -> 查找驱动 jar -> 加载驱动（缓存）
    -> 打开原生连接 -> 包装句柄

配置类错误（方言、数据库名、连接字符串）和驱动解析错误在打开任何原生
连接之前抛出。唯一的重试是 Oracle thin 直接寻址失败后改用 TNS 名称。
"""

from typing import Any, Callable, Dict

from sqlalchemy.engine import Connection as SQLAlchemyConnection
from sqlalchemy.engine import Engine

from ..drivers.jdbc import (
    JdbcDriverCache,
    default_driver_cache,
    find_path_to_jar,
    folder_classpath,
    register_auth_library,
)
from ..drivers.sqlite import SQLiteDriver
from ..utils.logging_utils import get_logger, mask_credentials
from .connection import ConnectionHandle
from .details import ConnectionDetails, ResolvedCredentials, create_connection_details
from .dialects import NATIVE_JDBC, NATIVE_SQLITE, Dialect, DialectRule, lookup
from .exceptions import ConfigError, ConnectionError
from .url_builder import ORACLE_THIN, build_connection_string, build_oracle_tns_url

# 获取模块级别的日志记录器
logger = get_logger(__name__)

# 非本库连接对象的类名到方言的映射（模块名前缀, 类名）
_NATIVE_CLASS_DIALECTS = (
    ("sqlite3", "Connection", "sqlite"),
    ("psycopg2", "connection", "postgresql"),
    ("psycopg", "Connection", "postgresql"),
    ("pymssql", "Connection", "sql server"),
    ("duckdb", "DuckDBPyConnection", "duckdb"),
    ("_duckdb", "DuckDBPyConnection", "duckdb"),
    ("redshift_connector", "Connection", "redshift"),
    ("google.cloud.bigquery.dbapi", "Connection", "bigquery"),
)

# SQLAlchemy 方言名称到方言标识的映射
_SQLALCHEMY_DIALECTS = {
    "mssql": "sql server",
    "postgresql": "postgresql",
    "sqlite": "sqlite",
    "oracle": "oracle",
    "redshift": "redshift",
    "bigquery": "bigquery",
    "snowflake": "snowflake",
    "duckdb": "duckdb",
}


class Dispatcher:
    """
    连接调度器

    Attributes:
        driver_cache (JdbcDriverCache): JDBC 驱动缓存，默认使用进程级缓存
        sqlite_driver_factory (Callable[[bool], Any]): 创建 SQLite 驱动的工厂，
            参数为是否启用扩展类型
    """

    def __init__(
        self,
        driver_cache: JdbcDriverCache | None = None,
        sqlite_driver_factory: Callable[[bool], Any] = SQLiteDriver,
    ) -> None:
        self.driver_cache = driver_cache if driver_cache is not None else default_driver_cache
        self.sqlite_driver_factory = sqlite_driver_factory

    def connect(self, details: ConnectionDetails) -> ConnectionHandle:
        """
        打开连接

        Args:
            details: 连接参数

        Returns:
            ConnectionHandle: 已打开的连接句柄

        Raises:
            ConfigError: 方言不受支持、缺少数据库名或连接字符串、连接属性为空
            DriverError: 驱动 jar 未找到或驱动类无法加载
            ConnectionError: 原生驱动连接失败
        """
        rule = lookup(details.dialect)
        credentials = details.resolve()

        logger.info(f"使用 {rule.display_name} 驱动连接")

        if rule.native_kind == NATIVE_SQLITE:
            native = self._connect_sqlite(rule, credentials)
        elif rule.native_kind == NATIVE_JDBC:
            native = self._connect_jdbc(rule, details, credentials)
        else:
            raise ConfigError(f"未知的原生层类型: {rule.native_kind}", dialect=rule.id)

        try:
            handle = ConnectionHandle(native, rule)
        except Exception:
            native.close()
            raise

        logger.info(f"{rule.display_name} 连接成功: {handle.uuid}")
        return handle

    def _connect_sqlite(self, rule: DialectRule, credentials: ResolvedCredentials) -> Any:
        url = credentials.connection_string or build_connection_string(
            rule, credentials.server, credentials.port, None
        )
        driver = self.sqlite_driver_factory(rule.dialect is Dialect.SQLITE_EXTENDED)
        native = driver.connect(url, {})
        if native is None:
            raise ConnectionError(
                f"无法连接到 {url}", error_code="CONNECT_FAILED", dialect=rule.id, url=url
            )
        return native

    def _connect_jdbc(
        self,
        rule: DialectRule,
        details: ConnectionDetails,
        credentials: ResolvedCredentials,
    ) -> Any:
        integrated_security = (
            rule.supports_integrated_security and credentials.user is None
        )
        explicit_url = credentials.connection_string or None

        if explicit_url is None:
            url = build_connection_string(
                rule,
                credentials.server,
                credentials.port,
                details.extra_settings,
                integrated_security=integrated_security,
                oracle_driver=details.oracle_driver,
            )
        else:
            url = explicit_url

        if integrated_security:
            logger.info(f"使用 {rule.display_name} 驱动和 Windows 集成认证连接")
            # 认证库目录需要在 JVM 启动前登记
            register_auth_library()

        jar = find_path_to_jar(rule.jar_pattern, details.path_to_driver)
        classpath = folder_classpath(details.path_to_driver) if rule.classpath_from_folder else ()
        driver = self.driver_cache.get_or_load(rule.driver_class_for(jar.name), jar, classpath)

        properties: Dict[str, Any] = dict(rule.connection_properties)
        if not integrated_security and credentials.user is not None:
            properties["user"] = credentials.user
            properties["password"] = credentials.password

        # Oracle thin 直接寻址失败时改用 TNS 名称重试一次
        if (
            rule.dialect is Dialect.ORACLE
            and explicit_url is None
            and details.oracle_driver == ORACLE_THIN
        ):
            try:
                return self._native_connect(driver, url, properties, rule)
            except ConnectionError as e:
                logger.warning(f"Oracle 直接寻址连接失败，尝试使用 TNS 名称: {e.message}")
                url = build_oracle_tns_url(credentials.server)

        return self._native_connect(driver, url, properties, rule)

    def _native_connect(
        self, driver: Any, url: str, properties: Dict[str, Any], rule: DialectRule
    ) -> Any:
        for name, value in properties.items():
            if value is None:
                raise ConfigError(
                    f"连接属性 '{name}' 为空", error_code="PROPERTY_NULL",
                    dialect=rule.id, config_key=name,
                )

        masked_url = mask_credentials(url)
        logger.debug(f"连接字符串: {masked_url}")
        native = driver.connect(url, {name: str(value) for name, value in properties.items()})
        if native is None:
            raise ConnectionError(
                f"无法通过 JDBC 连接到 {masked_url}",
                error_code="CONNECT_FAILED",
                dialect=rule.id,
                url=masked_url,
            )
        return native


_default_dispatcher = Dispatcher()


def connect(connection_details: ConnectionDetails | None = None, **params: Any) -> ConnectionHandle:
    """
    打开数据库连接

    可以传入 create_connection_details() 创建的参数对象，也可以直接传入
    与 create_connection_details() 相同的关键字参数。

    Example:
        >>> conn = connect(dialect="sqlite", server=":memory:")
        >>> dbms(conn)
        'sqlite'
        >>> disconnect(conn)
        True
    """
    if connection_details is None:
        connection_details = create_connection_details(**params)
    elif params:
        raise ConfigError("不能同时提供 connection_details 和连接参数")
    return _default_dispatcher.connect(connection_details)


def disconnect(handle: ConnectionHandle) -> bool:
    """关闭连接，已关闭时只发出警告"""
    handle.close()
    return True


def dbms(connection: Any) -> str | None:
    """
    返回连接的方言标识

    本库的连接句柄直接返回其方言；其他 DB-API 连接和 SQLAlchemy
    Connection/Engine 按类型推断，无法识别时返回 None。
    """
    if isinstance(connection, ConnectionHandle):
        return connection.dbms

    if isinstance(connection, (SQLAlchemyConnection, Engine)):
        return _SQLALCHEMY_DIALECTS.get(connection.dialect.name)

    # SQLAlchemy 连接池代理的原始连接
    dbapi_connection = getattr(connection, "dbapi_connection", None)
    if dbapi_connection is not None and dbapi_connection is not connection:
        return dbms(dbapi_connection)

    cls = type(connection)
    module = cls.__module__ or ""
    for module_prefix, class_name, dialect in _NATIVE_CLASS_DIALECTS:
        if cls.__name__ == class_name and (
            module == module_prefix or module.startswith(module_prefix + ".")
        ):
            return dialect
    return None
