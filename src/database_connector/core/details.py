"""
连接参数描述

ConnectionDetails 描述"如何连接"，但不包含任何已求值的凭据：
凭据字段都是 CredentialProvider，连接时由调度器统一求值一次。
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..utils.logging_utils import get_logger
from .config import default_jar_folder
from .credentials import CredentialProvider, as_provider
from .dialects import Dialect, lookup
from .exceptions import ConfigError, DriverError
from .url_builder import ORACLE_OCI, ORACLE_THIN

# 获取模块级别的日志记录器
logger = get_logger(__name__)

ORACLE_DRIVERS = (ORACLE_THIN, ORACLE_OCI)


@dataclass(frozen=True)
class ResolvedCredentials:
    """一次连接尝试中求值后的凭据"""

    user: Any = None
    password: Any = None
    server: Any = None
    port: Any = None
    connection_string: Any = None


@dataclass(frozen=True)
class ConnectionDetails:
    """
    连接参数

    Attributes:
        dialect (Dialect): 数据库方言
        user / password / server / port / connection_string (CredentialProvider):
            延迟求值的凭据
        extra_settings (str | None): 附加到连接字符串的设置
        path_to_driver (str): 驱动 jar 目录或文件，SQLite 方言为空字符串
        oracle_driver (str): Oracle 驱动类型，"thin" 或 "oci"
    """

    dialect: Dialect
    user: CredentialProvider
    password: CredentialProvider
    server: CredentialProvider
    port: CredentialProvider
    connection_string: CredentialProvider
    extra_settings: str | None = None
    path_to_driver: str = ""
    oracle_driver: str = ORACLE_THIN

    def resolve(self) -> ResolvedCredentials:
        """对所有凭据提供者求值一次"""
        return ResolvedCredentials(
            user=self.user.resolve(),
            password=self.password.resolve(),
            server=self.server.resolve(),
            port=self.port.resolve(),
            connection_string=self.connection_string.resolve(),
        )


def _check_path_to_driver(path_to_driver: str | Path | None, dialect: str) -> str:
    if path_to_driver is None or str(path_to_driver) == "":
        path_to_driver = default_jar_folder()
    if not path_to_driver:
        raise DriverError(
            f"连接 {dialect} 需要指定驱动路径，请设置 path_to_driver 参数"
            "或环境变量 DATABASECONNECTOR_JAR_FOLDER",
            error_code="DRIVER_PATH_MISSING",
        )

    path = Path(path_to_driver).expanduser()
    if not path.exists():
        raise DriverError(
            f"驱动路径不存在: {path}",
            error_code="DRIVER_PATH_MISSING",
            jar_path=str(path),
        )
    return str(path)


def create_connection_details(
    dialect: str | Dialect,
    user: Any = None,
    password: Any = None,
    server: Any = None,
    port: Any = None,
    extra_settings: str | None = None,
    oracle_driver: str = ORACLE_THIN,
    connection_string: Any = None,
    path_to_driver: str | Path | None = None,
) -> ConnectionDetails:
    """
    创建连接参数

    凭据字段可以是普通值、无参函数或 CredentialProvider，此处不会求值。

    Args:
        dialect: 方言标识，如 "postgresql"、"sql server"
        user: 用户名，SQL Server 系列方言未提供时使用集成认证
        password: 密码
        server: 服务器，部分方言要求 <host>/<database> 格式
        port: 端口，未提供时使用方言默认端口
        extra_settings: 附加到连接字符串的设置
        oracle_driver: "thin" 或 "oci"
        connection_string: 完整连接字符串，提供时忽略 server/port/extra_settings
        path_to_driver: 驱动 jar 目录或文件，默认读取 DATABASECONNECTOR_JAR_FOLDER

    Returns:
        ConnectionDetails: 不可变的连接参数

    Raises:
        ConfigError: 当方言不受支持或 oracle_driver 无效时
        DriverError: 当 JDBC 方言的驱动路径未配置或不存在时

    Example:
        >>> details = create_connection_details(
        ...     "postgresql", user="ohdsi", password=lambda: "secret",
        ...     server="localhost/cdm", path_to_driver="~/jdbc")
    """
    rule = lookup(dialect)

    if oracle_driver not in ORACLE_DRIVERS:
        raise ConfigError(
            f"无效的 oracle_driver: '{oracle_driver}'，可选值: {', '.join(ORACLE_DRIVERS)}",
            dialect=rule.id,
            config_key="oracle_driver",
        )

    resolved_path = ""
    if rule.is_jdbc:
        resolved_path = _check_path_to_driver(path_to_driver, rule.id)

    details = ConnectionDetails(
        dialect=rule.dialect,
        user=as_provider(user),
        password=as_provider(password),
        server=as_provider(server),
        port=as_provider(port),
        connection_string=as_provider(connection_string),
        extra_settings=extra_settings,
        path_to_driver=resolved_path,
        oracle_driver=oracle_driver,
    )
    logger.debug(f"已创建连接参数: {rule.id}")
    return details
