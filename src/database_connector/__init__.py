# SPDX-FileCopyrightText: 2025-present wangquanqing <wangquanqing1636@sina.com>
#
# SPDX-License-Identifier: MIT
"""
Database Connector - 统一数据库连接模块
======================================

通过一个调度器连接多种数据库：根据方言选择连接规则，缓存 JDBC 驱动，
打开原生连接并包装为带方言标签的连接句柄，结果按批读取。

主要特性:
- 支持 Oracle, PostgreSQL, Redshift, SQL Server, PDW, Synapse, Netezza,
  Impala, Hive, BigQuery, Spark, Snowflake, SQLite
- 驱动类在进程内只加载一次
- 凭据延迟求值，支持环境变量、交互输入和加密令牌
- 统一的引用规则、结果类型和错误类型

使用示例:
    >>> from database_connector import connect, disconnect
    >>> conn = connect(dialect="sqlite", server=":memory:")
    >>> conn.execute("CREATE TABLE t(a INT)")
    0
    >>> with conn.cursor("SELECT a FROM t") as cursor:
    ...     batch = cursor.fetch(1000)
    >>> disconnect(conn)
    True
"""

from .core.connection import ConnectionHandle
from .core.credentials import (
    CallableCredential,
    CredentialProvider,
    EncryptedCredential,
    EnvCredential,
    PromptCredential,
    StaticCredential,
)
from .core.cursor import ResultCursor
from .core.details import ConnectionDetails, create_connection_details
from .core.dialects import Dialect, DialectRule, lookup, supported_dialects
from .core.dispatcher import Dispatcher, connect, dbms, disconnect
from .core.exceptions import (
    AlreadyClosedWarning,
    ConfigError,
    ConfigurationError,
    ConnectFailure,
    ConnectionError,
    CryptoError,
    DatabaseError,
    DBConnectorError,
    DriverError,
    DriverResolutionError,
    QueryError,
)
from .core.observers import ConnectionObserver, register_observer, unregister_observer
from .core.types import ColumnInfo, SemanticType
from .drivers.jdbc import JdbcDriverCache

__version__ = "0.1.0"

# 公共API导出列表
__all__ = [
    # ==================== 连接入口 ====================
    "connect",
    "disconnect",
    "dbms",
    "create_connection_details",
    "Dispatcher",
    # ==================== 连接参数与方言 ====================
    "ConnectionDetails",
    "Dialect",
    "DialectRule",
    "lookup",
    "supported_dialects",
    # ==================== 凭据 ====================
    "CredentialProvider",
    "StaticCredential",
    "CallableCredential",
    "EnvCredential",
    "PromptCredential",
    "EncryptedCredential",
    # ==================== 连接与结果 ====================
    "ConnectionHandle",
    "ResultCursor",
    "ColumnInfo",
    "SemanticType",
    "JdbcDriverCache",
    # ==================== 观察者 ====================
    "ConnectionObserver",
    "register_observer",
    "unregister_observer",
    # ==================== 异常类 ====================
    "DBConnectorError",
    "ConfigError",
    "CryptoError",
    "DatabaseError",
    "DriverError",
    "ConnectionError",
    "QueryError",
    "AlreadyClosedWarning",
    "ConfigurationError",
    "DriverResolutionError",
    "ConnectFailure",
]
