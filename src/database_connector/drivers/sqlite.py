"""
SQLite 原生层

通过 SQLAlchemy 的 pysqlite 方言打开 SQLite 数据库，返回 DB-API 连接。
不使用连接池（NullPool），每个连接句柄独占一个底层连接，关闭句柄即关闭
底层连接。连接使用自动提交模式。

"sqlite extended" 方言启用 sqlite3 的声明类型检测，DATE/TIMESTAMP 列会
返回 date/datetime 对象。
"""

import sqlite3
from typing import Any, Dict

from dateutil import parser
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from ..core.exceptions import ConnectionError
from ..utils.logging_utils import get_logger

# 获取模块级别的日志记录器
logger = get_logger(__name__)


def _convert_date(value: bytes):
    return parser.parse(value.decode("utf-8")).date()


def _convert_timestamp(value: bytes):
    return parser.parse(value.decode("utf-8"))


_converters_registered = False


def register_converters() -> None:
    """
    登记声明类型为 DATE/TIMESTAMP/DATETIME 的列的转换函数

    sqlite3 的转换函数是进程级的（名称不区分大小写），登记后会替换
    sqlite3 自带的 date/timestamp 转换函数，影响进程内所有启用
    detect_types 的 sqlite3 连接。替换后的函数对 ISO 格式的值返回相同
    的 date/datetime 对象。只登记一次。
    """
    global _converters_registered
    if _converters_registered:
        return
    sqlite3.register_converter("DATE", _convert_date)
    sqlite3.register_converter("TIMESTAMP", _convert_timestamp)
    sqlite3.register_converter("DATETIME", _convert_timestamp)
    _converters_registered = True


class SQLiteDriver:
    """
    SQLite 驱动

    Attributes:
        extended (bool): 是否启用扩展类型（声明类型检测）
    """

    def __init__(self, extended: bool = False) -> None:
        self.extended = extended
        if extended:
            register_converters()

    def _connect_args(self) -> Dict[str, Any]:
        # 与 JDBC 驱动一致使用自动提交，语句执行后立即生效
        connect_args: Dict[str, Any] = {"check_same_thread": False, "isolation_level": None}
        if self.extended:
            connect_args["detect_types"] = (
                sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES
            )
        return connect_args

    def connect(self, url: str, properties: Dict[str, str] | None = None) -> Any:
        """
        打开 SQLite 连接

        Args:
            url: SQLAlchemy 格式的地址，如 "sqlite:///:memory:"
            properties: 未使用，与 JDBC 驱动保持相同的调用方式

        Returns:
            DB-API 连接对象

        Raises:
            ConnectionError: 当数据库文件无法打开时
        """
        try:
            engine = create_engine(
                url, poolclass=NullPool, connect_args=self._connect_args()
            )
            native = engine.raw_connection()
        except SQLAlchemyError as e:
            logger.error(f"SQLite 连接失败: {str(e)}")
            raise ConnectionError(
                f"无法打开 SQLite 数据库 {url} ({str(e)})",
                error_code="CONNECT_FAILED",
                dialect="sqlite extended" if self.extended else "sqlite",
                url=url,
                native_message=str(e),
            ) from e

        logger.debug(f"SQLite 连接已打开: {url}")
        return native
