"""
连接句柄

ConnectionHandle 包装一个原生 DB-API 连接，并带有方言标签、引用字符和
随机生成的 uuid。句柄只有两个状态：打开、关闭。重复关闭只发出
AlreadyClosedWarning，不会抛出异常。
"""

import secrets
import string
import warnings
from typing import Any, List, Tuple

from ..utils.logging_utils import get_logger
from .cursor import ResultCursor
from .dialects import DialectRule
from .exceptions import AlreadyClosedWarning, ConnectionError, QueryError
from .observers import notify_close, notify_open

# 获取模块级别的日志记录器
logger = get_logger(__name__)

UUID_ALPHABET = string.ascii_lowercase + string.digits
UUID_LENGTH = 20


def generate_uuid(length: int = UUID_LENGTH) -> str:
    """生成由小写字母和数字组成的随机标识"""
    return "".join(secrets.choice(UUID_ALPHABET) for _ in range(length))


class ConnectionHandle:
    """
    数据库连接句柄

    Attributes:
        rule (DialectRule): 连接所属方言的规则
        uuid (str): 20 位随机标识
        identifier_quote (str): 标识符引用字符
        string_quote (str): 字符串字面量引用字符

    Example:
        >>> with connect(dialect="sqlite", server=":memory:") as conn:
        ...     conn.execute("CREATE TABLE t(a INT)")
        ...     rows = conn.query("SELECT * FROM t")
    """

    def __init__(self, native: Any, rule: DialectRule, uuid: str | None = None) -> None:
        if native is None:
            raise ValueError("原生连接不能为空")
        self.rule = rule
        self.uuid = uuid or generate_uuid()
        self.identifier_quote = rule.identifier_quote
        self.string_quote = rule.string_quote
        self._native = native
        self._closed = False
        notify_open(self)

    @property
    def dbms(self) -> str:
        return self.rule.id

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def native(self) -> Any:
        return self._native

    def close(self) -> None:
        """
        关闭连接

        已关闭时发出 AlreadyClosedWarning 并直接返回。

        Raises:
            ConnectionError: 当原生连接关闭失败时
        """
        if self._closed:
            message = "连接已经关闭"
            logger.warning(f"{message}: {self.uuid}")
            warnings.warn(message, AlreadyClosedWarning, stacklevel=2)
            return

        try:
            self._native.close()
        except Exception as e:
            logger.error(f"关闭连接失败: {str(e)}")
            raise ConnectionError(
                f"关闭连接失败: {str(e)}",
                error_code="CLOSE_FAILED",
                dialect=self.dbms,
                native_message=str(e),
            ) from e
        else:
            logger.info(f"{self.rule.display_name} 连接已关闭: {self.uuid}")
        finally:
            # 无论原生连接是否关闭成功，句柄都已进入关闭状态
            self._closed = True
            notify_close(self)

    def _ensure_open(self) -> None:
        if self._closed:
            raise ConnectionError(
                "连接已关闭", error_code="CONNECTION_CLOSED", dialect=self.dbms
            )

    def quote_identifier(self, name: str) -> str:
        quote = self.identifier_quote
        return f"{quote}{name.replace(quote, quote * 2)}{quote}"

    def quote_literal(self, value: str) -> str:
        quote = self.string_quote
        return f"{quote}{value.replace(quote, quote * 2)}{quote}"

    def cursor(self, sql: str) -> ResultCursor:
        """
        执行语句并返回结果游标

        Raises:
            ConnectionError: 当连接已关闭时
            QueryError: 当语句执行失败时
        """
        self._ensure_open()
        native_cursor = self._native.cursor()
        try:
            native_cursor.execute(sql)
        except Exception as e:
            native_cursor.close()
            logger.error(f"语句执行失败: {str(e)}")
            raise QueryError(
                f"语句执行失败: {str(e)}", error_code="EXECUTE_FAILED", query=sql
            ) from e
        return ResultCursor(self, native_cursor, sql)

    def execute(self, sql: str) -> int:
        """执行非查询语句，返回影响的行数"""
        with self.cursor(sql) as result:
            return result.rows_affected

    def query(self, sql: str, batch_size: int = 1000) -> List[Tuple[Any, ...]]:
        """执行查询并返回全部结果"""
        with self.cursor(sql) as result:
            return result.fetch_all(batch_size)

    def commit(self) -> None:
        self._ensure_open()
        self._native.commit()

    def rollback(self) -> None:
        self._ensure_open()
        self._native.rollback()

    def __enter__(self) -> "ConnectionHandle":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if not self._closed:
            self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<ConnectionHandle {self.dbms} {self.uuid} ({state})>"
