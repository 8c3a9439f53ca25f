"""
结果游标

ResultCursor 包装一个原生 DB-API 游标，按批读取结果：

- fetch(batch_size) 返回不超过 batch_size 行；返回空列表当且仅当结果已读完
- 返回的行数少于 batch_size 时同样视为读完，之后的 fetch 直接返回空列表
- 非查询语句（description 为 None）执行后立即完成，rows_affected 为影响行数
- 所属连接关闭后继续读取会抛出 ConnectionError
"""

from typing import TYPE_CHECKING, Any, Iterator, List, Tuple

from ..utils.logging_utils import get_logger
from .exceptions import ConnectionError, QueryError
from .types import ColumnInfo, column_info_from_description, coerce_row

if TYPE_CHECKING:
    from .connection import ConnectionHandle

# 获取模块级别的日志记录器
logger = get_logger(__name__)


class ResultCursor:
    """
    结果游标

    Attributes:
        sql (str): 执行的 SQL 语句
        row_count (int): 已返回的行数
        rows_affected (int): 非查询语句影响的行数，查询语句为 0
        complete (bool): 结果是否已读完
    """

    def __init__(self, connection: "ConnectionHandle", native_cursor: Any, sql: str) -> None:
        self.connection = connection
        self.sql = sql
        self.row_count = 0
        self.rows_affected = 0
        self.complete = False
        self._native = native_cursor
        self._released = False

        description = native_cursor.description
        self._columns = column_info_from_description(
            description, connection.rule.date_as_timestamp
        )
        if description is None:
            # 非查询语句没有结果集
            rowcount = getattr(native_cursor, "rowcount", -1)
            self.rows_affected = max(rowcount if rowcount is not None else -1, 0)
            self.complete = True

    @property
    def released(self) -> bool:
        return self._released

    def column_info(self) -> List[ColumnInfo]:
        """返回结果集的列名和语义类型"""
        return list(self._columns)

    def fetch(self, batch_size: int) -> List[Tuple[Any, ...]]:
        """
        读取下一批数据

        Args:
            batch_size: 本批最多读取的行数，必须为正整数

        Returns:
            List[Tuple[Any, ...]]: 本批数据，结果读完时为空列表

        Raises:
            ValueError: 当 batch_size 不是正整数时
            ConnectionError: 当所属连接已关闭时
            QueryError: 当原生游标读取失败时
        """
        if not isinstance(batch_size, int) or isinstance(batch_size, bool) or batch_size <= 0:
            raise ValueError(f"batch_size 必须为正整数: {batch_size}")

        if self.complete or self._released:
            return []

        if self.connection.closed:
            raise ConnectionError(
                "连接已关闭，无法继续读取结果",
                error_code="CONNECTION_CLOSED",
                dialect=self.connection.dbms,
            )

        try:
            rows = self._native.fetchmany(batch_size)
        except Exception as e:
            logger.error(f"读取结果失败: {str(e)}")
            raise QueryError(
                f"读取结果失败: {str(e)}", error_code="FETCH_FAILED", query=self.sql
            ) from e

        if len(rows) < batch_size:
            self.complete = True

        column_types = [column.type for column in self._columns]
        batch = [
            coerce_row(row, column_types, self.connection.rule.date_as_timestamp)
            for row in rows
        ]
        self.row_count += len(batch)
        return batch

    def iter_batches(self, batch_size: int) -> Iterator[List[Tuple[Any, ...]]]:
        """逐批迭代结果，直到读完"""
        while True:
            batch = self.fetch(batch_size)
            if not batch:
                return
            yield batch

    def fetch_all(self, batch_size: int = 1000) -> List[Tuple[Any, ...]]:
        rows: List[Tuple[Any, ...]] = []
        for batch in self.iter_batches(batch_size):
            rows.extend(batch)
        return rows

    def release(self) -> None:
        """释放原生游标，可以重复调用"""
        if self._released:
            return
        self._released = True
        self.complete = True
        if self.connection.closed:
            return
        try:
            self._native.close()
        except Exception as e:
            raise QueryError(
                f"释放游标失败: {str(e)}", error_code="RELEASE_FAILED", query=self.sql
            ) from e

    def __enter__(self) -> "ResultCursor":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "complete" if self.complete else "open"
        return f"<ResultCursor {state}, rows={self.row_count}>"
