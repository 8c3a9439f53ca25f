"""
语义类型与值转换测试
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from database_connector.core.types import (
    ColumnInfo,
    SemanticType,
    coerce_row,
    coerce_value,
    column_info_from_description,
    semantic_type_of_code,
)


class JdbcTypeGroup:
    """模拟 jaydebeapi 的 DBAPITypeObject"""

    def __init__(self, *values):
        self.values = values


class TestCoerceValue:
    """值转换测试类"""

    def test_scalars(self):
        """测试基本类型保持不变"""
        assert coerce_value(None) is None
        assert coerce_value(True) is True
        assert coerce_value(42) == 42
        assert coerce_value(1.25) == 1.25
        assert coerce_value("abc") == "abc"

    def test_decimal(self):
        """测试 Decimal 转换"""
        assert coerce_value(Decimal("10")) == 10
        assert isinstance(coerce_value(Decimal("10.000")), int)
        assert coerce_value(Decimal("2.5")) == 2.5
        assert isinstance(coerce_value(Decimal("2.5")), float)
        assert coerce_value(Decimal("Infinity")) == float("inf")

    def test_binary(self):
        """测试二进制值"""
        assert coerce_value(bytearray(b"ab")) == b"ab"
        assert coerce_value(memoryview(b"cd")) == b"cd"

    def test_dates(self):
        """测试日期按方言转换"""
        day = date(2024, 2, 29)
        assert coerce_value(day) == day
        assert coerce_value(day, date_as_timestamp=True) == datetime(2024, 2, 29)
        moment = datetime(2024, 2, 29, 8, 15)
        assert coerce_value(moment, date_as_timestamp=True) is moment

    def test_textual_timestamps(self):
        """测试文本形式的日期时间解析"""
        assert coerce_value("2024-01-02 03:04:05", SemanticType.TIMESTAMP) == datetime(2024, 1, 2, 3, 4, 5)
        assert coerce_value("2024-01-02", SemanticType.DATE) == date(2024, 1, 2)
        assert coerce_value("2024-01-02", SemanticType.DATE, True) == datetime(2024, 1, 2)
        assert coerce_value("2024-01-02", SemanticType.TEXT) == "2024-01-02"

    def test_other_objects_become_text(self):
        """测试其他对象转换为文本"""

        class JavaString:
            def __str__(self):
                return "java"

        assert coerce_value(JavaString()) == "java"

    def test_coerce_row(self):
        """测试整行转换"""
        row = coerce_row(
            ("2024-01-02 00:00:00", Decimal("3")),
            [SemanticType.TIMESTAMP, SemanticType.FLOAT],
        )
        assert row == (datetime(2024, 1, 2), 3)
        assert coerce_row((Decimal("1.5"),), []) == (1.5,)


class TestSemanticTypes:
    """语义类型推断测试类"""

    def test_jdbc_type_groups(self):
        """测试 JDBC 类型分组"""
        assert semantic_type_of_code(JdbcTypeGroup("TIMESTAMP")) is SemanticType.TIMESTAMP
        assert semantic_type_of_code(JdbcTypeGroup("DATE")) is SemanticType.DATE
        assert semantic_type_of_code(JdbcTypeGroup("DATE"), True) is SemanticType.TIMESTAMP
        assert semantic_type_of_code(JdbcTypeGroup("BOOLEAN", "BIGINT", "BIT", "INTEGER")) is SemanticType.INTEGER
        assert semantic_type_of_code(JdbcTypeGroup("FLOAT", "REAL", "DOUBLE")) is SemanticType.FLOAT
        assert semantic_type_of_code(JdbcTypeGroup("DECIMAL", "NUMERIC")) is SemanticType.FLOAT
        assert semantic_type_of_code(JdbcTypeGroup("CHAR", "VARCHAR")) is SemanticType.TEXT
        assert semantic_type_of_code(JdbcTypeGroup("BINARY", "BLOB")) is SemanticType.BINARY
        assert semantic_type_of_code(JdbcTypeGroup("STRUCT")) is SemanticType.UNKNOWN

    def test_python_type_codes(self):
        """测试 Python 类型形式的 type_code"""
        assert semantic_type_of_code(bool) is SemanticType.BOOLEAN
        assert semantic_type_of_code(int) is SemanticType.INTEGER
        assert semantic_type_of_code(str) is SemanticType.TEXT
        assert semantic_type_of_code(datetime) is SemanticType.TIMESTAMP
        assert semantic_type_of_code(None) is SemanticType.UNKNOWN

    def test_column_info_from_description(self):
        """测试从 description 生成列信息"""
        description = [("id", JdbcTypeGroup("INTEGER")), ("born", JdbcTypeGroup("DATE"))]
        assert column_info_from_description(description, date_as_timestamp=True) == [
            ColumnInfo("id", SemanticType.INTEGER),
            ColumnInfo("born", SemanticType.TIMESTAMP),
        ]
        assert column_info_from_description(None) == []


if __name__ == "__main__":
    pytest.main()
