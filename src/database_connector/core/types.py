"""
语义类型与值转换

把不同原生层返回的值统一为少量语义类型：整数、浮点数、文本、布尔、
时间戳、日期、二进制和空值。JDBC 驱动（jaydebeapi）把 DATE/TIMESTAMP
以文本形式返回，这里用 dateutil 解析为 date/datetime。
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Sequence, Tuple

from dateutil import parser


class SemanticType(str, Enum):
    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    DATE = "date"
    BINARY = "binary"
    NULL = "null"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ColumnInfo:
    """结果集列信息"""

    name: str
    type: SemanticType


# jaydebeapi 的 DBAPITypeObject 按 JDBC 类型名分组，按组内的类型名判断
_JDBC_GROUPS: Tuple[Tuple[str, SemanticType], ...] = (
    ("TIMESTAMP", SemanticType.TIMESTAMP),
    ("DATE", SemanticType.DATE),
    ("TIME", SemanticType.TEXT),
    ("BLOB", SemanticType.BINARY),
    ("INTEGER", SemanticType.INTEGER),
    ("DOUBLE", SemanticType.FLOAT),
    ("NUMERIC", SemanticType.FLOAT),
    ("VARCHAR", SemanticType.TEXT),
    ("CLOB", SemanticType.TEXT),
    ("ROWID", SemanticType.TEXT),
)

_PYTHON_TYPES: Tuple[Tuple[type, SemanticType], ...] = (
    (bool, SemanticType.BOOLEAN),
    (int, SemanticType.INTEGER),
    (float, SemanticType.FLOAT),
    (Decimal, SemanticType.FLOAT),
    (str, SemanticType.TEXT),
    (bytes, SemanticType.BINARY),
    (datetime, SemanticType.TIMESTAMP),
    (date, SemanticType.DATE),
)


def semantic_type_of_code(type_code: Any, date_as_timestamp: bool = False) -> SemanticType:
    """
    根据 DB-API description 中的 type_code 推断语义类型

    支持 jaydebeapi 的类型对象和以 Python 类型表示的 type_code，
    无法识别时返回 UNKNOWN。
    """
    if type_code is None:
        return SemanticType.UNKNOWN

    result = SemanticType.UNKNOWN
    jdbc_names = getattr(type_code, "values", None)
    if isinstance(jdbc_names, (tuple, list)):
        for name, semantic_type in _JDBC_GROUPS:
            if name in jdbc_names:
                result = semantic_type
                break
    elif isinstance(type_code, type):
        for python_type, semantic_type in _PYTHON_TYPES:
            if issubclass(type_code, python_type):
                result = semantic_type
                break

    if result is SemanticType.DATE and date_as_timestamp:
        return SemanticType.TIMESTAMP
    return result


def column_info_from_description(
    description: Sequence[Sequence[Any]] | None, date_as_timestamp: bool = False
) -> List[ColumnInfo]:
    if not description:
        return []
    return [
        ColumnInfo(
            name=str(column[0]),
            type=semantic_type_of_code(column[1], date_as_timestamp),
        )
        for column in description
    ]


def _to_datetime(value: date) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def coerce_value(
    value: Any,
    column_type: SemanticType = SemanticType.UNKNOWN,
    date_as_timestamp: bool = False,
) -> Any:
    """
    把原生值转换为语义类型对应的 Python 值

    Args:
        value: 原生层返回的值
        column_type: 列的语义类型，用于解析文本形式的日期时间
        date_as_timestamp: 为 True 时 DATE 值转换为午夜的 datetime

    Returns:
        None、bool、int、float、str、bytes、date 或 datetime
    """
    if value is None:
        return None
    if isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, Decimal):
        if value.is_finite() and value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return _to_datetime(value) if date_as_timestamp else value

    text = str(value)
    if column_type is SemanticType.TIMESTAMP:
        return parser.parse(text)
    if column_type is SemanticType.DATE:
        parsed = parser.parse(text)
        return parsed if date_as_timestamp else parsed.date()
    return text


def coerce_row(
    row: Sequence[Any],
    column_types: Sequence[SemanticType],
    date_as_timestamp: bool = False,
) -> Tuple[Any, ...]:
    if not column_types:
        return tuple(coerce_value(value, date_as_timestamp=date_as_timestamp) for value in row)
    return tuple(
        coerce_value(value, column_type, date_as_timestamp)
        for value, column_type in zip(row, column_types)
    )
