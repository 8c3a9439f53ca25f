"""
测试公共夹具

FakeJdbcDriver 模拟 JDBC 驱动：记录加载次数和每次连接使用的连接字符串与属性，
返回的 FakeNativeConnection 提供 DB-API 形式的 cursor/close。
"""

from typing import Any, Dict, List

import pytest


class FakeNativeCursor:
    def __init__(self, rows: List[tuple], description=None, rowcount: int = -1):
        self._rows = list(rows)
        self.description = description
        self.rowcount = rowcount
        self.closed = False
        self.executed: List[str] = []

    def execute(self, sql: str) -> None:
        self.executed.append(sql)

    def fetchmany(self, size: int) -> List[tuple]:
        batch, self._rows = self._rows[:size], self._rows[size:]
        return batch

    def close(self) -> None:
        self.closed = True


class FakeNativeConnection:
    def __init__(self, rows: List[tuple] | None = None, description=None):
        self.rows = rows or []
        self.description = description
        self.close_count = 0
        self.fail_on_close = False
        self.commits = 0
        self.cursors: List[FakeNativeCursor] = []

    def cursor(self) -> FakeNativeCursor:
        cursor = FakeNativeCursor(self.rows, self.description)
        self.cursors.append(cursor)
        return cursor

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        pass

    def close(self) -> None:
        self.close_count += 1
        if self.fail_on_close:
            raise RuntimeError("close failed")


class FakeJdbcDriver:
    """可注入 JdbcDriverCache 的假驱动"""

    instances: List["FakeJdbcDriver"] = []
    # 返回 None 的连接字符串，用于模拟驱动返回 null
    null_urls: set = set()

    def __init__(self, class_name: str, jar_path: str, classpath=()):
        self.class_name = class_name
        self.jar_path = jar_path
        self.classpath = tuple(classpath)
        self.load_count = 0
        self.connect_calls: List[tuple] = []
        FakeJdbcDriver.instances.append(self)

    def load(self) -> None:
        self.load_count += 1

    def connect(self, url: str, properties: Dict[str, Any]):
        self.connect_calls.append((url, dict(properties)))
        if url in FakeJdbcDriver.null_urls:
            return None
        return FakeNativeConnection()


@pytest.fixture
def fake_driver_class():
    FakeJdbcDriver.instances = []
    FakeJdbcDriver.null_urls = set()
    yield FakeJdbcDriver
    FakeJdbcDriver.instances = []
    FakeJdbcDriver.null_urls = set()


@pytest.fixture
def native_connection_class():
    return FakeNativeConnection


@pytest.fixture
def jar_folder(tmp_path):
    """包含常用驱动文件名的临时驱动目录"""
    folder = tmp_path / "jdbc"
    folder.mkdir()
    for name in [
        "postgresql-42.7.3.jar",
        "mssql-jdbc-12.4.2.jre11.jar",
        "ojdbc8.jar",
        "RedshiftJDBC42-2.1.0.jar",
        "snowflake-jdbc-3.14.jar",
        "SparkJDBC42.jar",
        "GoogleBigQueryJDBC42.jar",
        "google-api-client.jar",
        "hive-jdbc-3.1.3-standalone.jar",
        "nzjdbc.jar",
        "ImpalaJDBC42.jar",
    ]:
        (folder / name).write_bytes(b"")
    return folder


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """隔离可能影响测试的环境变量"""
    for name in [
        "DATABASECONNECTOR_JAR_FOLDER",
        "PATH_TO_AUTH_DLL",
        "DATABASECONNECTOR_JVM_OPTIONS",
        "DATABASECONNECTOR_SECRET",
    ]:
        monkeypatch.delenv(name, raising=False)
