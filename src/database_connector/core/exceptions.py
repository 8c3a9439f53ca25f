"""
数据库连接器自定义异常模块

提供项目专用的异常类层次结构，用于区分配置错误、驱动解析错误、
连接失败以及查询执行错误。配置类与驱动解析类错误会在接触任何原生
资源之前抛出，连接失败则携带尝试使用的连接字符串与原生错误信息。

异常类层次结构：
DBConnectorError
├── ConfigError (配置相关异常：不支持的方言、缺少数据库名、缺少连接字符串)
├── CryptoError (加密凭据解密失败)
└── DatabaseError (数据库操作基础异常)
    ├── DriverError (驱动 jar 未找到、驱动类无法加载)
    ├── ConnectionError (原生连接失败、连接已关闭)
    └── QueryError (语句执行与结果获取失败)

AlreadyClosedWarning 不是异常，而是可恢复的警告：重复关闭连接时发出。
"""

from typing import Any, Dict


class DBConnectorError(Exception):
    """
    数据库连接器基础异常类

    所有自定义异常的基类，提供统一的异常处理接口。
    支持错误代码、详细信息和字典格式转换。

    Attributes:
        message (str): 异常描述信息
        error_code (str | None): 错误代码，用于错误分类和识别
        details (Dict[str, Any]): 详细的错误信息字典

    Example:
        >>> try:
        ...     raise DBConnectorError("测试异常", "TEST_001", {"key": "value"})
        ... except DBConnectorError as e:
        ...     print(e.to_dict())
        {'error_type': 'DBConnectorError', 'message': '测试异常',
         'error_code': 'TEST_001', 'details': {'key': 'value'}}
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: Dict[str, Any] | None = None,
    ) -> None:
        """
        初始化基础异常

        Args:
            message: 异常描述信息，应清晰描述错误原因
            error_code: 错误代码，格式建议为"模块_编号"
            details: 详细的错误信息字典，包含相关上下文信息
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        """返回异常的字符串表示"""
        base_str = f"{self.__class__.__name__}: {self.message}"
        if self.error_code:
            base_str += f" (错误代码: {self.error_code})"
        return base_str

    def to_dict(self) -> Dict[str, Any]:
        """
        将异常信息转换为字典格式

        Returns:
            Dict[str, Any]: 包含异常信息的字典
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ConfigError(DBConnectorError):
    """
    配置相关异常

    处理连接参数校验、方言选择和设置文件解析中出现的错误。
    这类错误总是致命的，立即抛出，从不重试。

    Attributes:
        dialect (str | None): 相关的数据库方言
        config_key (str | None): 相关的配置键名称
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        dialect: str | None = None,
        config_key: str | None = None,
        details: Dict[str, Any] | None = None,
    ) -> None:
        """
        初始化配置异常

        Args:
            message: 异常描述信息
            error_code: 错误代码
            dialect: 相关的数据库方言
            config_key: 相关的配置键
            details: 详细的错误信息
        """
        super().__init__(message, error_code, details)
        self.dialect = dialect
        self.config_key = config_key

        # 自动填充详细信息
        if dialect:
            self.details["dialect"] = dialect
        if config_key:
            self.details["config_key"] = config_key


class CryptoError(DBConnectorError):
    """
    加密解密相关异常

    处理密钥派生、凭据加密和解密过程中出现的错误。
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        operation: str | None = None,
        details: Dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)
        self.operation = operation

        if operation:
            self.details["operation"] = operation


class DatabaseError(DBConnectorError):
    """
    数据库操作基础异常

    处理所有数据库相关操作的通用错误。

    Attributes:
        dialect (str | None): 数据库方言（如：postgresql, oracle 等）
        operation (str | None): 数据库操作类型（如：connect, fetch, close 等）
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        dialect: str | None = None,
        operation: str | None = None,
        details: Dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)
        self.dialect = dialect
        self.operation = operation

        # 自动填充详细信息
        if dialect:
            self.details["dialect"] = dialect
        if operation:
            self.details["operation"] = operation


class ConnectionError(DatabaseError):
    """
    数据库连接异常

    原生驱动返回空连接或抛出错误时使用。消息中包含尝试的连接字符串
    （已掩码）以及可用的原生错误文本。连接关闭后继续读取游标时同样抛出。

    Attributes:
        url (str | None): 尝试连接的连接字符串（已掩码）
        native_message (str | None): 原生驱动返回的错误信息
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        dialect: str | None = None,
        url: str | None = None,
        native_message: str | None = None,
        details: Dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, dialect=dialect, details=details)
        self.url = url
        self.native_message = native_message

        if url:
            self.details["url"] = url
        if native_message:
            self.details["native_message"] = native_message


class DriverError(DatabaseError):
    """
    数据库驱动异常

    处理驱动 jar 查找、驱动类加载和实例化过程中出现的错误。

    Attributes:
        driver_name (str | None): 驱动类名
        jar_path (str | None): 驱动所在的 jar 文件或目录
        pattern (str | None): 查找 jar 时使用的文件名模式
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        driver_name: str | None = None,
        jar_path: str | None = None,
        pattern: str | None = None,
        details: Dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details=details)
        self.driver_name = driver_name
        self.jar_path = jar_path
        self.pattern = pattern

        # 自动填充详细信息
        if driver_name:
            self.details["driver_name"] = driver_name
        if jar_path:
            self.details["jar_path"] = jar_path
        if pattern:
            self.details["pattern"] = pattern


class QueryError(DatabaseError):
    """
    查询执行异常

    处理SQL语句执行、结果集读取、游标释放等过程中出现的错误。

    Attributes:
        query (str | None): 执行的SQL语句
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        query: str | None = None,
        details: Dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details=details)
        self.query = query

        # 只记录预览，避免日志中出现完整SQL
        if query:
            self.details["query_preview"] = self._get_query_preview(query)

    def _get_query_preview(self, query: str, max_length: int = 100) -> str:
        """获取查询语句的预览"""
        if len(query) <= max_length:
            return query
        return query[:max_length] + "..."


class AlreadyClosedWarning(UserWarning):
    """重复关闭连接时发出的可恢复警告"""


# 错误分类别名
ConfigurationError = ConfigError
DriverResolutionError = DriverError
ConnectFailure = ConnectionError
