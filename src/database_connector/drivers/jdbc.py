"""
JDBC 驱动加载与缓存

通过 JPype 启动 JVM，从 jar 文件中加载驱动类并实例化，连接结果包装为
jaydebeapi 的 DB-API 连接对象。驱动类加载代价较高，JdbcDriverCache 保证
每个 (驱动类名, jar 路径) 在进程内只加载一次。

JPype1 与 JayDeBeApi 在首次加载驱动时才导入，只使用 SQLite 方言时不需要安装。
"""

import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence, Tuple

from ..core.config import SettingsManager, auth_dll_path
from ..core.exceptions import ConnectionError, DriverError
from ..utils.logging_utils import get_logger, mask_credentials
from ..utils.path_utils import PathHelper

# 获取模块级别的日志记录器
logger = get_logger(__name__)

# 已登记的原生库目录（Windows 集成认证 DLL），JVM 启动时写入 java.library.path
_library_paths: List[str] = []
_jvm_lock = threading.Lock()


def find_path_to_jar(pattern: str, path_to_driver: str | Path) -> Path:
    """
    在驱动路径中查找匹配模式的 jar 文件

    path_to_driver 可以是目录，也可以直接指向 jar 文件。目录中有多个
    匹配时按文件名字典序取第一个，并记录警告。

    Args:
        pattern: jar 文件名的正则表达式
        path_to_driver: 驱动目录或 jar 文件路径

    Returns:
        Path: 解析到的 jar 文件路径

    Raises:
        DriverError: 当路径下没有匹配的 jar 文件时
    """
    path = Path(path_to_driver).expanduser()

    if path.is_file() and PathHelper.is_jar_file(path):
        logger.debug(f"直接使用指定的驱动文件: {path}")
        return path

    matches = PathHelper.list_matching_files(path, pattern)
    if not matches:
        raise DriverError(
            f"在目录 '{path}' 中未找到匹配 '{pattern}' 的驱动文件",
            error_code="DRIVER_NOT_FOUND",
            jar_path=str(path),
            pattern=pattern,
        )

    if len(matches) > 1:
        names = ", ".join(match.name for match in matches)
        logger.warning(f"找到多个匹配的驱动文件: {names}，使用 {matches[0].name}")

    return matches[0]


def folder_classpath(path_to_driver: str | Path) -> List[Path]:
    """返回驱动目录中的全部 jar 文件，用于需要完整类路径的驱动"""
    path = Path(path_to_driver).expanduser()
    folder = path.parent if path.is_file() else path
    return PathHelper.list_matching_files(folder, r"\.jar$")


def register_auth_library(path: str | None = None) -> str | None:
    """
    登记 Windows 集成认证所需的原生库目录

    未指定 path 时读取 PATH_TO_AUTH_DLL 环境变量或设置文件。目录会在 JVM
    启动时加入 java.library.path；JVM 已经启动时只能对之后的新进程生效。

    Returns:
        str | None: 登记的目录，没有配置时为 None
    """
    library_path = path or auth_dll_path()
    if not library_path:
        return None

    logger.info(f"在 PATH_TO_AUTH_DLL 指定的目录中查找认证库: {library_path}")
    with _jvm_lock:
        if library_path not in _library_paths:
            _library_paths.append(library_path)

    if _jvm_started():
        logger.warning("JVM 已启动，认证库目录将无法加入 java.library.path")
    return library_path


def _jvm_started() -> bool:
    try:
        import jpype
    except ImportError:
        return False
    return jpype.isJVMStarted()


def _import_jdbc_modules() -> Tuple[Any, Any]:
    try:
        import jaydebeapi
        import jpype
    except ImportError as e:
        raise DriverError(
            "JDBC 方言需要 JPype1 和 JayDeBeApi，请安装 database-connector[jdbc]",
            error_code="JDBC_UNAVAILABLE",
        ) from e
    return jpype, jaydebeapi


def ensure_jvm_started() -> None:
    """
    启动 JVM（进程内只启动一次）

    启动参数来自设置中的 jvm_options（DATABASECONNECTOR_JVM_OPTIONS 优先），
    已登记的认证库目录写入 -Djava.library.path。
    """
    jpype, jaydebeapi = _import_jdbc_modules()

    with _jvm_lock:
        if not jpype.isJVMStarted():
            options = list(SettingsManager().load().jvm_options)
            if _library_paths:
                options.append(f"-Djava.library.path={os.pathsep.join(_library_paths)}")
            logger.info(f"启动 JVM，参数: {options}")
            jpype.startJVM(*options, ignoreUnrecognized=True, convertStrings=True)

        # jaydebeapi 的类型转换表需要在 JVM 启动后根据 java.sql.Types 初始化
        if not jaydebeapi._jdbc_name_to_const:
            types_map = {}
            for java_field in jpype.java.sql.Types.class_.getFields():
                if jpype.java.lang.reflect.Modifier.isStatic(java_field.getModifiers()):
                    types_map[str(java_field.getName())] = java_field.get(None)
            jaydebeapi._init_types(types_map)


class JdbcDriver:
    """
    单个 JDBC 驱动实例

    Attributes:
        class_name (str): 驱动类名
        jar_path (str): 驱动 jar 文件路径
        classpath (Tuple[str, ...]): 额外加入类加载器的 jar 文件
    """

    def __init__(
        self, class_name: str, jar_path: str, classpath: Sequence[str] = ()
    ) -> None:
        self.class_name = class_name
        self.jar_path = str(jar_path)
        self.classpath = tuple(str(jar) for jar in classpath)
        self._driver = None

    @property
    def loaded(self) -> bool:
        return self._driver is not None

    def load(self) -> None:
        """
        通过 URLClassLoader 加载并实例化驱动类

        Raises:
            DriverError: 当驱动类无法加载或实例化时
        """
        if self._driver is not None:
            return

        ensure_jvm_started()
        import jpype

        jars = [self.jar_path] + [jar for jar in self.classpath if jar != self.jar_path]
        try:
            file_class = jpype.JClass("java.io.File")
            url_class = jpype.JClass("java.net.URL")
            urls = jpype.JArray(url_class)(
                [file_class(jar).toURI().toURL() for jar in jars]
            )
            loader = jpype.JClass("java.net.URLClassLoader")(urls)
            driver_class = jpype.JClass(self.class_name, loader=loader)
            self._driver = driver_class()
        except Exception as e:
            logger.error(f"加载驱动类失败: {self.class_name} ({str(e)})")
            raise DriverError(
                f"无法从 '{self.jar_path}' 加载驱动类 {self.class_name}: {str(e)}",
                error_code="DRIVER_LOAD_FAILED",
                driver_name=self.class_name,
                jar_path=self.jar_path,
            ) from e

        logger.info(f"驱动类加载成功: {self.class_name}")

    def connect(self, url: str, properties: Dict[str, str]) -> Any:
        """
        打开原生连接

        Args:
            url: JDBC 连接字符串
            properties: 连接属性（user、password 以及方言固定属性）

        Returns:
            jaydebeapi.Connection | None: DB-API 连接，驱动返回 null 时为 None

        Raises:
            ConnectionError: 当 Java 驱动抛出异常时，包含原生错误信息
        """
        self.load()
        jpype, jaydebeapi = _import_jdbc_modules()

        java_properties = jpype.JClass("java.util.Properties")()
        for name, value in properties.items():
            java_properties.setProperty(name, str(value))

        try:
            jconn = self._driver.connect(url, java_properties)
        except jpype.JException as e:
            masked_url = mask_credentials(url)
            raise ConnectionError(
                f"无法通过 JDBC 连接到 {masked_url} ({str(e)})",
                error_code="CONNECT_FAILED",
                url=masked_url,
                native_message=str(e),
            ) from e

        if jconn is None:
            return None
        return jaydebeapi.Connection(jconn, jaydebeapi._converters)

    def __repr__(self) -> str:
        return f"<JdbcDriver {self.class_name} from {self.jar_path}>"


@dataclass
class _CacheEntry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    driver: Any = None


class JdbcDriverCache:
    """
    驱动单例缓存

    以 (驱动类名, jar 真实路径) 为键，同一个键只加载一次驱动，并发请求
    同一个键时后来者等待首次加载完成。不同键之间只共享很短的插入锁。
    加载失败不会被缓存，下次请求会重新尝试。缓存条目从不淘汰。

    Example:
        >>> cache = JdbcDriverCache()
        >>> driver = cache.get_or_load("org.postgresql.Driver", "/opt/jdbc/postgresql-42.7.3.jar")
    """

    def __init__(self, driver_factory: Callable[..., Any] = JdbcDriver) -> None:
        """
        Args:
            driver_factory: 根据 (class_name, jar_path, classpath) 创建驱动对象的工厂，
                返回的对象需提供 load() 和 connect(url, properties)
        """
        self._driver_factory = driver_factory
        self._entries: Dict[Tuple[str, str], _CacheEntry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def make_key(class_name: str, jar_path: str | Path) -> Tuple[str, str]:
        return class_name, os.path.realpath(jar_path)

    def get_or_load(
        self,
        class_name: str,
        jar_path: str | Path,
        classpath: Sequence[str | Path] = (),
    ) -> Any:
        """
        获取已加载的驱动，不存在时加载

        Raises:
            DriverError: 当驱动加载失败时
        """
        key = self.make_key(class_name, jar_path)

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = _CacheEntry()
                self._entries[key] = entry

        with entry.lock:
            if entry.driver is None:
                logger.debug(f"首次加载驱动: {class_name} ({key[1]})")
                driver = self._driver_factory(
                    class_name, key[1], tuple(str(jar) for jar in classpath)
                )
                driver.load()
                entry.driver = driver
            return entry.driver

    def __contains__(self, key: Tuple[str, str]) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.driver is not None

    def __len__(self) -> int:
        return sum(1 for entry in self._entries.values() if entry.driver is not None)


# 进程级默认缓存
default_driver_cache = JdbcDriverCache()
