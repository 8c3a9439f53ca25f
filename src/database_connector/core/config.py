"""
设置管理模块

使用 TOML 格式保存用户级设置（驱动目录、认证库路径、JVM 参数、默认批量
大小、日志级别），环境变量优先于设置文件中的值。

设置文件位置：<用户配置目录>/database_connector/settings.toml

环境变量：
- DATABASECONNECTOR_JAR_FOLDER: JDBC 驱动 jar 所在目录
- PATH_TO_AUTH_DLL: Windows 集成认证所需的原生库目录
- DATABASECONNECTOR_JVM_OPTIONS: 启动 JVM 时附加的参数（按 shell 规则拆分）
"""

import os
import shlex
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List

import tomli_w

from ..utils.logging_utils import get_logger
from ..utils.path_utils import PathHelper
from .exceptions import ConfigError

# 获取模块级别的日志记录器
logger = get_logger(__name__)

ENV_JAR_FOLDER = "DATABASECONNECTOR_JAR_FOLDER"
ENV_AUTH_DLL = "PATH_TO_AUTH_DLL"
ENV_JVM_OPTIONS = "DATABASECONNECTOR_JVM_OPTIONS"

DEFAULT_SETTINGS_FILE = "settings.toml"
DEFAULT_BATCH_SIZE = 1000


@dataclass
class Settings:
    """
    用户设置

    Attributes:
        jar_folder (str): JDBC 驱动 jar 所在目录
        auth_dll_path (str): 集成认证原生库目录
        jvm_options (List[str]): 启动 JVM 时附加的参数
        default_batch_size (int): 游标默认每批读取的行数
        log_level (str): 日志级别
    """

    jar_folder: str = ""
    auth_dll_path: str = ""
    jvm_options: List[str] = field(default_factory=list)
    default_batch_size: int = DEFAULT_BATCH_SIZE
    log_level: str = "INFO"

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典，便于序列化和显示"""
        return asdict(self)


class SettingsManager:
    """
    设置管理器类

    负责加载、合并（文件 + 环境变量）和保存用户设置。

    Attributes:
        app_name (str): 应用名称，用于确定配置目录
        config_path (Path): 完整设置文件路径

    Example:
        >>> manager = SettingsManager()
        >>> settings = manager.load()
        >>> manager.set("default_batch_size", "500")
    """

    def __init__(
        self,
        app_name: str = "database_connector",
        config_file: str = DEFAULT_SETTINGS_FILE,
        config_dir: str | Path | None = None,
    ) -> None:
        """
        初始化设置管理器

        Args:
            app_name: 应用名称，用于确定配置目录
            config_file: 设置文件名，默认为"settings.toml"
            config_dir: 自定义配置目录，为None时使用用户配置目录
        """
        self.app_name = app_name
        self.config_dir = (
            Path(config_dir)
            if config_dir is not None
            else PathHelper.get_user_config_dir(app_name, create=False)
        )
        self.config_path = self.config_dir / config_file

    def load_file(self) -> Dict[str, Any]:
        """
        读取设置文件中的原始值

        Returns:
            Dict[str, Any]: 文件中的设置项，文件不存在时返回空字典

        Raises:
            ConfigError: 当设置文件无法解析时
        """
        if not self.config_path.exists():
            return {}

        try:
            with open(self.config_path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.error(f"读取设置文件失败: {str(e)}")
            raise ConfigError(
                f"设置文件读取失败: {str(e)}", details={"file": str(self.config_path)}
            ) from e

        unknown_keys = set(data) - _setting_names()
        if unknown_keys:
            logger.warning(f"忽略未知的设置项: {', '.join(sorted(unknown_keys))}")
        return {key: value for key, value in data.items() if key in _setting_names()}

    def load(self) -> Settings:
        """
        加载设置，环境变量优先于设置文件

        Returns:
            Settings: 合并后的设置对象
        """
        values = self.load_file()
        settings = Settings(**{k: _coerce_value(k, v) for k, v in values.items()})

        if os.environ.get(ENV_JAR_FOLDER):
            settings.jar_folder = os.environ[ENV_JAR_FOLDER]
        if os.environ.get(ENV_AUTH_DLL):
            settings.auth_dll_path = os.environ[ENV_AUTH_DLL]
        if os.environ.get(ENV_JVM_OPTIONS):
            settings.jvm_options = shlex.split(os.environ[ENV_JVM_OPTIONS])

        return settings

    def set(self, key: str, value: Any) -> Settings:
        """
        修改单个设置项并保存到设置文件

        Args:
            key: 设置项名称
            value: 新值（字符串会按设置项类型转换）

        Returns:
            Settings: 保存后的设置（不含环境变量覆盖）

        Raises:
            ConfigError: 当设置项不存在或值无效时
        """
        if key not in _setting_names():
            valid = ", ".join(sorted(_setting_names()))
            raise ConfigError(f"未知的设置项: {key}，可用的设置项: {valid}", config_key=key)

        values = {k: _coerce_value(k, v) for k, v in self.load_file().items()}
        values[key] = _coerce_value(key, value)
        settings = Settings(**values)
        self.save(settings)
        logger.info(f"设置项已更新: {key}")
        return settings

    def save(self, settings: Settings) -> None:
        """
        保存设置到 TOML 文件

        Raises:
            ConfigError: 当设置文件保存失败时
        """
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "wb") as f:
                f.write(tomli_w.dumps(settings.to_dict()).encode("utf-8"))
            logger.debug(f"设置文件已保存: {self.config_path}")
        except OSError as e:
            logger.error(f"保存设置文件失败: {str(e)}")
            raise ConfigError(f"设置文件保存失败: {str(e)}") from e


def _setting_names() -> set:
    return {f.name for f in fields(Settings)}


def _coerce_value(key: str, value: Any) -> Any:
    """按设置项类型转换值"""
    try:
        if key == "default_batch_size":
            batch_size = int(value)
            if batch_size <= 0:
                raise ValueError("批量大小必须为正整数")
            return batch_size
        if key == "jvm_options":
            return shlex.split(value) if isinstance(value, str) else list(value)
        if key == "log_level":
            level = str(value).upper()
            if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
                raise ValueError(f"无效的日志级别: {value}")
            return level
        return str(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"设置项 {key} 的值无效: {str(e)}", config_key=key) from e


def default_jar_folder() -> str:
    """
    获取默认的驱动目录

    优先读取环境变量 DATABASECONNECTOR_JAR_FOLDER，未设置时读取设置文件。

    Returns:
        str: 驱动目录，未配置时为空字符串
    """
    env_value = os.environ.get(ENV_JAR_FOLDER)
    if env_value:
        return env_value
    return SettingsManager().load().jar_folder


def auth_dll_path() -> str:
    """获取集成认证原生库目录，环境变量 PATH_TO_AUTH_DLL 优先于设置文件"""
    env_value = os.environ.get(ENV_AUTH_DLL)
    if env_value:
        return env_value
    return SettingsManager().load().auth_dll_path
