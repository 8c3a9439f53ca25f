"""
数据库连接器路径处理工具模块

提供跨平台的路径处理功能，包括配置目录获取、路径规范化以及驱动目录
中按文件名模式查找文件。支持 Windows、macOS 和 Linux 系统。

主要功能：
- 跨平台配置目录获取
- 路径规范化（展开 ~ 与相对路径）
- 按正则模式列出目录中的文件（按文件名字典序排序）
"""

import os
import platform
import re
from pathlib import Path
from typing import List


class PathHelper:
    """
    路径辅助类 - 提供跨平台的路径处理功能

    所有方法均为静态方法，无需实例化即可使用。

    Example:
        >>> config_dir = PathHelper.get_user_config_dir("my_app")
        >>> jars = PathHelper.list_matching_files("~/jdbc", r"^postgresql-.*\\.jar$")
    """

    @staticmethod
    def get_user_config_dir(
        app_name: str = "database_connector", create: bool = True
    ) -> Path:
        """
        获取用户配置目录路径

        根据操作系统类型获取标准的用户配置目录，并创建应用特定的子目录。
        当标准目录创建失败时回退到当前工作目录下的隐藏目录。

        Args:
            app_name (str): 应用名称，默认为"database_connector"
            create (bool): 是否创建目录，为False时只返回路径

        Returns:
            Path: 配置目录的Path对象

        Raises:
            ValueError: 当应用名称为空或不是字符串时
            OSError: 当无法创建目录时（仅在回退方案也失败时）

        Note:
            - Windows: %APPDATA%\\{app_name}
            - macOS: ~/Library/Application Support/{app_name}
            - Linux: ~/.config/{app_name}
        """
        if not app_name or not isinstance(app_name, str):
            raise ValueError("应用名称不能为空且必须是字符串")

        system = platform.system().lower()

        try:
            # 根据操作系统选择基础配置目录
            if system == "windows":
                base_dir = Path(os.environ.get("APPDATA", Path.home()))
            elif system == "darwin":  # macOS
                base_dir = Path.home() / "Library" / "Application Support"
            else:  # Linux和其他Unix系统
                base_dir = Path.home() / ".config"

            config_dir = base_dir / app_name
            if not create:
                return config_dir
            config_dir.mkdir(parents=True, exist_ok=True)

            return config_dir

        except OSError as e:
            # 回退到当前目录（隐藏目录）
            fallback_dir = Path.cwd() / f".{app_name}"
            try:
                fallback_dir.mkdir(exist_ok=True)
                return fallback_dir
            except OSError:
                raise OSError(f"无法创建配置目录: {str(e)}")

    @staticmethod
    def normalize_path(path: str | Path) -> Path:
        """
        规范化路径

        展开用户主目录(~)并解析为绝对路径。

        Args:
            path (str | Path): 需要规范化的路径字符串或Path对象

        Returns:
            Path: 规范化后的Path对象

        Raises:
            ValueError: 当路径为空时
            OSError: 当路径解析失败时
        """
        if not path:
            raise ValueError("路径不能为空")

        try:
            path_obj = Path(path) if isinstance(path, str) else path
            return path_obj.expanduser().resolve()
        except OSError as e:
            raise OSError(f"无法解析路径 '{path}': {str(e)}")

    @staticmethod
    def is_jar_file(path: str | Path) -> bool:
        """判断路径是否指向 jar 文件（按扩展名，不区分大小写）"""
        return str(path).lower().endswith(".jar")

    @staticmethod
    def list_matching_files(folder: str | Path, pattern: str) -> List[Path]:
        """
        列出目录中文件名匹配正则模式的文件

        结果按文件名字典序排序，保证不同平台上的目录列举顺序一致。

        Args:
            folder (str | Path): 要搜索的目录
            pattern (str): 应用于文件名（不含目录）的正则表达式

        Returns:
            List[Path]: 匹配的文件路径列表，可能为空

        Raises:
            OSError: 当目录不可读取时

        Example:
            >>> PathHelper.list_matching_files("/opt/jdbc", r"^ojdbc.*\\.jar$")
            [PosixPath('/opt/jdbc/ojdbc11.jar'), PosixPath('/opt/jdbc/ojdbc8.jar')]
        """
        folder_path = Path(folder)
        if not folder_path.is_dir():
            return []

        regex = re.compile(pattern)
        matches = [
            entry
            for entry in folder_path.iterdir()
            if entry.is_file() and regex.search(entry.name)
        ]
        return sorted(matches, key=lambda entry: entry.name)
