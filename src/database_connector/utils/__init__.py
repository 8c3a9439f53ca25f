"""
数据库连接器工具模块

提供日志配置和跨平台路径处理功能。

日志管理功能：
- setup_logging(): 初始化日志系统配置（滚动文件 + 可选控制台输出）
- get_logger(): 获取模块级别的日志记录器
- set_log_level(): 动态设置日志级别
- mask_credentials(): 掩码连接字符串中的密码

路径处理功能：
- PathHelper: 配置目录获取、路径规范化、按文件名模式查找驱动文件

使用示例：
    >>> from database_connector.utils import get_logger, setup_logging
    >>> setup_logging(level="DEBUG", log_to_console=True)
    >>> logger = get_logger(__name__)
"""

from .logging_utils import get_logger, mask_credentials, set_log_level, setup_logging
from .path_utils import PathHelper

# 按功能模块分组，便于用户理解和导入
__all__ = [
    # ==================== 日志管理模块 ====================
    "setup_logging",  # 初始化日志系统配置
    "get_logger",  # 获取模块级别的日志记录器
    "set_log_level",  # 动态设置日志级别
    "mask_credentials",  # 掩码连接字符串中的密码
    # ==================== 路径处理模块 ====================
    "PathHelper",  # 路径助手类
]
