"""
数据库连接器日志配置模块

提供统一的日志配置和管理功能，封装Python标准库logging模块。

主要功能：
- setup_logging: 快速配置日志系统（滚动文件 + 可选控制台输出）
- get_logger: 获取指定名称的logger
- set_log_level: 动态调整日志级别
- mask_credentials: 掩码连接字符串中的密码，避免写入日志
"""

import logging
import logging.handlers
import os
import re
import sys
from pathlib import Path

from .path_utils import PathHelper

# 默认日志格式 - 包含时间、模块名、级别、消息和源码位置
DEFAULT_LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s "
    + "[%(filename)s:%(lineno)d]"
)

# 支持的日志级别映射
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# 连接字符串中可能出现的密码片段
_PASSWORD_PATTERNS = [
    (re.compile(r"(password=)[^;&]*", re.IGNORECASE), r"\1***"),
    (re.compile(r"(pwd=)[^;&]*", re.IGNORECASE), r"\1***"),
    (re.compile(r"://([^:/@]+):([^@]+)@"), r"://\1:***@"),
]


def setup_logging(
    app_name: str = "database_connector",
    level: str = "INFO",
    log_to_console: bool = False,
    log_to_file: bool = True,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    log_format: str | None = None,
    log_dir: str | None = None,
) -> logging.Logger:
    """
    配置并初始化应用程序的日志系统

    Args:
        app_name (str): 应用名称，用于创建日志目录和logger名称
        level (str): 日志级别，可选值：DEBUG, INFO, WARNING, ERROR, CRITICAL
        log_to_console (bool): 是否输出到控制台（stderr）
        log_to_file (bool): 是否输出到文件
        max_file_size (int): 单个日志文件最大大小（字节），默认10MB
        backup_count (int): 保留的备份日志文件数量，默认5个
        log_format (str | None): 自定义日志格式字符串
        log_dir (str | None): 自定义日志目录，为None时使用用户配置目录下的 logs

    Returns:
        logging.Logger: 配置好的logger实例

    Raises:
        ValueError: 当日志级别无效或未启用任何输出方式时
        OSError: 当无法创建日志目录或文件时

    Example:
        >>> logger = setup_logging("database_connector", "DEBUG", log_to_console=True)
        >>> logger.info("应用程序启动成功")
    """
    log_level = _validate_log_level(level)

    if not log_to_file and not log_to_console:
        raise ValueError("至少需要启用一种日志输出方式（控制台或文件）")

    # 设置日志格式
    format_to_use = log_format if log_format is not None else DEFAULT_LOG_FORMAT
    formatter = logging.Formatter(format_to_use)

    # 获取应用专用logger（避免使用root logger）
    logger = logging.getLogger(app_name)
    logger.setLevel(log_level)

    # 清除已有的handler，避免重复配置导致的重复日志
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    log_file = None
    log_file_exists = True

    # 配置文件handler（滚动日志）
    if log_to_file:
        if log_dir is None:
            log_dir_path = PathHelper.get_user_config_dir(app_name) / "logs"
        else:
            log_dir_path = Path(log_dir)

        try:
            log_dir_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OSError(f"无法创建日志目录 {log_dir_path}: {str(e)}")

        log_file = log_dir_path / f"{app_name}.log"
        log_file_exists = os.path.exists(log_file)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=str(log_file),
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        logger.addHandler(file_handler)

    # 配置控制台handler
    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        console_handler.setLevel(log_level)
        logger.addHandler(console_handler)

    # 只在文件不存在时才打印初始化信息，避免重复日志
    if not log_file_exists:
        logger.info(
            f"日志系统初始化完成 - 应用: {app_name}, "
            f"级别: {level.upper()}, 日志文件: {log_file}"
        )

    return logger


def _validate_log_level(level: str) -> int:
    """
    验证并转换日志级别字符串为对应的logging常量

    Raises:
        ValueError: 当日志级别无效时抛出
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(f"无效的日志级别: '{level}'，有效值为: {VALID_LOG_LEVELS}")
    return LOG_LEVEL_MAP[level_upper]


def get_logger(name: str) -> logging.Logger:
    """
    获取指定名称的logger实例

    建议在模块级别使用此函数获取logger。

    Args:
        name (str): logger名称，通常使用模块名（如：__name__）

    Returns:
        logging.Logger: logger实例
    """
    return logging.getLogger(name)


def set_log_level(logger_name: str, level: str) -> None:
    """
    动态设置指定logger的日志级别

    同时更新logger和所有关联handler的级别，确保立即生效。

    Raises:
        ValueError: 当日志级别无效时
    """
    log_level = _validate_log_level(level)
    logger = get_logger(logger_name)
    logger.setLevel(log_level)

    for handler in logger.handlers:
        handler.setLevel(log_level)


def mask_credentials(url: str | None) -> str:
    """
    掩码连接字符串中的密码部分

    Args:
        url: 原始连接字符串

    Returns:
        str: 掩码后的连接字符串

    Example:
        >>> mask_credentials("jdbc:sqlserver://db;user=sa;password=secret")
        'jdbc:sqlserver://db;user=sa;password=***'
    """
    if not url:
        return ""
    masked = url
    for pattern, replacement in _PASSWORD_PATTERNS:
        masked = pattern.sub(replacement, masked)
    return masked
