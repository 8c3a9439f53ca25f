"""
凭据提供者

连接参数中的用户名、密码、服务器、端口和连接字符串都可以延迟求值：
创建 ConnectionDetails 时只保存提供者，真正连接时才调用 resolve()，
并且每次连接尝试只求值一次。

支持的提供者：
- StaticCredential: 固定值
- CallableCredential: 无参函数
- EnvCredential: 环境变量
- PromptCredential: 交互式输入（getpass）
- EncryptedCredential: 加密令牌（需要 DATABASECONNECTOR_SECRET）
"""

import getpass
import os
from abc import ABC, abstractmethod
from typing import Any, Callable

from ..utils.logging_utils import get_logger
from .crypto import CryptoManager
from .exceptions import ConfigError

# 获取模块级别的日志记录器
logger = get_logger(__name__)


class CredentialProvider(ABC):
    """凭据提供者基类"""

    @abstractmethod
    def resolve(self) -> Any:
        """求值并返回凭据，可能返回 None"""


class StaticCredential(CredentialProvider):
    def __init__(self, value: Any) -> None:
        self._value = value

    def resolve(self) -> Any:
        return self._value

    def __repr__(self) -> str:
        # 不输出具体值
        return "StaticCredential(***)" if self._value is not None else "StaticCredential(None)"


class CallableCredential(CredentialProvider):
    def __init__(self, func: Callable[[], Any]) -> None:
        if not callable(func):
            raise ConfigError("CallableCredential 需要一个无参函数")
        self._func = func

    def resolve(self) -> Any:
        return self._func()

    def __repr__(self) -> str:
        return f"CallableCredential({getattr(self._func, '__name__', 'callable')})"


class EnvCredential(CredentialProvider):
    """
    从环境变量读取凭据

    Args:
        name: 环境变量名
        required: 为 True 时环境变量缺失会抛出 ConfigError，否则返回 None
    """

    def __init__(self, name: str, required: bool = True) -> None:
        self.name = name
        self.required = required

    def resolve(self) -> Any:
        value = os.environ.get(self.name)
        if value is None and self.required:
            raise ConfigError(
                f"环境变量 {self.name} 未设置", config_key=self.name
            )
        return value

    def __repr__(self) -> str:
        return f"EnvCredential({self.name!r})"


class PromptCredential(CredentialProvider):
    """交互式输入凭据，输入内容不回显"""

    def __init__(self, prompt: str = "密码: ") -> None:
        self.prompt = prompt

    def resolve(self) -> Any:
        return getpass.getpass(self.prompt)

    def __repr__(self) -> str:
        return f"PromptCredential({self.prompt!r})"


class EncryptedCredential(CredentialProvider):
    """
    加密令牌形式的凭据

    令牌由 CryptoManager.encrypt() 生成（命令行 encrypt 子命令），解密口令
    默认取自 DATABASECONNECTOR_SECRET 环境变量。

    Example:
        >>> password = EncryptedCredential("c2FsdA==$gAAAAAB...")
    """

    def __init__(self, token: str, crypto: CryptoManager | None = None) -> None:
        self.token = token
        self._crypto = crypto

    def resolve(self) -> Any:
        crypto = self._crypto or CryptoManager.from_environment()
        return crypto.decrypt(self.token)

    def __repr__(self) -> str:
        return "EncryptedCredential(***)"


def as_provider(value: Any) -> CredentialProvider:
    """
    把普通值、无参函数或提供者统一转换为 CredentialProvider
    """
    if isinstance(value, CredentialProvider):
        return value
    if callable(value):
        return CallableCredential(value)
    return StaticCredential(value)
