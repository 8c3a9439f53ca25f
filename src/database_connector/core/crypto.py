"""
加密管理模块

使用 cryptography.fernet 进行对称加密，为连接凭据提供加密令牌。
密钥由口令和盐值经 PBKDF2 派生，因此只需在环境中提供口令
（DATABASECONNECTOR_SECRET）即可在连接时解密凭据。

令牌格式：<base64 盐值>$<Fernet 令牌>，盐值随令牌一起保存，
解密时只需要口令。
"""

import base64
import os
import secrets

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..utils.logging_utils import get_logger
from .exceptions import CryptoError

# 获取模块级别的日志记录器
logger = get_logger(__name__)

ENV_SECRET = "DATABASECONNECTOR_SECRET"
TOKEN_SEPARATOR = "$"


class CryptoManager:
    """
    加密管理器类

    提供基于 Fernet 的对称加密功能，使用 PBKDF2 进行密钥派生。

    Attributes:
        DEFAULT_SALT_LENGTH (int): 默认盐值长度（16字节）
        DEFAULT_ITERATIONS (int): PBKDF2 迭代次数（480000次，符合OWASP推荐）

    Example:
        >>> crypto = CryptoManager("my_passphrase")
        >>> token = crypto.encrypt("db_password")
        >>> crypto.decrypt(token)
        'db_password'
    """

    DEFAULT_SALT_LENGTH = 16
    DEFAULT_ITERATIONS = 480000

    def __init__(self, passphrase: str) -> None:
        """
        初始化加密管理器

        Args:
            passphrase: 用于派生密钥的口令

        Raises:
            CryptoError: 当口令为空时
        """
        if not passphrase or not isinstance(passphrase, str):
            raise CryptoError("加密口令不能为空且必须是字符串", operation="init")
        self._passphrase = passphrase

    @classmethod
    def from_environment(cls) -> "CryptoManager":
        """
        使用环境变量 DATABASECONNECTOR_SECRET 中的口令创建实例

        Raises:
            CryptoError: 当环境变量未设置时
        """
        passphrase = os.environ.get(ENV_SECRET)
        if not passphrase:
            raise CryptoError(
                f"未设置环境变量 {ENV_SECRET}，无法解密凭据", operation="init"
            )
        return cls(passphrase)

    def _create_fernet_instance(self, salt: bytes) -> Fernet:
        """
        创建 Fernet 加密实例

        Process:
            1. 使用 PBKDF2 从口令和盐值派生密钥
            2. 将派生的密钥编码为 base64 格式
            3. 创建 Fernet 实例
        """
        try:
            kdf = PBKDF2HMAC(
                algorithm=hashes.SHA256(),
                length=32,
                salt=salt,
                iterations=self.DEFAULT_ITERATIONS,
            )
            key_material = kdf.derive(self._passphrase.encode("utf-8"))
            return Fernet(base64.urlsafe_b64encode(key_material))
        except Exception as e:
            logger.error(f"Fernet 实例创建失败: {str(e)}")
            raise CryptoError(f"加密密钥派生失败: {str(e)}", operation="derive") from e

    def encrypt(self, data: str) -> str:
        """
        加密字符串数据

        Args:
            data: 要加密的明文字符串

        Returns:
            str: 带盐值前缀的加密令牌

        Raises:
            ValueError: 当输入数据为空或不是字符串时
        """
        if not data or not isinstance(data, str):
            raise ValueError("加密数据不能为空且必须是字符串")

        salt = secrets.token_bytes(self.DEFAULT_SALT_LENGTH)
        fernet = self._create_fernet_instance(salt)
        token = fernet.encrypt(data.encode("utf-8")).decode("utf-8")
        salt_text = base64.urlsafe_b64encode(salt).decode("utf-8")
        return f"{salt_text}{TOKEN_SEPARATOR}{token}"

    def decrypt(self, token: str) -> str:
        """
        解密加密令牌

        Args:
            token: encrypt() 生成的令牌

        Returns:
            str: 解密后的明文

        Raises:
            CryptoError: 当令牌格式无效、被篡改或口令不匹配时
        """
        if not token or not isinstance(token, str) or TOKEN_SEPARATOR not in token:
            raise CryptoError("加密令牌格式无效", operation="decrypt")

        salt_text, fernet_token = token.split(TOKEN_SEPARATOR, 1)
        try:
            salt = base64.urlsafe_b64decode(salt_text.encode("utf-8"))
        except ValueError as e:
            raise CryptoError("加密令牌中的盐值无效", operation="decrypt") from e

        fernet = self._create_fernet_instance(salt)
        try:
            return fernet.decrypt(fernet_token.encode("utf-8")).decode("utf-8")
        except InvalidToken as e:
            logger.error("解密令牌无效")
            raise CryptoError(
                "解密失败: 加密数据可能被篡改或口令不匹配", operation="decrypt"
            ) from e

    def __repr__(self) -> str:
        """返回加密管理器的详细表示（安全版本，不包含口令）"""
        return f"<CryptoManager object at {hex(id(self))}, iterations={self.DEFAULT_ITERATIONS}>"
