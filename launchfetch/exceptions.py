"""
LaunchFetch 统一异常体系

提供分层的异常结构，支持错误代码、上下文信息和 JSON 序列化。
"""

from typing import Any, Dict, List, Optional


class LaunchFetchError(Exception):
    """LaunchFetch 基础异常类"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._get_default_code()
        self.context = context or {}

    def _get_default_code(self) -> str:
        """获取默认错误代码"""
        return "E000"

    def to_dict(self) -> Dict[str, Any]:
        """将异常转换为字典格式"""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "type": self.__class__.__name__,
        }

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ConfigError(LaunchFetchError):
    """配置相关错误"""

    def _get_default_code(self) -> str:
        return "E100"


class ConfigParseError(ConfigError):
    """配置解析错误"""

    def _get_default_code(self) -> str:
        return "E101"


class ConfigValidationError(ConfigError):
    """配置验证错误"""

    def _get_default_code(self) -> str:
        return "E102"


class ManifestError(LaunchFetchError):
    """
    清单错误

    版本清单、版本描述或资源索引无法获取或格式不正确。
    没有其他来源可用，因此直接抛给调用者。
    """

    def _get_default_code(self) -> str:
        return "E200"


class DownloadError(LaunchFetchError):
    """下载相关错误"""

    def _get_default_code(self) -> str:
        return "E300"


class TransportError(DownloadError):
    """下载网络错误（连接、超时、数据流中断）"""

    def _get_default_code(self) -> str:
        return "E301"


class IntegrityError(DownloadError):
    """文件校验错误"""

    def _get_default_code(self) -> str:
        return "E302"


class VerifyNotFoundError(IntegrityError):
    """待校验的文件不存在"""

    def _get_default_code(self) -> str:
        return "E303"


class SyncExhaustedError(DownloadError):
    """资源同步达到最大轮数仍未收敛"""

    def __init__(
        self,
        message: str,
        remaining: Optional[List[str]] = None,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, code, context)
        self.remaining = remaining or []
        self.context.setdefault("remaining", len(self.remaining))

    def _get_default_code(self) -> str:
        return "E304"


class ClientJarError(DownloadError):
    """客户端 jar 下载失败"""

    def _get_default_code(self) -> str:
        return "E305"


class ArchiveError(LaunchFetchError):
    """压缩包解压错误"""

    def _get_default_code(self) -> str:
        return "E400"


__all__ = [
    # 基础异常
    "LaunchFetchError",
    # 配置异常
    "ConfigError",
    "ConfigParseError",
    "ConfigValidationError",
    # 清单异常
    "ManifestError",
    # 下载异常
    "DownloadError",
    "TransportError",
    "IntegrityError",
    "VerifyNotFoundError",
    "SyncExhaustedError",
    "ClientJarError",
    # 解压异常
    "ArchiveError",
]
