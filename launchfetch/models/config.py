"""
配置数据模型

从 TOML / JSON / YAML 读取的字典构建配置对象，并进行校验。
"""

import platform
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from launchfetch.exceptions import ConfigValidationError

VERSION_MANIFEST_URL = "https://launchermeta.mojang.com/mc/game/version_manifest.json"
ASSETS_URL = "https://resources.download.minecraft.net"
LIBRARIES_URL = "https://libraries.minecraft.net/"

OS_TAGS = ("windows", "osx", "linux")


def detect_os() -> str:
    """根据当前平台推断系统标识"""
    system = platform.system().lower()
    if system == "windows":
        return "windows"
    if system == "darwin":
        return "osx"
    return "linux"


@dataclass
class NetworkConfig:
    """网络配置"""

    max_concurrent: int = 16
    timeout: float = 3.0
    chunk_size: int = 8192

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetworkConfig":
        config = cls(
            max_concurrent=data.get("max_concurrent", cls.max_concurrent),
            timeout=data.get("timeout", cls.timeout),
            chunk_size=data.get("chunk_size", cls.chunk_size),
        )
        if not isinstance(config.max_concurrent, int) or config.max_concurrent <= 0:
            raise ConfigValidationError(
                "network.max_concurrent 必须为正整数",
                context={"max_concurrent": config.max_concurrent},
            )
        if not isinstance(config.timeout, (int, float)) or config.timeout <= 0:
            raise ConfigValidationError(
                "network.timeout 必须为正数", context={"timeout": config.timeout}
            )
        if not isinstance(config.chunk_size, int) or config.chunk_size <= 0:
            raise ConfigValidationError(
                "network.chunk_size 必须为正整数",
                context={"chunk_size": config.chunk_size},
            )
        return config


@dataclass
class RetryConfig:
    """
    重试配置

    max_passes 为 None 时不限制同步轮数；retry_delay 为 0 时关闭退避。
    """

    max_passes: Optional[int] = None
    retry_delay: float = 1.0
    backoff_factor: float = 2.0
    max_delay: float = 60.0

    def delay_before(self, attempt: int) -> float:
        """第 attempt 轮（从 0 开始）开始前需要等待的秒数"""
        if attempt <= 0 or self.retry_delay <= 0:
            return 0.0
        return min(self.retry_delay * self.backoff_factor ** (attempt - 1), self.max_delay)

    def exhausted(self, attempt: int) -> bool:
        return self.max_passes is not None and attempt >= self.max_passes

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RetryConfig":
        max_passes = data.get("max_passes")
        if max_passes == 0:
            max_passes = None
        if max_passes is not None and (
            not isinstance(max_passes, int) or max_passes < 0
        ):
            raise ConfigValidationError(
                "retry.max_passes 必须为非负整数", context={"max_passes": max_passes}
            )

        config = cls(
            max_passes=max_passes,
            retry_delay=data.get("retry_delay", cls.retry_delay),
            backoff_factor=data.get("backoff_factor", cls.backoff_factor),
            max_delay=data.get("max_delay", cls.max_delay),
        )
        for key in ("retry_delay", "backoff_factor", "max_delay"):
            value = getattr(config, key)
            if not isinstance(value, (int, float)) or value < 0:
                raise ConfigValidationError(
                    f"retry.{key} 必须为非负数", context={key: value}
                )
        return config


@dataclass
class SourcesConfig:
    """远程地址配置"""

    version_manifest: str = VERSION_MANIFEST_URL
    assets_url: str = ASSETS_URL
    libraries_url: str = LIBRARIES_URL

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SourcesConfig":
        config = cls(
            version_manifest=data.get("version_manifest", VERSION_MANIFEST_URL),
            assets_url=data.get("assets_url", ASSETS_URL),
            libraries_url=data.get("libraries_url", LIBRARIES_URL),
        )
        for key, value in vars(config).items():
            if not isinstance(value, str) or not value.startswith(
                ("http://", "https://")
            ):
                raise ConfigValidationError(
                    f"sources.{key} 必须为 http(s) 地址", context={key: value}
                )
        return config


@dataclass
class LaunchFetchConfig:
    """LaunchFetch 总配置"""

    root: str = ".minecraft"
    os: str = field(default_factory=detect_os)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    sources: SourcesConfig = field(default_factory=SourcesConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "LaunchFetchConfig":
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigValidationError("配置文件顶层必须为表/对象")

        os_tag = data.get("os") or detect_os()
        if os_tag not in OS_TAGS:
            raise ConfigValidationError(
                f"os 必须为 {'/'.join(OS_TAGS)}", context={"os": os_tag}
            )

        root = data.get("root", ".minecraft")
        if not isinstance(root, str) or not root:
            raise ConfigValidationError("root 必须为非空路径", context={"root": root})

        sections = {}
        for key in ("network", "retry", "sources"):
            section = data.get(key) or {}
            if not isinstance(section, dict):
                raise ConfigValidationError(
                    f"{key} 必须为表/对象", context={key: section}
                )
            sections[key] = section

        return cls(
            root=root,
            os=os_tag,
            network=NetworkConfig.from_dict(sections["network"]),
            retry=RetryConfig.from_dict(sections["retry"]),
            sources=SourcesConfig.from_dict(sections["sources"]),
        )
