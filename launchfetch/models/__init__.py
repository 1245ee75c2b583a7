"""
LaunchFetch 数据模型包

包含配置模型、版本模型和结果模型定义。
"""

from launchfetch.models.config import (
    LaunchFetchConfig,
    NetworkConfig,
    RetryConfig,
    SourcesConfig,
    detect_os,
)
from launchfetch.models.version import (
    AssetEntry,
    AssetIndex,
    AssetIndexRef,
    Artifact,
    LibraryDescriptor,
    VersionDescriptor,
    VersionManifest,
    VersionManifestEntry,
    ForgeLibrary,
    ForgeDescriptor,
)
from launchfetch.models.results import FetchOutcome, SyncResult, DependencyBundle
from launchfetch.models.launch import (
    Authorization,
    ServerAddress,
    ProxySettings,
    LaunchOptions,
)

__all__ = [
    # 配置模型
    "LaunchFetchConfig",
    "NetworkConfig",
    "RetryConfig",
    "SourcesConfig",
    "detect_os",
    # 版本模型
    "AssetEntry",
    "AssetIndex",
    "AssetIndexRef",
    "Artifact",
    "LibraryDescriptor",
    "VersionDescriptor",
    "VersionManifest",
    "VersionManifestEntry",
    "ForgeLibrary",
    "ForgeDescriptor",
    # 结果模型
    "FetchOutcome",
    "SyncResult",
    "DependencyBundle",
    # 启动模型
    "Authorization",
    "ServerAddress",
    "ProxySettings",
    "LaunchOptions",
]
