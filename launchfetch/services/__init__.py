"""
LaunchFetch 服务层

包含业务逻辑服务：清单获取、资源同步、依赖解析、原生库安装、启动参数。
"""

from launchfetch.services.manifest_client import ManifestClient
from launchfetch.services.asset_sync import AssetSynchronizer, ProgressCounter
from launchfetch.services.dependency_resolver import DependencyResolver
from launchfetch.services.natives import NativeInstaller
from launchfetch.services.package import PackageExtractor
from launchfetch.services.launch_args import build_game_arguments, jvm_arguments

__all__ = [
    "ManifestClient",
    "AssetSynchronizer",
    "ProgressCounter",
    "DependencyResolver",
    "NativeInstaller",
    "PackageExtractor",
    "build_game_arguments",
    "jvm_arguments",
]
