"""
启动参数构建

替换游戏参数中的占位符，并追加服务器和代理参数。纯函数，不做任何 I/O。
"""

import os
from typing import Dict, List, Optional, Union

from loguru import logger

from launchfetch.models import ForgeDescriptor, LaunchOptions, VersionDescriptor
from launchfetch.models.launch import Authorization

LEGACY_ASSETS = ("legacy", "pre-1.6")
DEFAULT_SERVER_PORT = "25565"
DEFAULT_PROXY_PORT = "8080"

JVM_ARGUMENTS = {
    "windows": "-XX:HeapDumpPath=MojangTricksIntelDriversForPerformance_javaw.exe_minecraft.exe.heapdump",
    "osx": "-XstartOnFirstThread",
    "linux": "-Xss1M",
}


def assets_root(version: VersionDescriptor, root: str) -> str:
    """旧版本使用 assets/legacy"""
    if version.assets in LEGACY_ASSETS:
        return os.path.join(root, "assets", "legacy")
    return os.path.join(root, "assets")


def placeholder_fields(
    version: VersionDescriptor, options: LaunchOptions
) -> Dict[str, str]:
    """占位符到实际值的映射"""
    auth = options.authorization or Authorization()
    asset_path = assets_root(version, options.root)
    return {
        "${auth_access_token}": auth.access_token,
        "${auth_session}": auth.access_token,
        "${auth_player_name}": auth.name,
        "${auth_uuid}": auth.uuid,
        "${user_properties}": auth.user_properties,
        "${user_type}": "mojang",
        "${version_name}": options.version_number,
        "${assets_index_name}": version.asset_index.id,
        "${game_directory}": options.root,
        "${assets_root}": asset_path,
        "${game_assets}": asset_path,
        "${version_type}": options.version_type,
    }


def _raw_arguments(
    descriptor: Union[VersionDescriptor, ForgeDescriptor],
) -> List[str]:
    if descriptor.minecraft_arguments is not None:
        return descriptor.minecraft_arguments.split(" ")

    arguments = []
    for item in descriptor.game_arguments or []:
        # 带 rules 的条件参数不处理
        if isinstance(item, str):
            arguments.append(item)
        else:
            logger.debug(f"[参数] 跳过条件参数: {item}")
    return arguments


def build_game_arguments(
    version: VersionDescriptor,
    options: LaunchOptions,
    forge: Optional[ForgeDescriptor] = None,
) -> List[str]:
    """
    构建游戏参数

    Args:
        version: 版本描述
        options: 启动选项
        forge: Forge 描述，提供时优先使用其参数

    Returns:
        参数列表
    """
    descriptor = version
    if forge is not None and (
        forge.minecraft_arguments is not None or forge.game_arguments is not None
    ):
        descriptor = forge

    fields = placeholder_fields(version, options)
    arguments = [fields.get(arg, arg) for arg in _raw_arguments(descriptor)]

    if options.server:
        arguments += [
            "--server",
            options.server.host,
            "--port",
            options.server.port or DEFAULT_SERVER_PORT,
        ]
    if options.proxy:
        arguments += [
            "--proxyHost",
            options.proxy.host,
            "--proxyPort",
            options.proxy.port or DEFAULT_PROXY_PORT,
            "--proxyUser",
            options.proxy.username,
            "--proxyPass",
            options.proxy.password,
        ]

    return arguments


def jvm_arguments(os_tag: str) -> List[str]:
    """系统相关的 JVM 参数"""
    argument = JVM_ARGUMENTS.get(os_tag)
    return [argument] if argument else []
