"""
依赖解析服务

计算启动所需的库 jar 路径，缺失的库文件会被下载。
支持 Forge 叠加描述。
"""

import os
from typing import Dict, List, Optional, Tuple

from loguru import logger

from launchfetch.archive import ArchiveExtractor
from launchfetch.download import Fetcher, WorkerPool
from launchfetch.models import (
    DependencyBundle,
    ForgeDescriptor,
    ForgeLibrary,
    LibraryDescriptor,
    VersionDescriptor,
)
from launchfetch.models.config import LIBRARIES_URL
from launchfetch.services.manifest_client import read_json

FORGE_METADATA_ENTRY = "version.json"


class DependencyResolver:
    """依赖解析器"""

    def __init__(
        self,
        fetcher: Fetcher,
        pool: WorkerPool,
        libraries_url: str = LIBRARIES_URL,
        extractor: Optional[ArchiveExtractor] = None,
    ):
        self.fetcher = fetcher
        self.pool = pool
        self.libraries_url = libraries_url
        self.extractor = extractor or ArchiveExtractor()

    async def resolve(
        self,
        root: str,
        version: VersionDescriptor,
        forge_jar: Optional[str] = None,
    ) -> DependencyBundle:
        """
        解析全部依赖

        Returns:
            DependencyBundle：基础库路径在前，Forge 库路径在后；
            有 Forge 时 descriptor 为 Forge 描述
        """
        classpath = await self.resolve_classes(root, version)
        if forge_jar is None:
            return DependencyBundle(classpath=classpath, descriptor=version)

        forge_paths, forge = await self.resolve_forge(root, version, forge_jar)
        return DependencyBundle(classpath=classpath + forge_paths, descriptor=forge)

    async def resolve_classes(
        self, root: str, version: VersionDescriptor
    ) -> List[str]:
        """
        解析版本的库文件

        结果顺序与库列表一致，不去重。下载失败只记录日志，路径仍然保留。
        """
        libraries = [lib for lib in version.libraries if lib.artifact is not None]
        logger.info(f"[依赖] 开始处理 {len(libraries)} 个库文件...")

        # 同一路径只下载一次
        unique: Dict[str, LibraryDescriptor] = {}
        for lib in libraries:
            unique.setdefault(self._library_path(root, lib), lib)

        await self.pool.map(
            lambda item: self._ensure_library(item[0], item[1]), unique.items()
        )
        return [self._library_path(root, lib) for lib in libraries]

    @staticmethod
    def _library_path(root: str, library: LibraryDescriptor) -> str:
        return os.path.join(root, "libraries", *library.artifact.path.split("/"))

    async def _ensure_library(
        self, library_path: str, library: LibraryDescriptor
    ) -> str:
        if os.path.exists(library_path):
            return library_path

        outcome = await self.fetcher.fetch(
            library.artifact.url,
            os.path.dirname(library_path),
            os.path.basename(library_path),
        )
        if outcome.failed:
            logger.warning(f"[依赖] 库 '{library.name}' 下载失败: {outcome.error}")
        return library_path

    async def resolve_forge(
        self, root: str, version: VersionDescriptor, forge_jar: str
    ) -> Tuple[List[str], ForgeDescriptor]:
        """
        解析 Forge 库文件

        从 Forge jar 中提取 version.json 到 forge/<版本>/，
        跳过 Forge 自身的 jar，按库条目选择下载仓库。

        Returns:
            (库路径列表, Forge 描述)

        Raises:
            ArchiveError: Forge jar 中没有 version.json
            ManifestError: version.json 格式错误
        """
        forge_dir = os.path.join(root, "forge", version.id)
        metadata_path = await self.extractor.extract_entry_async(
            forge_jar, FORGE_METADATA_ENTRY, forge_dir
        )
        forge = ForgeDescriptor.from_dict(await read_json(metadata_path))
        logger.info(f"[依赖] 开始处理 {len(forge.libraries)} 个 Forge 库...")

        paths: List[str] = []
        unique: Dict[str, Tuple[str, ForgeLibrary]] = {}
        for lib in forge.libraries:
            target = self._forge_target(root, lib)
            if target is None:
                continue
            jar_path, base_url = target
            paths.append(jar_path)
            unique.setdefault(jar_path, (base_url, lib))

        await self.pool.map(
            lambda item: self._ensure_forge_library(item[0], *item[1]),
            unique.items(),
        )
        return paths, forge

    def repository_for(self, library: ForgeLibrary) -> Optional[str]:
        """选择下载仓库：条目自带地址，否则客户端/服务端必需时使用默认仓库"""
        if library.url:
            return library.url if library.url.endswith("/") else f"{library.url}/"
        if library.clientreq or library.serverreq:
            return self.libraries_url
        return None

    def _forge_target(
        self, root: str, library: ForgeLibrary
    ) -> Optional[Tuple[str, str]]:
        """(jar 路径, 仓库地址)，Forge 自身或无下载地址时返回 None"""
        if library.is_loader():
            return None

        base_url = self.repository_for(library)
        if base_url is None:
            logger.debug(f"[依赖] 跳过 Forge 库 '{library.name}'（无下载地址）")
            return None

        jar_dir = os.path.join(root, "libraries", *library.maven_dir().split("/"))
        return os.path.join(jar_dir, library.filename), base_url

    async def _ensure_forge_library(
        self, jar_path: str, base_url: str, library: ForgeLibrary
    ) -> str:
        if os.path.exists(jar_path):
            return jar_path

        outcome = await self.fetcher.fetch(
            f"{base_url}{library.maven_path()}",
            os.path.dirname(jar_path),
            library.filename,
        )
        if outcome.failed:
            logger.warning(f"[依赖] Forge 库 '{library.name}' 下载失败: {outcome.error}")
        return jar_path

    @staticmethod
    def build_classpath(paths: List[str], client_jar: str, os_tag: str) -> str:
        """拼接 classpath，客户端 jar 放在最后"""
        separator = ";" if os_tag == "windows" else ":"
        return separator.join([*paths, client_jar])
