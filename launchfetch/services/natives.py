"""
原生库安装服务

下载当前系统的原生库压缩包，解压到 natives/<版本>/ 后删除压缩包。
"""

import os
from typing import Optional

from loguru import logger

from launchfetch.archive import ArchiveExtractor
from launchfetch.download import Fetcher, WorkerPool
from launchfetch.models import LibraryDescriptor, VersionDescriptor


class NativeInstaller:
    """
    原生库安装器

    目录存在即视为安装完成，不再检查其内容。
    """

    def __init__(
        self,
        fetcher: Fetcher,
        pool: WorkerPool,
        extractor: Optional[ArchiveExtractor] = None,
    ):
        self.fetcher = fetcher
        self.pool = pool
        self.extractor = extractor or ArchiveExtractor()

    @staticmethod
    def native_dir(root: str, version: VersionDescriptor) -> str:
        return os.path.join(root, "natives", version.id)

    async def install(self, root: str, version: VersionDescriptor, os_tag: str) -> str:
        """
        安装原生库

        Returns:
            原生库目录
        """
        native_dir = self.native_dir(root, version)
        if os.path.isdir(native_dir):
            logger.debug(f"[跳过] 原生库目录已存在: {native_dir}")
            return native_dir

        os.makedirs(native_dir, exist_ok=True)

        libraries = [lib for lib in version.libraries if lib.native_for(os_tag)]
        logger.info(f"[原生库] 开始处理 {len(libraries)} 个原生库 ({os_tag})...")

        await self.pool.map(
            lambda lib: self._install_library(native_dir, lib, os_tag), libraries
        )
        return native_dir

    async def _install_library(
        self, native_dir: str, library: LibraryDescriptor, os_tag: str
    ) -> None:
        native = library.native_for(os_tag)
        name = native.filename
        archive_path = os.path.join(native_dir, name)

        outcome = await self.fetcher.fetch(native.url, native_dir, name)
        if outcome.failed:
            logger.warning(f"[原生库] '{library.name}' 下载失败: {outcome.error}")
            return

        try:
            count = await self.extractor.extract_all_async(archive_path, native_dir)
            logger.debug(f"[原生库] '{name}' 解压了 {count} 个文件")
        finally:
            try:
                os.remove(archive_path)
            except OSError as e:
                logger.warning(f"[原生库] 无法删除压缩包 {archive_path}: {e}")
