"""
客户端包解压

把预先打包好的客户端包（本地路径或 http 地址）解压到游戏目录。
"""

import os
from typing import Optional

from loguru import logger

from launchfetch.archive import ArchiveExtractor
from launchfetch.download import Fetcher
from launchfetch.events import EventBus, EventType, ensure_bus
from launchfetch.exceptions import ArchiveError, TransportError

PACKAGE_NAME = "clientPackage.zip"


class PackageExtractor:
    """客户端包解压器"""

    def __init__(
        self,
        fetcher: Fetcher,
        events: Optional[EventBus] = None,
        extractor: Optional[ArchiveExtractor] = None,
    ):
        self.fetcher = fetcher
        self.events = ensure_bus(events)
        self.extractor = extractor or ArchiveExtractor()

    async def extract(self, root: str, package: str) -> int:
        """
        解压客户端包

        Returns:
            解压的文件数

        Raises:
            TransportError: 远程包下载失败
            ArchiveError: 包无法读取
        """
        if package.startswith(("http://", "https://")):
            outcome = await self.fetcher.fetch(package, root, PACKAGE_NAME)
            if outcome.failed:
                raise TransportError(
                    f"客户端包下载失败: {outcome.error}", context={"url": package}
                )
            package = os.path.join(root, PACKAGE_NAME)

        if not os.path.isfile(package):
            raise ArchiveError(f"客户端包不存在: {package}", context={"path": package})

        count = await self.extractor.extract_all_async(package, root)
        if count == 0:
            raise ArchiveError(f"客户端包为空或无法读取: {package}", context={"path": package})

        logger.info(f"[解压] 客户端包解压了 {count} 个文件")
        self.events.emit(EventType.PACKAGE_EXTRACT, success=True)
        return count
