"""
进度日志监听器

把资源同步进度写入日志。
"""

from loguru import logger

from launchfetch.events import Event, EventListener, EventType


class ProgressListener(EventListener):
    """
    资源同步进度监听器

    每完成 step 个百分点记录一次日志。
    """

    name = "progress"

    def __init__(self, step: int = 5):
        self.step = step
        self._last_percent = 0
        self.downloaded = 0

    def register_handlers(self):
        return {
            EventType.ASSETS_DOWNLOAD_START: self.on_assets_start,
            EventType.ASSETS_DOWNLOAD_STATUS: self.on_assets_status,
            EventType.DOWNLOAD: self.on_download,
            EventType.PACKAGE_EXTRACT: self.on_package_extract,
        }

    def on_assets_start(self, event: Event) -> None:
        self._last_percent = 0
        logger.info("[资源] 开始同步资源文件")

    def on_assets_status(self, event: Event) -> None:
        total = event["total_count"]
        if not total:
            return
        percent = int(event["d_count"] * 100 / total)
        if percent - self._last_percent >= self.step or percent == 100:
            self._last_percent = percent
            logger.info(f"[进度] 资源 {event['d_count']}/{total} ({percent}%)")

    def on_download(self, event: Event) -> None:
        self.downloaded += 1
        logger.debug(f"[完成] '{event['name']}' 下载完成")

    def on_package_extract(self, event: Event) -> None:
        if event["success"]:
            logger.success("[解压] 客户端包解压完成")
