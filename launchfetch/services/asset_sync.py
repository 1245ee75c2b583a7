"""
资源同步服务

按资源索引并发下载缺失的资源文件，逐个校验哈希，
把下载失败或校验失败的条目放入下一轮，直到没有失败条目为止。
"""

import asyncio
import os
from dataclasses import dataclass
from typing import Dict, List, Optional

from loguru import logger

from launchfetch.download import Fetcher, FileVerifier, WorkerPool
from launchfetch.events import EventBus, EventType, ensure_bus
from launchfetch.exceptions import IntegrityError, SyncExhaustedError
from launchfetch.models import (
    AssetEntry,
    AssetIndex,
    RetryConfig,
    SyncResult,
    VersionDescriptor,
)
from launchfetch.models.config import ASSETS_URL
from launchfetch.services.manifest_client import ManifestClient


@dataclass
class ProgressCounter:
    """同步进度统计，只用于进度显示"""

    d_count: int = 0
    d_size: int = 0
    total_count: int = 0
    total_size: int = 0

    def reset(self, total_count: int, total_size: int) -> None:
        self.d_count = 0
        self.d_size = 0
        self.total_count = total_count
        self.total_size = total_size

    @property
    def percentage(self) -> int:
        if self.total_size <= 0:
            return 0
        return round(self.d_size / self.total_size * 100)


class AssetSynchronizer:
    """资源同步器"""

    def __init__(
        self,
        fetcher: Fetcher,
        manifest_client: ManifestClient,
        pool: WorkerPool,
        retry: Optional[RetryConfig] = None,
        assets_url: str = ASSETS_URL,
        events: Optional[EventBus] = None,
        verifier: Optional[FileVerifier] = None,
    ):
        self.fetcher = fetcher
        self.manifest_client = manifest_client
        self.pool = pool
        self.retry = retry or RetryConfig()
        self.assets_url = assets_url
        self.events = ensure_bus(events)
        self.verifier = verifier or FileVerifier()
        self.progress = ProgressCounter()
        self._progress_lock = asyncio.Lock()

    async def synchronize(self, directory: str, version: VersionDescriptor) -> int:
        """
        同步版本的全部资源文件

        Returns:
            执行的轮数

        Raises:
            ManifestError: 资源索引无法获取
            SyncExhaustedError: 配置了最大轮数且仍有失败条目
        """
        self.events.emit(EventType.ASSETS_DOWNLOAD_START)
        index = await self.manifest_client.get_asset_index(
            directory, version.asset_index
        )
        return await self.synchronize_index(directory, index)

    async def synchronize_index(self, directory: str, index: AssetIndex) -> int:
        """按资源索引循环同步直到收敛"""
        self.progress.reset(len(index.objects), index.total_size)
        logger.info(
            f"[资源] 共 {self.progress.total_count} 个资源文件，"
            f"总大小 {self.progress.total_size / (1024 * 1024):.2f} MB"
        )

        pending: Dict[str, AssetEntry] = dict(index.objects)
        passes = 0
        while pending:
            if self.retry.exhausted(passes):
                raise SyncExhaustedError(
                    f"资源同步 {passes} 轮后仍有 {len(pending)} 个文件失败",
                    remaining=sorted(pending),
                    context={"passes": passes},
                )

            delay = self.retry.delay_before(passes)
            if delay > 0:
                logger.info(f"[重试] {delay:.1f}s 后重试 {len(pending)} 个文件...")
                await asyncio.sleep(delay)

            result = await self.run_pass(directory, pending)
            passes += 1
            logger.info(
                f"[资源] 第 {passes} 轮: {len(result.failed)} 个文件失败 "
                f"(下载失败 {result.transport_failures}, "
                f"校验失败 {result.integrity_failures})"
            )
            pending = result.failed

        logger.success(f"[完成] 资源同步完成，共执行 {passes} 轮")
        return passes

    async def run_pass(
        self, directory: str, assets: Dict[str, AssetEntry]
    ) -> SyncResult:
        """
        执行一轮同步

        同一哈希对应的多个名称共用一个文件，只下载和校验一次。

        Returns:
            SyncResult，failed 为需要重试的条目
        """
        groups: Dict[str, List[AssetEntry]] = {}
        for entry in assets.values():
            groups.setdefault(entry.hash, []).append(entry)

        result = SyncResult()

        async def handle(entries: List[AssetEntry]) -> None:
            await self._sync_object(directory, entries, result)

        outcomes = await self.pool.map(handle, groups.values())

        # 工作池已记录异常，这里把对应条目放回重试集合
        for entries, outcome in zip(groups.values(), outcomes):
            if isinstance(outcome, Exception):
                self._mark_failed(result, entries)
                result.integrity_failures += 1

        return result

    async def _sync_object(
        self, directory: str, entries: List[AssetEntry], result: SyncResult
    ) -> None:
        entry = entries[0]
        object_dir = entry.object_dir(directory)
        file_path = entry.object_path(directory)

        if not self.verifier.is_present(file_path):
            outcome = await self.fetcher.fetch(
                entry.url(self.assets_url), object_dir, entry.hash
            )
            if outcome.failed:
                logger.debug(f"[失败] 下载资源 '{entry.name}' 失败: {outcome.error}")
                self._mark_failed(result, entries)
                result.transport_failures += 1
                return

        try:
            file_hash = await self.verifier.calc_sha1(file_path)
        except (IntegrityError, OSError) as e:
            logger.error(f"[错误] 无法校验 '{entry.name}' ({file_path}): {e}")
            self._discard(file_path)
            self._mark_failed(result, entries)
            result.integrity_failures += 1
            return

        if file_hash != entry.hash:
            logger.warning(
                f"[校验] '{entry.name}' 哈希不匹配 "
                f"(期望 {entry.hash}, 实际 {file_hash})，已删除"
            )
            self._discard(file_path)
            self._mark_failed(result, entries)
            result.integrity_failures += 1
            return

        for item in entries:
            await self._accept(item)

    async def _accept(self, entry: AssetEntry) -> None:
        """记录一个校验通过的条目"""
        async with self._progress_lock:
            self.progress.d_count += 1
            self.progress.d_size += entry.size
            self.events.emit(
                EventType.ASSETS_DOWNLOAD_STATUS,
                d_count=self.progress.d_count,
                total_count=self.progress.total_count,
                name=entry.name,
            )
            logger.debug(
                f"[校验] ({self.progress.d_count}/{self.progress.total_count}) "
                f"{self.progress.percentage}% '{entry.name}' 校验通过"
            )

    @staticmethod
    def _mark_failed(result: SyncResult, entries: List[AssetEntry]) -> None:
        for item in entries:
            result.failed[item.name] = item

    @staticmethod
    def _discard(file_path: str) -> None:
        try:
            os.remove(file_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"[警告] 无法删除文件 {file_path}: {e}")
