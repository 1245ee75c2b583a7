"""
下载器

把单个远程文件流式写入本地路径。任何传输错误都作为 FetchOutcome 返回，
不会抛出异常，调用者据此决定重试或记录。
"""

import asyncio
import os
from typing import Optional

import aiofiles
import aiohttp
from loguru import logger

from launchfetch.events import EventBus, EventType, ensure_bus
from launchfetch.exceptions import TransportError
from launchfetch.models import FetchOutcome


class Fetcher:
    """
    下载器

    Args:
        session: 共享的 aiohttp session，未提供时自行创建并在 close 时关闭
        timeout: 连接或读取停顿超过该秒数即视为失败
        chunk_size: 每次写入的块大小
        events: 事件总线
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 3.0,
        chunk_size: int = 8192,
        events: Optional[EventBus] = None,
    ):
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.events = ensure_bus(events)
        self._session = session
        self._owned_session = session is None

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(
                    total=None, sock_connect=self.timeout, sock_read=self.timeout
                )
            )
            self._owned_session = True
        return self._session

    async def fetch(self, url: str, directory: str, name: str) -> FetchOutcome:
        """
        下载单个文件到 directory/name

        同一目标路径不能并发下载。
        """
        file_path = os.path.join(directory, name)

        try:
            os.makedirs(directory, exist_ok=True)
            await self._stream_to_file(url, file_path, name)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError, TransportError) as e:
            error = str(e) or type(e).__name__
            logger.debug(f"[失败] 下载 '{name}' 失败: {error} ({url})")
            self._remove_partial(file_path)
            return FetchOutcome(
                failed=True, url=url, directory=directory, name=name, error=error
            )

        self.events.emit(EventType.DOWNLOAD, name=name)
        return FetchOutcome(failed=False, url=url, directory=directory, name=name)

    async def _stream_to_file(self, url: str, file_path: str, name: str) -> None:
        timeout = aiohttp.ClientTimeout(
            total=None, sock_connect=self.timeout, sock_read=self.timeout
        )
        async with self.session.get(url, timeout=timeout) as response:
            if response.status != 200:
                raise TransportError(
                    f"HTTP {response.status}",
                    context={"url": url, "status": response.status},
                )

            async with aiofiles.open(file_path, "wb") as f:
                downloaded = 0
                async for chunk in response.content.iter_chunked(self.chunk_size):
                    await f.write(chunk)
                    downloaded += len(chunk)
                    self.events.emit(
                        EventType.DOWNLOAD_STATUS,
                        name=name,
                        current=downloaded,
                        total=len(chunk),
                    )

    @staticmethod
    def _remove_partial(file_path: str) -> None:
        """清理不完整的文件"""
        if os.path.isfile(file_path):
            try:
                os.remove(file_path)
            except OSError as e:
                logger.warning(f"[警告] 无法删除不完整的文件 {file_path}: {e}")

    async def close(self):
        """关闭 session"""
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
