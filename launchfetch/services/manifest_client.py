"""
清单客户端

获取版本清单、版本描述和资源索引，并在本地缓存。
"""

import asyncio
import json
import os
from typing import Any

import aiofiles
import aiohttp
from loguru import logger

from launchfetch.download import Fetcher, FileVerifier
from launchfetch.exceptions import ClientJarError, ManifestError
from launchfetch.models import (
    AssetIndex,
    AssetIndexRef,
    VersionDescriptor,
    VersionManifest,
)
from launchfetch.models.config import VERSION_MANIFEST_URL


async def read_json(path: str) -> Any:
    """读取本地 JSON 文件，格式错误时抛出 ManifestError"""
    try:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            return json.loads(await f.read())
    except (OSError, ValueError) as e:
        raise ManifestError(f"无法读取 {path}: {e}", context={"path": path})


class ManifestClient:
    """清单客户端"""

    def __init__(
        self,
        fetcher: Fetcher,
        manifest_url: str = VERSION_MANIFEST_URL,
    ):
        self.fetcher = fetcher
        self.manifest_url = manifest_url

    async def _request(self, url: str) -> Any:
        """发送请求并解析 JSON"""
        try:
            async with self.fetcher.session.get(url) as response:
                if response.status != 200:
                    raise ManifestError(
                        f"请求失败 (状态码: {response.status})",
                        context={"url": url, "status_code": response.status},
                    )
                return json.loads(await response.text())
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ManifestError(f"请求失败: {e}", context={"url": url})
        except ValueError as e:
            raise ManifestError(f"响应不是有效的 JSON: {e}", context={"url": url})

    async def get_manifest(self) -> VersionManifest:
        """获取版本清单"""
        return VersionManifest.from_dict(await self._request(self.manifest_url))

    async def get_version(self, version: str, directory: str) -> VersionDescriptor:
        """
        获取版本描述

        优先使用 directory/<version>.json 缓存，否则从版本清单查找。

        Raises:
            ManifestError: 版本不存在或文档格式错误
        """
        cached = os.path.join(directory, f"{version}.json")
        if os.path.isfile(cached):
            logger.debug(f"[缓存] 使用本地版本描述: {cached}")
            return VersionDescriptor.from_dict(await read_json(cached))

        manifest = await self.get_manifest()
        entry = manifest.find(version)
        if entry is None:
            raise ManifestError(
                f"版本清单中不存在版本: {version}", context={"version": version}
            )

        logger.info(f"[清单] 获取版本描述: {version}")
        return VersionDescriptor.from_dict(await self._request(entry.url))

    async def install_client(
        self, version: VersionDescriptor, number: str, directory: str
    ) -> str:
        """
        下载客户端 jar，成功后把版本描述原样写入 <number>.json

        Returns:
            jar 路径
        """
        jar_path = os.path.join(directory, f"{number}.jar")
        json_path = os.path.join(directory, f"{number}.json")
        if os.path.isfile(jar_path) and os.path.isfile(json_path):
            logger.debug(f"[跳过] 客户端 {number}.jar 已存在")
            return jar_path

        outcome = await self.fetcher.fetch(
            version.client_url, directory, f"{number}.jar"
        )
        if outcome.failed:
            raise ClientJarError(
                f"客户端 jar 下载失败: {number}",
                context={"url": version.client_url, "error": outcome.error},
            )

        async with aiofiles.open(json_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(version.raw, indent=4))

        logger.success(f"[完成] 客户端 {number}.jar 下载完成")
        return jar_path

    async def get_asset_index(
        self, directory: str, ref: AssetIndexRef
    ) -> AssetIndex:
        """
        获取资源索引，缓存于 assets/indexes/<id>.json

        提供 sha1 时校验缓存和新下载的索引。无法解析的缓存会被删除，下次重新下载。

        Raises:
            ManifestError: 下载失败、校验失败或格式错误
        """
        index_dir = os.path.join(directory, "assets", "indexes")
        index_path = os.path.join(index_dir, f"{ref.id}.json")

        if os.path.isfile(index_path) and not await self._index_matches(index_path, ref):
            logger.warning(f"[清单] 资源索引缓存校验失败，重新下载: {ref.id}")
            self._discard(index_path)

        if not os.path.isfile(index_path):
            logger.info(f"[清单] 下载资源索引: {ref.id}")
            outcome = await self.fetcher.fetch(ref.url, index_dir, f"{ref.id}.json")
            if outcome.failed:
                raise ManifestError(
                    f"资源索引下载失败: {ref.id}",
                    context={"url": ref.url, "error": outcome.error},
                )
            if not await self._index_matches(index_path, ref):
                self._discard(index_path)
                raise ManifestError(
                    f"资源索引校验失败: {ref.id}",
                    context={"url": ref.url, "sha1": ref.sha1},
                )

        try:
            return AssetIndex.from_dict(ref.id, await read_json(index_path))
        except ManifestError:
            self._discard(index_path)
            raise

    @staticmethod
    async def _index_matches(index_path: str, ref: AssetIndexRef) -> bool:
        if not ref.sha1:
            return True
        return await FileVerifier.verify_sha1(index_path, ref.sha1)

    @staticmethod
    def _discard(path: str) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"[警告] 无法删除文件 {path}: {e}")
