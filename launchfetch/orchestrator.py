"""
主协调器

整合所有服务层组件，按顺序准备一个可启动的游戏目录。
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from loguru import logger

from launchfetch.download import Fetcher, WorkerPool
from launchfetch.events import EventBus, ensure_bus
from launchfetch.models import (
    Authorization,
    ForgeDescriptor,
    LaunchFetchConfig,
    LaunchOptions,
    VersionDescriptor,
)
from launchfetch.services import (
    AssetSynchronizer,
    DependencyResolver,
    ManifestClient,
    NativeInstaller,
    PackageExtractor,
    build_game_arguments,
    jvm_arguments,
)


@dataclass
class LaunchPlan:
    """准备完成的启动信息"""

    version: VersionDescriptor
    client_jar: str
    natives_dir: str
    classpath: List[str] = field(default_factory=list)
    game_arguments: List[str] = field(default_factory=list)
    jvm_arguments: List[str] = field(default_factory=list)
    main_class: Optional[str] = None
    asset_passes: int = 0


class LaunchFetch:
    """LaunchFetch 主协调器"""

    def __init__(self, config: LaunchFetchConfig, events: Optional[EventBus] = None):
        self.config = config
        self.events = ensure_bus(events)
        self.fetcher = Fetcher(
            timeout=config.network.timeout,
            chunk_size=config.network.chunk_size,
            events=self.events,
        )
        self.pool = WorkerPool(config.network.max_concurrent, name="downloader")
        self.manifest_client = ManifestClient(
            self.fetcher, manifest_url=config.sources.version_manifest
        )
        self.assets = AssetSynchronizer(
            self.fetcher,
            self.manifest_client,
            self.pool,
            retry=config.retry,
            assets_url=config.sources.assets_url,
            events=self.events,
        )
        self.dependencies = DependencyResolver(
            self.fetcher, self.pool, libraries_url=config.sources.libraries_url
        )
        self.natives = NativeInstaller(self.fetcher, self.pool)
        self.packages = PackageExtractor(self.fetcher, events=self.events)

    @property
    def versions_dir(self) -> str:
        return os.path.join(self.config.root, "versions")

    async def prepare(
        self,
        version_number: str,
        forge_jar: Optional[str] = None,
        authorization: Optional[Authorization] = None,
        options: Optional[LaunchOptions] = None,
    ) -> LaunchPlan:
        """
        准备版本：版本描述、客户端 jar、原生库、依赖库、资源文件、启动参数

        Raises:
            ManifestError: 版本描述或资源索引无法获取
            ClientJarError: 客户端 jar 下载失败
            SyncExhaustedError: 资源同步达到最大轮数
        """
        root = self.config.root
        logger.info(f"[开始] 准备 Minecraft {version_number} ({root})")

        try:
            version = await self.manifest_client.get_version(
                version_number, self.versions_dir
            )
            client_jar = await self.manifest_client.install_client(
                version, version_number, self.versions_dir
            )
            natives_dir = await self.natives.install(root, version, self.config.os)
            bundle = await self.dependencies.resolve(root, version, forge_jar)
            passes = await self.assets.synchronize(root, version)
        finally:
            await self.fetcher.close()

        if options is None:
            options = LaunchOptions(
                root=root,
                version_number=version_number,
                version_type=version.type or "release",
                authorization=authorization,
            )

        forge = bundle.descriptor if isinstance(bundle.descriptor, ForgeDescriptor) else None
        plan = LaunchPlan(
            version=version,
            client_jar=client_jar,
            natives_dir=natives_dir,
            classpath=bundle.classpath,
            game_arguments=build_game_arguments(version, options, forge),
            jvm_arguments=jvm_arguments(self.config.os),
            main_class=(forge.main_class if forge else None) or version.main_class,
            asset_passes=passes,
        )
        logger.success(f"[完成] Minecraft {version_number} 准备完成")
        return plan

    async def extract_package(self, package: str) -> int:
        """解压客户端包到游戏目录"""
        try:
            return await self.packages.extract(self.config.root, package)
        finally:
            await self.fetcher.close()

    def classpath_string(self, plan: LaunchPlan) -> str:
        return DependencyResolver.build_classpath(
            plan.classpath, plan.client_jar, self.config.os
        )
