"""
版本数据模型

定义版本清单、版本描述、库文件、资源索引等数据类。
所有远程文档都在这里做边界校验，格式不正确时抛出 ManifestError。
"""

import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from launchfetch.exceptions import ManifestError

_SHA1_RE = re.compile(r"^[0-9a-f]{40}$")


def _require(data: Any, key: str, kind: type, where: str) -> Any:
    """读取必填字段并检查类型"""
    if not isinstance(data, dict):
        raise ManifestError(f"{where} 不是 JSON 对象", context={"where": where})
    value = data.get(key)
    if not isinstance(value, kind) or isinstance(value, bool) and kind is int:
        raise ManifestError(
            f"{where} 缺少字段或类型错误: {key}",
            context={"where": where, "field": key},
        )
    return value


def _optional(data: dict, key: str, kind: type, where: str) -> Any:
    """读取可选字段，存在时检查类型"""
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, kind):
        raise ManifestError(
            f"{where} 字段类型错误: {key}",
            context={"where": where, "field": key},
        )
    return value


def _normalize_hash(value: str, where: str) -> str:
    digest = value.strip().lower()
    if not _SHA1_RE.match(digest):
        raise ManifestError(
            f"{where} 哈希值格式不正确: {value}",
            context={"where": where, "hash": value},
        )
    return digest


@dataclass
class AssetEntry:
    """
    资源条目

    文件按哈希值分片存储：assets/objects/<哈希前两位>/<哈希>。
    size 只用于统计进度，不参与校验。
    """

    name: str
    hash: str
    size: int = 0

    @property
    def shard(self) -> str:
        return self.hash[:2]

    def object_dir(self, directory: str) -> str:
        return os.path.join(directory, "assets", "objects", self.shard)

    def object_path(self, directory: str) -> str:
        return os.path.join(self.object_dir(directory), self.hash)

    def url(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}/{self.shard}/{self.hash}"

    @classmethod
    def from_dict(cls, name: str, data: dict) -> "AssetEntry":
        where = f"资源 '{name}'"
        digest = _normalize_hash(_require(data, "hash", str, where), where)
        size = _optional(data, "size", int, where) or 0
        return cls(name=name, hash=digest, size=size)


@dataclass
class AssetIndex:
    """资源索引"""

    id: str
    objects: Dict[str, AssetEntry] = field(default_factory=dict)

    @property
    def total_size(self) -> int:
        return sum(entry.size for entry in self.objects.values())

    @classmethod
    def from_dict(cls, index_id: str, data: dict) -> "AssetIndex":
        objects = _require(data, "objects", dict, f"资源索引 '{index_id}'")
        return cls(
            id=index_id,
            objects={
                name: AssetEntry.from_dict(name, entry)
                for name, entry in objects.items()
            },
        )


@dataclass
class AssetIndexRef:
    """版本描述中对资源索引的引用"""

    id: str
    url: str
    sha1: Optional[str] = None
    size: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> "AssetIndexRef":
        where = "assetIndex"
        return cls(
            id=_require(data, "id", str, where),
            url=_require(data, "url", str, where),
            sha1=_optional(data, "sha1", str, where),
            size=_optional(data, "size", int, where),
        )


@dataclass
class Artifact:
    """可下载的构件（库 jar 或原生库压缩包）"""

    path: str
    url: str
    sha1: Optional[str] = None
    size: Optional[int] = None

    @property
    def filename(self) -> str:
        return self.path.split("/")[-1]

    @classmethod
    def from_dict(cls, data: dict, where: str) -> "Artifact":
        return cls(
            path=_require(data, "path", str, where),
            url=_require(data, "url", str, where),
            sha1=_optional(data, "sha1", str, where),
            size=_optional(data, "size", int, where),
        )


@dataclass
class LibraryDescriptor:
    """库描述，name 为 Maven 坐标 group:artifact:version"""

    name: str
    artifact: Optional[Artifact] = None
    classifiers: Dict[str, Artifact] = field(default_factory=dict)

    @property
    def group(self) -> str:
        return self.name.split(":")[0]

    @property
    def artifact_id(self) -> str:
        parts = self.name.split(":")
        return parts[1] if len(parts) > 1 else ""

    @property
    def version(self) -> str:
        parts = self.name.split(":")
        return parts[2] if len(parts) > 2 else ""

    def native_for(self, os_tag: str) -> Optional[Artifact]:
        """获取指定系统的原生库压缩包"""
        return self.classifiers.get(f"natives-{os_tag}")

    @classmethod
    def from_dict(cls, data: dict) -> "LibraryDescriptor":
        name = _require(data, "name", str, "library")
        where = f"库 '{name}'"
        downloads = _optional(data, "downloads", dict, where) or {}

        artifact = None
        if downloads.get("artifact") is not None:
            artifact = Artifact.from_dict(downloads["artifact"], f"{where} artifact")

        classifiers = {}
        raw_classifiers = _optional(downloads, "classifiers", dict, where) or {}
        for tag, item in raw_classifiers.items():
            classifiers[tag] = Artifact.from_dict(item, f"{where} {tag}")

        return cls(name=name, artifact=artifact, classifiers=classifiers)


@dataclass
class VersionDescriptor:
    """
    版本描述

    raw 保存原始文档，客户端 jar 下载完成后原样写入 <版本号>.json。
    """

    id: str
    client_url: str
    asset_index: AssetIndexRef
    libraries: List[LibraryDescriptor] = field(default_factory=list)
    minecraft_arguments: Optional[str] = None
    game_arguments: Optional[List[Any]] = None
    assets: Optional[str] = None
    type: Optional[str] = None
    main_class: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict) -> "VersionDescriptor":
        version_id = _require(data, "id", str, "版本描述")
        where = f"版本 '{version_id}'"

        downloads = _require(data, "downloads", dict, where)
        client = _require(downloads, "client", dict, f"{where} downloads")
        client_url = _require(client, "url", str, f"{where} client")

        asset_index = AssetIndexRef.from_dict(
            _require(data, "assetIndex", dict, where)
        )
        libraries = [
            LibraryDescriptor.from_dict(lib)
            for lib in _require(data, "libraries", list, where)
        ]

        minecraft_arguments = _optional(data, "minecraftArguments", str, where)
        game_arguments = None
        arguments = _optional(data, "arguments", dict, where)
        if arguments is not None:
            game_arguments = _optional(arguments, "game", list, f"{where} arguments")
        if minecraft_arguments is None and game_arguments is None:
            raise ManifestError(
                f"{where} 缺少启动参数 (minecraftArguments / arguments.game)",
                context={"version": version_id},
            )

        return cls(
            id=version_id,
            client_url=client_url,
            asset_index=asset_index,
            libraries=libraries,
            minecraft_arguments=minecraft_arguments,
            game_arguments=game_arguments,
            assets=_optional(data, "assets", str, where),
            type=_optional(data, "type", str, where),
            main_class=_optional(data, "mainClass", str, where),
            raw=data,
        )


@dataclass
class VersionManifestEntry:
    """版本清单条目"""

    id: str
    url: str
    type: Optional[str] = None


@dataclass
class VersionManifest:
    """版本清单"""

    versions: List[VersionManifestEntry] = field(default_factory=list)

    def find(self, version_id: str) -> Optional[VersionManifestEntry]:
        for entry in self.versions:
            if entry.id == version_id:
                return entry
        return None

    @classmethod
    def from_dict(cls, data: dict) -> "VersionManifest":
        entries = []
        for item in _require(data, "versions", list, "版本清单"):
            entries.append(
                VersionManifestEntry(
                    id=_require(item, "id", str, "版本清单条目"),
                    url=_require(item, "url", str, "版本清单条目"),
                    type=_optional(item, "type", str, "版本清单条目"),
                )
            )
        return cls(versions=entries)


@dataclass
class ForgeLibrary:
    """Forge 库条目"""

    name: str
    url: Optional[str] = None
    clientreq: bool = False
    serverreq: bool = False

    @property
    def coordinates(self) -> List[str]:
        return self.name.split(":")

    @property
    def group(self) -> str:
        return self.coordinates[0]

    @property
    def artifact_id(self) -> str:
        return self.coordinates[1]

    @property
    def version(self) -> str:
        return self.coordinates[2]

    @property
    def filename(self) -> str:
        return f"{self.artifact_id}-{self.version}.jar"

    def maven_dir(self) -> str:
        """Maven 目录：group 中的点替换为斜杠"""
        return "/".join(
            [self.group.replace(".", "/"), self.artifact_id, self.version]
        )

    def maven_path(self) -> str:
        return f"{self.maven_dir()}/{self.filename}"

    def is_loader(self) -> bool:
        """是否为 Forge 自身的 jar"""
        return self.group == "net.minecraftforge" and "forge" in self.artifact_id

    @classmethod
    def from_dict(cls, data: dict) -> "ForgeLibrary":
        name = _require(data, "name", str, "forge library")
        if len(name.split(":")) < 3:
            raise ManifestError(
                f"Forge 库坐标格式不正确: {name}", context={"name": name}
            )
        where = f"Forge 库 '{name}'"
        return cls(
            name=name,
            url=_optional(data, "url", str, where),
            clientreq=bool(data.get("clientreq", False)),
            serverreq=bool(data.get("serverreq", False)),
        )


@dataclass
class ForgeDescriptor:
    """Forge 叠加描述（从 Forge jar 中的 version.json 解析）"""

    libraries: List[ForgeLibrary] = field(default_factory=list)
    id: Optional[str] = None
    minecraft_arguments: Optional[str] = None
    game_arguments: Optional[List[Any]] = None
    main_class: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict) -> "ForgeDescriptor":
        where = "Forge version.json"
        libraries = [
            ForgeLibrary.from_dict(lib)
            for lib in _require(data, "libraries", list, where)
        ]
        game_arguments = None
        arguments = _optional(data, "arguments", dict, where)
        if arguments is not None:
            game_arguments = _optional(arguments, "game", list, f"{where} arguments")
        return cls(
            libraries=libraries,
            id=_optional(data, "id", str, where),
            minecraft_arguments=_optional(data, "minecraftArguments", str, where),
            game_arguments=game_arguments,
            main_class=_optional(data, "mainClass", str, where),
            raw=data,
        )
