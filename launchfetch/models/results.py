"""
结果数据模型

下载结果、同步结果和依赖解析结果。
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from launchfetch.models.version import AssetEntry, ForgeDescriptor, VersionDescriptor


@dataclass
class FetchOutcome:
    """单个文件的下载结果，failed 为 True 时保留足够信息以便重试"""

    failed: bool
    url: str
    directory: str
    name: str
    error: Optional[str] = None


@dataclass
class SyncResult:
    """一轮资源同步的结果，failed 为空表示已收敛"""

    failed: Dict[str, AssetEntry] = field(default_factory=dict)
    transport_failures: int = 0
    integrity_failures: int = 0

    @property
    def converged(self) -> bool:
        return not self.failed


@dataclass
class DependencyBundle:
    """依赖解析结果：有序的 classpath 以及最终使用的描述"""

    classpath: List[str]
    descriptor: Union[VersionDescriptor, ForgeDescriptor]
