"""
LaunchFetch

Minecraft 客户端文件同步：客户端 jar、依赖库、原生库和资源文件。
"""

from launchfetch.orchestrator import LaunchFetch, LaunchPlan
from launchfetch.models import LaunchFetchConfig
from launchfetch.events import EventBus, EventType

__version__ = "0.1.0"

__all__ = [
    "LaunchFetch",
    "LaunchPlan",
    "LaunchFetchConfig",
    "EventBus",
    "EventType",
]
