"""
LaunchFetch 下载层

包含单文件下载、工作池、文件校验等功能。
"""

from launchfetch.download.fetcher import Fetcher
from launchfetch.download.pool import WorkerPool
from launchfetch.download.verifier import FileVerifier

__all__ = [
    "Fetcher",
    "WorkerPool",
    "FileVerifier",
]
