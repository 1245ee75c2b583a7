"""
内置事件监听器
"""

from launchfetch.listeners.progress import ProgressListener

__all__ = ["ProgressListener"]
