"""
工作池

固定数量的工作协程从队列中取任务执行，限制同时进行的传输数量。
"""

import asyncio
from typing import Any, Awaitable, Callable, Iterable, List

from loguru import logger


class WorkerPool:
    """工作池"""

    def __init__(self, max_concurrent: int = 16, name: str = "worker"):
        if max_concurrent <= 0:
            raise ValueError("max_concurrent 必须为正整数")
        self.max_concurrent = max_concurrent
        self.name = name

    async def map(
        self,
        handler: Callable[[Any], Awaitable[Any]],
        items: Iterable[Any],
    ) -> List[Any]:
        """
        对每个元素执行 handler

        单个任务抛出的异常会被记录并作为该元素的结果返回，
        不会中断同一批次中的其他任务。

        Returns:
            与 items 顺序一致的结果列表
        """
        items = list(items)
        results: List[Any] = [None] * len(items)
        if not items:
            return results

        queue: asyncio.Queue = asyncio.Queue()
        for index, item in enumerate(items):
            queue.put_nowait((index, item))

        async def worker():
            while True:
                index, item = await queue.get()
                try:
                    results[index] = await handler(item)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.error(f"[错误] {self.name} 任务执行失败: {e}")
                    results[index] = e
                finally:
                    queue.task_done()

        workers = [
            asyncio.create_task(worker(), name=f"{self.name}-{i}")
            for i in range(min(self.max_concurrent, len(items)))
        ]
        try:
            await queue.join()
        finally:
            for task in workers:
                task.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        return results
