"""
周期任务
延迟执行一次，之后按固定间隔重复执行，可随时取消
"""
import asyncio
from typing import Awaitable, Callable, Optional

import structlog

logger = structlog.get_logger()


class PeriodicTask:
    """可取消的周期任务"""

    def __init__(
        self,
        name: str,
        callback: Callable[[], Awaitable],
        interval: float,
        initial_delay: float = 0.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            name: 任务名称（用于日志）
            callback: 每次触发时执行的协程函数
            interval: 执行间隔（秒）
            initial_delay: 首次执行前的延迟（秒）
            sleep: 等待函数（测试时可替换）
        """
        self.name = name
        self.callback = callback
        self.interval = interval
        self.initial_delay = initial_delay
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self.runs = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """启动周期任务（重复调用不会创建第二个任务）"""
        if self.is_running:
            return self._task
        self._task = asyncio.create_task(self._loop(), name=self.name)
        logger.info("周期任务已启动", task=self.name, interval=self.interval, initial_delay=self.initial_delay)
        return self._task

    async def stop(self) -> None:
        """取消周期任务并等待其退出"""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("周期任务已停止", task=self.name, runs=self.runs)

    async def _loop(self) -> None:
        await self._sleep(self.initial_delay)
        while True:
            try:
                await self.callback()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error("周期任务执行失败", task=self.name, error=str(e))
            self.runs += 1
            await self._sleep(self.interval)
