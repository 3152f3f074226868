"""
PeriodicTask测试（使用伪造的sleep，不真正等待）
"""
import asyncio

from app.services.scheduler import PeriodicTask


class FakeSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)
        await asyncio.sleep(0)


async def _wait_for(condition, attempts: int = 100):
    for _ in range(attempts):
        if condition():
            return
        await asyncio.sleep(0)


async def test_periodic_task_delay_then_interval():
    """首次延迟后按固定间隔重复执行"""
    calls = []
    sleep = FakeSleep()

    async def callback():
        calls.append(len(calls))

    task = PeriodicTask("test", callback, interval=10, initial_delay=3, sleep=sleep)
    task.start()
    await _wait_for(lambda: len(calls) >= 3)
    await task.stop()

    assert len(calls) >= 3
    assert sleep.delays[0] == 3
    assert all(delay == 10 for delay in sleep.delays[1:])
    assert not task.is_running


async def test_periodic_task_survives_callback_errors():
    """回调失败只记录日志，任务继续执行"""
    attempts = []

    async def callback():
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("boom")

    task = PeriodicTask("flaky", callback, interval=1, sleep=FakeSleep())
    task.start()
    await _wait_for(lambda: len(attempts) >= 2)
    await task.stop()

    assert len(attempts) >= 2
    assert task.runs >= 2


async def test_start_is_idempotent():
    async def callback():
        pass

    task = PeriodicTask("once", callback, interval=1, sleep=FakeSleep())
    first = task.start()
    assert task.start() is first
    await task.stop()
    await task.stop()
