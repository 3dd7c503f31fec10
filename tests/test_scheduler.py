import asyncio

from app.services.scheduler import PeriodicTask, default_tasks


async def test_runs_immediately_on_start():
    calls = []

    async def job():
        calls.append("run")

    task = PeriodicTask("immediate", job, interval_seconds=60)
    task.start()
    await asyncio.sleep(0.05)

    assert calls == ["run"]
    assert task.running is True
    assert task.runs == 1

    await task.stop()
    assert task.running is False


async def test_keeps_running_after_a_failed_run():
    calls = []

    async def job():
        calls.append("run")
        if len(calls) == 1:
            raise RuntimeError("boom")

    task = PeriodicTask("flaky", job, interval_seconds=0.01)
    task.start()
    await asyncio.sleep(0.2)
    await task.stop()

    assert len(calls) >= 2
    assert task.runs >= 2


async def test_stop_halts_further_runs():
    calls = []

    async def job():
        calls.append("run")

    task = PeriodicTask("stoppable", job, interval_seconds=0.01)
    task.start()
    await asyncio.sleep(0.05)
    await task.stop()
    count = len(calls)
    await asyncio.sleep(0.05)

    assert len(calls) == count


async def test_start_is_idempotent_and_stop_without_start_is_safe():
    async def job():
        pass

    idle = PeriodicTask("idle", job, interval_seconds=60)
    await idle.stop()

    task = PeriodicTask("once", job, interval_seconds=60)
    task.start()
    first = task._task
    task.start()
    assert task._task is first
    await task.stop()


def test_default_tasks_use_configured_intervals():
    tasks = default_tasks()

    assert [task.name for task in tasks] == ["pdc-auto-issue", "event-delivery"]
    assert [task.interval_seconds for task in tasks] == [86400, 30]
    assert not any(task.running for task in tasks)
