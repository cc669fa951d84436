"""Tests for sequential and parallel schedulers."""

import threading
import time

import pytest

from buildscope.config.build_config import BuildConfig
from buildscope.tasks.scheduler import ParallelScheduler, SequentialScheduler, scheduler_for


class RecordingTask:
    """Invokable that records its name, optionally after a delay or failing."""

    def __init__(self, name, record, delay=0.0, error=None, tracker=None):
        self.name = name
        self.record = record
        self.delay = delay
        self.error = error
        self.tracker = tracker

    def invoke(self):
        if self.tracker is not None:
            self.tracker.enter()
        try:
            time.sleep(self.delay)
            if self.error is not None:
                raise self.error
            self.record.append(self.name)
            return self.name
        finally:
            if self.tracker is not None:
                self.tracker.leave()


class ConcurrencyTracker:
    """Counts how many tasks run at the same time."""

    def __init__(self):
        self.lock = threading.Lock()
        self.active = 0
        self.peak = 0

    def enter(self):
        with self.lock:
            self.active += 1
            self.peak = max(self.peak, self.active)

    def leave(self):
        with self.lock:
            self.active -= 1


def test_sequential_scheduler_keeps_order():
    record = []
    tasks = [RecordingTask(name, record) for name in ("a", "b", "c")]

    SequentialScheduler().invoke_all(tasks)

    assert record == ["a", "b", "c"]


def test_parallel_scheduler_invokes_all():
    record = []
    tasks = [RecordingTask(f"t{i}", record, delay=0.01) for i in range(6)]

    ParallelScheduler(max_parallelism=3).invoke_all(tasks)

    assert sorted(record) == [f"t{i}" for i in range(6)]


def test_parallel_scheduler_bounds_concurrency():
    record = []
    tracker = ConcurrencyTracker()
    tasks = [RecordingTask(f"t{i}", record, delay=0.05, tracker=tracker) for i in range(6)]

    ParallelScheduler(max_parallelism=2).invoke_all(tasks)

    assert len(record) == 6
    assert tracker.peak <= 2


def test_parallel_failure_raised_after_siblings_settle():
    record = []
    tasks = [
        RecordingTask("fails", record, error=ValueError("broken")),
        RecordingTask("slow", record, delay=0.05),
        RecordingTask("fast", record),
    ]

    with pytest.raises(ValueError, match="broken"):
        ParallelScheduler(max_parallelism=3).invoke_all(tasks)

    assert sorted(record) == ["fast", "slow"]


def test_parallel_scheduler_rejects_zero():
    with pytest.raises(ValueError):
        ParallelScheduler(max_parallelism=0)


@pytest.mark.asyncio
async def test_gather_from_async_code():
    record = []
    tasks = [RecordingTask(name, record) for name in ("a", "b")]

    results = await ParallelScheduler().gather(tasks)

    assert results == ["a", "b"]


@pytest.mark.asyncio
async def test_invoke_all_inside_running_loop():
    record = []
    tasks = [RecordingTask(name, record) for name in ("a", "b", "c")]

    ParallelScheduler().invoke_all(tasks)

    assert sorted(record) == ["a", "b", "c"]


def test_scheduler_for_config(tmp_path):
    parallel = scheduler_for(BuildConfig(working_dir=tmp_path, parallel=True, max_parallelism=7))
    sequential = scheduler_for(BuildConfig(working_dir=tmp_path, parallel=False))

    assert isinstance(parallel, ParallelScheduler)
    assert parallel.max_parallelism == 7
    assert isinstance(sequential, SequentialScheduler)
