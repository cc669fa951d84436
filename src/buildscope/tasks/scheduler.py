"""Schedulers that invoke a batch of sibling tasks."""

import asyncio
import contextvars
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Iterable, List

from ..config.build_config import BuildConfig
from .task import Invokable

logger = logging.getLogger(__name__)


class SequentialScheduler:
    """Invokes tasks one at a time, in order."""

    def invoke_all(self, tasks: Iterable[Invokable]) -> None:
        for task in tasks:
            task.invoke()


class ParallelScheduler:
    """
    Invokes sibling tasks concurrently and waits for all of them.

    PATTERN: asyncio.gather bounded by a semaphore, each invoke on a thread
    CRITICAL: Every sibling settles before the first failure is re-raised
    """

    def __init__(self, max_parallelism: int = 4):
        if max_parallelism < 1:
            raise ValueError("max_parallelism must be at least 1")
        self.max_parallelism = max_parallelism
        self.logger = logging.getLogger(__name__)

    def invoke_all(self, tasks: Iterable[Invokable]) -> None:
        """
        Invoke tasks concurrently, blocking until all complete.

        Args:
            tasks: Tasks to invoke

        Raises:
            Exception: The first failure among the tasks, after all settled
        """
        tasks = list(tasks)
        if len(tasks) <= 1:
            for task in tasks:
                task.invoke()
            return

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.gather(tasks))
            return

        # Called from inside an event loop: run the fan-out on its own loop,
        # keeping the caller's invocation chain.
        context = contextvars.copy_context()
        with ThreadPoolExecutor(max_workers=1) as pool:
            pool.submit(context.run, asyncio.run, self.gather(tasks)).result()

    async def gather(self, tasks: Iterable[Invokable]) -> List[Any]:
        """
        Invoke tasks concurrently from async code.

        Args:
            tasks: Tasks to invoke

        Returns:
            Results of each invoke, in task order
        """
        tasks = list(tasks)
        semaphore = asyncio.Semaphore(self.max_parallelism)

        async def bounded_invoke(task: Invokable) -> Any:
            async with semaphore:
                return await asyncio.to_thread(task.invoke)

        self.logger.debug(
            f"Invoking {len(tasks)} tasks in parallel "
            f"(max_parallelism={self.max_parallelism})"
        )
        start_time = datetime.now()

        results = await asyncio.gather(
            *[bounded_invoke(task) for task in tasks],
            return_exceptions=True,
        )

        total_time_ms = int((datetime.now() - start_time).total_seconds() * 1000)
        failures = [
            (task, result)
            for task, result in zip(tasks, results)
            if isinstance(result, BaseException)
        ]
        for task, error in failures:
            self.logger.error(f"Task {task.name} failed: {error}")

        if failures:
            raise failures[0][1]

        self.logger.debug(f"Parallel invocation complete in {total_time_ms}ms")
        return results


def scheduler_for(config: BuildConfig):
    """Pick the scheduler matching the configured execution mode."""
    if config.parallel:
        return ParallelScheduler(max_parallelism=config.max_parallelism)
    return SequentialScheduler()
