"""In-process async task manager for long-running operations.

Coroutine functions are awaited on the event loop; sync service methods
run in a thread pool via asyncio.run_in_executor(). No external broker
(Redis/Celery) needed.
"""

import asyncio
import inspect
import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import BaseModel

from .models import TaskStatus

logger = logging.getLogger(__name__)


class TaskInfo:
    """Internal task tracking state."""

    __slots__ = ("task_id", "name", "status", "result", "error", "created_at", "completed_at")

    def __init__(self, task_id: str, name: str = ""):
        self.task_id = task_id
        self.name = name
        self.status = TaskStatus.PENDING
        self.result: Any = None
        self.error: str | None = None
        self.created_at = datetime.now(timezone.utc).isoformat()
        self.completed_at: str | None = None

    def to_dict(self) -> dict:
        return {
            "task_id": self.task_id,
            "status": self.status.value,
            "result": self.result,
            "error": self.error,
            "created_at": self.created_at,
            "completed_at": self.completed_at,
        }


class TaskManager:
    """In-process task manager.

    Submits functions to run in the background, tracks their status, and
    stores results for polling via the /tasks endpoint.
    """

    def __init__(self, max_workers: int = 4):
        self._tasks: dict[str, TaskInfo] = {}
        self._running: set[asyncio.Task] = set()
        self._executor = ThreadPoolExecutor(max_workers=max_workers)

    async def submit(self, func: Callable, *args, **kwargs) -> str:
        """Submit a function to run in background.

        Args:
            func: Sync callable or coroutine function to execute.
            *args, **kwargs: Arguments to pass to func.

        Returns:
            Task ID for polling status.
        """
        task_id = uuid.uuid4().hex[:12]
        task_info = TaskInfo(task_id, getattr(func, "__name__", ""))
        self._tasks[task_id] = task_info

        task = asyncio.create_task(self._run(task_info, func, args, kwargs))
        self._running.add(task)
        task.add_done_callback(self._running.discard)

        logger.info("Task %s submitted (%s)", task_id, task_info.name)
        return task_id

    async def _run(self, task_info: TaskInfo, func: Callable, args: tuple, kwargs: dict) -> None:
        """Execute the function and capture result/error."""
        task_info.status = TaskStatus.RUNNING
        try:
            if inspect.iscoroutinefunction(func):
                result = await func(*args, **kwargs)
            else:
                loop = asyncio.get_running_loop()
                result = await loop.run_in_executor(
                    self._executor, lambda: func(*args, **kwargs)
                )

            # Convert Pydantic models to dicts for JSON serialization
            if isinstance(result, BaseModel):
                result = result.model_dump(mode="json")

            task_info.status = TaskStatus.COMPLETED
            task_info.result = result
            logger.info("Task %s completed", task_info.task_id)
        except Exception as e:
            task_info.status = TaskStatus.FAILED
            task_info.error = str(e)
            logger.error("Task %s failed: %s", task_info.task_id, e)
        finally:
            task_info.completed_at = datetime.now(timezone.utc).isoformat()

    async def wait(self) -> None:
        """Wait for every submitted task to finish."""
        if self._running:
            await asyncio.gather(*self._running, return_exceptions=True)

    def get_task(self, task_id: str) -> dict | None:
        """Get task status by ID.

        Returns:
            Task info dict or None if not found.
        """
        task_info = self._tasks.get(task_id)
        if not task_info:
            return None
        return task_info.to_dict()

    def get_tasks(self, limit: int = 20) -> list[dict]:
        """Get recent tasks sorted by creation time, newest first."""
        sorted_tasks = sorted(
            self._tasks.values(),
            key=lambda t: t.created_at,
            reverse=True,
        )[:limit]
        return [t.to_dict() for t in sorted_tasks]

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)
