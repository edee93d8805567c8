"""Worker-thread pool for spreading two-dimensional loops over the CPU cores."""

from __future__ import annotations

import math
import os
import threading
from collections import deque
from functools import partial
from typing import Callable, Deque, List, Optional

Task = Callable[[], object]

_COMPLEX_SPLIT = math.sqrt(16)


def _run_chunk(func: Callable[[int, int], object], x: int, y: int, width: int, height: int) -> None:
    for i in range(width):
        for j in range(height):
            func(x + i, y + j)


class ThreadPool:
    """A fixed set of worker threads consuming a FIFO queue of callables.

    Exceptions raised by tasks are collected and the first one is re-raised
    by :meth:`wait`.
    """

    def __init__(self, thread_count: int = 0) -> None:
        if thread_count < 0:
            raise ValueError("thread_count must not be negative")
        if thread_count == 0:
            thread_count = os.cpu_count() or 1
        self._lock = threading.Lock()
        self._has_work = threading.Condition(self._lock)
        self._idle = threading.Condition(self._lock)
        self._tasks: Deque[Task] = deque()
        self._pending = 0
        self._alive = True
        self._errors: List[BaseException] = []
        self._threads = [
            threading.Thread(target=self._work, name=f"pbtracer-worker-{i}", daemon=True)
            for i in range(thread_count)
        ]
        for thread in self._threads:
            thread.start()

    @property
    def thread_count(self) -> int:
        """Number of worker threads."""
        return len(self._threads)

    @property
    def pending(self) -> int:
        """Tasks queued or running that have not finished yet."""
        with self._lock:
            return self._pending

    @property
    def closed(self) -> bool:
        """Whether :meth:`close` has shut the workers down."""
        with self._lock:
            return not self._alive

    def _work(self) -> None:
        while True:
            with self._lock:
                while self._alive and not self._tasks:
                    self._has_work.wait()
                if not self._tasks:
                    return
                task = self._tasks.popleft()
            try:
                task()
            except BaseException as error:  # re-raised from wait()
                with self._lock:
                    self._errors.append(error)
            finally:
                with self._lock:
                    self._finish_locked()

    def _finish_locked(self) -> None:
        self._pending -= 1
        if self._pending == 0:
            self._idle.notify_all()

    def _ensure_open_locked(self) -> None:
        if not self._alive:
            raise RuntimeError("thread pool is closed")

    def parallel_for(
        self,
        width: int,
        height: int,
        func: Callable[[int, int], object],
        is_complex: bool = True,
    ) -> None:
        """Queue ``func(x, y)`` for every cell of a ``width`` x ``height`` grid.

        The grid is cut into rectangular chunks, one task each; ``is_complex``
        asks for smaller chunks so that uneven work is spread more evenly.
        Call :meth:`wait` to block until all of them have run.
        """
        if width < 0 or height < 0:
            raise ValueError("width and height must not be negative")
        if width == 0 or height == 0:
            return
        root = math.sqrt(self.thread_count)
        chunk_width = width / root
        chunk_height = height / root
        if is_complex:
            chunk_width /= _COMPLEX_SPLIT
            chunk_height /= _COMPLEX_SPLIT
        chunk_width = max(1, math.ceil(chunk_width))
        chunk_height = max(1, math.ceil(chunk_height))

        tasks = [
            partial(
                _run_chunk,
                func,
                x,
                y,
                min(chunk_width, width - x),
                min(chunk_height, height - y),
            )
            for x in range(0, width, chunk_width)
            for y in range(0, height, chunk_height)
        ]
        with self._lock:
            self._ensure_open_locked()
            self._tasks.extend(tasks)
            self._pending += len(tasks)
            self._has_work.notify_all()

    def wait(self) -> None:
        """Block until every queued task has finished; re-raise the first task error."""
        with self._lock:
            while self._pending > 0:
                self._idle.wait()
            errors, self._errors = self._errors, []
        if errors:
            raise errors[0]

    def add_task(self, task: Task) -> None:
        """Queue a single callable taking no arguments."""
        if not callable(task):
            raise TypeError("task must be callable")
        with self._lock:
            self._ensure_open_locked()
            self._pending += 1
            self._tasks.append(task)
            self._has_work.notify()

    def get_task(self) -> Optional[Task]:
        """Remove and return the next queued task, or None if the queue is empty.

        The returned task no longer counts as pending; running it is up to the caller.
        """
        with self._lock:
            if not self._tasks:
                return None
            task = self._tasks.popleft()
            self._finish_locked()
            return task

    def close(self) -> None:
        """Wait for the queued work, then stop and join the worker threads."""
        with self._lock:
            if not self._alive:
                return
        try:
            self.wait()
        finally:
            with self._lock:
                self._alive = False
                self._has_work.notify_all()
            for thread in self._threads:
                thread.join()

    def __enter__(self) -> "ThreadPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False


_default: Optional[ThreadPool] = None
_default_lock = threading.Lock()


def default_pool() -> ThreadPool:
    """Return the shared pool with one worker per CPU, creating it on first use."""
    global _default
    with _default_lock:
        if _default is None or _default.closed:
            _default = ThreadPool()
        return _default