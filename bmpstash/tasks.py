"""Image task records and a thread-safe task queue."""

import threading
from collections import deque
from dataclasses import dataclass
from queue import Empty


@dataclass
class ImageTask:
    """Information for processing one image of a multi-image file."""

    img_index: int = 0
    total_images: int = 0
    bytes_capacity: int = 0
    bytes_to_read: int = 0
    width: int = 0
    height: int = 0
    file_position: int = 0
    base_outfile: str = ""
    extension: str = ""
    filename: str = ""


class TaskQueue:
    """FIFO queue shared between producer and consumer threads.

    Once ``finish`` is called and the queue has drained, ``pop`` raises
    ``queue.Empty`` instead of blocking.
    """

    def __init__(self):
        self._items = deque()
        self._condition = threading.Condition()
        self._done = False

    def push(self, task):
        """Add a task and wake one waiting consumer."""
        with self._condition:
            self._items.append(task)
            self._condition.notify()

    def pop(self, timeout=None):
        """Remove and return the oldest task.

        Raises ``queue.Empty`` if ``timeout`` seconds pass with nothing to
        return, or if the queue is finished and empty.
        """
        with self._condition:
            ready = self._condition.wait_for(
                lambda: bool(self._items) or self._done, timeout
            )
            if not ready or not self._items:
                raise Empty
            return self._items.popleft()

    def finish(self):
        """Signal that no more tasks will be added."""
        with self._condition:
            self._done = True
            self._condition.notify_all()

    def is_empty(self):
        """Return whether the queue currently holds no tasks."""
        with self._condition:
            return not self._items

    def __len__(self):
        with self._condition:
            return len(self._items)

    def __iter__(self):
        """Yield tasks until the queue is finished and drained."""
        while True:
            try:
                yield self.pop()
            except Empty:
                return