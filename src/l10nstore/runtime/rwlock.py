"""Readers-writer locks scoped to individual keys.

This module provides:
- RWLock: multiple concurrent readers OR one exclusive writer, with writer
  preference, reentrant reads and optional acquisition timeout
- KeyLockRegistry: one RWLock per key, allocated on first use and dropped
  once no thread holds or waits for it

Mutations of one key take that key's write lock for the duration of the
invariant check plus the repository writes. Reads take the read lock, so
they never observe a half-applied mutation. Different keys never contend.

Upgrade and Downgrade Limitations:
    A thread holding a read lock cannot acquire the write lock, a thread
    holding the write lock cannot acquire the read lock, and the write lock
    is not reentrant. Each case raises RuntimeError instead of deadlocking.

Python 3.13+.
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator, Hashable

__all__ = ["KeyLockRegistry", "RWLock"]


class RWLock:
    """Readers-writer lock with writer preference.

    Thread Safety:
        All methods are thread-safe. The read lock is reentrant: the same
        thread can acquire it multiple times and must release it the same
        number of times.

    Example:
        >>> lock = RWLock()
        >>> with lock.read():
        ...     pass
        >>> with lock.write(timeout=2.0):
        ...     pass
    """

    __slots__ = (
        "_active_readers",
        "_active_writer",
        "_condition",
        "_reader_threads",
        "_waiting_writers",
    )

    def __init__(self) -> None:
        """Initialize readers-writer lock."""
        self._condition = threading.Condition(threading.Lock())
        self._active_readers: int = 0
        self._active_writer: int | None = None
        self._waiting_writers: int = 0
        # thread id -> reentrant acquisition count
        self._reader_threads: dict[int, int] = {}

    @contextmanager
    def read(self, timeout: float | None = None) -> Generator[None]:
        """Acquire read lock (shared access).

        Args:
            timeout: Maximum seconds to wait. None waits indefinitely;
                0.0 is a non-blocking attempt.

        Raises:
            RuntimeError: If thread holds write lock (downgrade prohibited).
            TimeoutError: If lock cannot be acquired within timeout.
            ValueError: If timeout is negative.
        """
        self._acquire_read(timeout)
        try:
            yield
        finally:
            self._release_read()

    @contextmanager
    def write(self, timeout: float | None = None) -> Generator[None]:
        """Acquire write lock (exclusive access).

        Args:
            timeout: Maximum seconds to wait. None waits indefinitely;
                0.0 is a non-blocking attempt.

        Raises:
            RuntimeError: If thread holds a read lock or already holds the write lock.
            TimeoutError: If lock cannot be acquired within timeout.
            ValueError: If timeout is negative.
        """
        self._acquire_write(timeout)
        try:
            yield
        finally:
            self._release_write()

    @staticmethod
    def _deadline(timeout: float | None) -> float | None:
        if timeout is None:
            return None
        if timeout < 0:
            msg = f"Timeout must be non-negative, got {timeout}"
            raise ValueError(msg)
        return time.monotonic() + timeout

    def _wait(self, deadline: float | None, what: str) -> None:
        """Wait on the condition once, honoring the deadline."""
        if deadline is None:
            self._condition.wait()
            return
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            msg = f"Timed out waiting for {what} lock"
            raise TimeoutError(msg)
        self._condition.wait(timeout=remaining)

    def _acquire_read(self, timeout: float | None) -> None:
        deadline = self._deadline(timeout)
        current = threading.get_ident()

        with self._condition:
            if current in self._reader_threads:
                self._reader_threads[current] += 1
                return

            if self._active_writer == current:
                msg = (
                    "Cannot acquire read lock while holding write lock. "
                    "Release the write lock before acquiring a read lock."
                )
                raise RuntimeError(msg)

            # Writer preference: new readers queue behind waiting writers
            while self._active_writer is not None or self._waiting_writers > 0:
                self._wait(deadline, "read")

            self._active_readers += 1
            self._reader_threads[current] = 1

    def _release_read(self) -> None:
        current = threading.get_ident()

        with self._condition:
            if current not in self._reader_threads:
                msg = "Thread does not hold read lock"
                raise RuntimeError(msg)

            self._reader_threads[current] -= 1
            if self._reader_threads[current] == 0:
                del self._reader_threads[current]
                self._active_readers -= 1
                if self._active_readers == 0:
                    self._condition.notify_all()

    def _acquire_write(self, timeout: float | None) -> None:
        deadline = self._deadline(timeout)
        current = threading.get_ident()

        with self._condition:
            if current in self._reader_threads:
                msg = (
                    "Cannot upgrade read lock to write lock. "
                    "Release read lock before acquiring write lock."
                )
                raise RuntimeError(msg)

            if self._active_writer == current:
                msg = (
                    "Cannot acquire write lock: already holding write lock. "
                    "Release the write lock before acquiring it again."
                )
                raise RuntimeError(msg)

            self._waiting_writers += 1
            try:
                while self._active_readers > 0 or self._active_writer is not None:
                    self._wait(deadline, "write")
                self._active_writer = current
            finally:
                # Readers spin on _waiting_writers; wake them on timeout too
                self._waiting_writers -= 1
                self._condition.notify_all()

    def _release_write(self) -> None:
        current = threading.get_ident()

        with self._condition:
            if self._active_writer != current:
                msg = "Thread does not hold write lock"
                raise RuntimeError(msg)
            self._active_writer = None
            self._condition.notify_all()

    @property
    def reader_count(self) -> int:
        """Number of distinct threads currently holding read locks."""
        with self._condition:
            return self._active_readers

    @property
    def writer_active(self) -> bool:
        """True if any thread currently holds the write lock."""
        with self._condition:
            return self._active_writer is not None

    @property
    def writers_waiting(self) -> int:
        """Number of threads blocked waiting to acquire the write lock."""
        with self._condition:
            return self._waiting_writers


class _LockSlot:
    """RWLock plus the number of threads holding or waiting for it."""

    __slots__ = ("holders", "lock")

    def __init__(self) -> None:
        self.lock = RWLock()
        self.holders = 0


class KeyLockRegistry:
    """Per-key RWLocks, created on demand and released when idle.

    A slot stays registered while any thread holds or waits for its lock,
    so two threads contending for the same key always share one RWLock.
    Memory is proportional to the number of keys in active use, not to
    the number of keys ever touched.

    Example:
        >>> locks = KeyLockRegistry()
        >>> with locks.write("greeting"):
        ...     pass  # exclusive for "greeting" only
        >>> len(locks)
        0
    """

    __slots__ = ("_mutex", "_slots", "_timeout")

    def __init__(self, timeout: float | None = None) -> None:
        """Initialize the registry.

        Args:
            timeout: Acquisition timeout applied to every lock, in seconds.
                None (default) waits indefinitely.

        Raises:
            ValueError: If timeout is negative
        """
        if timeout is not None and timeout < 0:
            msg = f"Timeout must be non-negative, got {timeout}"
            raise ValueError(msg)
        self._mutex = threading.Lock()
        self._slots: dict[Hashable, _LockSlot] = {}
        self._timeout = timeout

    def _checkout(self, key: Hashable) -> RWLock:
        with self._mutex:
            slot = self._slots.get(key)
            if slot is None:
                slot = self._slots[key] = _LockSlot()
            slot.holders += 1
            return slot.lock

    def _checkin(self, key: Hashable) -> None:
        with self._mutex:
            slot = self._slots[key]
            slot.holders -= 1
            if slot.holders == 0:
                del self._slots[key]

    @contextmanager
    def read(self, key: Hashable) -> Generator[None]:
        """Hold the read lock of key for the duration of the block."""
        lock = self._checkout(key)
        try:
            with lock.read(self._timeout):
                yield
        finally:
            self._checkin(key)

    @contextmanager
    def write(self, key: Hashable) -> Generator[None]:
        """Hold the write lock of key for the duration of the block."""
        lock = self._checkout(key)
        try:
            with lock.write(self._timeout):
                yield
        finally:
            self._checkin(key)

    @property
    def timeout(self) -> float | None:
        """Acquisition timeout in seconds, or None for unbounded waits."""
        return self._timeout

    def __len__(self) -> int:
        """Number of keys whose lock is currently held or awaited."""
        with self._mutex:
            return len(self._slots)
