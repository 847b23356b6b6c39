from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock

from coursegrid.core.exceptions import TermLockedError
from coursegrid.models.course import Semester


class TermLockRegistry:
    """One non-blocking lock per (semester, year) for generation triggers in this process."""

    def __init__(self) -> None:
        self._locks: dict[tuple[str, int], Lock] = defaultdict(Lock)
        self._guard = Lock()

    def _lock_for(self, semester: Semester, year: int) -> Lock:
        with self._guard:
            return self._locks[(semester.value, year)]

    @contextmanager
    def hold(self, semester: Semester, year: int) -> Iterator[None]:
        lock = self._lock_for(semester, year)
        if not lock.acquire(blocking=False):
            raise TermLockedError(semester.value, year)
        try:
            yield
        finally:
            lock.release()

    def is_locked(self, semester: Semester, year: int) -> bool:
        return self._lock_for(semester, year).locked()

    def clear(self) -> None:
        """Forget idle locks. Locks still held stay registered until released."""
        with self._guard:
            for key in [key for key, lock in self._locks.items() if not lock.locked()]:
                del self._locks[key]


_registry = TermLockRegistry()


def term_generation_lock(semester: Semester, year: int):
    return _registry.hold(semester, year)


def clear_term_locks() -> None:
    _registry.clear()
