# bto/core/locks.py
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, List, Tuple


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.users = 0


class KeyedLocks:
    """
    Process-local re-entrant locks addressed by key, e.g. ("application", id).

    Several keys are always acquired in sorted order so two callers asking for
    overlapping key sets cannot deadlock. An entry lives only while someone
    holds or waits on it. Database-level guards (conditional UPDATEs,
    FOR UPDATE) still apply across processes.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, _Entry] = {}

    def _checkout(self, key: Hashable) -> _Entry:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = _Entry()
                self._locks[key] = entry
            entry.users += 1
            return entry

    def _checkin(self, key: Hashable, entry: _Entry) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, *keys: Tuple[str, ...]) -> Iterator[None]:
        ordered = sorted(set(keys), key=repr)
        acquired: List[Tuple[Hashable, _Entry]] = []
        try:
            for key in ordered:
                entry = self._checkout(key)
                try:
                    entry.lock.acquire()
                except BaseException:
                    self._checkin(key, entry)
                    raise
                acquired.append((key, entry))
            yield
        finally:
            for key, entry in reversed(acquired):
                entry.lock.release()
                self._checkin(key, entry)


row_locks = KeyedLocks()


def application_key(application_id: str) -> Tuple[str, str]:
    return ("application", application_id)


def applicant_key(nric: str) -> Tuple[str, str]:
    return ("applicant", nric)


def inventory_key(project_name: str, unit_type: str) -> Tuple[str, str, str]:
    return ("inventory", project_name, unit_type)


def project_key(project_name: str) -> Tuple[str, str]:
    return ("project", project_name)


def officer_key(nric: str) -> Tuple[str, str]:
    return ("officer", nric)
