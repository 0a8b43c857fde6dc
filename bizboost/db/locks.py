from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from threading import Lock
from typing import Dict


@dataclass
class _Slot:
    lock: Lock
    holders: int = 0


class KeyedLock:
    """One mutex per key (business id), alive only while someone holds or waits on it.

    Writers to a business's derived fields hold its lock for the whole
    "write rows + recompute + commit" transaction. Readers never touch it.
    A slot is dropped when its last holder leaves, so the registry stays as
    small as the number of in-flight writes.
    """

    def __init__(self) -> None:
        self._guard = Lock()
        self._slots: Dict[str, _Slot] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                slot = _Slot(lock=Lock())
                self._slots[key] = slot
            slot.holders += 1

        try:
            with slot.lock:
                yield
        finally:
            with self._guard:
                slot.holders -= 1
                if slot.holders == 0:
                    self._slots.pop(key, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)
