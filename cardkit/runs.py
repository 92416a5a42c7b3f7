from __future__ import annotations

import threading
from typing import Any, Optional, Tuple


class LatestRunGate:
    """Generation counter that keeps only the newest run's result.

    Each run calls :meth:`begin` for a token. A run whose token is no longer
    current was superseded by newer input; its result is dropped by
    :meth:`publish` instead of overwriting the newer one.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._generation = 0
        self._published: Optional[Tuple[int, Any]] = None

    def begin(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._generation

    def publish(self, token: int, result: Any) -> bool:
        with self._lock:
            if token != self._generation:
                return False
            self._published = (token, result)
            return True

    @property
    def latest(self) -> Any:
        with self._lock:
            return None if self._published is None else self._published[1]
