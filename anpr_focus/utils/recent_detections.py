import time
import threading
from collections import deque
from typing import Deque, List, Optional, Tuple


class RecentDetections:
    def __init__(self, retention_s: float = 5.0):
        """
        :param retention_s: Segundos que se conserva cada texto crudo
        """
        self.retention_s = retention_s
        self._lock = threading.Lock()
        self._items: Deque[Tuple[float, str]] = deque()  # (timestamp, texto)

    def add(self, text: str, now: Optional[float] = None) -> None:
        now = time.monotonic() if now is None else now
        with self._lock:
            self._items.append((now, text))
            self._prune(now)

    def items(self, now: Optional[float] = None) -> List[str]:
        now = time.monotonic() if now is None else now
        with self._lock:
            self._prune(now)
            return [text for _, text in self._items]

    def _prune(self, now: float) -> None:
        cutoff = now - self.retention_s
        while self._items and self._items[0][0] < cutoff:
            self._items.popleft()
