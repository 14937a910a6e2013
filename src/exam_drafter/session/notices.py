"""User-facing notice queue.

Notices are shown sequentially without overlap: the host pops one,
displays it, and pops the next when the user dismisses it. A notice
raised while another is showing waits its turn.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, List, Optional

logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """One toast/popup for the user."""

    level: NoticeLevel
    title: str
    message: str
    retryable: bool = False

    @classmethod
    def info(cls, title: str, message: str) -> Notice:
        return cls(NoticeLevel.INFO, title, message)

    @classmethod
    def success(cls, title: str, message: str) -> Notice:
        return cls(NoticeLevel.SUCCESS, title, message)

    @classmethod
    def error(cls, title: str, message: str, *, retryable: bool = False) -> Notice:
        return cls(NoticeLevel.ERROR, title, message, retryable)


class NoticeQueue:
    """FIFO of pending notices.

    Usage:
        queue = NoticeQueue(on_push=ui.wake_toast_loop)
        queue.push(Notice.error("Erro", "Falha ao exportar PDF", retryable=True))
        notice = queue.pop()   # None when empty
    """

    def __init__(self, on_push: Optional[Callable[[Notice], None]] = None) -> None:
        self._queue: Deque[Notice] = deque()
        self._on_push = on_push

    def push(self, notice: Notice) -> None:
        """Append a notice and notify the host."""
        self._queue.append(notice)
        log = logger.warning if notice.level is NoticeLevel.ERROR else logger.info
        log(f"Notice [{notice.level.value}] {notice.title}: {notice.message}")
        if self._on_push is not None:
            self._on_push(notice)

    def extend(self, notices: List[Notice]) -> None:
        for notice in notices:
            self.push(notice)

    def pop(self) -> Optional[Notice]:
        """Next notice to show, or None when the queue is exhausted."""
        return self._queue.popleft() if self._queue else None

    def peek(self) -> Optional[Notice]:
        return self._queue[0] if self._queue else None

    def pending(self) -> List[Notice]:
        return list(self._queue)

    def __len__(self) -> int:
        return len(self._queue)

    def clear(self) -> None:
        self._queue.clear()
