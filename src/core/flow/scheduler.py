"""취소 가능한 지연 호출

메시지 노드 자동 전이와 자유 발화 응답 지연에 쓴다. 엔진은 예약한 노드 ID를
함께 기억하고, 노드를 떠나거나 리셋/카탈로그 교체 시 취소한다.
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Callable, Optional


class ScheduledCall(ABC):
    @abstractmethod
    def cancel(self) -> None:
        ...

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        ...


class Scheduler(ABC):
    """지연 호출 스케줄러 인터페이스"""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        ...


class _AsyncioCall(ScheduledCall):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """이벤트 루프 기반. 루프 스레드에서만 호출한다."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioCall(loop.call_later(delay, callback))


class _ManualCall(ScheduledCall):
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """호스트가 시간을 직접 진행시키는 결정적 스케줄러 (테스트, 콘솔 구동)"""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, _ManualCall]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        call = _ManualCall(self.now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (call.due, next(self._seq), call))
        return call

    def advance(self, seconds: float) -> int:
        """seconds만큼 시간을 진행하고 기한이 된 호출 실행. 실행 수 반환.

        콜백 안에서 새로 예약된 호출도 기한 안이면 같은 진행에서 실행된다.
        """
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, call = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            if call.cancelled:
                continue
            call.callback()
            fired += 1
        self.now = target
        return fired

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, call in self._queue if not call.cancelled)
