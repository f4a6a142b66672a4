"""단일 프로세스 호출 간격 게이트"""
from typing import Optional
import asyncio

from cj_bridge.core.ports.clock_port import ClockPort
from cj_bridge.core.ports.rate_limit_port import RateLimiterPort
from cj_bridge.shared.logging import get_logger

logger = get_logger(__name__)


class RateGate(RateLimiterPort):
    """모든 공급사 호출 사이에 최소 간격을 보장

    락은 간격 계산과 기록만 보호하고 실제 HTTP 호출은 락 밖에서 수행된다.
    대기 중 취소되면 last_call_at은 갱신되지 않는다.
    """

    def __init__(self, min_interval_seconds: float, clock: ClockPort):
        self.min_interval_seconds = min_interval_seconds
        self.clock = clock
        self._lock = asyncio.Lock()
        self._last_call_at: Optional[float] = None

    @property
    def last_call_at(self) -> Optional[float]:
        return self._last_call_at

    async def acquire(self) -> None:
        """호출 허용까지 대기"""
        async with self._lock:
            if self._last_call_at is not None:
                elapsed = self.clock.monotonic() - self._last_call_at
                if elapsed < self.min_interval_seconds:
                    wait = self.min_interval_seconds - elapsed
                    logger.debug(f"호출 간격 대기: {wait * 1000:.0f}ms")
                    await self.clock.sleep(wait)

            self._last_call_at = self.clock.monotonic()
