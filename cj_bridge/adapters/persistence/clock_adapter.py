"""시간 어댑터"""
from datetime import datetime, timezone
import asyncio
import time

from cj_bridge.core.ports.clock_port import ClockPort


class ClockAdapter(ClockPort):
    """시간 어댑터 구현체"""

    def now(self) -> datetime:
        """현재 시간 반환 (UTC)"""
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        """비동기 대기"""
        if seconds > 0:
            await asyncio.sleep(seconds)
