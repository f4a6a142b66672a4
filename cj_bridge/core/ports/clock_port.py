"""시간 포트 (인터페이스)"""
from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    """시간 인터페이스"""

    @abstractmethod
    def now(self) -> datetime:
        """현재 시간 반환 (UTC, timezone-aware)"""
        pass

    @abstractmethod
    def monotonic(self) -> float:
        """단조 증가 시계 (초)"""
        pass

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """비동기 대기"""
        pass
