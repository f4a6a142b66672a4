"""호출 간격 제한 포트 (인터페이스)

단일 프로세스 구현은 RateGate. 다중 인스턴스 배포에서는 공유 저장소 기반
토큰 버킷 구현으로 교체한다.
"""
from abc import ABC, abstractmethod


class RateLimiterPort(ABC):
    """외부 호출 게이트 인터페이스"""

    @abstractmethod
    async def acquire(self) -> None:
        """다음 호출이 허용될 때까지 대기"""
        pass
