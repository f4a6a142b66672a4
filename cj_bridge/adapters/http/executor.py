"""공급사 호출 실행기 (간격 제한 + 제한 시간 + 재시도)"""
from dataclasses import dataclass
from typing import Any, Dict, Optional
import asyncio

import httpx

from cj_bridge.core.exceptions import NetworkError, RateLimitError, RequestTimeoutError
from cj_bridge.core.ports.clock_port import ClockPort
from cj_bridge.core.ports.rate_limit_port import RateLimiterPort
from cj_bridge.shared.logging import get_logger, log_api_request

logger = get_logger(__name__)


@dataclass
class RetryPolicy:
    """재시도 정책"""
    max_attempts: int = 3  # 429 응답 시 총 시도 횟수
    base_delay_seconds: float = 1.0
    network_max_retries: int = 3
    timeout_seconds: float = 10.0

    def backoff_delay(self, retry_index: int) -> float:
        """지수 백오프 (retry_index는 0부터)"""
        return self.base_delay_seconds * (2 ** (retry_index + 1))


class RequestExecutor:
    """모든 공급사 HTTP 호출이 지나는 단일 관문

    - 매 시도마다 게이트 통과 후 새 AsyncClient로 호출 (연결 재사용 없음)
    - 제한 시간 초과는 재시도하지 않고 RequestTimeoutError
    - 429는 Retry-After 또는 지수 백오프 후 재시도, 한도 초과 시 RateLimitError
    - 전송 오류는 고정 간격으로 재시도, 한도 초과 시 NetworkError
    - 그 외 상태 코드는 호출자에게 그대로 반환
    """

    def __init__(
        self,
        base_url: str,
        limiter: RateLimiterPort,
        clock: ClockPort,
        policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip('/')
        self.limiter = limiter
        self.clock = clock
        self.policy = policy or RetryPolicy()
        self.transport = transport

    async def send(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """요청 전송"""
        url = path if path.startswith("http") else f"{self.base_url}/{path.lstrip('/')}"
        query = {k: v for k, v in (params or {}).items() if v is not None}
        request_headers = {"Content-Type": "application/json", **(headers or {})}

        rate_limited = 0
        network_retries = 0

        while True:
            await self.limiter.acquire()
            started = self.clock.monotonic()

            try:
                response = await self._dispatch(method, url, query, json, request_headers)
            except (asyncio.TimeoutError, httpx.TimeoutException) as e:
                logger.error(f"CJ API 제한 시간 초과: {method} {path} ({self.policy.timeout_seconds}s)")
                raise RequestTimeoutError(
                    f"CJ API 응답 시간 초과 ({self.policy.timeout_seconds}초)",
                    details={"endpoint": path}
                ) from e
            except httpx.TransportError as e:
                if network_retries < self.policy.network_max_retries:
                    network_retries += 1
                    logger.warning(f"네트워크 오류, 재시도 {network_retries}/{self.policy.network_max_retries}: {path} - {e}")
                    await self.clock.sleep(self.policy.base_delay_seconds)
                    continue
                logger.error(f"네트워크 오류 재시도 한도 초과: {path} - {e}")
                raise NetworkError(
                    f"CJ API 연결 실패: {e}",
                    details={"endpoint": path, "retries": network_retries}
                ) from e

            log_api_request(logger, method, path, response.status_code, self.clock.monotonic() - started)

            if response.status_code != 429:
                return response

            rate_limited += 1
            if rate_limited >= self.policy.max_attempts:
                logger.error(f"호출 제한 재시도 한도 초과: {path} ({rate_limited}회)")
                raise RateLimitError(
                    "CJ API 호출 제한 초과. 잠시 후 다시 시도하세요.",
                    code=429,
                    details={"endpoint": path, "attempts": rate_limited}
                )

            delay = self._retry_after(response)
            if delay is None:
                delay = self.policy.backoff_delay(rate_limited - 1)
            logger.warning(f"호출 제한(429), {delay:.1f}초 후 재시도 ({rate_limited}/{self.policy.max_attempts})")
            await self.clock.sleep(delay)

    async def _dispatch(
        self,
        method: str,
        url: str,
        params: Dict[str, Any],
        json: Optional[Dict[str, Any]],
        headers: Dict[str, str]
    ) -> httpx.Response:
        async with httpx.AsyncClient(transport=self.transport, timeout=self.policy.timeout_seconds) as client:
            return await asyncio.wait_for(
                client.request(method, url, params=params or None, json=json, headers=headers),
                timeout=self.policy.timeout_seconds
            )

    @staticmethod
    def _retry_after(response: httpx.Response) -> Optional[float]:
        """Retry-After 헤더 (초 단위만 지원)"""
        value = response.headers.get("Retry-After")
        if not value:
            return None
        try:
            return max(float(value), 0.0)
        except ValueError:
            return None
