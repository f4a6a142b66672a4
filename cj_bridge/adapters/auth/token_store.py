"""토큰 수명 관리"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import asyncio

from cj_bridge.adapters.auth.credential_repository import CredentialRepository
from cj_bridge.core.entities.credentials import IssuedToken, TokenState, TokenStatus
from cj_bridge.core.exceptions import (
    AuthenticationError, DropshippingError, NetworkError, NotConfiguredError,
    ProviderAPIError, SchemaValidationError,
    RateLimitError, RequestTimeoutError
)
from cj_bridge.core.ports.clock_port import ClockPort
from cj_bridge.shared.logging import get_logger

logger = get_logger(__name__)

TRANSIENT_ERRORS = (NetworkError, RequestTimeoutError, RateLimitError)
STRATEGY_ERRORS = (AuthenticationError, ProviderAPIError, SchemaValidationError) + TRANSIENT_ERRORS


@dataclass
class TokenRefreshPolicy:
    """토큰 갱신 정책"""
    buffer_hours: int = 1  # 만료 1시간 전부터 갱신


class TokenAuthApi(ABC):
    """토큰 발급 API (CJAuthApi가 구현)"""

    @abstractmethod
    async def authenticate(self, api_key: str, account_email: str) -> IssuedToken:
        pass

    @abstractmethod
    async def refresh(self, refresh_token: str) -> IssuedToken:
        pass


class TokenStrategy(ABC):
    """토큰 획득 전략

    적용할 수 없으면(리프레시 토큰/인증 정보 없음) None을 반환하고,
    공급사가 거부하면 예외를 던진다.
    """
    name: str = "strategy"

    @abstractmethod
    async def obtain(self, state: Optional[TokenState]) -> Optional[IssuedToken]:
        pass


class RefreshStrategy(TokenStrategy):
    """리프레시 토큰으로 갱신"""
    name = "refresh"

    def __init__(self, auth_api: TokenAuthApi):
        self.auth_api = auth_api

    async def obtain(self, state: Optional[TokenState]) -> Optional[IssuedToken]:
        if not state or not state.refresh_token:
            return None
        return await self.auth_api.refresh(state.refresh_token)


class ReauthenticateStrategy(TokenStrategy):
    """저장된 인증 정보로 재인증"""
    name = "reauthenticate"

    def __init__(self, auth_api: TokenAuthApi, repository: CredentialRepository):
        self.auth_api = auth_api
        self.repository = repository

    async def obtain(self, state: Optional[TokenState]) -> Optional[IssuedToken]:
        credentials = await self.repository.get_credentials()
        if credentials is None:
            return None
        return await self.auth_api.authenticate(credentials.api_key, credentials.account_email)


def default_strategies(auth_api: TokenAuthApi, repository: CredentialRepository) -> List[TokenStrategy]:
    """기본 전략 순서: 갱신 -> 재인증"""
    return [RefreshStrategy(auth_api), ReauthenticateStrategy(auth_api, repository)]


class TokenLifecycleManager:
    """항상 유효한 액세스 토큰을 제공

    상태 확인과 갱신은 하나의 락 안에서 수행되어 동시에 여러 호출자가
    만료를 감지해도 갱신 요청은 한 번만 나간다.
    """

    def __init__(
        self,
        repository: CredentialRepository,
        strategies: Sequence[TokenStrategy],
        clock: ClockPort,
        refresh_policy: TokenRefreshPolicy = None
    ):
        self.repository = repository
        self.strategies = list(strategies)
        self.clock = clock
        self.refresh_policy = refresh_policy or TokenRefreshPolicy()
        self._lock = asyncio.Lock()

    def _status_of(self, state: Optional[TokenState]) -> TokenStatus:
        if state is None:
            return TokenStatus.NO_TOKEN
        return state.status(self.clock.now(), self.refresh_policy.buffer_hours)

    async def get_status(self) -> TokenStatus:
        return self._status_of(await self.repository.load_token_state())

    async def get_valid_access_token(self) -> str:
        """유효한 액세스 토큰 반환 (필요 시 갱신/재인증)"""
        async with self._lock:
            state = await self.repository.load_token_state()
            status = self._status_of(state)
            if not status.needs_renewal():
                return state.access_token

            logger.info(f"CJ 토큰 갱신 필요: {status.value}")
            return await self._run_strategies(state)

    async def force_refresh(self, rejected_token: Optional[str]) -> str:
        """공급사가 거부한 토큰 교체

        다른 호출자가 이미 교체했다면 네트워크 호출 없이 새 토큰을 반환한다.
        """
        async with self._lock:
            state = await self.repository.load_token_state()
            if (
                state is not None
                and state.access_token
                and state.access_token != rejected_token
                and not self._status_of(state).needs_renewal()
            ):
                return state.access_token

            logger.warning("CJ 토큰 거부됨, 강제 갱신")
            return await self._run_strategies(state)

    async def _run_strategies(self, state: Optional[TokenState]) -> str:
        failures: List[Tuple[str, DropshippingError]] = []
        last_skipped = False

        for strategy in self.strategies:
            try:
                issued = await strategy.obtain(state)
            except STRATEGY_ERRORS as e:
                logger.warning(f"토큰 전략 실패: {strategy.name} - {e.message}")
                failures.append((strategy.name, e))
                last_skipped = False
                continue

            if issued is None:
                last_skipped = True
                continue

            await self.repository.save_tokens(
                issued.access_token,
                issued.refresh_token,
                issued.access_token_expires_at
            )
            logger.info(f"CJ 토큰 획득 완료: {strategy.name}")
            return issued.access_token

        last_error = failures[-1][1] if failures else None
        if isinstance(last_error, TRANSIENT_ERRORS):
            raise last_error

        if last_error is None or last_skipped:
            raise NotConfiguredError("CJ 인증 정보가 설정되지 않았습니다. 설정에서 API 키를 입력하세요.")

        raise AuthenticationError(
            f"CJ 인증 실패: {last_error.message}",
            code=last_error.code,
            details={"attempts": [{"strategy": name, "error": err.message} for name, err in failures]}
        )
