"""의존성 주입 설정

레이트 게이트와 토큰 관리자는 프로세스 전체에서 하나만 존재해야 하므로 캐시된 팩토리로 만든다.
"""
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from cj_bridge.adapters.auth.credential_repository import CredentialRepository
from cj_bridge.adapters.auth.token_store import TokenLifecycleManager, TokenRefreshPolicy, default_strategies
from cj_bridge.adapters.http.executor import RequestExecutor, RetryPolicy
from cj_bridge.adapters.http.rate_gate import RateGate
from cj_bridge.adapters.persistence.clock_adapter import ClockAdapter
from cj_bridge.adapters.persistence.models import create_engine_for, create_session_factory
from cj_bridge.adapters.persistence.settings_store import SqlSettingsStore
from cj_bridge.adapters.security.encryption import FernetEncryptor
from cj_bridge.adapters.suppliers.cj_adapter import CJDropshippingAdapter
from cj_bridge.adapters.suppliers.cj_auth_api import CJAuthApi
from cj_bridge.adapters.suppliers.cj_client import CJRequestClient
from cj_bridge.core.ports.clock_port import ClockPort
from cj_bridge.services.cj_service import CJIntegrationService
from cj_bridge.shared.config import get_settings
from cj_bridge.shared.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()


@lru_cache()
def get_clock() -> ClockPort:
    """클록 포트 구현체"""
    return ClockAdapter()


@lru_cache()
def get_engine() -> AsyncEngine:
    return create_engine_for(settings.database_url)


@lru_cache()
def get_session_factory() -> async_sessionmaker:
    return create_session_factory(get_engine())


@lru_cache()
def get_settings_store() -> SqlSettingsStore:
    """설정 저장소 (읽기 캐시 공유)"""
    return SqlSettingsStore(
        get_session_factory(),
        get_clock(),
        cache_ttl_seconds=settings.settings_cache_ttl_seconds
    )


@lru_cache()
def get_credential_repository() -> CredentialRepository:
    return CredentialRepository(
        get_settings_store(),
        FernetEncryptor(settings.encryption_key),
        get_clock(),
        default_lifetime_days=settings.token_default_lifetime_days
    )


@lru_cache()
def get_rate_gate() -> RateGate:
    """프로세스 전역 레이트 게이트"""
    return RateGate(settings.cj_min_request_interval_ms / 1000, get_clock())


@lru_cache()
def get_executor() -> RequestExecutor:
    return RequestExecutor(
        settings.cj_api_base_url,
        get_rate_gate(),
        get_clock(),
        RetryPolicy(
            max_attempts=settings.cj_max_attempts,
            base_delay_seconds=settings.cj_retry_base_delay_seconds,
            network_max_retries=settings.cj_network_max_retries,
            timeout_seconds=settings.cj_request_timeout_seconds
        )
    )


@lru_cache()
def get_auth_api() -> CJAuthApi:
    return CJAuthApi(get_executor())


@lru_cache()
def get_token_manager() -> TokenLifecycleManager:
    """프로세스 전역 토큰 관리자"""
    repository = get_credential_repository()
    return TokenLifecycleManager(
        repository,
        default_strategies(get_auth_api(), repository),
        get_clock(),
        TokenRefreshPolicy(buffer_hours=settings.token_refresh_buffer_hours)
    )


@lru_cache()
def get_cj_adapter() -> CJDropshippingAdapter:
    """CJ 카탈로그 어댑터"""
    client = CJRequestClient(get_executor(), get_token_manager())
    return CJDropshippingAdapter(client, get_auth_api(), settings)


def get_cj_service() -> CJIntegrationService:
    """CJ 연동 서비스 파사드"""
    return CJIntegrationService(
        credentials=get_credential_repository(),
        token_manager=get_token_manager(),
        auth_api=get_auth_api(),
        catalog=get_cj_adapter()
    )
