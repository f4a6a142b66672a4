"""공용 테스트 픽스처"""
import pytest

from cj_bridge.adapters.auth.credential_repository import CredentialRepository
from cj_bridge.adapters.auth.token_store import TokenLifecycleManager, default_strategies
from cj_bridge.adapters.http.executor import RequestExecutor, RetryPolicy
from cj_bridge.adapters.http.rate_gate import RateGate
from cj_bridge.adapters.security.encryption import FernetEncryptor
from cj_bridge.adapters.suppliers.cj_adapter import CJDropshippingAdapter
from cj_bridge.adapters.suppliers.cj_auth_api import CJAuthApi
from cj_bridge.adapters.suppliers.cj_client import CJRequestClient
from cj_bridge.shared.config import Settings
from cj_bridge.tests.fakes import BASE_URL, FakeClock, InMemorySettingsStore, ProviderMock, StubAuthApi


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemorySettingsStore()


@pytest.fixture
def encryptor():
    return FernetEncryptor("test-secret")


@pytest.fixture
def repository(store, encryptor, clock):
    return CredentialRepository(store, encryptor, clock, default_lifetime_days=15)


@pytest.fixture
def auth_api():
    return StubAuthApi()


@pytest.fixture
def token_manager(repository, auth_api, clock):
    return TokenLifecycleManager(repository, default_strategies(auth_api, repository), clock)


@pytest.fixture
def provider(clock):
    return ProviderMock(clock)


@pytest.fixture
def rate_gate(clock):
    return RateGate(0.2, clock)


@pytest.fixture
def executor(provider, rate_gate, clock):
    return RequestExecutor(BASE_URL, rate_gate, clock, RetryPolicy(), transport=provider.transport())


@pytest.fixture
async def valid_token(repository):
    """1일 뒤 만료되는 저장 토큰"""
    await repository.save_credentials("api-key-1234567890", "seller@example.com")
    await repository.save_tokens("stored-access", "stored-refresh", "2025-01-02T00:00:00+00:00")
    return "stored-access"


@pytest.fixture
def cj_stack(executor, repository, clock):
    """실제 인증 API와 토큰 관리자를 쓰는 클라이언트/어댑터 묶음"""
    real_auth_api = CJAuthApi(executor)
    manager = TokenLifecycleManager(repository, default_strategies(real_auth_api, repository), clock)
    client = CJRequestClient(executor, manager)
    adapter = CJDropshippingAdapter(client, real_auth_api, Settings())
    return {"auth_api": real_auth_api, "token_manager": manager, "client": client, "adapter": adapter}
