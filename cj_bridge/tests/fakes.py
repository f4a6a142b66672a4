"""테스트용 가짜 구현체"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Union
import asyncio

import httpx

from cj_bridge.adapters.auth.token_store import TokenAuthApi
from cj_bridge.core.entities.credentials import IssuedToken
from cj_bridge.core.ports.clock_port import ClockPort
from cj_bridge.core.ports.settings_port import SettingsStorePort

BASE_URL = "https://cj.test/api2.0/v1"


class FakeClock(ClockPort):
    """sleep이 가상 시간을 진행시키는 시계"""

    def __init__(self, start: datetime = datetime(2025, 1, 1, tzinfo=timezone.utc)):
        self._now = start
        self._monotonic = 1000.0
        self.sleeps: List[float] = []

    def now(self) -> datetime:
        return self._now

    def monotonic(self) -> float:
        return self._monotonic

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(seconds)
        await asyncio.sleep(0)

    def advance(self, seconds: float) -> None:
        self._now += timedelta(seconds=seconds)
        self._monotonic += seconds


class InMemorySettingsStore(SettingsStorePort):
    """딕셔너리 기반 설정 저장소"""

    def __init__(self):
        self.values: Dict[str, Any] = {}
        self.invalidations: List[Optional[str]] = []

    async def get(self, key: str) -> Optional[Any]:
        return self.values.get(key)

    async def set(self, key: str, value: Any) -> None:
        self.values[key] = value

    async def delete(self, key: str) -> None:
        self.values.pop(key, None)

    def invalidate(self, key: Optional[str] = None) -> None:
        self.invalidations.append(key)


class StubAuthApi(TokenAuthApi):
    """호출을 기록하고 미리 정한 결과를 돌려주는 인증 API"""

    def __init__(self):
        self.calls: List[str] = []
        self.authenticate_results: List[Union[IssuedToken, Exception]] = []
        self.refresh_results: List[Union[IssuedToken, Exception]] = []

    async def authenticate(self, api_key: str, account_email: str) -> IssuedToken:
        self.calls.append("authenticate")
        return self._next(self.authenticate_results)

    async def refresh(self, refresh_token: str) -> IssuedToken:
        self.calls.append("refresh")
        return self._next(self.refresh_results)

    @staticmethod
    def _next(results: List[Union[IssuedToken, Exception]]) -> IssuedToken:
        result = results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def issued(access: str = "access-new", refresh: str = "refresh-new", expires: Optional[str] = None) -> IssuedToken:
    return IssuedToken(access_token=access, refresh_token=refresh, access_token_expires_at=expires)


def cj_payload(data: Any = None, code: int = 200, result: bool = True, message: str = "Success") -> Dict[str, Any]:
    """공급사 응답 봉투"""
    return {"code": code, "result": result, "message": message, "data": data, "requestId": "req-1"}


class ProviderMock:
    """httpx.MockTransport 핸들러

    경로별 응답(dict, httpx.Response, 예외, 또는 이들의 목록)을 등록하면
    요청 순서대로 돌려주고 요청과 호출 시각을 기록한다.
    """

    def __init__(self, clock: Optional[FakeClock] = None):
        self.clock = clock
        self.routes: Dict[str, List[Any]] = {}
        self.requests: List[httpx.Request] = []
        self.call_times: List[float] = []

    def on(self, path: str, *responses: Any) -> "ProviderMock":
        self.routes.setdefault(path, []).extend(responses)
        return self

    def calls(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/" + path)]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.clock is not None:
            self.call_times.append(self.clock.monotonic())

        for path, responses in self.routes.items():
            if request.url.path.endswith("/" + path):
                # 마지막 응답은 계속 재사용
                response = responses.pop(0) if len(responses) > 1 else responses[0]
                return self._build(response, request)

        return httpx.Response(404, json={"message": "not mocked"}, request=request)

    @staticmethod
    def _build(response: Any, request: httpx.Request) -> httpx.Response:
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(request)
        if isinstance(response, httpx.Response):
            return httpx.Response(
                response.status_code,
                headers=response.headers,
                content=response.content,
                request=request
            )
        return httpx.Response(200, json=response, request=request)


def shape_a_product(**overrides):
    product = {
        "pid": "1001",
        "productNameEn": "Wireless  Earbuds\nPro",
        "productSku": "CJJBHP0082",
        "productImage": "https://img.test/1001.jpg",
        "sellPrice": "9.15",
        "categoryId": "cat-7",
        "categoryName": "Earphones",
        "productType": "ORDINARY_PRODUCT",
    }
    product.update(overrides)
    return product


def shape_b_product(**overrides):
    product = {
        "id": "1001",
        "nameEn": "Wireless Earbuds Pro",
        "sku": "CJJBHP0082",
        "bigImage": "https://img.test/1001.jpg",
        "sellPrice": "9.15",
        "categoryId": "cat-7",
        "threeCategoryName": "Earphones",
        "productType": "ORDINARY_PRODUCT",
    }
    product.update(overrides)
    return product


def shape_b_payload(products, total=None):
    return {
        "code": 200,
        "result": True,
        "message": "Success",
        "data": {
            "pageNumber": 1,
            "pageSize": 20,
            "totalRecords": total if total is not None else len(products),
            "content": [{"productList": products, "keyWord": "earbuds"}],
        },
    }
