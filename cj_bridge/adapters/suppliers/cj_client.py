"""CJ API 요청 클라이언트 (토큰 부착 + 인증 오류 재시도)"""
from typing import Any, Dict, Optional, Tuple

from cj_bridge.adapters.auth.token_store import TokenLifecycleManager
from cj_bridge.adapters.http.executor import RequestExecutor
from cj_bridge.adapters.suppliers.cj_schemas import is_auth_error
from cj_bridge.core.exceptions import AuthenticationError, ProviderAPIError, SchemaValidationError
from cj_bridge.shared.logging import get_logger

logger = get_logger(__name__)


class CJRequestClient:
    """인증된 CJ API 호출

    공급사는 인증 실패를 HTTP 200 응답 본문의 code로 알린다. 인증 거부 시
    토큰을 강제로 교체한 뒤 한 번만 재시도한다.
    """

    TOKEN_HEADER = "CJ-Access-Token"

    def __init__(self, executor: RequestExecutor, token_manager: TokenLifecycleManager):
        self.executor = executor
        self.token_manager = token_manager

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, body: Dict[str, Any]) -> Any:
        return await self.request("POST", path, json=body)

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None
    ) -> Any:
        """요청 후 JSON 응답 반환"""
        token = await self.token_manager.get_valid_access_token()
        status_code, payload = await self._send(method, path, token, params, json)

        if self._is_auth_rejection(status_code, payload):
            logger.warning(f"CJ 인증 오류 응답, 새 토큰으로 재시도: {path}")
            token = await self.token_manager.force_refresh(token)
            status_code, payload = await self._send(method, path, token, params, json)

            if self._is_auth_rejection(status_code, payload):
                code = payload.get("code") if isinstance(payload, dict) else status_code
                message = payload.get("message") if isinstance(payload, dict) else None
                logger.error(f"CJ 인증 재시도 실패: {path} - {code}")
                raise AuthenticationError(f"CJ 인증 실패: {message or '토큰이 거부되었습니다'}", code=code)

        return payload

    async def _send(
        self,
        method: str,
        path: str,
        token: str,
        params: Optional[Dict[str, Any]],
        json: Optional[Dict[str, Any]]
    ) -> Tuple[int, Any]:
        response = await self.executor.send(
            method,
            path,
            params=params,
            json=json,
            headers={self.TOKEN_HEADER: token}
        )

        if response.status_code == 401:
            return response.status_code, None

        if response.status_code >= 400:
            logger.error(f"CJ API 요청 실패: {method} {path} - {response.status_code}")
            raise ProviderAPIError(
                f"CJ API 요청 실패: {response.status_code} {response.reason_phrase} - {response.text[:200]}",
                status_code=response.status_code
            )

        try:
            return response.status_code, response.json()
        except ValueError as e:
            logger.error(f"CJ API 응답이 JSON이 아님: {path} - {response.text[:200]}")
            raise SchemaValidationError(f"CJ API 응답이 JSON이 아닙니다: {path}", raw_payload=response.text) from e

    @staticmethod
    def _is_auth_rejection(status_code: int, payload: Any) -> bool:
        if status_code == 401:
            return True
        return isinstance(payload, dict) and is_auth_error(payload.get("code"))
