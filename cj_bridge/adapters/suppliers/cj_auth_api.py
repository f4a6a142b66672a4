"""CJ 인증 API (토큰 발급 / 갱신)"""
from typing import Any, Dict

from pydantic import ValidationError

from cj_bridge.adapters.auth.token_store import TokenAuthApi
from cj_bridge.adapters.http.executor import RequestExecutor
from cj_bridge.adapters.suppliers.cj_normalizer import payload_preview
from cj_bridge.adapters.suppliers.cj_schemas import CJAuthResponse, is_cj_success
from cj_bridge.core.entities.credentials import IssuedToken
from cj_bridge.core.exceptions import AuthenticationError, ProviderAPIError, SchemaValidationError
from cj_bridge.shared.logging import get_logger

logger = get_logger(__name__)


class CJAuthApi(TokenAuthApi):
    """인증 엔드포인트 호출 (토큰 헤더 없이 같은 실행기를 통과)

    공급사는 getAccessToken 호출을 5분에 1회로 제한한다.
    """

    ACCESS_TOKEN_PATH = "authentication/getAccessToken"
    REFRESH_TOKEN_PATH = "authentication/refreshAccessToken"

    def __init__(self, executor: RequestExecutor):
        self.executor = executor

    async def authenticate(self, api_key: str, account_email: str) -> IssuedToken:
        """API 키로 신규 토큰 발급"""
        payload = await self._post(self.ACCESS_TOKEN_PATH, {"email": account_email, "apiKey": api_key})
        return self._issued_token(payload, "CJ 인증")

    async def refresh(self, refresh_token: str) -> IssuedToken:
        """리프레시 토큰으로 갱신"""
        payload = await self._post(self.REFRESH_TOKEN_PATH, {"refreshToken": refresh_token})
        return self._issued_token(payload, "CJ 토큰 갱신")

    def parse_token_response(self, payload: Any) -> IssuedToken:
        """외부에서 받은 인증 응답(JSON)을 토큰으로 변환"""
        return self._issued_token(payload, "CJ 토큰 가져오기")

    async def _post(self, path: str, body: Dict[str, Any]) -> Any:
        response = await self.executor.send("POST", path, json=body)

        if response.status_code >= 400:
            logger.error(f"CJ 인증 요청 실패: {path} - {response.status_code}")
            if response.status_code in (401, 403):
                raise AuthenticationError(
                    f"CJ 인증 거부: {response.status_code}",
                    code=response.status_code
                )
            raise ProviderAPIError(
                f"CJ 인증 요청 실패: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise SchemaValidationError(f"CJ 인증 응답이 JSON이 아닙니다: {path}", raw_payload=response.text) from e

    def _issued_token(self, payload: Any, operation: str) -> IssuedToken:
        try:
            parsed = CJAuthResponse.model_validate(payload)
        except ValidationError as e:
            logger.error(f"{operation} 응답 형식 오류: {payload_preview(payload)}")
            raise SchemaValidationError(f"{operation} 응답 형식 오류", raw_payload=payload) from e

        if not is_cj_success(parsed.code, parsed.result) or parsed.data is None:
            logger.warning(f"{operation} 실패: {parsed.code} - {parsed.message}")
            raise AuthenticationError(f"{operation} 실패: {parsed.message}", code=parsed.code)

        return IssuedToken(
            access_token=parsed.data.accessToken,
            refresh_token=parsed.data.refreshToken,
            access_token_expires_at=parsed.data.accessTokenExpiryDate,
            refresh_token_expires_at=parsed.data.refreshTokenExpiryDate,
            open_id=parsed.data.openId
        )
