"""CJ 연동 서비스"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional
import asyncio

from cj_bridge.adapters.auth.credential_repository import CredentialRepository
from cj_bridge.adapters.auth.token_store import TokenLifecycleManager
from cj_bridge.adapters.suppliers.cj_adapter import CJDropshippingAdapter
from cj_bridge.adapters.suppliers.cj_auth_api import CJAuthApi
from cj_bridge.core.entities.product import FreightOption, ProductRefreshData
from cj_bridge.core.exceptions import DropshippingError, NotConfiguredError
from cj_bridge.shared.logging import get_logger
from cj_bridge.shared.result import Failure, Result, Success

logger = get_logger(__name__)


def mean_delivery_days(options: List[FreightOption]) -> Optional[int]:
    """배송 옵션별 평균 배송일의 평균 (반올림)"""
    days = [option.average_delivery_days for option in options if option.average_delivery_days is not None]
    if not days:
        return None
    mean = Decimal(sum(days)) / len(days)
    return int(mean.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class CJIntegrationService:
    """CJ 연동 서비스 파사드

    실패는 Failure로 반환하며 Failure.value에 원인 예외를 담는다.
    """

    def __init__(
        self,
        credentials: CredentialRepository,
        token_manager: TokenLifecycleManager,
        auth_api: CJAuthApi,
        catalog: CJDropshippingAdapter
    ):
        self.credentials = credentials
        self.token_manager = token_manager
        self.auth_api = auth_api
        self.catalog = catalog

    async def connect(self, api_key: str, account_email: str) -> Result[Dict[str, Any]]:
        """인증 정보 검증 후 저장 (발급된 토큰도 함께 저장)"""
        api_key = (api_key or "").strip()
        account_email = (account_email or "").strip()
        if not api_key or not account_email:
            error = NotConfiguredError("API 키와 계정 이메일은 필수입니다")
            return Failure(error.message, error)

        try:
            issued = await self.catalog.check_credentials(api_key, account_email)
            await self.credentials.save_credentials(api_key, account_email)
            await self.credentials.save_tokens(
                issued.access_token,
                issued.refresh_token,
                issued.access_token_expires_at
            )
            logger.info(f"CJ 연결 완료: {account_email}")
            return Success(await self.credentials.describe())

        except DropshippingError as e:
            logger.error(f"CJ 연결 실패: {e.message}")
            return Failure(f"연결 테스트 실패: {e.message}", e)

    async def disconnect(self) -> Result[bool]:
        """인증 정보와 토큰 삭제"""
        try:
            await self.credentials.clear_credentials()
            return Success(True)

        except DropshippingError as e:
            logger.error(f"CJ 연결 해제 실패: {e.message}")
            return Failure(f"연결 해제 실패: {e.message}", e)

    async def get_status(self) -> Result[Dict[str, Any]]:
        """연결 상태 (비밀 값 제외)"""
        try:
            status = await self.credentials.describe()
            token_status = await self.token_manager.get_status()
            status["token_status"] = token_status.value
            return Success(status)

        except DropshippingError as e:
            logger.error(f"CJ 상태 조회 실패: {e.message}")
            return Failure(f"상태 조회 실패: {e.message}", e)

    async def test_connection(self) -> Result[bool]:
        """저장된 인증 정보로 연결 확인"""
        try:
            if not await self.credentials.has_credentials():
                raise NotConfiguredError("CJ 인증 정보가 없습니다. 먼저 인증 정보를 설정하세요.")
            return Success(await self.catalog.test_connection())

        except DropshippingError as e:
            logger.error(f"CJ 연결 확인 실패: {e.message}")
            return Failure(f"연결 확인 실패: {e.message}", e)

    async def import_tokens(self, payload: Any) -> Result[Dict[str, Any]]:
        """외부에서 받은 인증 응답으로 토큰 저장"""
        try:
            issued = self.auth_api.parse_token_response(payload)
            state = await self.credentials.save_tokens(
                issued.access_token,
                issued.refresh_token,
                issued.access_token_expires_at
            )
            return Success({"token_expires_at": state.expires_at.isoformat()})

        except DropshippingError as e:
            logger.error(f"CJ 토큰 가져오기 실패: {e.message}")
            return Failure(f"토큰 저장 실패: {e.message}", e)

    async def refresh_product_data(self, pid: str, sku: str, vid: Optional[str] = None) -> Result[ProductRefreshData]:
        """가격 / 재고 / 배송 옵션 동시 조회

        일부 항목이 실패해도 나머지는 반환하며 실패 메시지는 errors에 담긴다.
        """
        try:
            await self.token_manager.get_valid_access_token()
        except DropshippingError as e:
            logger.error(f"CJ 상품 정보 갱신 실패: {e.message}")
            return Failure(f"상품 정보 갱신 실패: {e.message}", e)

        product_result, inventory_result, freight_result = await asyncio.gather(
            self.catalog.get_product(pid),
            self.catalog.get_inventory_by_sku(sku),
            self._freight_options(vid),
            return_exceptions=True
        )

        errors: Dict[str, str] = {}
        for part, result in (("product", product_result), ("inventory", inventory_result), ("freight", freight_result)):
            if isinstance(result, DropshippingError):
                logger.warning(f"CJ 상품 정보 일부 실패: {pid} {part} - {result.message}")
                errors[part] = result.message
            elif isinstance(result, BaseException):
                raise result

        price = product_result.sell_price if "product" not in errors and product_result else None
        inventory = inventory_result if "inventory" not in errors else []
        options = freight_result if "freight" not in errors else []

        return Success(ProductRefreshData(
            price=price,
            inventory=inventory,
            shipping_options=options,
            avg_delivery_days=mean_delivery_days(options),
            errors=errors
        ))

    async def _freight_options(self, vid: Optional[str]) -> List[FreightOption]:
        if not vid:
            return []
        quote = await self.catalog.calculate_freight_for_destinations(vid)
        return quote.options
