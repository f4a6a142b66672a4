"""CJ Dropshipping 카탈로그 어댑터"""
from typing import Any, Dict, List, Optional
import asyncio
import re

from cj_bridge.adapters.suppliers.cj_auth_api import CJAuthApi
from cj_bridge.adapters.suppliers.cj_client import CJRequestClient
from cj_bridge.adapters.suppliers.cj_normalizer import (
    flatten_categories, parse_freight_options, parse_inventory,
    parse_my_products, parse_product_list, parse_product_list_v2, payload_preview
)
from cj_bridge.core.entities.credentials import IssuedToken
from cj_bridge.core.entities.product import (
    CanonicalProduct, Category, FreightOption, FreightQuote, MyProductsResult,
    ProductPage, ProductQuery, ProductReference, ReferenceKind, WarehouseInventory
)
from cj_bridge.core.exceptions import (
    DropshippingError, InvalidProductReferenceError, ProductNotFoundError,
    SchemaValidationError, UpstreamPartialResultError
)
from cj_bridge.core.ports.supplier_port import SupplierCatalogPort
from cj_bridge.shared.config import Settings, get_settings
from cj_bridge.shared.logging import get_logger
from cj_bridge.shared.result import Result

logger = get_logger(__name__)

MAX_V2_PAGE_SIZE = 100

_URL_PID_PATTERNS = (
    re.compile(r"[?&]pid=([^&]+)"),
    re.compile(r"/product/(\d+)"),
    re.compile(r"pid[=:](\d+)", re.IGNORECASE),
)


def classify_product_reference(text: str) -> ProductReference:
    """입력 문자열을 URL / PID / SKU로 분류

    URL은 PID를 추출하며, 숫자만 있으면 PID, 그 외 영숫자는 SKU로 본다.
    """
    value = (text or "").strip()
    if not value:
        raise InvalidProductReferenceError("상품 식별자가 비어 있습니다")

    if "http" in value or "cjdropshipping" in value:
        for pattern in _URL_PID_PATTERNS:
            match = pattern.search(value)
            if match and match.group(1):
                return ProductReference(kind=ReferenceKind.URL, value=match.group(1), lookup_field="pid")
        raise InvalidProductReferenceError(
            "URL에서 상품 ID를 찾을 수 없습니다. 상품 검색을 사용하거나 SKU/PID를 직접 입력하세요.",
            details={"input": value}
        )

    if value.isdigit():
        return ProductReference(kind=ReferenceKind.PID, value=value, lookup_field="pid")

    return ProductReference(kind=ReferenceKind.SKU, value=value, lookup_field="productSku")


class CJDropshippingAdapter(SupplierCatalogPort):
    """CJ Dropshipping API 어댑터"""

    PRODUCT_LIST_PATH = "product/list"
    PRODUCT_LIST_V2_PATH = "product/listV2"
    MY_PRODUCTS_PATH = "product/myProduct/query"
    CATEGORY_PATH = "product/getCategory"
    INVENTORY_PATH = "product/stock/queryBySku"
    FREIGHT_PATH = "logistic/freightCalculate"

    def __init__(self, client: CJRequestClient, auth_api: CJAuthApi, settings: Settings = None):
        self.client = client
        self.auth_api = auth_api
        self.settings = settings or get_settings()

    # --- 상품 ---

    async def search_products(self, query: ProductQuery) -> ProductPage:
        """상품 검색 (listV2 우선, 형식 불일치 시 product/list로 한 번 재시도)"""
        payload = await self.client.get(self.PRODUCT_LIST_V2_PATH, self._v2_params(query))
        result = parse_product_list_v2(payload)
        if result.is_success():
            logger.info(f"CJ 상품 검색 완료(listV2): {len(result.get_value().products)}개")
            return result.get_value()

        logger.warning(f"listV2 응답 형식 불일치, product/list로 재시도: {result.get_error()}")
        payload = await self.client.get(self.PRODUCT_LIST_PATH, self._list_params(query))
        page = self._unwrap(parse_product_list(payload), "상품 검색")
        logger.info(f"CJ 상품 검색 완료(list): {len(page.products)}개")
        return page

    async def get_product(self, pid: str) -> Optional[CanonicalProduct]:
        """PID로 상품 조회 (없으면 None)"""
        payload = await self.client.get(self.PRODUCT_LIST_PATH, {"pid": pid})
        page = self._unwrap(parse_product_list(payload), "상품 조회")
        return page.products[0] if page.products else None

    async def get_product_by_reference(self, reference: str) -> CanonicalProduct:
        """URL / PID / SKU로 상품 조회"""
        ref = classify_product_reference(reference)
        logger.info(f"CJ 상품 조회: {ref.lookup_field}={ref.value}")

        payload = await self.client.get(self.PRODUCT_LIST_PATH, {ref.lookup_field: ref.value})
        page = self._unwrap(parse_product_list(payload), "상품 조회")

        if not page.products:
            search_type = "SKU" if ref.kind is ReferenceKind.SKU else "PID"
            raise ProductNotFoundError(
                f"{search_type} '{ref.value}' 상품을 찾을 수 없습니다",
                details={"kind": ref.kind.value, "value": ref.value}
            )
        return page.products[0]

    async def batch_get_products(self, pids: List[str]) -> List[Optional[CanonicalProduct]]:
        """여러 상품 병렬 조회 (실패한 항목은 None)"""
        results = await asyncio.gather(*(self.get_product(pid) for pid in pids), return_exceptions=True)

        products: List[Optional[CanonicalProduct]] = []
        for pid, result in zip(pids, results):
            if isinstance(result, DropshippingError):
                logger.warning(f"CJ 상품 조회 실패: {pid} - {result.message}")
                products.append(None)
            elif isinstance(result, BaseException):
                raise result
            else:
                products.append(result)
        return products

    async def get_categories(self) -> List[Category]:
        payload = await self.client.get(self.CATEGORY_PATH)
        return flatten_categories(payload)

    async def get_inventory_by_sku(self, sku: str) -> List[WarehouseInventory]:
        payload = await self.client.get(self.INVENTORY_PATH, {"sku": sku})
        return parse_inventory(payload)

    # --- 배송비 ---

    async def calculate_freight(
        self,
        vid: str,
        end_country_code: str,
        start_country_code: Optional[str] = None,
        quantity: int = 1,
        zip_code: Optional[str] = None,
        tax_id: Optional[str] = None,
        house_number: Optional[str] = None,
        ioss_number: Optional[str] = None
    ) -> List[FreightOption]:
        """단일 목적지 배송비 계산"""
        body: Dict[str, Any] = {
            "startCountryCode": start_country_code or self.settings.cj_freight_origin_country,
            "endCountryCode": end_country_code,
            "products": [{"quantity": quantity, "vid": vid}],
        }
        optional = {"zip": zip_code, "taxId": tax_id, "houseNumber": house_number, "iossNumber": ioss_number}
        body.update({key: value for key, value in optional.items() if value})

        payload = await self.client.post(self.FREIGHT_PATH, body)
        return parse_freight_options(payload, destination_country=end_country_code)

    async def calculate_freight_for_destinations(
        self,
        vid: str,
        destinations: Optional[List[str]] = None,
        quantity: int = 1
    ) -> FreightQuote:
        """여러 목적지 배송비 병렬 계산 (첫 목적지가 선호 목적지)"""
        countries = list(destinations or self.settings.cj_freight_destinations)
        results = await asyncio.gather(
            *(self.calculate_freight(vid, country, quantity=quantity) for country in countries),
            return_exceptions=True
        )

        options: List[FreightOption] = []
        failures: Dict[str, str] = {}
        errors: List[DropshippingError] = []
        for country, result in zip(countries, results):
            if isinstance(result, DropshippingError):
                logger.warning(f"CJ 배송비 계산 실패: {vid} -> {country} - {result.message}")
                failures[country] = result.message
                errors.append(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                options.extend(result)

        if errors and len(errors) == len(countries):
            raise errors[0]

        return FreightQuote(options=options, failures=failures)

    # --- 내 상품 ---

    async def list_my_products(self) -> MyProductsResult:
        """내 상품 목록

        공급사 엔드포인트가 페이지네이션을 무시하므로 최대 페이지 크기로 한 번만 호출한다.
        """
        page_size = self.settings.cj_my_products_page_size
        payload = await self.client.get(self.MY_PRODUCTS_PATH, {"pageNumber": 1, "pageSize": page_size})
        page = self._unwrap(parse_my_products(payload), "내 상품 조회")

        partial = None
        if page.total > len(page.products):
            logger.warning(f"CJ 내 상품 일부만 반환됨: {len(page.products)}/{page.total}")
            partial = UpstreamPartialResultError(
                f"공급사가 {page.total}개 중 {len(page.products)}개만 반환했습니다",
                returned=len(page.products),
                total=page.total
            )

        return MyProductsResult(products=page.products, total=page.total, partial=partial)

    # --- 연결 ---

    async def check_credentials(self, api_key: str, account_email: str) -> IssuedToken:
        """저장하지 않고 인증 정보로 토큰 발급 시도"""
        return await self.auth_api.authenticate(api_key, account_email)

    async def test_connection(self) -> bool:
        """카테고리 조회로 연결 확인"""
        categories = await self.get_categories()
        logger.info(f"CJ 연결 확인 완료: 카테고리 {len(categories)}개")
        return True

    # --- 내부 ---

    @staticmethod
    def _unwrap(result: Result, operation: str) -> Any:
        if result.is_success():
            return result.get_value()
        logger.error(f"{operation} 응답 형식 오류: {result.get_error()} - payload={payload_preview(result.value)}")
        raise SchemaValidationError(f"{operation}: CJ 응답 형식이 예상과 다릅니다", raw_payload=result.value)

    @staticmethod
    def _v2_params(query: ProductQuery) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "page": query.page,
            "size": min(query.page_size, MAX_V2_PAGE_SIZE),
        }
        if query.keyword:
            params["keyWord"] = query.keyword
        if query.category_id:
            params["categoryId"] = query.category_id
        if query.min_price is not None:
            params["startSellPrice"] = str(query.min_price)
        if query.max_price is not None:
            params["endSellPrice"] = str(query.max_price)
        if query.country_code:
            params["countryCode"] = query.country_code
        return params

    @staticmethod
    def _list_params(query: ProductQuery) -> Dict[str, Any]:
        params: Dict[str, Any] = {"pageNum": query.page, "pageSize": query.page_size}
        if query.keyword:
            params["productNameEn"] = query.keyword
        if query.category_id:
            params["categoryId"] = query.category_id
        if query.min_price is not None:
            params["minPrice"] = str(query.min_price)
        if query.max_price is not None:
            params["maxPrice"] = str(query.max_price)
        if query.order_by:
            params["orderBy"] = query.order_by
        return params
