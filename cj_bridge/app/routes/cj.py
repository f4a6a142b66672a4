"""CJ Dropshipping 연동 라우트"""
from dataclasses import asdict
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from cj_bridge.adapters.suppliers.cj_adapter import CJDropshippingAdapter
from cj_bridge.app.di import get_cj_adapter, get_cj_service
from cj_bridge.core.entities.product import ProductQuery
from cj_bridge.core.exceptions import DropshippingError, create_http_exception
from cj_bridge.presentation.schemas.cj import (
    CategoryResponse,
    ConnectRequest,
    ConnectionStatusResponse,
    FreightQuoteResponse,
    FreightRequest,
    ImportTokensRequest,
    InventoryResponse,
    MyProductsResponse,
    ProductPageResponse,
    ProductRefreshRequest,
    ProductRefreshResponse,
    ProductResponse
)
from cj_bridge.services.cj_service import CJIntegrationService
from cj_bridge.shared.logging import get_logger
from cj_bridge.shared.result import Result

router = APIRouter()
logger = get_logger(__name__)


def _unwrap(result: Result):
    """서비스 결과를 값 또는 HTTP 예외로 변환"""
    if result.is_success():
        return result.get_value()
    logger.warning(f"요청 처리 실패: {result.get_error()}")
    if isinstance(result.value, DropshippingError):
        raise create_http_exception(result.value)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.get_error())


# --- 연결 ---

@router.post("/connection", response_model=ConnectionStatusResponse)
async def connect(
    request: ConnectRequest,
    service: CJIntegrationService = Depends(get_cj_service)
):
    """인증 정보 검증 후 저장"""
    return _unwrap(await service.connect(request.api_key, request.account_email))


@router.get("/connection", response_model=ConnectionStatusResponse)
async def get_connection_status(service: CJIntegrationService = Depends(get_cj_service)):
    """연결 상태 조회"""
    return _unwrap(await service.get_status())


@router.delete("/connection", status_code=status.HTTP_204_NO_CONTENT)
async def disconnect(service: CJIntegrationService = Depends(get_cj_service)):
    """인증 정보와 토큰 삭제"""
    _unwrap(await service.disconnect())


@router.post("/connection/test")
async def test_connection(service: CJIntegrationService = Depends(get_cj_service)):
    """저장된 인증 정보로 연결 확인"""
    return {"success": _unwrap(await service.test_connection())}


@router.post("/connection/tokens")
async def import_tokens(
    request: ImportTokensRequest,
    service: CJIntegrationService = Depends(get_cj_service)
):
    """외부 인증 응답에서 토큰 가져오기"""
    return _unwrap(await service.import_tokens(request.payload))


# --- 상품 ---

@router.get("/products/search", response_model=ProductPageResponse)
async def search_products(
    keyword: Optional[str] = None,
    category_id: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    country_code: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    order_by: Optional[str] = None,
    adapter: CJDropshippingAdapter = Depends(get_cj_adapter)
):
    """상품 검색"""
    query = ProductQuery(
        keyword=keyword,
        category_id=category_id,
        min_price=min_price,
        max_price=max_price,
        country_code=country_code,
        page=page,
        page_size=page_size,
        order_by=order_by
    )
    try:
        return asdict(await adapter.search_products(query))
    except DropshippingError as e:
        raise create_http_exception(e)


@router.get("/products/lookup", response_model=ProductResponse)
async def lookup_product(
    ref: str = Query(..., min_length=1),
    adapter: CJDropshippingAdapter = Depends(get_cj_adapter)
):
    """URL / PID / SKU로 상품 조회"""
    try:
        return asdict(await adapter.get_product_by_reference(ref))
    except DropshippingError as e:
        raise create_http_exception(e)


@router.get("/products/{pid}", response_model=ProductResponse)
async def get_product(pid: str, adapter: CJDropshippingAdapter = Depends(get_cj_adapter)):
    """PID로 상품 조회"""
    try:
        product = await adapter.get_product(pid)
    except DropshippingError as e:
        raise create_http_exception(e)

    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"상품을 찾을 수 없습니다: {pid}")
    return asdict(product)


@router.post("/products/{pid}/refresh", response_model=ProductRefreshResponse)
async def refresh_product(
    pid: str,
    request: ProductRefreshRequest,
    service: CJIntegrationService = Depends(get_cj_service)
):
    """가격 / 재고 / 배송 옵션 갱신"""
    return asdict(_unwrap(await service.refresh_product_data(pid, request.sku, request.vid)))


@router.get("/my-products", response_model=MyProductsResponse)
async def list_my_products(adapter: CJDropshippingAdapter = Depends(get_cj_adapter)):
    """내 상품 목록"""
    try:
        result = await adapter.list_my_products()
    except DropshippingError as e:
        raise create_http_exception(e)

    partial = None
    if result.partial is not None:
        partial = {
            "message": result.partial.message,
            "returned": result.partial.returned,
            "total": result.partial.total
        }
    return {
        "products": [asdict(p) for p in result.products],
        "total": result.total,
        "partial": partial
    }


# --- 카테고리 / 재고 / 배송비 ---

@router.get("/categories", response_model=List[CategoryResponse])
async def get_categories(adapter: CJDropshippingAdapter = Depends(get_cj_adapter)):
    """리프 카테고리 목록"""
    try:
        return [asdict(c) for c in await adapter.get_categories()]
    except DropshippingError as e:
        raise create_http_exception(e)


@router.get("/inventory/{sku}", response_model=List[InventoryResponse])
async def get_inventory(sku: str, adapter: CJDropshippingAdapter = Depends(get_cj_adapter)):
    """SKU별 창고 재고"""
    try:
        return [asdict(i) for i in await adapter.get_inventory_by_sku(sku)]
    except DropshippingError as e:
        raise create_http_exception(e)


@router.post("/freight", response_model=FreightQuoteResponse)
async def calculate_freight(
    request: FreightRequest,
    adapter: CJDropshippingAdapter = Depends(get_cj_adapter)
):
    """목적지별 배송비 계산"""
    try:
        quote = await adapter.calculate_freight_for_destinations(
            request.vid,
            destinations=request.destinations,
            quantity=request.quantity
        )
    except DropshippingError as e:
        raise create_http_exception(e)
    return asdict(quote)
