"""CJ 연동 DTO 스키마"""
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


class ConnectRequest(BaseModel):
    """CJ 연결 요청"""
    api_key: str = Field(..., min_length=1)
    account_email: str = Field(..., min_length=3)


class ConnectionStatusResponse(BaseModel):
    """CJ 연결 상태 응답"""
    configured: bool
    account_email: Optional[str] = None
    api_key: Optional[str] = None
    has_access_token: bool = False
    token_expires_at: Optional[str] = None
    token_status: Optional[str] = None


class ImportTokensRequest(BaseModel):
    """외부 인증 응답 가져오기 요청"""
    payload: Dict[str, Any]


class PackingDimensionsResponse(BaseModel):
    length: Optional[Decimal] = None
    width: Optional[Decimal] = None
    height: Optional[Decimal] = None
    weight: Optional[Decimal] = None


class VariantResponse(BaseModel):
    variant_id: str
    sku: str
    image_url: Optional[str] = None
    option_map: Optional[Dict[str, str]] = None
    name_en: Optional[str] = None
    sell_price: Optional[Decimal] = None
    list_price: Optional[Decimal] = None
    dimensions: Optional[PackingDimensionsResponse] = None
    stock: Optional[int] = None


class ProductResponse(BaseModel):
    """표준 상품 응답"""
    id: str
    name_en: str
    sku: str
    image_url: Optional[str] = None
    sell_price: Optional[Decimal] = None
    list_price: Optional[Decimal] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    product_type: Optional[str] = None
    packing_dimensions: Optional[PackingDimensionsResponse] = None
    variants: List[VariantResponse] = []
    default_variant_id: Optional[str] = None


class ProductPageResponse(BaseModel):
    """상품 검색 응답"""
    products: List[ProductResponse]
    total: int
    source: str


class PartialResultResponse(BaseModel):
    message: str
    returned: int
    total: int


class MyProductsResponse(BaseModel):
    """내 상품 목록 응답"""
    products: List[ProductResponse]
    total: int
    partial: Optional[PartialResultResponse] = None


class CategoryResponse(BaseModel):
    category_id: str
    category_name: str
    category_second_name: Optional[str] = None
    category_first_name: Optional[str] = None


class InventoryResponse(BaseModel):
    area_id: str
    area_name: str
    country_code: str
    total_inventory: int
    cj_inventory: int
    factory_inventory: int
    country_name: Optional[str] = None


class FreightRequest(BaseModel):
    """배송비 계산 요청 (목적지가 없으면 기본 목적지 전체)"""
    vid: str = Field(..., min_length=1)
    destinations: Optional[List[str]] = None
    quantity: int = Field(1, ge=1)


class FreightOptionResponse(BaseModel):
    carrier_name: str
    price_usd: Decimal
    delivery_days_range: Optional[Tuple[int, int]] = None
    average_delivery_days: Optional[int] = None
    destination_country: Optional[str] = None
    aging_text: Optional[str] = None


class FreightQuoteResponse(BaseModel):
    options: List[FreightOptionResponse]
    failures: Dict[str, str] = {}


class ProductRefreshRequest(BaseModel):
    """상품 최신 정보 요청"""
    sku: str = Field(..., min_length=1)
    vid: Optional[str] = None


class ProductRefreshResponse(BaseModel):
    """상품 최신 정보 응답"""
    price: Optional[Decimal] = None
    inventory: List[InventoryResponse]
    shipping_options: List[FreightOptionResponse]
    avg_delivery_days: Optional[int] = None
    errors: Dict[str, str] = {}
