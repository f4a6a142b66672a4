"""CJ 상품 도메인 엔티티 (정규화된 표준 형태)"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Dict, Any, Optional


@dataclass(frozen=True)
class PackingDimensions:
    """포장 치수 (cm / g)"""
    length: Optional[Decimal] = None
    width: Optional[Decimal] = None
    height: Optional[Decimal] = None
    weight: Optional[Decimal] = None

    def is_empty(self) -> bool:
        return all(v is None for v in (self.length, self.width, self.height, self.weight))


@dataclass(frozen=True)
class Variant:
    """상품 변형 (색상/사이즈 조합)"""
    variant_id: str
    sku: str
    image_url: Optional[str] = None
    option_map: Optional[Dict[str, str]] = None
    name_en: Optional[str] = None
    sell_price: Optional[Decimal] = None
    list_price: Optional[Decimal] = None
    dimensions: Optional[PackingDimensions] = None
    stock: Optional[int] = None


@dataclass(frozen=True)
class CanonicalProduct:
    """표준 상품 표현

    어떤 응답 형식(list / listV2 / myProduct)에서 왔는지와 무관하게 같은 구조.
    """
    id: str
    name_en: str
    sku: str
    image_url: Optional[str] = None
    sell_price: Optional[Decimal] = None
    list_price: Optional[Decimal] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    product_type: Optional[str] = None
    packing_dimensions: Optional[PackingDimensions] = None
    variants: List[Variant] = field(default_factory=list)
    default_variant_id: Optional[str] = None



@dataclass(frozen=True)
class ProductPage:
    """상품 목록 한 페이지"""
    products: List[CanonicalProduct]
    total: int
    source: str = "list"  # "list" | "listV2" | "myProduct"


@dataclass(frozen=True)
class MyProductsResult:
    """내 상품 목록 결과

    partial이 설정된 경우 공급사 페이지네이션 결함으로 나머지 상품은 조회 불가.
    """
    products: List[CanonicalProduct]
    total: int
    partial: Optional[Any] = None  # UpstreamPartialResultError

    @property
    def is_partial(self) -> bool:
        return self.partial is not None


@dataclass(frozen=True)
class Category:
    """리프(3단계) 카테고리"""
    category_id: str
    category_name: str
    category_second_name: Optional[str] = None
    category_first_name: Optional[str] = None


@dataclass(frozen=True)
class WarehouseInventory:
    """창고별 재고"""
    area_id: str
    area_name: str
    country_code: str
    total_inventory: int
    cj_inventory: int
    factory_inventory: int
    country_name: Optional[str] = None


@dataclass(frozen=True)
class FreightOption:
    """배송 옵션"""
    carrier_name: str
    price_usd: Decimal
    delivery_days_range: Optional[tuple]  # (min, max)
    average_delivery_days: Optional[int]
    destination_country: Optional[str] = None
    aging_text: Optional[str] = None


@dataclass(frozen=True)
class FreightQuote:
    """여러 목적지 배송비 병합 결과 (선호 목적지가 먼저)"""
    options: List[FreightOption]
    failures: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ProductQuery:
    """상품 검색 조건"""
    keyword: Optional[str] = None
    category_id: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    country_code: Optional[str] = None
    page: int = 1
    page_size: int = 20
    order_by: Optional[str] = None


class ReferenceKind(Enum):
    """상품 식별자 종류"""
    URL = "url"
    PID = "pid"
    SKU = "sku"


@dataclass(frozen=True)
class ProductReference:
    """분류된 상품 식별자 (URL은 PID로 해석됨)"""
    kind: ReferenceKind
    value: str
    lookup_field: str  # "pid" | "productSku"


@dataclass(frozen=True)
class ProductRefreshData:
    """상품 최신 정보 (가격 / 재고 / 배송 옵션)

    errors에는 실패한 항목("product" / "inventory" / "freight")의 오류 메시지가 담긴다.
    """
    price: Optional[Decimal]
    inventory: List[WarehouseInventory]
    shipping_options: List[FreightOption]
    avg_delivery_days: Optional[int]
    errors: Dict[str, str] = field(default_factory=dict)
