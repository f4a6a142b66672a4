"""CJ 응답 정규화

원본 응답(list / listV2 / myProduct / 카테고리 트리 / 재고 / 배송비)을 검증하고
표준 엔티티로 변환한다. 상품 목록 파서는 예외 대신 Result를 반환하며
Failure.value에 원본 응답을 담는다.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Tuple
import json
import re

from pydantic import BaseModel, ValidationError

from cj_bridge.adapters.suppliers.cj_schemas import (
    CJCategoryListResponse, CJFreightCalculateResponse, CJInventoryBySkuResponse,
    CJMyProductItem, CJMyProductResponse, CJProduct, CJProductListResponse,
    CJProductListV2Response, CJProductV2, CJProductVariant,
    is_cj_success, parse_price_token
)
from cj_bridge.core.entities.product import (
    CanonicalProduct, Category, FreightOption, PackingDimensions,
    ProductPage, Variant, WarehouseInventory
)
from cj_bridge.core.exceptions import ProviderAPIError, SchemaValidationError
from cj_bridge.shared.logging import get_logger
from cj_bridge.shared.result import Failure, Result, Success

logger = get_logger(__name__)

MAX_TITLE_LENGTH = 200
_AGING_RANGE = re.compile(r"(\d+)\s*-\s*(\d+)")
_AGING_SINGLE = re.compile(r"^\s*(\d+)\s*$")


def payload_preview(payload: Any, limit: int = 1000) -> str:
    """로그용 원본 응답 일부"""
    try:
        text = json.dumps(payload, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        text = repr(payload)
    return text[:limit]


def clean_title(title: Optional[str]) -> str:
    """상품명 공백 정리 (최대 200자)"""
    if not title:
        return ""
    return " ".join(title.split())[:MAX_TITLE_LENGTH]


def parse_variant_options(variant_key: Optional[str]) -> Optional[Dict[str, str]]:
    """변형 키 문자열 파싱

    "Color:Red|Size:M" -> {"Color": "Red", "Size": "M"}
    값에 ":"가 더 있으면 두 번째 조각까지만 사용 ("Color:Red:Dark" -> "Red")
    키:값 쌍이 하나도 없으면 None (예외를 던지지 않음)
    """
    if not variant_key or not isinstance(variant_key, str):
        return None

    options: Dict[str, str] = {}
    for pair in variant_key.split("|"):
        parts = pair.split(":")
        if len(parts) < 2:
            continue
        key, value = parts[0].strip(), parts[1].strip()
        if key and value:
            options[key] = value

    return options or None


def _to_int(value: Optional[Decimal]) -> Optional[int]:
    return int(value) if value is not None else None


def _dimensions(length=None, width=None, height=None, weight=None) -> Optional[PackingDimensions]:
    dims = PackingDimensions(length=length, width=width, height=height, weight=weight)
    return None if dims.is_empty() else dims


def _first(values: Optional[Iterable]) -> Optional[Decimal]:
    for value in values or []:
        return parse_price_token(value)
    return None


def _validate(model: type, payload: Any) -> Tuple[Optional[BaseModel], Optional[str]]:
    try:
        return model.model_validate(payload), None
    except ValidationError as e:
        return None, f"{model.__name__} 검증 실패: {e.error_count()}개 오류 ({e.errors()[0]['loc']})"


def _require(model: type, payload: Any, operation: str) -> Any:
    """검증 실패 시 SchemaValidationError (원본 응답 로그)"""
    parsed, error = _validate(model, payload)
    if parsed is None:
        logger.error(f"{operation} 응답 형식 오류: {error} - payload={payload_preview(payload)}")
        raise SchemaValidationError(f"{operation}: CJ 응답 형식이 예상과 다릅니다", raw_payload=payload)
    return parsed


def ensure_success(code: Optional[int], result: Optional[bool], message: Optional[str], operation: str) -> None:
    """응답 봉투가 성공이 아니면 ProviderAPIError"""
    if not is_cj_success(code, result):
        raise ProviderAPIError(f"{operation} 실패: {message or '알 수 없는 오류'}", code=code)


# --- 상품 변환 ---

def convert_variant(variant: CJProductVariant) -> Variant:
    """Shape A 변형 -> 표준 변형"""
    return Variant(
        variant_id=variant.vid,
        sku=variant.variantSku or variant.productSku or "",
        image_url=variant.variantImage,
        option_map=parse_variant_options(variant.variantKey),
        name_en=variant.variantNameEn,
        sell_price=variant.sellPrice,
        list_price=variant.listPrice,
        dimensions=_dimensions(variant.length, variant.width, variant.height, variant.weight),
        stock=_to_int(variant.stock)
    )


def convert_product(product: CJProduct) -> CanonicalProduct:
    """Shape A 상품 -> 표준 상품"""
    return CanonicalProduct(
        id=product.pid,
        name_en=clean_title(product.productNameEn),
        sku=product.productSku,
        image_url=product.productImage,
        sell_price=product.sellPrice,
        list_price=product.listPrice,
        category_id=product.categoryId,
        category_name=product.categoryName,
        product_type=product.productType,
        packing_dimensions=_dimensions(
            product.packingLength, product.packingWidth, product.packingHeight, product.packingWeight
        ),
        variants=[convert_variant(v) for v in product.variantList or []]
    )


def convert_v2_product(product: CJProductV2) -> Optional[CanonicalProduct]:
    """Shape B 상품 -> 표준 상품

    영문명이 비어 있는 자리표시 상품은 None.
    가격은 sellPrice 우선, 없으면 nowPrice (범위 문자열은 첫 값).
    """
    if not product.nameEn or not product.nameEn.strip():
        return None

    sell_price = product.sellPrice if product.sellPrice is not None else product.nowPrice

    return CanonicalProduct(
        id=product.id,
        name_en=clean_title(product.nameEn),
        sku=product.sku or product.spu or "",
        image_url=product.bigImage,
        sell_price=sell_price,
        category_id=product.categoryId,
        category_name=product.threeCategoryName,
        product_type=product.productType
    )


def convert_my_product(item: CJMyProductItem) -> CanonicalProduct:
    """내 상품 항목 -> 표준 상품 (치수 목록은 첫 값, 무게는 packWeight 우선)"""
    weight = item.packWeight if item.packWeight is not None else item.weight
    return CanonicalProduct(
        id=item.productId or "",
        name_en=clean_title(item.nameEn),
        sku=item.sku or "",
        image_url=item.bigImage,
        sell_price=item.sellPrice,
        product_type=item.productType,
        packing_dimensions=_dimensions(
            _first(item.lengthList), _first(item.widthList), _first(item.heightList), weight
        ),
        default_variant_id=item.vid
    )


# --- 상품 목록 파서 (Result 반환) ---

def parse_product_list(payload: Any) -> Result[ProductPage]:
    """Shape A: {code, result, message, data: {total, list}}"""
    parsed, error = _validate(CJProductListResponse, payload)
    if parsed is None:
        return Failure(error, payload)

    ensure_success(parsed.code, parsed.result, parsed.message, "상품 목록 조회")

    if parsed.data is None:
        return Success(ProductPage(products=[], total=0, source="list"))

    return Success(ProductPage(
        products=[convert_product(p) for p in parsed.data.list],
        total=parsed.data.total,
        source="list"
    ))


def is_v2_success(response: CJProductListV2Response) -> bool:
    """listV2 성공 판정

    공급사가 result / success / code 중 어떤 것을 채우는지 일정하지 않아 세 가지를
    모두 확인한다 (공급사 버전 간 동작은 검증되지 않음).
    """
    return (
        response.result is True
        or (response.result is None and response.success is True)
        or response.code == 200
    )


def parse_product_list_v2(payload: Any) -> Result[ProductPage]:
    """Shape B: {data: {content: [{productList}], totalRecords}}"""
    parsed, error = _validate(CJProductListV2Response, payload)
    if parsed is None:
        return Failure(error, payload)

    if not is_v2_success(parsed):
        raise ProviderAPIError(f"상품 검색 실패: {parsed.message}", code=parsed.code)

    products: List[CanonicalProduct] = []
    content = parsed.data.content if parsed.data and parsed.data.content else []
    for item in content:
        for v2_product in item.productList:
            converted = convert_v2_product(v2_product)
            if converted is not None:
                products.append(converted)

    total = parsed.data.totalRecords if parsed.data and parsed.data.totalRecords is not None else len(products)
    return Success(ProductPage(products=products, total=total, source="listV2"))


def parse_my_products(payload: Any) -> Result[ProductPage]:
    """내 상품 응답 (content[] 형식, 실패 시 Shape A로 재시도)"""
    parsed, error = _validate(CJMyProductResponse, payload)
    if parsed is not None and parsed.data is not None:
        ensure_success(parsed.code, parsed.result, parsed.message, "내 상품 조회")
        products = [convert_my_product(item) for item in parsed.data.content]
        total = parsed.data.totalRecords if parsed.data.totalRecords is not None else len(products)
        return Success(ProductPage(products=products, total=total, source="myProduct"))

    fallback = parse_product_list(payload)
    if fallback.is_success():
        return fallback
    return Failure(error or fallback.get_error(), payload)


# --- 카테고리 / 재고 / 배송비 ---

def flatten_categories(payload: Any) -> List[Category]:
    """3단계 카테고리 트리를 리프 카테고리 목록으로 평탄화"""
    parsed = _require(CJCategoryListResponse, payload, "카테고리 조회")
    ensure_success(parsed.code, parsed.result, parsed.message, "카테고리 조회")

    categories: List[Category] = []
    for first in parsed.data or []:
        for second in first.categoryFirstList:
            for third in second.categorySecondList:
                categories.append(Category(
                    category_id=third.categoryId,
                    category_name=third.categoryName,
                    category_second_name=second.categorySecondName,
                    category_first_name=first.categoryFirstName
                ))
    return categories


def parse_inventory(payload: Any) -> List[WarehouseInventory]:
    """SKU별 창고 재고"""
    parsed = _require(CJInventoryBySkuResponse, payload, "재고 조회")
    ensure_success(parsed.code, parsed.result, parsed.message, "재고 조회")

    return [
        WarehouseInventory(
            area_id=item.areaId,
            area_name=item.areaEn,
            country_code=item.countryCode,
            total_inventory=item.totalInventoryNum,
            cj_inventory=item.cjInventoryNum,
            factory_inventory=item.factoryInventoryNum,
            country_name=item.countryNameEn
        )
        for item in parsed.data or []
    ]


def parse_delivery_range(aging: Optional[str]) -> Optional[Tuple[int, int]]:
    """배송 기간 문자열 "2-5" -> (2, 5), "7" -> (7, 7)"""
    if not aging:
        return None
    match = _AGING_RANGE.search(aging)
    if match:
        return int(match.group(1)), int(match.group(2))
    match = _AGING_SINGLE.match(aging)
    if match:
        return int(match.group(1)), int(match.group(1))
    return None


def average_delivery_days(aging: Optional[str]) -> Optional[int]:
    """평균 배송일 (중간값 반올림, half-up): "2-5" -> 4"""
    days_range = parse_delivery_range(aging)
    if days_range is None:
        return None
    midpoint = Decimal(days_range[0] + days_range[1]) / 2
    return int(midpoint.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_freight_options(payload: Any, destination_country: Optional[str] = None) -> List[FreightOption]:
    """배송비 계산 응답"""
    parsed = _require(CJFreightCalculateResponse, payload, "배송비 계산")
    ensure_success(parsed.code, parsed.result, parsed.message, "배송비 계산")

    return [
        FreightOption(
            carrier_name=option.logisticName,
            price_usd=option.logisticPrice,
            delivery_days_range=parse_delivery_range(option.logisticAging),
            average_delivery_days=average_delivery_days(option.logisticAging),
            destination_country=destination_country,
            aging_text=option.logisticAging
        )
        for option in parsed.data or []
    ]
