"""CJ Dropshipping API 응답 스키마

공급사는 숫자를 문자열/숫자/빈 문자열로 섞어 보내므로 숫자 필드는 관대하게 변환한다.
"""
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, List, Optional, Union
import re

from pydantic import BaseModel, BeforeValidator


class CJResponseCode:
    """공급사 응답 코드"""
    SUCCESS = 200
    UNAUTHORIZED = 401
    INVALID_TOKEN = 10001
    TOKEN_EXPIRED = 10002

    AUTH_ERRORS = frozenset({UNAUTHORIZED, INVALID_TOKEN, TOKEN_EXPIRED})


_NUMBER_TOKEN = re.compile(r"\d+(?:\.\d+)?")


def parse_price_token(value: Any) -> Optional[Decimal]:
    """숫자/문자열에서 첫 번째 숫자를 Decimal로 추출

    "9.15-9.40" -> 9.15, "39.40 -- 41.39" -> 39.40, "" -> None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            return Decimal(str(value))
        except InvalidOperation:
            return None
    match = _NUMBER_TOKEN.search(str(value))
    return Decimal(match.group(0)) if match else None


def _to_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (int, str)) and not isinstance(value, bool):
        text = str(value).strip()
        return text or None
    raise ValueError("문자열 또는 숫자가 아님")


def _to_id(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError("ID는 문자열 또는 숫자")
    return str(value)


LenientDecimal = Annotated[Optional[Decimal], BeforeValidator(parse_price_token)]
LenientStr = Annotated[Optional[str], BeforeValidator(_to_optional_str)]
IdStr = Annotated[str, BeforeValidator(_to_id)]


class CJEnvelope(BaseModel):
    """공통 응답 봉투"""
    code: int
    result: Optional[bool] = None
    success: Optional[bool] = None
    message: Optional[str] = None
    requestId: Optional[str] = None


# --- 인증 ---

class CJTokenData(BaseModel):
    accessToken: str
    accessTokenExpiryDate: Optional[str] = None
    refreshToken: Optional[str] = None
    refreshTokenExpiryDate: Optional[str] = None
    createDate: Optional[str] = None
    openId: Optional[IdStr] = None


class CJAuthResponse(CJEnvelope):
    """POST authentication/getAccessToken, refreshAccessToken"""
    data: Optional[CJTokenData] = None


# --- 상품 (Shape A: product/list) ---

class CJProductImage(BaseModel):
    url: str
    type: Optional[str] = None


class CJProductVariant(BaseModel):
    vid: IdStr
    productSku: Optional[str] = None
    productNameEn: Optional[str] = None
    variantNameEn: Optional[str] = None
    variantSku: Optional[str] = None
    variantImage: LenientStr = None
    variantKey: Optional[str] = None
    sellPrice: LenientDecimal = None
    listPrice: LenientDecimal = None
    weight: LenientDecimal = None
    length: LenientDecimal = None
    width: LenientDecimal = None
    height: LenientDecimal = None
    stock: LenientDecimal = None


class CJProduct(BaseModel):
    pid: IdStr
    productNameEn: str
    productNameCn: Optional[str] = None
    productSku: str
    productImage: LenientStr = None
    productImageList: Optional[List[CJProductImage]] = None
    productType: Optional[str] = None
    categoryId: LenientStr = None
    categoryName: Optional[str] = None
    description: Optional[str] = None
    descriptionEn: Optional[str] = None
    sellPrice: LenientDecimal = None
    listPrice: LenientDecimal = None
    packingWeight: LenientDecimal = None
    packingLength: LenientDecimal = None
    packingWidth: LenientDecimal = None
    packingHeight: LenientDecimal = None
    variantList: Optional[List[CJProductVariant]] = None
    entryTime: Optional[str] = None
    isSupportCustomization: Optional[bool] = None
    sourceFrom: Optional[str] = None


class CJProductListData(BaseModel):
    total: int
    list: List[CJProduct]
    pageNum: Optional[int] = None
    pageSize: Optional[int] = None


class CJProductListResponse(BaseModel):
    """GET product/list"""
    code: int
    result: bool
    message: str
    data: Optional[CJProductListData] = None


# --- 상품 (Shape B: product/listV2, 검색엔진 기반) ---

class CJProductV2(BaseModel):
    id: IdStr
    nameEn: str
    sku: Optional[str] = None
    spu: Optional[str] = None
    bigImage: LenientStr = None
    sellPrice: LenientDecimal = None
    nowPrice: LenientDecimal = None
    categoryId: LenientStr = None
    threeCategoryName: Optional[str] = None
    twoCategoryName: Optional[str] = None
    oneCategoryName: Optional[str] = None
    warehouseInventoryNum: Optional[int] = None
    totalVerifiedInventory: Optional[int] = None
    productType: Optional[str] = None
    supplierName: Optional[str] = None
    directMinOrderNum: Optional[int] = None


class CJProductV2Content(BaseModel):
    productList: List[CJProductV2]
    relatedCategoryList: Optional[List[Any]] = None
    keyWord: Optional[str] = None
    keyWordOld: Optional[str] = None


class CJProductListV2Data(BaseModel):
    content: Optional[List[CJProductV2Content]] = None
    pageNumber: Optional[int] = None
    pageSize: Optional[int] = None
    totalRecords: Optional[int] = None
    totalPages: Optional[int] = None


class CJProductListV2Response(BaseModel):
    """GET product/listV2"""
    code: int
    result: Optional[bool] = None
    success: Optional[bool] = None
    message: str
    data: Optional[CJProductListV2Data] = None


# --- 내 상품 (product/myProduct/query) ---

class CJMyProductItem(BaseModel):
    productId: Optional[IdStr] = None
    nameEn: Optional[str] = None
    sku: Optional[str] = None
    bigImage: LenientStr = None
    sellPrice: LenientDecimal = None
    productType: Optional[str] = None
    weight: LenientDecimal = None
    packWeight: LenientDecimal = None
    vid: Optional[IdStr] = None
    lengthList: Optional[List[Union[int, float]]] = None
    widthList: Optional[List[Union[int, float]]] = None
    heightList: Optional[List[Union[int, float]]] = None
    createAt: Optional[int] = None


class CJMyProductData(BaseModel):
    content: List[CJMyProductItem]
    totalRecords: Optional[int] = None
    pageNumber: Optional[int] = None
    pageSize: Optional[int] = None


class CJMyProductResponse(BaseModel):
    code: int
    result: bool
    message: str
    data: Optional[CJMyProductData] = None


# --- 카테고리 (3단계 트리) ---

class CJCategoryThird(BaseModel):
    categoryId: IdStr
    categoryName: str


class CJCategorySecond(BaseModel):
    categorySecondName: str
    categorySecondList: List[CJCategoryThird]


class CJCategoryFirst(BaseModel):
    categoryFirstName: str
    categoryFirstList: List[CJCategorySecond]


class CJCategoryListResponse(BaseModel):
    """GET product/getCategory"""
    code: int
    result: bool
    message: str
    data: Optional[List[CJCategoryFirst]] = None


# --- 재고 ---

class CJInventoryBySkuItem(BaseModel):
    areaEn: str
    areaId: IdStr
    countryCode: str
    totalInventoryNum: int
    cjInventoryNum: int
    factoryInventoryNum: int
    countryNameEn: Optional[str] = None


class CJInventoryBySkuResponse(BaseModel):
    """GET product/stock/queryBySku"""
    code: int
    result: bool
    success: Optional[bool] = None
    message: str
    data: Optional[List[CJInventoryBySkuItem]] = None


# --- 배송비 ---

class CJFreightOption(BaseModel):
    logisticName: str
    logisticPrice: Decimal
    logisticPriceCn: Optional[Decimal] = None
    logisticAging: str
    taxesFee: Optional[Decimal] = None
    clearanceOperationFee: Optional[Decimal] = None
    totalPostageFee: Optional[Decimal] = None


class CJFreightCalculateResponse(BaseModel):
    """POST logistic/freightCalculate"""
    code: int
    result: bool
    message: str
    data: Optional[List[CJFreightOption]] = None


def is_cj_success(code: Optional[int], result: Optional[bool]) -> bool:
    """표준 성공 판정 (result가 true이고 code가 200)"""
    return result is True and code == CJResponseCode.SUCCESS


def is_auth_error(code: Any) -> bool:
    return code in CJResponseCode.AUTH_ERRORS
