"""공급사 카탈로그 연동 포트 (인터페이스)"""
from abc import ABC, abstractmethod
from typing import List, Optional

from cj_bridge.core.entities.credentials import IssuedToken
from cj_bridge.core.entities.product import (
    CanonicalProduct, Category, FreightOption, FreightQuote,
    MyProductsResult, ProductPage, ProductQuery, WarehouseInventory
)


class SupplierCatalogPort(ABC):
    """공급사 카탈로그 인터페이스

    토큰은 구현체 내부에서 관리되며 호출자는 토큰을 다루지 않는다.
    """

    @abstractmethod
    async def search_products(self, query: ProductQuery) -> ProductPage:
        """상품 검색"""
        pass

    @abstractmethod
    async def get_product(self, pid: str) -> Optional[CanonicalProduct]:
        """PID로 상품 조회"""
        pass

    @abstractmethod
    async def get_product_by_reference(self, reference: str) -> CanonicalProduct:
        """URL / PID / SKU로 상품 조회"""
        pass

    @abstractmethod
    async def get_categories(self) -> List[Category]:
        """리프 카테고리 목록"""
        pass

    @abstractmethod
    async def get_inventory_by_sku(self, sku: str) -> List[WarehouseInventory]:
        """SKU별 창고 재고"""
        pass

    @abstractmethod
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
        pass

    @abstractmethod
    async def calculate_freight_for_destinations(
        self,
        vid: str,
        destinations: Optional[List[str]] = None,
        quantity: int = 1
    ) -> FreightQuote:
        """여러 목적지 배송비 병렬 계산"""
        pass

    @abstractmethod
    async def list_my_products(self) -> MyProductsResult:
        """내 상품 목록"""
        pass

    @abstractmethod
    async def check_credentials(self, api_key: str, account_email: str) -> IssuedToken:
        """인증 정보 유효성 검증 (저장된 토큰과 무관)"""
        pass
