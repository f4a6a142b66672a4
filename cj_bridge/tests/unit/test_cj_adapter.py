"""CJ 카탈로그 어댑터 단위 테스트"""
import json

import httpx
import pytest

from cj_bridge.adapters.suppliers.cj_adapter import classify_product_reference
from cj_bridge.core.entities.product import ProductQuery, ReferenceKind
from cj_bridge.core.exceptions import (
    InvalidProductReferenceError, NetworkError, ProductNotFoundError,
    ProviderAPIError, SchemaValidationError
)
from cj_bridge.tests.fakes import cj_payload, shape_a_product, shape_b_payload, shape_b_product


def freight_payload(*options):
    return cj_payload([
        {"logisticName": name, "logisticPrice": price, "logisticAging": aging}
        for name, price, aging in options
    ])


class TestClassifyProductReference:
    """상품 식별자 분류 테스트"""

    @pytest.mark.parametrize("text,kind,value", [
        ("https://cjdropshipping.com/product-detail.html?pid=ABC-123&from=x", ReferenceKind.URL, "ABC-123"),
        ("https://cjdropshipping.com/product/1425360952578123776.html", ReferenceKind.URL, "1425360952578123776"),
        ("cjdropshipping.com/item?PID:998877", ReferenceKind.URL, "998877"),
        ("  1425360952578123776 ", ReferenceKind.PID, "1425360952578123776"),
        ("CJJBHP0082", ReferenceKind.SKU, "CJJBHP0082"),
    ])
    def test_classification(self, text, kind, value):
        reference = classify_product_reference(text)

        assert reference.kind is kind
        assert reference.value == value

    def test_sku_uses_product_sku_lookup(self):
        assert classify_product_reference("CJZN218906").lookup_field == "productSku"

    def test_url_without_pid_is_invalid(self):
        with pytest.raises(InvalidProductReferenceError):
            classify_product_reference("https://cjdropshipping.com/search?q=lamp")

    def test_blank_is_invalid(self):
        with pytest.raises(InvalidProductReferenceError):
            classify_product_reference("   ")


class TestSearchProducts:
    """상품 검색 / 폴백 테스트"""

    async def test_listv2_success(self, cj_stack, provider, valid_token):
        provider.on("product/listV2", shape_b_payload([shape_b_product()]))

        page = await cj_stack["adapter"].search_products(ProductQuery(keyword="earbuds", page_size=500))

        params = provider.calls("product/listV2")[0].url.params
        assert page.source == "listV2"
        assert params["keyWord"] == "earbuds"
        assert params["size"] == "100"
        assert provider.calls("product/list") == []

    async def test_drift_triggers_exactly_one_fallback(self, cj_stack, provider, valid_token):
        drifted = shape_b_product()
        drifted["productName"] = drifted.pop("nameEn")
        provider.on("product/listV2", shape_b_payload([drifted]))
        provider.on("product/list", cj_payload({"total": 1, "list": [shape_a_product()]}))

        page = await cj_stack["adapter"].search_products(ProductQuery(keyword="earbuds", min_price=1))

        list_calls = provider.calls("product/list")
        assert page.source == "list"
        assert len(provider.calls("product/listV2")) == 1
        assert len(list_calls) == 1
        assert list_calls[0].url.params["productNameEn"] == "earbuds"
        assert list_calls[0].url.params["minPrice"] == "1"

    async def test_both_shapes_invalid_raises_schema_error(self, cj_stack, provider, valid_token):
        provider.on("product/listV2", {"unexpected": True})
        provider.on("product/list", {"also": "unexpected"})

        with pytest.raises(SchemaValidationError):
            await cj_stack["adapter"].search_products(ProductQuery(keyword="earbuds"))

        assert len(provider.calls("product/list")) == 1

    async def test_provider_failure_does_not_fall_back(self, cj_stack, provider, valid_token):
        provider.on("product/listV2", {"code": 1600100, "result": False, "message": "param error"})

        with pytest.raises(ProviderAPIError):
            await cj_stack["adapter"].search_products(ProductQuery(keyword="earbuds"))

        assert provider.calls("product/list") == []


class TestProductLookup:
    """상품 조회 테스트"""

    async def test_get_product(self, cj_stack, provider, valid_token):
        provider.on("product/list", cj_payload({"total": 1, "list": [shape_a_product()]}))

        product = await cj_stack["adapter"].get_product("1001")

        assert product.id == "1001"
        assert provider.requests[0].url.params["pid"] == "1001"

    async def test_get_missing_product_is_none(self, cj_stack, provider, valid_token):
        provider.on("product/list", cj_payload({"total": 0, "list": []}))

        assert await cj_stack["adapter"].get_product("404") is None

    async def test_lookup_by_sku(self, cj_stack, provider, valid_token):
        provider.on("product/list", cj_payload({"total": 1, "list": [shape_a_product()]}))

        product = await cj_stack["adapter"].get_product_by_reference("CJJBHP0082")

        assert product.sku == "CJJBHP0082"
        assert provider.requests[0].url.params["productSku"] == "CJJBHP0082"

    async def test_lookup_not_found(self, cj_stack, provider, valid_token):
        provider.on("product/list", cj_payload({"total": 0, "list": []}))

        with pytest.raises(ProductNotFoundError):
            await cj_stack["adapter"].get_product_by_reference("https://cjdropshipping.com/product/123.html")

    async def test_batch_returns_none_for_failures(self, cj_stack, provider, valid_token):
        def respond(request):
            if request.url.params["pid"] == "bad":
                return httpx.Response(200, json={"code": 500, "result": False, "message": "error"})
            return httpx.Response(200, json=cj_payload({"total": 1, "list": [shape_a_product(pid=request.url.params["pid"])]}))

        provider.on("product/list", respond)

        products = await cj_stack["adapter"].batch_get_products(["1", "bad", "3"])

        assert [p.id if p else None for p in products] == ["1", None, "3"]


class TestFreight:
    """배송비 계산 테스트"""

    async def test_single_destination_request_body(self, cj_stack, provider, valid_token):
        provider.on("logistic/freightCalculate", freight_payload(("CJPacket", "3.20", "7-12")))

        options = await cj_stack["adapter"].calculate_freight("v-1", "US", quantity=2, zip_code="10001")

        body = json.loads(provider.requests[0].content)
        assert body == {
            "startCountryCode": "CN",
            "endCountryCode": "US",
            "products": [{"quantity": 2, "vid": "v-1"}],
            "zip": "10001",
        }
        assert options[0].destination_country == "US"

    async def test_destinations_merged_with_preferred_first(self, cj_stack, provider, valid_token):
        by_country = {
            "CA": freight_payload(("CA Post", "5.00", "5-9")),
            "US": freight_payload(("USPS", "3.00", "2-5"), ("UPS", "9.00", "1-2")),
            "GB": freight_payload(("Royal Mail", "4.00", "6-10")),
        }

        def respond(request):
            return httpx.Response(200, json=by_country[json.loads(request.content)["endCountryCode"]])

        provider.on("logistic/freightCalculate", respond)

        quote = await cj_stack["adapter"].calculate_freight_for_destinations("v-1")

        assert [o.destination_country for o in quote.options] == ["CA", "US", "US", "GB"]
        assert quote.failures == {}

    async def test_failed_destination_is_reported(self, cj_stack, provider, valid_token):
        def respond(request):
            if json.loads(request.content)["endCountryCode"] == "GB":
                return httpx.Response(200, json={"code": 1603001, "result": False, "message": "no route"})
            return httpx.Response(200, json=freight_payload(("CJPacket", "3.00", "2-5")))

        provider.on("logistic/freightCalculate", respond)

        quote = await cj_stack["adapter"].calculate_freight_for_destinations("v-1", ["CA", "GB"])

        assert [o.destination_country for o in quote.options] == ["CA"]
        assert "GB" in quote.failures

    async def test_all_destinations_failing_raises(self, cj_stack, provider, valid_token):
        provider.on("logistic/freightCalculate", httpx.ConnectError("down"))

        with pytest.raises(NetworkError):
            await cj_stack["adapter"].calculate_freight_for_destinations("v-1", ["CA", "US"])


class TestMyProducts:
    """내 상품 테스트"""

    async def test_partial_result_is_attached(self, cj_stack, provider, valid_token):
        items = [{"productId": str(i), "nameEn": f"Item {i}", "sku": f"SKU{i}"} for i in range(100)]
        provider.on("product/myProduct/query", cj_payload({"content": items, "totalRecords": 140}))

        result = await cj_stack["adapter"].list_my_products()

        params = provider.requests[0].url.params
        assert params["pageSize"] == "100"
        assert len(result.products) == 100
        assert result.is_partial
        assert result.partial.returned == 100
        assert result.partial.total == 140

    async def test_complete_result(self, cj_stack, provider, valid_token):
        items = [{"productId": "1", "nameEn": "Item", "sku": "SKU1"}]
        provider.on("product/myProduct/query", cj_payload({"content": items, "totalRecords": 1}))

        result = await cj_stack["adapter"].list_my_products()

        assert not result.is_partial


class TestConnection:
    async def test_test_connection_calls_categories(self, cj_stack, provider, valid_token):
        provider.on("product/getCategory", cj_payload([]))

        assert await cj_stack["adapter"].test_connection() is True
