"""CJ 연동 API 통합 테스트"""
import httpx
import pytest
from fastapi.testclient import TestClient

from cj_bridge.app.di import get_cj_adapter, get_cj_service
from cj_bridge.app.main import create_app
from cj_bridge.services.cj_service import CJIntegrationService
from cj_bridge.tests.fakes import cj_payload, shape_a_product, shape_b_payload, shape_b_product

TOKEN_DATA = {
    "accessToken": "route-access",
    "accessTokenExpiryDate": "2025-01-16T00:00:00+08:00",
    "refreshToken": "route-refresh",
    "refreshTokenExpiryDate": "2025-06-01T00:00:00+08:00",
}


@pytest.fixture
def test_app(cj_stack, repository):
    """테스트용 FastAPI 애플리케이션 (공급사는 MockTransport)"""
    service = CJIntegrationService(
        credentials=repository,
        token_manager=cj_stack["token_manager"],
        auth_api=cj_stack["auth_api"],
        catalog=cj_stack["adapter"]
    )

    app = create_app()
    app.dependency_overrides[get_cj_service] = lambda: service
    app.dependency_overrides[get_cj_adapter] = lambda: cj_stack["adapter"]
    return app


@pytest.fixture
def test_client(test_app):
    """테스트용 HTTP 클라이언트"""
    return TestClient(test_app)


@pytest.fixture
def connected(test_client, provider):
    """연결 완료 상태"""
    provider.on("authentication/getAccessToken", cj_payload(TOKEN_DATA))
    response = test_client.post("/api/v1/cj/connection", json={
        "api_key": "api-key-1234567890",
        "account_email": "seller@example.com"
    })
    assert response.status_code == 200
    return response.json()


class TestHealth:
    def test_health_check(self, test_client):
        response = test_client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestConnectionRoutes:
    """연결 관리 API 테스트"""

    def test_connect_saves_credentials_and_tokens(self, connected, test_client):
        status = test_client.get("/api/v1/cj/connection").json()

        assert connected["configured"] is True
        assert connected["api_key"] == "api-****7890"
        assert status["token_status"] == "valid"
        assert status["has_access_token"] is True

    def test_connect_with_rejected_credentials(self, test_client, provider):
        provider.on("authentication/getAccessToken", cj_payload(None, code=1600001, result=False, message="Invalid API key"))

        response = test_client.post("/api/v1/cj/connection", json={
            "api_key": "bad-key",
            "account_email": "seller@example.com"
        })

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == 1600001

    def test_disconnect_is_idempotent(self, test_client):
        assert test_client.delete("/api/v1/cj/connection").status_code == 204
        assert test_client.delete("/api/v1/cj/connection").status_code == 204

        status = test_client.get("/api/v1/cj/connection").json()
        assert status["configured"] is False
        assert status["token_status"] == "no_token"

    def test_calls_without_configuration_are_precondition_failures(self, test_client):
        response = test_client.get("/api/v1/cj/categories")

        assert response.status_code == 412
        assert response.json()["detail"]["type"] == "NotConfiguredError"

    def test_connection_test_uses_stored_credentials(self, connected, test_client, provider):
        provider.on("product/getCategory", cj_payload([]))

        response = test_client.post("/api/v1/cj/connection/test")

        assert response.status_code == 200
        assert response.json() == {"success": True}

    def test_connection_test_without_credentials(self, test_client):
        response = test_client.post("/api/v1/cj/connection/test")

        assert response.status_code == 412

    def test_import_tokens(self, test_client):
        response = test_client.post("/api/v1/cj/connection/tokens", json={"payload": cj_payload(TOKEN_DATA)})

        assert response.status_code == 200
        assert response.json()["token_expires_at"] == "2025-01-15T16:00:00+00:00"


class TestCatalogRoutes:
    """카탈로그 API 테스트"""

    def test_search(self, connected, test_client, provider):
        provider.on("product/listV2", shape_b_payload([shape_b_product(sellPrice="9.15-9.40")]))

        response = test_client.get("/api/v1/cj/products/search", params={"keyword": "earbuds"})

        body = response.json()
        assert response.status_code == 200
        assert body["source"] == "listV2"
        assert body["products"][0]["sell_price"] == "9.15"

    def test_lookup_not_found(self, connected, test_client, provider):
        provider.on("product/list", cj_payload({"total": 0, "list": []}))

        response = test_client.get("/api/v1/cj/products/lookup", params={"ref": "CJNOTHING"})

        assert response.status_code == 404

    def test_lookup_invalid_url(self, connected, test_client):
        response = test_client.get("/api/v1/cj/products/lookup", params={"ref": "https://cjdropshipping.com/list"})

        assert response.status_code == 400

    def test_get_product(self, connected, test_client, provider):
        provider.on("product/list", cj_payload({"total": 1, "list": [shape_a_product()]}))

        response = test_client.get("/api/v1/cj/products/1001")

        assert response.status_code == 200
        assert response.json()["id"] == "1001"

    def test_rate_limited_upstream(self, connected, test_client, provider):
        provider.on("product/getCategory", httpx.Response(429))

        response = test_client.get("/api/v1/cj/categories")

        assert response.status_code == 429
        assert response.json()["detail"]["retryable"] is True

    def test_my_products_partial(self, connected, test_client, provider):
        items = [{"productId": "1", "nameEn": "Item", "sku": "SKU1"}]
        provider.on("product/myProduct/query", cj_payload({"content": items, "totalRecords": 3}))

        body = test_client.get("/api/v1/cj/my-products").json()

        assert body["total"] == 3
        assert body["partial"] == {"message": body["partial"]["message"], "returned": 1, "total": 3}

    def test_freight(self, connected, test_client, provider):
        provider.on("logistic/freightCalculate", cj_payload([
            {"logisticName": "CJPacket", "logisticPrice": "3.00", "logisticAging": "2-5"}
        ]))

        response = test_client.post("/api/v1/cj/freight", json={"vid": "v-1", "destinations": ["CA", "US"]})

        body = response.json()
        assert response.status_code == 200
        assert [o["destination_country"] for o in body["options"]] == ["CA", "US"]
        assert body["options"][0]["average_delivery_days"] == 4

    def test_refresh_product_with_partial_failure(self, connected, test_client, provider):
        provider.on("product/list", cj_payload({"total": 1, "list": [shape_a_product()]}))
        provider.on("product/stock/queryBySku", cj_payload(None, code=1602000, result=False, message="sku not found"))
        provider.on("logistic/freightCalculate", cj_payload([
            {"logisticName": "CJPacket", "logisticPrice": "3.00", "logisticAging": "2-5"},
            {"logisticName": "Express", "logisticPrice": "9.00", "logisticAging": "1-2"},
        ]))

        response = test_client.post("/api/v1/cj/products/1001/refresh", json={"sku": "CJJBHP0082", "vid": "v-1"})

        body = response.json()
        assert response.status_code == 200
        assert body["price"] == "9.15"
        assert body["inventory"] == []
        assert "inventory" in body["errors"]
        assert body["avg_delivery_days"] == 3
        assert len(body["shipping_options"]) == 6
