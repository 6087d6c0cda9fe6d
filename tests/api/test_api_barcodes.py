"""
Интеграционные тесты API endpoints для штрихкодов.

Покрывает:
- GET /health
- GET /api/v1/barcodes/layout
- POST /api/v1/barcodes/encode
- POST /api/v1/barcodes/validate
- POST /api/v1/barcodes/preview
- POST /api/v1/barcodes/sheet
"""

import io

import pikepdf
import pytest
from fastapi.testclient import TestClient
from reportlab.pdfgen import canvas

# === Fixtures ===


@pytest.fixture
def test_client():
    """TestClient приложения (lifespan включён)."""
    from labelsheet.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def headphones() -> dict:
    """Товар в формате основного приложения (camelCase)."""
    return {
        "id": "p-1",
        "name": "Wireless Bluetooth Headphones",
        "price": 299.99,
        "discountPrice": 249.99,
        "vendorShortCode": "VD01",
        "vendorName": "Sound Co",
    }


@pytest.fixture
def charger() -> dict:
    return {
        "id": "p-2",
        "name": "USB-C Fast Charger",
        "price": 49.99,
        "discountPrice": 39.99,
        "vendorShortCode": "VD02",
    }


# === Служебные ===


class TestHealth:
    def test_health(self, test_client: TestClient):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_root(self, test_client: TestClient):
        response = test_client.get("/")

        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"


class TestLayout:
    def test_layout(self, test_client: TestClient):
        response = test_client.get("/api/v1/barcodes/layout")

        assert response.status_code == 200
        data = response.json()
        assert data["barcodes_per_page"] == 24
        assert data["rows"] == 8
        assert data["columns"] == 3
        assert data["label_width_mm"] == pytest.approx(63.5)
        assert data["margin_left_mm"] == pytest.approx(2.0)


# === Кодирование и проверка ===


class TestEncode:
    def test_encode(self, test_client: TestClient, headphones: dict):
        response = test_client.post(
            "/api/v1/barcodes/encode",
            json={"product": headphones, "vendorPrefix": "VD01"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["payload"] == "VD01-Wireless Bluetooth -$249.99"
        assert data["length"] == 32
        assert data["truncated"] is True
        assert data["valid"] is True
        assert data["errors"] == []

    def test_encode_invalid_characters(self, test_client: TestClient):
        product = {"id": "p", "name": "Café", "price": 3}
        response = test_client.post("/api/v1/barcodes/encode", json={"product": product})

        data = response.json()
        assert data["payload"] == "VD01-Café-$3.00"
        assert data["valid"] is False
        assert data["display"] == "VD01 - Café - $3.00"

    def test_encode_rejects_missing_price(self, test_client: TestClient):
        response = test_client.post(
            "/api/v1/barcodes/encode", json={"product": {"id": "p", "name": "Tea"}}
        )
        assert response.status_code == 422


class TestValidate:
    def test_empty_request(self, test_client: TestClient):
        response = test_client.post("/api/v1/barcodes/validate", json={"items": []})

        assert response.status_code == 200
        data = response.json()
        assert data["is_valid"] is False
        assert data["errors"] == ["No products selected for barcode generation"]

    def test_warnings(self, test_client: TestClient, headphones: dict):
        response = test_client.post(
            "/api/v1/barcodes/validate",
            json={"items": [{"product": headphones, "quantity": 2}]},
        )

        data = response.json()
        assert data["is_valid"] is True
        assert any("truncated" in w for w in data["warnings"])


class TestPreview:
    def test_preview(self, test_client: TestClient, headphones: dict, charger: dict):
        response = test_client.post(
            "/api/v1/barcodes/preview",
            json={
                "items": [
                    {"product": headphones, "quantity": 25},
                    {"product": charger, "quantity": 25},
                ]
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total_units"] == 50
        assert data["total_pages"] == 3
        assert data["layout"] == "8 x 3"


# === Генерация PDF ===


class TestSheet:
    def test_generate_pdf(self, test_client: TestClient, headphones: dict, charger: dict):
        response = test_client.post(
            "/api/v1/barcodes/sheet",
            json={
                "items": [
                    {"product": headphones, "quantity": 20},
                    {"product": charger, "quantity": 10},
                ],
                "options": {"show_vendor": True},
            },
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["x-total-pages"] == "2"
        assert response.headers["x-total-units"] == "30"
        # Обрезка имени наушников
        assert response.headers["x-warnings-count"] == "1"
        assert 'filename="barcodes_2products_30x_' in response.headers["content-disposition"]
        assert response.content[:4] == b"%PDF"

        with pikepdf.open(io.BytesIO(response.content)) as pdf:
            assert len(pdf.pages) == 2

    def test_single_product_filename(self, test_client: TestClient, charger: dict):
        response = test_client.post(
            "/api/v1/barcodes/sheet",
            json={"items": [{"product": charger, "quantity": 1}]},
        )

        assert response.status_code == 200
        assert 'filename="barcode_USB_C_Fast_Charger_1x_' in response.headers["content-disposition"]

    def test_all_zero_returns_422(self, test_client: TestClient, charger: dict):
        response = test_client.post(
            "/api/v1/barcodes/sheet",
            json={"items": [{"product": charger, "quantity": 0}]},
        )

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["success"] is False
        assert "No barcodes to generate (all quantities are 0)" in detail["errors"]

    def test_backend_failure_returns_500(
        self,
        test_client: TestClient,
        charger: dict,
        monkeypatch: pytest.MonkeyPatch,
    ):
        def broken_draw_image(self, *args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(canvas.Canvas, "drawImage", broken_draw_image)

        response = test_client.post(
            "/api/v1/barcodes/sheet",
            json={"items": [{"product": charger, "quantity": 1}]},
        )

        assert response.status_code == 500
        assert "Failed to assemble PDF" in response.json()["detail"]["errors"][0]
