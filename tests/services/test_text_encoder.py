"""
Тесты кодировщика строки штрихкода text_encoder.py.

Покрывает:
- Формат {VendorPrefix}-{ProductName}-${Price} и лимит 32 символа
- Обрезку имени (префикс и цена не обрезаются)
- Округление цены как у toFixed
- Разбор строки, префикс поставщика, форматирование для отображения
"""

import pytest

from labelsheet.config import PAYLOAD
from labelsheet.models.schemas import ProductSnapshot
from labelsheet.services.text_encoder import (
    TextEncoder,
    format_for_display,
    format_price,
    generate_vendor_prefix,
    parse_payload,
)

# === Fixtures ===


@pytest.fixture
def encoder() -> TextEncoder:
    return TextEncoder()


@pytest.fixture
def headphones() -> ProductSnapshot:
    """Товар с длинным именем и скидкой."""
    return ProductSnapshot(
        id="p-1",
        name="Wireless Bluetooth Headphones",
        price=299.99,
        discount_price=249.99,
    )


@pytest.fixture
def charger() -> ProductSnapshot:
    """Товар с дефисом в имени."""
    return ProductSnapshot(
        id="p-2",
        name="USB-C Fast Charger",
        price=49.99,
        discount_price=39.99,
    )


# === Кодирование ===


class TestEncode:
    """Строка штрихкода для товара."""

    def test_long_name_truncated_to_32(self, encoder: TextEncoder, headphones: ProductSnapshot):
        """Имя обрезается с конца, пробел на границе сохраняется."""
        payload = encoder.encode(headphones, "VD01")

        assert payload == "VD01-Wireless Bluetooth -$249.99"
        assert len(payload) == PAYLOAD.MAX_LENGTH

    def test_name_with_hyphen_kept(self, encoder: TextEncoder, charger: ProductSnapshot):
        """Короткое имя с дефисом не меняется."""
        assert encoder.encode(charger, "VD02") == "VD02-USB-C Fast Charger-$39.99"

    def test_discount_price_used_when_positive(self, encoder: TextEncoder):
        product = ProductSnapshot(id="p", name="Tea", price=5.0, discount_price=4.5)
        assert encoder.encode(product, "VD01").endswith("-$4.50")

    @pytest.mark.parametrize("discount", [None, 0.0, -1.0])
    def test_regular_price_without_valid_discount(self, encoder: TextEncoder, discount):
        product = ProductSnapshot(id="p", name="Tea", price=5.0, discount_price=discount)
        assert encoder.encode(product, "VD01") == "VD01-Tea-$5.00"

    def test_prefix_from_product(self, encoder: TextEncoder):
        product = ProductSnapshot(id="p", name="Tea", price=3, vendor_short_code="TS01")
        assert encoder.encode(product) == "TS01-Tea-$3.00"

    def test_explicit_prefix_wins(self, encoder: TextEncoder):
        product = ProductSnapshot(id="p", name="Tea", price=3, vendor_short_code="TS01")
        assert encoder.encode(product, "AB12") == "AB12-Tea-$3.00"

    @pytest.mark.parametrize("prefix", [None, ""])
    def test_default_prefix(self, encoder: TextEncoder, prefix):
        """Без префикса в запросе и в товаре — VD01."""
        product = ProductSnapshot(id="p", name="Tea", price=3)
        assert encoder.encode(product, prefix) == "VD01-Tea-$3.00"

    def test_empty_name_is_valid_output(self, encoder: TextEncoder):
        """Кодировщик не бросает исключений на пустом имени."""
        product = ProductSnapshot(id="p", name="", price=1)
        assert encoder.encode(product) == "VD01--$1.00"

    def test_deterministic(self, encoder: TextEncoder, headphones: ProductSnapshot):
        assert encoder.encode(headphones, "VD01") == encoder.encode(headphones, "VD01")


class TestEncodeDetailed:
    """Признаки обрезки."""

    def test_truncated_flag(self, encoder: TextEncoder, headphones: ProductSnapshot):
        encoded = encoder.encode_detailed(headphones, "VD01")

        assert encoded.truncated is True
        assert encoded.degenerate is False
        assert encoded.name == "Wireless Bluetooth "
        assert encoded.prefix == "VD01"
        assert encoded.price_text == "$249.99"

    def test_not_truncated(self, encoder: TextEncoder, charger: ProductSnapshot):
        encoded = encoder.encode_detailed(charger, "VD02")
        assert encoded.truncated is False

    def test_degenerate_when_prefix_and_price_fill_budget(self, encoder: TextEncoder):
        """Длинные префикс и цена: остаётся один символ имени, строка длиннее 32."""
        product = ProductSnapshot(id="p", name="Headphones", price=123456789012.0)
        encoded = encoder.encode_detailed(product, "VERYLONGPREFIX01")

        assert encoded.degenerate is True
        assert encoded.truncated is True
        assert encoded.name == "H"
        assert encoded.payload == "VERYLONGPREFIX01-H-$123456789012.00"
        assert len(encoded.payload) > PAYLOAD.MAX_LENGTH


# === Цена ===


class TestFormatPrice:
    """Два знака после запятой, как Number.toFixed(2)."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (249.99, "$249.99"),
            (3, "$3.00"),
            (0.125, "$0.13"),  # точно представимо, половина вверх
            (1.005, "$1.00"),  # в двоичном виде чуть меньше 1.005
            (2.675, "$2.67"),
            (0.0, "$0.00"),
            (-0.0, "$0.00"),
            (-1.5, "$-1.50"),
        ],
    )
    def test_format(self, value: float, expected: str):
        assert format_price(value) == expected


# === Разбор и утилиты ===


class TestParsePayload:
    """Обратный разбор строки штрихкода."""

    def test_parse_with_hyphen_in_name(self):
        parts = parse_payload("VD02-USB-C Fast Charger-$39.99")

        assert parts is not None
        assert parts.vendor_prefix == "VD02"
        assert parts.product_name == "USB-C Fast Charger"
        assert parts.price_text == "$39.99"
        assert parts.price == pytest.approx(39.99)

    @pytest.mark.parametrize("payload", ["", "VD01", "VD01-Tea", "VD01-Tea-3.00", "VD01-Tea-$3.0"])
    def test_invalid_returns_none(self, payload: str):
        assert parse_payload(payload) is None

    def test_encoder_output_parses(self, encoder: TextEncoder, headphones: ProductSnapshot):
        parts = parse_payload(encoder.encode(headphones, "VD01"))

        assert parts is not None
        assert parts.product_name == "Wireless Bluetooth "
        assert parts.price == pytest.approx(249.99)


class TestVendorPrefix:
    """Префикс поставщика из названия и ID."""

    @pytest.mark.parametrize(
        ("business", "vendor_id", "expected"),
        [
            ("Tech Store", "abc01", "TS01"),
            ("Acme", "xyz42", "AV42"),
            ("green  valley farms", "v-007", "GV07"),
            ("4U Shop", "id99", "US99"),
        ],
    )
    def test_generate(self, business: str, vendor_id: str, expected: str):
        assert generate_vendor_prefix(business, vendor_id) == expected

    @pytest.mark.parametrize(("business", "vendor_id"), [("", "01"), ("   ", "01"), ("Acme", "")])
    def test_blank_input_raises(self, business: str, vendor_id: str):
        with pytest.raises(ValueError):
            generate_vendor_prefix(business, vendor_id)


def test_format_for_display():
    assert format_for_display("VD01-Tea-$3.00") == "VD01 - Tea - $3.00"
