"""
Проверка формата строки штрихкода.

Используется как pre-flight фильтр и как оракул в тестах кодировщика.
Все проверки независимы: собираем все нарушения, без раннего выхода.
"""

import re

from labelsheet.config import PAYLOAD
from labelsheet.models.label_types import FormatCheckResult
from labelsheet.models.schemas import ProductSnapshot
from labelsheet.services.text_encoder import parse_payload

# Цена в конце строки: -$12.34
PRICE_SUFFIX_RE = re.compile(r"-\$[0-9]+\.[0-9]{2}\Z")

# Буквы, цифры, дефис, точка, $ и пробел (в названиях бывают пробелы)
ALLOWED_CHARS_RE = re.compile(r"[A-Za-z0-9\-.$ ]*")

MAX_PRICE = 999999.99
MAX_PREFIX_LENGTH = 10
PRICE_MATCH_TOLERANCE = 0.01


class FormatValidator:
    """Проверка длины, структуры и алфавита строки штрихкода."""

    def __init__(
        self,
        max_length: int = PAYLOAD.MAX_LENGTH,
        min_length: int = PAYLOAD.MIN_LENGTH,
    ):
        self.max_length = max_length
        self.min_length = min_length

    def validate(self, payload: str) -> FormatCheckResult:
        """
        Проверка формата.

        Args:
            payload: Строка штрихкода

        Returns:
            FormatCheckResult со всеми найденными нарушениями
        """
        errors: list[str] = []
        length = len(payload)

        if length > self.max_length:
            errors.append(
                f"Barcode length {length} exceeds maximum of {self.max_length} characters"
            )
        if length < self.min_length:
            errors.append(
                f"Barcode length {length} is too short (minimum {self.min_length} characters)"
            )

        if len(payload.split(PAYLOAD.SEPARATOR)) < 3:
            errors.append("Barcode should follow format: {VendorPrefix}-{ProductName}-${Price}")

        if not PRICE_SUFFIX_RE.search(payload):
            errors.append("Barcode should end with price in format: -$XX.XX")

        if not ALLOWED_CHARS_RE.fullmatch(payload):
            errors.append(
                "Barcode contains invalid characters "
                "(only letters, numbers, spaces, hyphens, dots and $ allowed)"
            )

        return FormatCheckResult(valid=not errors, errors=errors, length=length)

    def check_business_rules(
        self,
        payload: str,
        product: ProductSnapshot | None = None,
    ) -> FormatCheckResult:
        """
        Бизнес-правила поверх формата.

        Префикс 1-10 символов без пробелов, непустое имя без двойных пробелов,
        цена в диапазоне (0, 999999.99] и, если передан товар, совпадает
        с его ценой или ценой со скидкой.
        """
        format_check = self.validate(payload)
        if not format_check.valid:
            return FormatCheckResult(
                valid=False,
                errors=["Barcode format is invalid", *format_check.errors],
                length=format_check.length,
            )

        parts = parse_payload(payload)
        if parts is None:
            return FormatCheckResult(
                valid=False,
                errors=["Barcode format is invalid"],
                length=len(payload),
            )

        errors: list[str] = []

        if not 1 <= len(parts.vendor_prefix) <= MAX_PREFIX_LENGTH:
            errors.append(f"Vendor prefix should be between 1-{MAX_PREFIX_LENGTH} characters")
        if " " in parts.vendor_prefix:
            errors.append("Vendor prefix should not contain spaces")

        if not parts.product_name:
            errors.append("Product name cannot be empty")
        if "  " in parts.product_name:
            errors.append("Product name contains multiple consecutive spaces")

        if parts.price <= 0:
            errors.append("Price must be greater than 0")
        if parts.price > MAX_PRICE:
            errors.append(f"Price is too large (max ${MAX_PRICE:,.2f})")

        if product is not None and not _price_matches(parts.price, product):
            errors.append("Barcode price does not match product price or discount price")

        return FormatCheckResult(valid=not errors, errors=errors, length=len(payload))


def _price_matches(price: float, product: ProductSnapshot) -> bool:
    """Цена из строки совпадает с ценой или скидочной ценой товара."""
    candidates = [product.price]
    if product.discount_price is not None:
        candidates.append(product.discount_price)
    return any(abs(price - candidate) <= PRICE_MATCH_TOLERANCE for candidate in candidates)
