"""
Кодирование товара в строку штрихкода.

Формат: {VendorPrefix}-{ProductName}-${Price}, максимум 32 символа.
Обрезается только имя товара (с конца); префикс и цена — никогда.
"""

import re
from decimal import ROUND_HALF_UP, Context, Decimal

from labelsheet.config import PAYLOAD
from labelsheet.models.label_types import EncodedPayload, PayloadParts
from labelsheet.models.schemas import ProductSnapshot

_PRICE_SEGMENT_RE = re.compile(r"\$([0-9]+\.[0-9]{2})")

# Точность с запасом: quantize не должен падать даже на 1e308
_PRICE_CONTEXT = Context(prec=400)


def format_price(value: float) -> str:
    """
    Цена с символом валюты и ровно двумя знаками: 249.99 -> "$249.99".

    Округление половины от нуля по точному двоичному значению
    (0.125 -> 0.13, 1.005 -> 1.00), как у Number.toFixed.
    """
    if value == 0:
        value = 0.0  # -0.0 печатается как "0.00"
    amount = Decimal(value).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP, context=_PRICE_CONTEXT
    )
    return f"{PAYLOAD.CURRENCY_SYMBOL}{amount}"


class TextEncoder:
    """
    Кодировщик строки штрихкода.

    Чистая тотальная функция: для любого корректного по типам товара
    возвращает строку и не бросает исключений. Пустое имя допустимо —
    о нём предупреждает GenerationValidator.
    """

    def __init__(self, max_length: int = PAYLOAD.MAX_LENGTH):
        self.max_length = max_length

    def encode(self, product: ProductSnapshot, vendor_prefix: str | None = None) -> str:
        """
        Строка штрихкода для товара.

        Args:
            product: Снимок товара
            vendor_prefix: Префикс поставщика (приоритетнее, чем в товаре)

        Returns:
            Строка вида "VD01-Wireless Bluetooth -$249.99"
        """
        return self.encode_detailed(product, vendor_prefix).payload

    def encode_detailed(
        self,
        product: ProductSnapshot,
        vendor_prefix: str | None = None,
    ) -> EncodedPayload:
        """То же, что encode(), плюс признаки обрезки."""
        sep = PAYLOAD.SEPARATOR
        prefix = vendor_prefix or product.vendor_short_code or PAYLOAD.DEFAULT_VENDOR_PREFIX
        price = format_price(product.effective_price)

        # Место под имя: всё, что осталось после "PREFIX-" и "-$PRICE"
        budget = self.max_length - len(prefix + sep) - len(sep + price)
        name = product.name[: max(budget, 1)]
        payload = f"{prefix}{sep}{name}{sep}{price}"

        # Повторная обрезка (одна, не цикл) для аномально длинных префикса/цены
        if len(payload) > self.max_length:
            available = self.max_length - len(prefix) - len(price) - 2
            name = name[: max(available, 1)]
            payload = f"{prefix}{sep}{name}{sep}{price}"

        return EncodedPayload(
            payload=payload,
            prefix=prefix,
            name=name,
            price_text=price,
            truncated=len(name) < len(product.name),
            degenerate=budget < 1,
        )


def parse_payload(payload: str) -> PayloadParts | None:
    """
    Разбор строки штрихкода на компоненты.

    Имя товара может содержать дефисы — средние сегменты склеиваются обратно.

    Returns:
        PayloadParts или None, если строка не в формате PREFIX-NAME-$0.00
    """
    parts = payload.split(PAYLOAD.SEPARATOR)
    if len(parts) < 3:
        return None

    price_segment = parts[-1]
    match = _PRICE_SEGMENT_RE.fullmatch(price_segment)
    if not match:
        return None

    return PayloadParts(
        vendor_prefix=parts[0],
        product_name=PAYLOAD.SEPARATOR.join(parts[1:-1]),
        price_text=price_segment,
        price=float(match.group(1)),
    )


def generate_vendor_prefix(business_name: str, vendor_id: str) -> str:
    """
    Префикс поставщика из названия компании и ID.

    Первые буквы первых двух слов (только латиница, верхний регистр,
    дополняется "V") + два последних символа ID.

    Примеры:
    - "Tech Store", "abc01" → "TS01"
    - "Acme", "xyz42" → "AV42"

    Raises:
        ValueError: Если название или ID пустые
    """
    if not business_name or not business_name.strip():
        raise ValueError("Business name must be a non-empty string")
    if not vendor_id or not vendor_id.strip():
        raise ValueError("Vendor ID must be a non-empty string")

    letters_only = re.sub(r"[^a-zA-Z\s]", "", business_name.strip())
    words = [word for word in letters_only.split() if word]
    initials = "".join(word[0].upper() for word in words[:2])

    return f"{initials.ljust(2, 'V')}{vendor_id[-2:]}"


def format_for_display(payload: str) -> str:
    """Пробелы вокруг разделителей: "VD01-Tea-$3.00" → "VD01 - Tea - $3.00"."""
    return payload.replace(PAYLOAD.SEPARATOR, f" {PAYLOAD.SEPARATOR} ")
