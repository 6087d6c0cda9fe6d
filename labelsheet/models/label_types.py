# labelsheet/models/label_types.py
"""
Внутренние типы данных конвейера генерации этикеток.
"""

from dataclasses import dataclass, field

from PIL import Image


@dataclass(frozen=True)
class EncodedPayload:
    """Результат кодирования товара в строку штрихкода."""

    payload: str
    prefix: str
    name: str  # Имя товара в том виде, в каком попало в строку
    price_text: str  # "$249.99"
    truncated: bool = False  # Имя обрезано с конца
    degenerate: bool = False  # Префикс + цена не оставили места под имя


@dataclass(frozen=True)
class PayloadParts:
    """Строка штрихкода, разобранная на компоненты."""

    vendor_prefix: str
    product_name: str
    price_text: str
    price: float


@dataclass(frozen=True)
class EncodedUnit:
    """Одна копия этикетки (после раскрытия количества)."""

    payload: str
    product_name: str
    vendor_label: str
    unit_price: float
    source_id: str
    copy: int = 1  # Номер копии внутри позиции (с 1)
    truncated: bool = False


@dataclass(frozen=True)
class RenderMeta:
    """Человекочитаемые данные над штрихкодом и флаги отображения."""

    product_name: str
    vendor_label: str
    unit_price: float
    show_vendor: bool = False
    show_price: bool = True
    show_product_info: bool = True


@dataclass(frozen=True)
class Slot:
    """Позиция этикетки: страница, ряд, колонка (с 0)."""

    page: int
    row: int
    column: int


@dataclass
class RenderedTile:
    """Растровая плитка одной этикетки."""

    image: Image.Image
    slot: Slot | None = None
    error: str | None = None  # Причина, если вместо штрихкода заглушка

    @property
    def placeholder(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class FormatCheckResult:
    """Результат проверки формата строки штрихкода."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    length: int = 0
