"""
Pydantic схемы движка и API.

Входные данные (снимок товара, запрос на печать) принимаются в camelCase,
как их отдаёт основное приложение; ответы — в snake_case.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

# === Входные данные ===


class ProductSnapshot(BaseModel):
    """Снимок товара из каталога (только чтение)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(description="ID товара в каталоге")
    name: str = Field(description="Название товара")
    price: float = Field(allow_inf_nan=False, description="Цена")
    discount_price: float | None = Field(
        default=None,
        alias="discountPrice",
        allow_inf_nan=False,
        description="Цена со скидкой (используется, если > 0)",
    )
    vendor_short_code: str | None = Field(
        default=None,
        alias="vendorShortCode",
        description="Префикс поставщика для строки штрихкода (например VD01)",
    )
    vendor_name: str | None = Field(
        default=None,
        alias="vendorName",
        description="Название поставщика для подписи на этикетке",
    )

    @property
    def effective_price(self) -> float:
        """Цена со скидкой, если она задана и положительна, иначе обычная."""
        if self.discount_price is not None and self.discount_price > 0:
            return self.discount_price
        return self.price

    @property
    def vendor_label(self) -> str | None:
        """Подпись поставщика: название, иначе короткий код."""
        return self.vendor_name or self.vendor_short_code or None


class PrintItem(BaseModel):
    """Позиция запроса: товар и количество этикеток."""

    product: ProductSnapshot
    quantity: int = Field(description="Количество этикеток (0 — позиция пропускается)")


class PrintRequest(BaseModel):
    """Упорядоченный список позиций на печать."""

    items: list[PrintItem] = Field(default_factory=list)

    @property
    def total_units(self) -> int:
        """Общее количество этикеток (отрицательные количества не считаются)."""
        return sum(max(item.quantity, 0) for item in self.items)


class DisplayOptions(BaseModel):
    """Какие поля показывать над штрихкодом."""

    show_product_info: bool = Field(default=True, description="Текстовый блок над штрихкодом")
    show_price: bool = Field(default=True, description="Строка с ценой")
    show_vendor: bool = Field(default=False, description="Строка с поставщиком")


# === Результаты ===


class ValidationReport(BaseModel):
    """Результат pre-flight проверки запроса."""

    errors: list[str] = Field(default_factory=list, description="Блокирующие ошибки")
    warnings: list[str] = Field(default_factory=list, description="Предупреждения")

    @computed_field
    @property
    def is_valid(self) -> bool:
        """Можно ли продолжить генерацию."""
        return not self.errors


class LayoutPreview(BaseModel):
    """Предварительный расчёт листов до генерации."""

    total_units: int
    total_pages: int
    barcodes_per_page: int
    layout: str = Field(description="Сетка, например '8 x 3'")
    estimated_file_size: str


class Placement(BaseModel):
    """Куда на листе попала конкретная копия этикетки."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(description="Порядковый номер копии (с 0)")
    page: int = Field(description="Страница (с 0)")
    row: int
    column: int
    x_mm: float = Field(description="Левый край от левого края листа")
    y_mm: float = Field(description="Верхний край от верхнего края листа")
    source_id: str
    payload: str
    placeholder: bool = False


class GenerationResult(BaseModel):
    """Итог одной генерации. Неизменяемый после возврата."""

    model_config = ConfigDict(frozen=True)

    success: bool
    document: bytes | None = Field(default=None, repr=False, exclude=True)
    total_pages: int = 0
    total_units: int = 0
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    placeholder_count: int = 0
    placements: tuple[Placement, ...] = Field(default=(), repr=False)
    filename: str | None = None
    failure: Literal["validation", "assembly", "cancelled"] | None = Field(
        default=None, description="Этап, на котором генерация не удалась"
    )


# === API ===


class SheetRequest(BaseModel):
    """Запрос на генерацию листов."""

    items: list[PrintItem] = Field(description="Товары и количества")
    options: DisplayOptions = Field(default_factory=DisplayOptions)
    vendor_prefix: str | None = Field(
        default=None,
        alias="vendorPrefix",
        description="Принудительный префикс для всех товаров",
    )

    model_config = ConfigDict(populate_by_name=True)

    def to_print_request(self) -> PrintRequest:
        return PrintRequest(items=self.items)


class EncodeRequest(BaseModel):
    """Запрос на кодирование одного товара."""

    model_config = ConfigDict(populate_by_name=True)

    product: ProductSnapshot
    vendor_prefix: str | None = Field(default=None, alias="vendorPrefix")


class EncodeResponse(BaseModel):
    """Строка штрихкода и результат её проверки."""

    payload: str
    length: int
    truncated: bool
    valid: bool
    errors: list[str] = Field(default_factory=list)
    display: str = Field(description="Строка с пробелами вокруг разделителей")


class LayoutResponse(BaseModel):
    """Геометрия листа."""

    page_width_mm: float
    page_height_mm: float
    margin_top_mm: float
    margin_bottom_mm: float
    margin_left_mm: float
    margin_right_mm: float
    label_width_mm: float
    label_height_mm: float
    column_gutter_mm: float
    row_gutter_mm: float
    rows: int
    columns: int
    barcodes_per_page: int


class GenerationErrorResponse(BaseModel):
    """Ответ при неуспешной генерации."""

    success: bool = False
    errors: list[str]
    warnings: list[str] = Field(default_factory=list)
