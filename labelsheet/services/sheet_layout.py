"""
Геометрия листа с этикетками (Avery L7159).

Все размеры в мм, начало координат — левый верхний угол листа, ось Y вниз.
Вместимость сетки и место под итоговую подпись проверяются при построении
геометрии: если этикетки не помещаются на лист, это ошибка конфигурации,
а не рендеринга.
"""

import math
from dataclasses import dataclass, field

from labelsheet.config import SHEET
from labelsheet.exceptions import LayoutConfigurationError
from labelsheet.models.label_types import Slot
from labelsheet.models.schemas import LayoutPreview

POINTS_PER_MM = 72 / 25.4

# Грубая оценка размера PDF для предпросмотра
ESTIMATED_KB_PER_PAGE = 150
ESTIMATED_MIN_KB = 50


@dataclass(frozen=True)
class Margins:
    """Поля листа."""

    top: float
    bottom: float
    left: float
    right: float


@dataclass(frozen=True)
class LayoutConfig:
    """Константы физического носителя."""

    page_width_mm: float = SHEET.PAGE_WIDTH_MM
    page_height_mm: float = SHEET.PAGE_HEIGHT_MM
    margins: Margins = field(
        default_factory=lambda: Margins(
            top=SHEET.MARGIN_TOP_MM,
            bottom=SHEET.MARGIN_BOTTOM_MM,
            left=SHEET.MARGIN_LEFT_MM,
            right=SHEET.MARGIN_RIGHT_MM,
        )
    )
    label_width_mm: float = SHEET.LABEL_WIDTH_MM
    label_height_mm: float = SHEET.LABEL_HEIGHT_MM
    column_gutter_mm: float = SHEET.COLUMN_GUTTER_MM
    row_gutter_mm: float = SHEET.ROW_GUTTER_MM
    rows: int = SHEET.ROWS
    columns: int = SHEET.COLUMNS


# Единственный поддерживаемый носитель
AVERY_L7159 = LayoutConfig()


@dataclass(frozen=True)
class LayoutGeometry:
    """
    Рассчитанная геометрия листа.

    Инвариант (проверяется в __post_init__):
        columns·label_width + (columns−1)·column_gutter ≤ page_width − left − right
        rows·label_height + (rows−1)·row_gutter ≤ page_height − top − bottom
        итоговая подпись помещается под последним рядом
    """

    page_width_mm: float
    page_height_mm: float
    margins: Margins
    label_width_mm: float
    label_height_mm: float
    column_gutter_mm: float
    row_gutter_mm: float
    rows: int
    columns: int

    def __post_init__(self) -> None:
        self._check_positive()
        self.check_capacity()
        self.check_summary_space()

    # === Производные размеры ===

    @property
    def barcodes_per_page(self) -> int:
        return self.rows * self.columns

    @property
    def available_width_mm(self) -> float:
        return self.page_width_mm - self.margins.left - self.margins.right

    @property
    def available_height_mm(self) -> float:
        return self.page_height_mm - self.margins.top - self.margins.bottom

    @property
    def grid_width_mm(self) -> float:
        """Ширина сетки вместе с промежутками."""
        return self.columns * self.label_width_mm + (self.columns - 1) * self.column_gutter_mm

    @property
    def grid_height_mm(self) -> float:
        """Высота сетки вместе с промежутками."""
        return self.rows * self.label_height_mm + (self.rows - 1) * self.row_gutter_mm

    @property
    def grid_bottom_mm(self) -> float:
        """Нижний край последнего ряда (от верха листа)."""
        return self.margins.top + self.grid_height_mm

    @property
    def summary_free_mm(self) -> float:
        """Свободное место под последним рядом (для итоговой подписи)."""
        return self.page_height_mm - self.grid_bottom_mm

    # === Позиционирование ===

    def slot_origin(self, row: int, column: int) -> tuple[float, float]:
        """
        Левый верхний угол ячейки.

        Returns:
            (x, y) в мм от левого верхнего угла листа
        """
        if not (0 <= row < self.rows and 0 <= column < self.columns):
            raise IndexError(f"Slot ({row}, {column}) outside {self.rows}x{self.columns} grid")

        x = self.margins.left + column * (self.label_width_mm + self.column_gutter_mm)
        y = self.margins.top + row * (self.label_height_mm + self.row_gutter_mm)
        return x, y

    def slot_for_index(self, index: int) -> Slot:
        """Ячейка для N-й этикетки (с 0): построчно, слева направо."""
        if index < 0:
            raise IndexError(f"Negative label index: {index}")

        page, position = divmod(index, self.barcodes_per_page)
        row, column = divmod(position, self.columns)
        return Slot(page=page, row=row, column=column)

    def page_count(self, total_units: int) -> int:
        """Количество листов для total_units этикеток."""
        if total_units <= 0:
            return 0
        return math.ceil(total_units / self.barcodes_per_page)

    # === Проверки ===

    def _check_positive(self) -> None:
        dimensions = {
            "page_width_mm": self.page_width_mm,
            "page_height_mm": self.page_height_mm,
            "label_width_mm": self.label_width_mm,
            "label_height_mm": self.label_height_mm,
            "rows": self.rows,
            "columns": self.columns,
        }
        for name, value in dimensions.items():
            if value <= 0:
                raise LayoutConfigurationError(f"{name} must be positive, got {value}")

        spacing = {
            "column_gutter_mm": self.column_gutter_mm,
            "row_gutter_mm": self.row_gutter_mm,
            "margins.top": self.margins.top,
            "margins.bottom": self.margins.bottom,
            "margins.left": self.margins.left,
            "margins.right": self.margins.right,
        }
        for name, value in spacing.items():
            if value < 0:
                raise LayoutConfigurationError(f"{name} must not be negative, got {value}")

    def check_capacity(self) -> None:
        """
        Проверка вместимости сетки.

        Raises:
            LayoutConfigurationError: Если ряды или колонки не помещаются между полями
        """
        tolerance = SHEET.FIT_TOLERANCE_MM

        if self.grid_width_mm > self.available_width_mm + tolerance:
            raise LayoutConfigurationError(
                f"{self.columns} columns need {self.grid_width_mm:.2f}mm, "
                f"only {self.available_width_mm:.2f}mm available between margins"
            )
        if self.grid_height_mm > self.available_height_mm + tolerance:
            raise LayoutConfigurationError(
                f"{self.rows} rows need {self.grid_height_mm:.2f}mm, "
                f"only {self.available_height_mm:.2f}mm available between margins"
            )

    def check_summary_space(self) -> None:
        """
        Итоговая подпись последней страницы должна стоять под сеткой.

        Raises:
            LayoutConfigurationError: Если подпись перекроет нижний ряд этикеток
        """
        text_top_mm = SHEET.SUMMARY_BASELINE_MM + SHEET.SUMMARY_FONT_SIZE_PT / POINTS_PER_MM

        if SHEET.SUMMARY_BASELINE_MM <= 0 or text_top_mm >= self.summary_free_mm:
            raise LayoutConfigurationError(
                f"Summary line needs {text_top_mm:.2f}mm at the bottom of the page, "
                f"only {self.summary_free_mm:.2f}mm free below the last row"
            )


def compute_geometry(config: LayoutConfig = AVERY_L7159) -> LayoutGeometry:
    """
    Геометрия листа из констант носителя.

    Raises:
        LayoutConfigurationError: Если сетка не помещается на лист
            или подпись налезает на нижний ряд
    """
    return LayoutGeometry(
        page_width_mm=config.page_width_mm,
        page_height_mm=config.page_height_mm,
        margins=config.margins,
        label_width_mm=config.label_width_mm,
        label_height_mm=config.label_height_mm,
        column_gutter_mm=config.column_gutter_mm,
        row_gutter_mm=config.row_gutter_mm,
        rows=config.rows,
        columns=config.columns,
    )


class SheetLayoutEngine:
    """Раскладка этикеток по листам."""

    def __init__(self, config: LayoutConfig = AVERY_L7159):
        # Ошибка конфигурации всплывает здесь, а не при рендеринге
        self.config = config
        self.geometry = compute_geometry(config)

    @property
    def barcodes_per_page(self) -> int:
        return self.geometry.barcodes_per_page

    def preview(self, total_units: int) -> LayoutPreview:
        """
        Предварительный расчёт: сколько листов и примерный размер файла.

        Args:
            total_units: Общее количество этикеток
        """
        total_pages = self.geometry.page_count(total_units)
        estimated_kb = max(ESTIMATED_MIN_KB, total_pages * ESTIMATED_KB_PER_PAGE)
        if estimated_kb > 1024:
            estimated_size = f"{estimated_kb / 1024:.1f} MB"
        else:
            estimated_size = f"{estimated_kb} KB"

        return LayoutPreview(
            total_units=max(total_units, 0),
            total_pages=total_pages,
            barcodes_per_page=self.barcodes_per_page,
            layout=f"{self.geometry.rows} x {self.geometry.columns}",
            estimated_file_size=estimated_size,
        )
