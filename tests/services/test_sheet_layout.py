"""
Тесты геометрии листа Avery L7159.

Покрывает:
- Вместимость сетки (3 колонки и 8 рядов помещаются между полями)
- Ошибки конфигурации при построении (включая место под итоговую подпись)
- Координаты ячеек и нумерацию страниц
- Предварительный расчёт листов
"""

import pytest

from labelsheet.config import SHEET
from labelsheet.exceptions import LayoutConfigurationError
from labelsheet.models.label_types import Slot
from labelsheet.services.sheet_layout import (
    AVERY_L7159,
    LayoutConfig,
    Margins,
    SheetLayoutEngine,
    compute_geometry,
)


@pytest.fixture
def engine() -> SheetLayoutEngine:
    return SheetLayoutEngine()


class TestCapacity:
    """Инвариант вместимости."""

    def test_avery_constants_fit(self):
        geometry = compute_geometry(AVERY_L7159)

        # 3·63.5 + 2·5.5 = 201.5 ≤ 210 − 2 − 5 = 203
        assert geometry.grid_width_mm == pytest.approx(201.5)
        assert geometry.available_width_mm == pytest.approx(203.0)
        # 8·33.9 + 7·0 = 271.2 ≤ 297 − 12.5 − 12.5 = 272
        assert geometry.grid_height_mm == pytest.approx(271.2)
        assert geometry.available_height_mm == pytest.approx(272.0)

    def test_barcodes_per_page(self, engine: SheetLayoutEngine):
        assert engine.barcodes_per_page == 24
        assert engine.geometry.rows == SHEET.ROWS
        assert engine.geometry.columns == SHEET.COLUMNS

    def test_too_many_columns(self):
        with pytest.raises(LayoutConfigurationError, match="columns"):
            compute_geometry(LayoutConfig(columns=4))

    def test_too_tall_labels(self):
        with pytest.raises(LayoutConfigurationError, match="rows"):
            compute_geometry(LayoutConfig(label_height_mm=34.1))

    def test_wider_margin_breaks_fit(self):
        margins = Margins(top=12.5, bottom=12.5, left=3.6, right=5.0)
        with pytest.raises(LayoutConfigurationError):
            SheetLayoutEngine(LayoutConfig(margins=margins))

    def test_wider_gutter_breaks_fit(self):
        with pytest.raises(LayoutConfigurationError):
            compute_geometry(LayoutConfig(column_gutter_mm=6.5))

    @pytest.mark.parametrize(
        "config",
        [
            LayoutConfig(rows=0),
            LayoutConfig(columns=-1),
            LayoutConfig(label_width_mm=0),
            LayoutConfig(row_gutter_mm=-1.0),
        ],
    )
    def test_non_positive_dimensions(self, config: LayoutConfig):
        with pytest.raises(LayoutConfigurationError):
            compute_geometry(config)

    def test_smaller_grid_fits(self):
        geometry = compute_geometry(LayoutConfig(rows=4, columns=2))
        assert geometry.barcodes_per_page == 8

    def test_summary_space_below_grid(self):
        geometry = compute_geometry()

        # 297 − 12.5 − 271.2 = 13.3
        assert geometry.summary_free_mm == pytest.approx(13.3)

    def test_summary_overlapping_labels(self):
        """Сетка влезает, но итоговой подписи под ней некуда встать."""
        config = LayoutConfig(
            margins=Margins(top=12.5, bottom=0.0, left=2.0, right=5.0),
            label_height_mm=35.5,
        )

        with pytest.raises(LayoutConfigurationError, match="Summary line"):
            compute_geometry(config)
        with pytest.raises(LayoutConfigurationError, match="Summary line"):
            SheetLayoutEngine(config)


class TestPositions:
    """Координаты ячеек от левого верхнего угла листа."""

    def test_first_slot(self, engine: SheetLayoutEngine):
        assert engine.geometry.slot_origin(0, 0) == pytest.approx((2.0, 12.5))

    def test_slot_origin(self, engine: SheetLayoutEngine):
        x, y = engine.geometry.slot_origin(1, 2)

        assert x == pytest.approx(2.0 + 2 * (63.5 + 5.5))
        assert y == pytest.approx(12.5 + 33.9)

    def test_last_slot_inside_margins(self, engine: SheetLayoutEngine):
        geometry = engine.geometry
        x, y = geometry.slot_origin(geometry.rows - 1, geometry.columns - 1)

        assert x + geometry.label_width_mm <= geometry.page_width_mm - geometry.margins.right
        assert y + geometry.label_height_mm <= geometry.page_height_mm - geometry.margins.bottom

    @pytest.mark.parametrize(("row", "column"), [(8, 0), (0, 3), (-1, 0)])
    def test_slot_outside_grid(self, engine: SheetLayoutEngine, row: int, column: int):
        with pytest.raises(IndexError):
            engine.geometry.slot_origin(row, column)

    @pytest.mark.parametrize(
        ("index", "expected"),
        [
            (0, Slot(page=0, row=0, column=0)),
            (2, Slot(page=0, row=0, column=2)),
            (3, Slot(page=0, row=1, column=0)),
            (23, Slot(page=0, row=7, column=2)),
            (24, Slot(page=1, row=0, column=0)),
            (48, Slot(page=2, row=0, column=0)),
            (49, Slot(page=2, row=0, column=1)),
        ],
    )
    def test_slot_for_index(self, engine: SheetLayoutEngine, index: int, expected: Slot):
        assert engine.geometry.slot_for_index(index) == expected

    @pytest.mark.parametrize(("units", "pages"), [(0, 0), (1, 1), (24, 1), (25, 2), (50, 3)])
    def test_page_count(self, engine: SheetLayoutEngine, units: int, pages: int):
        assert engine.geometry.page_count(units) == pages


class TestPreview:
    """Предварительный расчёт листов."""

    def test_preview_50_units(self, engine: SheetLayoutEngine):
        preview = engine.preview(50)

        assert preview.total_units == 50
        assert preview.total_pages == 3
        assert preview.barcodes_per_page == 24
        assert preview.layout == "8 x 3"
        assert preview.estimated_file_size == "450 KB"

    def test_preview_minimum_size(self, engine: SheetLayoutEngine):
        preview = engine.preview(0)

        assert preview.total_pages == 0
        assert preview.estimated_file_size == "50 KB"

    def test_preview_megabytes(self, engine: SheetLayoutEngine):
        assert engine.preview(240).estimated_file_size == "1.5 MB"
