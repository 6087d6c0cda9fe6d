# labelsheet/services/document_assembler.py
"""
Сборка многостраничного PDF с этикетками через ReportLab.

Workflow:
1. Раскрытие количества: позиция x N → N копий EncodedUnit (порядок сохраняется)
2. Раскладка: каждой копии заранее назначается страница/ряд/колонка
3. Рендер плиток постранично в пуле потоков
4. Вставка плиток в PDF строго в порядке раскладки
5. Итоговая подпись на последней странице (в нижнем поле, не на этикетках)

Порядок размещения — контракт: оператор сверяет напечатанные листы
со списком подбора, поэтому копии никогда не переставляются.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from io import BytesIO

from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from labelsheet.config import PAYLOAD, SHEET, get_settings
from labelsheet.exceptions import AssemblyError, GenerationCancelled
from labelsheet.models.label_types import EncodedUnit, RenderedTile, RenderMeta, Slot
from labelsheet.models.schemas import DisplayOptions, GenerationResult, Placement, PrintRequest
from labelsheet.services.sheet_layout import LayoutGeometry
from labelsheet.services.symbol_renderer import SymbolRenderer
from labelsheet.services.text_encoder import TextEncoder

logger = logging.getLogger(__name__)

# Стандартный шрифт PDF для служебной подписи
SUMMARY_FONT_NAME = "Helvetica"

RenderKey = tuple[str, RenderMeta]


@dataclass(frozen=True)
class PlannedUnit:
    """Копия этикетки с заранее назначенной позицией."""

    index: int
    unit: EncodedUnit
    slot: Slot
    x_mm: float
    y_mm: float


def expand_request(
    request: PrintRequest,
    encoder: TextEncoder | None = None,
    vendor_prefix: str | None = None,
) -> list[EncodedUnit]:
    """
    Раскрытие количества в отдельные копии.

    Порядок: позиции в порядке запроса, внутри позиции — копии по номеру.
    Позиции с количеством <= 0 не дают копий.

    Args:
        request: Запрос на печать
        encoder: Кодировщик строки штрихкода
        vendor_prefix: Префикс для всех позиций (иначе из товара)

    Returns:
        Список EncodedUnit длиной sum(quantity)
    """
    encoder = encoder or TextEncoder()
    units: list[EncodedUnit] = []

    for item in request.items:
        if item.quantity <= 0:
            continue

        product = item.product
        # Одна строка на позицию
        encoded = encoder.encode_detailed(product, vendor_prefix)
        vendor_label = product.vendor_label or PAYLOAD.UNKNOWN_VENDOR_LABEL

        for copy in range(1, item.quantity + 1):
            units.append(
                EncodedUnit(
                    payload=encoded.payload,
                    product_name=product.name,
                    vendor_label=vendor_label,
                    unit_price=product.effective_price,
                    source_id=product.id,
                    copy=copy,
                    truncated=encoded.truncated,
                )
            )

    return units


def plan_placements(units: list[EncodedUnit], geometry: LayoutGeometry) -> list[PlannedUnit]:
    """
    Назначение позиций: страница за страницей, ряды сверху вниз,
    колонки слева направо.
    """
    planned: list[PlannedUnit] = []
    for index, unit in enumerate(units):
        slot = geometry.slot_for_index(index)
        x_mm, y_mm = geometry.slot_origin(slot.row, slot.column)
        planned.append(PlannedUnit(index=index, unit=unit, slot=slot, x_mm=x_mm, y_mm=y_mm))
    return planned


class DocumentAssembler:
    """
    Сборщик PDF с листами этикеток.

    Рендер плиток параллельный (ThreadPoolExecutor), вставка в PDF —
    последовательная, в порядке раскладки.
    """

    def __init__(
        self,
        renderer: SymbolRenderer | None = None,
        display: DisplayOptions | None = None,
        render_workers: int | None = None,
        debug_borders: bool | None = None,
    ):
        settings = get_settings()
        self.renderer = renderer or SymbolRenderer()
        self.display = display or DisplayOptions()
        self.render_workers = render_workers or settings.render_workers
        self.debug_borders = settings.debug_borders if debug_borders is None else debug_borders
        self.author = settings.document_author

    def assemble(
        self,
        units: list[EncodedUnit],
        geometry: LayoutGeometry,
        cancel_event: threading.Event | None = None,
    ) -> GenerationResult:
        """
        Сборка PDF.

        Args:
            units: Копии этикеток в порядке печати
            geometry: Геометрия листа
            cancel_event: Если установлен — генерация прерывается (проверка на каждой копии)

        Returns:
            GenerationResult; ошибки отдельных этикеток — в warnings,
            success=False только при сбое PDF-бэкенда или отмене
        """
        if not units:
            return GenerationResult(
                success=False,
                errors=("No barcodes to generate",),
                failure="validation",
            )

        total_units = len(units)
        total_pages = geometry.page_count(total_units)
        plan = plan_placements(units, geometry)

        started = time.perf_counter()
        logger.info(f"[ASSEMBLE] Старт: {total_units} этикеток, {total_pages} стр.")

        try:
            document, tile_errors = self._build_document(plan, geometry, total_pages, cancel_event)
        except GenerationCancelled:
            logger.info(
                f"[ASSEMBLE] Отменено ({total_units} этикеток)",
                extra={"units": total_units, "pages": total_pages},
            )
            return GenerationResult(
                success=False,
                total_units=total_units,
                errors=("Generation cancelled",),
                failure="cancelled",
            )
        except AssemblyError as e:
            logger.error(
                f"[ASSEMBLE] Ошибка сборки PDF: {e}",
                exc_info=True,
                extra={"units": total_units, "pages": total_pages},
            )
            return GenerationResult(
                success=False,
                total_units=total_units,
                errors=(f"Failed to assemble PDF: {e}",),
                failure="assembly",
            )

        placements: list[Placement] = []
        warnings: list[str] = []
        for placed, error in zip(plan, tile_errors, strict=True):
            placeholder = error is not None
            placements.append(
                Placement(
                    index=placed.index,
                    page=placed.slot.page,
                    row=placed.slot.row,
                    column=placed.slot.column,
                    x_mm=placed.x_mm,
                    y_mm=placed.y_mm,
                    source_id=placed.unit.source_id,
                    payload=placed.unit.payload,
                    placeholder=placeholder,
                )
            )
            if placeholder:
                warnings.append(
                    f'Label {placed.index + 1} ("{placed.unit.product_name}", '
                    f"page {placed.slot.page + 1}): placeholder printed, {error}"
                )

        elapsed = time.perf_counter() - started
        logger.info(
            f"[ASSEMBLE] Готово: {total_units} этикеток, {total_pages} стр., "
            f"заглушек {len(warnings)}, {elapsed:.2f}с",
            extra={
                "units": total_units,
                "pages": total_pages,
                "placeholders": len(warnings),
                "elapsed_s": round(elapsed, 3),
            },
        )

        return GenerationResult(
            success=True,
            document=document,
            total_pages=total_pages,
            total_units=total_units,
            warnings=tuple(warnings),
            placeholder_count=len(warnings),
            placements=tuple(placements),
        )

    def _build_document(
        self,
        plan: list[PlannedUnit],
        geometry: LayoutGeometry,
        total_pages: int,
        cancel_event: threading.Event | None,
    ) -> tuple[bytes, list[str | None]]:
        """
        Постраничный рендер и вставка.

        Повторяющиеся этикетки (копии одной позиции) рендерятся один раз;
        в памяти не больше двух страниц плиток. Для каждой копии
        запоминается только ошибка рендера (None, если символ построен).

        Raises:
            GenerationCancelled: Если установлен cancel_event
            AssemblyError: Любой другой сбой рендера или PDF-бэкенда
        """
        buffer = BytesIO()
        try:
            c = canvas.Canvas(
                buffer,
                pagesize=(geometry.page_width_mm * mm, geometry.page_height_mm * mm),
            )
            c.setTitle("Barcode labels")
            c.setAuthor(self.author)
        except Exception as e:
            raise AssemblyError(f"cannot create PDF canvas: {e}") from e

        per_page = geometry.barcodes_per_page
        tile_errors: list[str | None] = []
        previous: dict[RenderKey, tuple[RenderedTile, ImageReader]] = {}

        try:
            with ThreadPoolExecutor(max_workers=self.render_workers) as executor:
                for page in range(total_pages):
                    page_plan = plan[page * per_page : (page + 1) * per_page]
                    current = self._render_page(page_plan, previous, executor, cancel_event)

                    for placed in page_plan:
                        self._check_cancelled(cancel_event)
                        tile, reader = current[self._render_key(placed)]
                        self._embed_tile(c, reader, placed, geometry)
                        tile_errors.append(tile.error)

                    if page == total_pages - 1:
                        self._draw_summary(c, geometry, len(plan), total_pages)

                    c.showPage()
                    # Плитки позапрошлой страницы больше не нужны
                    previous = current
        except (GenerationCancelled, AssemblyError):
            raise
        except Exception as e:
            raise AssemblyError(f"cannot render or embed labels: {e}") from e

        try:
            c.save()
        except Exception as e:
            raise AssemblyError(f"cannot write PDF: {e}") from e

        return buffer.getvalue(), tile_errors

    def _render_page(
        self,
        page_plan: list[PlannedUnit],
        previous: dict[RenderKey, tuple[RenderedTile, ImageReader]],
        executor: ThreadPoolExecutor,
        cancel_event: threading.Event | None,
    ) -> dict[RenderKey, tuple[RenderedTile, ImageReader]]:
        """Плитки страницы: новые рендерятся в пуле, остальные берутся с прошлой страницы."""
        keys = list(dict.fromkeys(self._render_key(placed) for placed in page_plan))
        missing = [key for key in keys if key not in previous]

        def render_one(key: RenderKey) -> RenderedTile:
            self._check_cancelled(cancel_event)
            payload, meta = key
            return self.renderer.render(payload, meta)

        # map() отдаёт результаты в порядке ключей, а не завершения
        rendered = dict(zip(missing, executor.map(render_one, missing), strict=True))

        current: dict[RenderKey, tuple[RenderedTile, ImageReader]] = {}
        for key in keys:
            if key in previous:
                current[key] = previous[key]
            else:
                current[key] = (rendered[key], ImageReader(rendered[key].image))
        return current

    def _render_key(self, placed: PlannedUnit) -> RenderKey:
        unit = placed.unit
        meta = RenderMeta(
            product_name=unit.product_name,
            vendor_label=unit.vendor_label,
            unit_price=unit.unit_price,
            show_vendor=self.display.show_vendor,
            show_price=self.display.show_price,
            show_product_info=self.display.show_product_info,
        )
        return unit.payload, meta

    def _embed_tile(
        self,
        c: canvas.Canvas,
        reader: ImageReader,
        placed: PlannedUnit,
        geometry: LayoutGeometry,
    ) -> None:
        """Вставка плитки в ячейку (ReportLab: Y от нижнего края)."""
        x = placed.x_mm * mm
        y = (geometry.page_height_mm - placed.y_mm - geometry.label_height_mm) * mm
        width = geometry.label_width_mm * mm
        height = geometry.label_height_mm * mm

        try:
            c.drawImage(reader, x, y, width=width, height=height)
        except Exception as e:
            raise AssemblyError(f"cannot embed label {placed.index + 1}: {e}") from e

        if self.debug_borders:
            c.saveState()
            c.setStrokeGray(SHEET.DEBUG_BORDER_GRAY)
            c.setLineWidth(SHEET.DEBUG_BORDER_WIDTH_MM * mm)
            c.rect(x, y, width, height, fill=0, stroke=1)
            c.restoreState()

    def _draw_summary(
        self,
        c: canvas.Canvas,
        geometry: LayoutGeometry,
        total_units: int,
        total_pages: int,
    ) -> None:
        """Подпись для оператора: сколько этикеток и листов."""
        c.saveState()
        c.setFont(SUMMARY_FONT_NAME, SHEET.SUMMARY_FONT_SIZE_PT)
        c.setFillGray(SHEET.SUMMARY_GRAY)
        c.drawCentredString(
            (geometry.page_width_mm / 2) * mm,
            SHEET.SUMMARY_BASELINE_MM * mm,
            f"Generated {total_units} barcodes across {total_pages} pages",
        )
        c.restoreState()

    def _check_cancelled(self, cancel_event: threading.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise GenerationCancelled("generation cancelled")
