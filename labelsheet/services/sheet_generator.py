"""
Генератор листов со штрихкодами — точка входа конвейера.

Pre-flight → раскрытие количества → раскладка → рендер → PDF.
"""

import logging
import re
import threading
from datetime import date

from labelsheet.exceptions import GenerationValidationError
from labelsheet.models.schemas import (
    DisplayOptions,
    GenerationResult,
    LayoutPreview,
    PrintRequest,
    ValidationReport,
)
from labelsheet.services.document_assembler import DocumentAssembler, expand_request
from labelsheet.services.generation_validator import GenerationValidator
from labelsheet.services.sheet_layout import SheetLayoutEngine
from labelsheet.services.symbol_renderer import SymbolRenderer
from labelsheet.services.text_encoder import TextEncoder

logger = logging.getLogger(__name__)

FILENAME_NAME_MAX_LENGTH = 20


def generate_filename(request: PrintRequest, today: date | None = None) -> str:
    """
    Имя PDF-файла.

    Один товар: barcode_<имя>_<N>x_<дата>.pdf
    Несколько:  barcodes_<K>products_<N>x_<дата>.pdf
    """
    today = today or date.today()
    stamp = today.isoformat()
    total_units = request.total_units

    if len(request.items) == 1:
        name = request.items[0].product.name
        safe_name = re.sub(r"[^a-zA-Z0-9]", "_", name)[:FILENAME_NAME_MAX_LENGTH]
        return f"barcode_{safe_name}_{total_units}x_{stamp}.pdf"

    return f"barcodes_{len(request.items)}products_{total_units}x_{stamp}.pdf"


class BarcodeSheetGenerator:
    """
    Генератор PDF-листов с этикетками.

    Компоненты можно подменить (тесты, другой носитель);
    по умолчанию — Avery L7159 и настройки из окружения.
    """

    def __init__(
        self,
        layout_engine: SheetLayoutEngine | None = None,
        encoder: TextEncoder | None = None,
        validator: GenerationValidator | None = None,
        renderer: SymbolRenderer | None = None,
        render_workers: int | None = None,
    ):
        self.layout_engine = layout_engine or SheetLayoutEngine()
        self.encoder = encoder or TextEncoder()
        self.validator = validator or GenerationValidator(encoder=self.encoder)
        self.renderer = renderer or SymbolRenderer()
        self.render_workers = render_workers

    def validate(self, request: PrintRequest, vendor_prefix: str | None = None) -> ValidationReport:
        """Pre-flight проверка без генерации."""
        return self.validator.validate(request, vendor_prefix)

    def preview(self, request: PrintRequest) -> LayoutPreview:
        """Сколько листов получится и примерный размер файла."""
        return self.layout_engine.preview(request.total_units)

    def generate(
        self,
        request: PrintRequest,
        options: DisplayOptions | None = None,
        vendor_prefix: str | None = None,
        cancel_event: threading.Event | None = None,
        today: date | None = None,
    ) -> GenerationResult:
        """
        Генерация PDF.

        Args:
            request: Позиции и количества
            options: Что показывать над штрихкодом
            vendor_prefix: Принудительный префикс для всех товаров
            cancel_event: Флаг отмены (проверяется на каждой этикетке)
            today: Дата для имени файла

        Returns:
            GenerationResult. Ошибки pre-flight → success=False без документа;
            ошибки отдельных этикеток → заглушки и warnings
        """
        try:
            report = self.validator.ensure_valid(request, vendor_prefix)
        except GenerationValidationError as e:
            logger.warning(
                f"[GENERATE] Pre-flight не пройден: {'; '.join(e.errors)}",
                extra={"errors": len(e.errors), "warnings": len(e.warnings)},
            )
            return GenerationResult(
                success=False,
                total_units=request.total_units,
                errors=tuple(e.errors),
                warnings=tuple(e.warnings),
                failure="validation",
            )

        units = expand_request(request, self.encoder, vendor_prefix)
        assembler = DocumentAssembler(
            renderer=self.renderer,
            display=options,
            render_workers=self.render_workers,
        )
        result = assembler.assemble(units, self.layout_engine.geometry, cancel_event)

        # Предупреждения pre-flight идут первыми, затем по этикеткам
        update: dict = {"warnings": (*report.warnings, *result.warnings)}
        if result.success:
            update["filename"] = generate_filename(request, today)
            logger.info(
                f"[GENERATE] {update['filename']}: {result.total_units} этикеток, "
                f"{result.total_pages} стр.",
                extra={
                    "units": result.total_units,
                    "pages": result.total_pages,
                    "pdf_filename": update["filename"],
                },
            )

        return result.model_copy(update=update)
