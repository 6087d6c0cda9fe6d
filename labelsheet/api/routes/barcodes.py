"""
API эндпоинты для генерации листов со штрихкодами.
"""

import io

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import StreamingResponse

from labelsheet.models.schemas import (
    EncodeRequest,
    EncodeResponse,
    GenerationErrorResponse,
    LayoutPreview,
    LayoutResponse,
    SheetRequest,
    ValidationReport,
)
from labelsheet.services.format_validator import FormatValidator
from labelsheet.services.sheet_generator import BarcodeSheetGenerator
from labelsheet.services.text_encoder import TextEncoder, format_for_display

router = APIRouter()

# Компоненты без состояния, общие для всех запросов
generator = BarcodeSheetGenerator()
encoder = TextEncoder()
format_validator = FormatValidator()


@router.get(
    "/barcodes/layout",
    response_model=LayoutResponse,
    summary="Геометрия листа",
)
async def get_layout() -> LayoutResponse:
    """Размеры листа, полей и этикеток в мм."""
    geometry = generator.layout_engine.geometry
    return LayoutResponse(
        page_width_mm=geometry.page_width_mm,
        page_height_mm=geometry.page_height_mm,
        margin_top_mm=geometry.margins.top,
        margin_bottom_mm=geometry.margins.bottom,
        margin_left_mm=geometry.margins.left,
        margin_right_mm=geometry.margins.right,
        label_width_mm=geometry.label_width_mm,
        label_height_mm=geometry.label_height_mm,
        column_gutter_mm=geometry.column_gutter_mm,
        row_gutter_mm=geometry.row_gutter_mm,
        rows=geometry.rows,
        columns=geometry.columns,
        barcodes_per_page=geometry.barcodes_per_page,
    )


@router.post(
    "/barcodes/encode",
    response_model=EncodeResponse,
    summary="Строка штрихкода для товара",
)
async def encode_product(request: EncodeRequest) -> EncodeResponse:
    """Кодирование одного товара и проверка формата результата."""
    encoded = encoder.encode_detailed(request.product, request.vendor_prefix)
    check = format_validator.validate(encoded.payload)

    return EncodeResponse(
        payload=encoded.payload,
        length=check.length,
        truncated=encoded.truncated,
        valid=check.valid,
        errors=check.errors,
        display=format_for_display(encoded.payload),
    )


@router.post(
    "/barcodes/validate",
    response_model=ValidationReport,
    summary="Pre-flight проверка",
    description="""
Проверка запроса БЕЗ генерации PDF.

Ошибки блокируют генерацию, предупреждения — нет.
    """,
)
async def validate_sheet(request: SheetRequest) -> ValidationReport:
    return generator.validate(request.to_print_request(), request.vendor_prefix)


@router.post(
    "/barcodes/preview",
    response_model=LayoutPreview,
    summary="Предварительный расчёт листов",
)
async def preview_sheet(request: SheetRequest) -> LayoutPreview:
    return generator.preview(request.to_print_request())


@router.post(
    "/barcodes/sheet",
    response_class=StreamingResponse,
    summary="Сгенерировать PDF",
    responses={
        422: {"model": GenerationErrorResponse, "description": "Запрос не прошёл pre-flight"},
        500: {"model": GenerationErrorResponse, "description": "Ошибка сборки PDF"},
    },
)
def generate_sheet(request: SheetRequest) -> StreamingResponse:
    """
    Генерация PDF с листами этикеток.

    Обычная (не async) функция: рендер занимает CPU,
    FastAPI выполняет её в пуле потоков.

    Returns:
        PDF файл для скачивания; число листов, этикеток и
        предупреждений — в заголовках X-Total-Pages, X-Total-Units, X-Warnings-Count
    """
    result = generator.generate(
        request.to_print_request(),
        options=request.options,
        vendor_prefix=request.vendor_prefix,
    )

    if not result.success or result.document is None:
        status_code = (
            status.HTTP_422_UNPROCESSABLE_ENTITY
            if result.failure == "validation"
            else status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        raise HTTPException(
            status_code=status_code,
            detail=GenerationErrorResponse(
                errors=list(result.errors),
                warnings=list(result.warnings),
            ).model_dump(),
        )

    return StreamingResponse(
        io.BytesIO(result.document),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"',
            "X-Total-Pages": str(result.total_pages),
            "X-Total-Units": str(result.total_units),
            "X-Warnings-Count": str(len(result.warnings)),
        },
    )
