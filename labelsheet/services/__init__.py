"""Сервисы конвейера: кодирование, проверка, раскладка, рендер, сборка PDF."""

from labelsheet.services.document_assembler import DocumentAssembler, expand_request
from labelsheet.services.format_validator import FormatValidator
from labelsheet.services.generation_validator import GenerationValidator
from labelsheet.services.sheet_generator import BarcodeSheetGenerator, generate_filename
from labelsheet.services.sheet_layout import SheetLayoutEngine, compute_geometry
from labelsheet.services.symbol_renderer import SymbolRenderer
from labelsheet.services.text_encoder import TextEncoder, format_price, parse_payload

__all__ = [
    "BarcodeSheetGenerator",
    "DocumentAssembler",
    "FormatValidator",
    "GenerationValidator",
    "SheetLayoutEngine",
    "SymbolRenderer",
    "TextEncoder",
    "compute_geometry",
    "expand_request",
    "format_price",
    "generate_filename",
    "parse_payload",
]
