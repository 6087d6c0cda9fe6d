"""
Рендеринг одной этикетки: текстовый блок + штрихкод CODE128.

Плитка рисуется во внутреннем разрешении 1000x500 пикселей независимо
от физического размера этикетки — текст остаётся чётким после
масштабирования до 63.5x33.9мм в PDF.

Каждый вызов создаёт собственное изображение, общего изменяемого
состояния нет, поэтому рендер можно вызывать из нескольких потоков.
"""

import logging
import threading
from io import BytesIO

from barcode import Code128
from barcode.errors import BarcodeError
from barcode.writer import ImageWriter
from PIL import Image, ImageDraw, ImageFont

from labelsheet.config import PAYLOAD, RENDER
from labelsheet.exceptions import RenderError
from labelsheet.models.label_types import RenderedTile, RenderMeta, Slot
from labelsheet.services.text_encoder import format_price

logger = logging.getLogger(__name__)

# Жирные шрифты по приоритету; если ни одного нет — встроенный шрифт Pillow
FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    "C:/Windows/Fonts/arialbd.ttf",
    "arialbd.ttf",
    "arial.ttf",
)

# Минимальный размер при подгонке длинной строки по ширине
MIN_FONT_SIZE_PX = 16
FONT_STEP_PX = 2

# FreeType-шрифты не потокобезопасны, кэш на поток
_thread_fonts = threading.local()


def _load_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Загрузка шрифта нужного размера."""
    for font_path in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(font_path, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def get_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Шрифт из кэша текущего потока."""
    cache: dict[int, ImageFont.FreeTypeFont | ImageFont.ImageFont] | None = getattr(
        _thread_fonts, "cache", None
    )
    if cache is None:
        cache = {}
        _thread_fonts.cache = cache

    font = cache.get(size)
    if font is None:
        font = _load_font(size)
        cache[size] = font
    return font


def truncate_display_name(name: str) -> str:
    """
    Обрезка названия для отображения (не для сканирования).

    Лимит 50 символов: длиннее — первые 47 + "...".
    """
    limit = PAYLOAD.DISPLAY_NAME_MAX_LENGTH
    if len(name) <= limit:
        return name
    ellipsis = PAYLOAD.DISPLAY_ELLIPSIS
    return name[: limit - len(ellipsis)] + ellipsis


class SymbolRenderer:
    """
    Рендер плитки этикетки.

    Ошибка кодирования символа (недопустимый символ, пустая строка)
    не прерывает печать: вместо штрихкода рисуется заглушка
    "Error generating barcode", причина сохраняется в tile.error.
    """

    def __init__(
        self,
        width_px: int = RENDER.TILE_WIDTH_PX,
        height_px: int = RENDER.TILE_HEIGHT_PX,
    ):
        self.width_px = width_px
        self.height_px = height_px

    def render(self, payload: str, meta: RenderMeta, slot: Slot | None = None) -> RenderedTile:
        """
        Рендер одной этикетки.

        Args:
            payload: Строка штрихкода
            meta: Подписи и флаги отображения
            slot: Позиция на листе (передаётся дальше как есть)

        Returns:
            RenderedTile; при ошибке символа — плитка-заглушка с error
        """
        try:
            image = self._render_label(payload, meta)
            return RenderedTile(image=image, slot=slot)
        except RenderError as e:
            logger.warning(
                f"[RENDER] Заглушка вместо штрихкода '{payload}': {e.reason}",
                extra={"payload": payload},
            )
            return RenderedTile(
                image=self._render_placeholder(meta),
                slot=slot,
                error=e.reason,
            )

    def _render_label(self, payload: str, meta: RenderMeta) -> Image.Image:
        """Плитка с текстом и штрихкодом."""
        # Сначала символ: если он не кодируется, текст не рисуется
        symbol = self.build_symbol(payload)

        tile = Image.new("RGB", (self.width_px, self.height_px), RENDER.COLOR_WHITE)
        draw = ImageDraw.Draw(tile)

        symbol_top = RENDER.SYMBOL_TOP_PX
        if meta.show_product_info:
            self._draw_product_info(draw, meta)
            symbol_top = RENDER.SYMBOL_TOP_WITH_INFO_PX

        self._paste_symbol(tile, symbol, symbol_top)
        return tile

    def build_symbol(self, payload: str) -> Image.Image:
        """
        Штрихкод CODE128 с подписью под штрихами.

        Raises:
            RenderError: Если строку нельзя закодировать
        """
        if not payload:
            raise RenderError(payload, "empty payload")

        non_ascii = [char for char in payload if ord(char) > 127]
        if non_ascii:
            raise RenderError(
                payload,
                f"CODE128 supports ASCII only, got {''.join(non_ascii)!r}",
            )

        buffer = BytesIO()
        try:
            barcode = Code128(payload, writer=ImageWriter())
            barcode.write(buffer, options=self._symbol_options())
        except (BarcodeError, ValueError) as e:
            raise RenderError(payload, str(e)) from e

        buffer.seek(0)
        img = Image.open(buffer)
        return img.convert("RGB")

    def _symbol_options(self) -> dict:
        """Настройки ImageWriter из RenderSettings."""
        return {
            "module_width": RENDER.BAR_MODULE_WIDTH_MM,
            "module_height": RENDER.BAR_HEIGHT_MM,
            "quiet_zone": RENDER.QUIET_ZONE_MM,
            "font_size": RENDER.SYMBOL_FONT_SIZE_PT,
            "text_distance": RENDER.SYMBOL_TEXT_DISTANCE_MM,
            "write_text": True,  # Строка штрихкода под штрихами
            "background": "white",
            "foreground": "black",
            "dpi": RENDER.SYMBOL_DPI,
        }

    def _paste_symbol(self, tile: Image.Image, symbol: Image.Image, top: int) -> None:
        """Вписывает символ в область под текстом с сохранением пропорций."""
        area_width = self.width_px - 2 * RENDER.SYMBOL_MARGIN_PX
        area_height = self.height_px - top - RENDER.SYMBOL_MARGIN_BOTTOM_PX

        scale = min(area_width / symbol.width, area_height / symbol.height)
        new_width = max(1, int(symbol.width * scale))
        new_height = max(1, int(symbol.height * scale))

        resized = symbol.resize((new_width, new_height), Image.Resampling.LANCZOS)

        x = (self.width_px - new_width) // 2
        y = top + (area_height - new_height) // 2
        tile.paste(resized, (x, y))

    def _draw_product_info(self, draw: ImageDraw.ImageDraw, meta: RenderMeta) -> None:
        """
        Текстовый блок над штрихкодом: поставщик, название, цена.

        Строки идут фиксированным стеком сверху вниз; отсутствующая строка
        не оставляет пустого места.
        """
        y = RENDER.INFO_TOP_PX

        if meta.show_vendor and meta.vendor_label:
            self._draw_centered(draw, meta.vendor_label, y, RENDER.VENDOR_FONT_SIZE_PX)
            y += RENDER.VENDOR_FONT_SIZE_PX + RENDER.INFO_LINE_GAP_PX

        if meta.product_name:
            display_name = truncate_display_name(meta.product_name)
            self._draw_centered(draw, display_name, y, RENDER.INFO_FONT_SIZE_PX)
            y += RENDER.INFO_FONT_SIZE_PX + RENDER.INFO_LINE_GAP_PX

        if meta.show_price:
            self._draw_centered(draw, format_price(meta.unit_price), y, RENDER.INFO_FONT_SIZE_PX)

    def _draw_centered(
        self,
        draw: ImageDraw.ImageDraw,
        text: str,
        y: int,
        font_size: int,
        fill: str = RENDER.COLOR_BLACK,
    ) -> None:
        """Строка по центру; шрифт уменьшается, пока строка не влезет по ширине."""
        max_width = self.width_px - 2 * RENDER.SYMBOL_MARGIN_PX
        font = get_font(font_size)

        while font_size > MIN_FONT_SIZE_PX and draw.textlength(text, font=font) > max_width:
            font_size -= FONT_STEP_PX
            font = get_font(font_size)

        left, _top, right, _bottom = draw.textbbox((0, 0), text, font=font)
        x = (self.width_px - (right - left)) // 2 - left
        draw.text((x, y), text, font=font, fill=fill)

    def _render_placeholder(self, meta: RenderMeta) -> Image.Image:
        """Видимая заглушка: рамка, "Error generating barcode" и название товара."""
        tile = Image.new("RGB", (self.width_px, self.height_px), RENDER.COLOR_WHITE)
        draw = ImageDraw.Draw(tile)

        inset = RENDER.SYMBOL_MARGIN_PX
        draw.rectangle(
            (inset, inset, self.width_px - inset, self.height_px - inset),
            outline=RENDER.COLOR_GRAY,
            width=RENDER.ERROR_FRAME_WIDTH_PX,
        )

        error_y = self.height_px // 2 - RENDER.ERROR_FONT_SIZE_PX
        self._draw_centered(draw, RENDER.ERROR_TEXT, error_y, RENDER.ERROR_FONT_SIZE_PX)

        if meta.product_name:
            self._draw_centered(
                draw,
                truncate_display_name(meta.product_name),
                error_y + RENDER.ERROR_FONT_SIZE_PX + RENDER.INFO_LINE_GAP_PX,
                RENDER.ERROR_DETAIL_FONT_SIZE_PX,
                fill=RENDER.COLOR_GRAY,
            )

        return tile
