"""
Конфигурация движка печати штрихкодов LabelSheet.

Все настройки в одном месте (SSOT).
Физические размеры листа и параметры рендеринга — константы,
а не runtime-настройки: новый формат бумаги = новый набор констант.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PayloadSettings:
    """
    Формат сканируемой строки штрихкода.

    Формат: {VendorPrefix}-{ProductName}-${Price}
    """

    # Жёсткий лимит длины (символ CODE128 должен уместиться в 63.5мм)
    MAX_LENGTH: int = 32
    MIN_LENGTH: int = 5

    # Префикс поставщика по умолчанию
    DEFAULT_VENDOR_PREFIX: str = "VD01"

    SEPARATOR: str = "-"
    CURRENCY_SYMBOL: str = "$"

    # Лимит имени для отображения на этикетке (не для сканирования)
    DISPLAY_NAME_MAX_LENGTH: int = 50
    DISPLAY_ELLIPSIS: str = "..."

    # Подпись, если у товара нет поставщика
    UNKNOWN_VENDOR_LABEL: str = "Unknown Vendor"


class SheetSettings:
    """
    Геометрия листа Avery L7159 (A4, 3 колонки x 8 рядов = 24 этикетки).

    Все размеры в мм, начало координат — левый верхний угол листа.
    Значения подогнаны под реальную печать (см. замечания клиента).
    """

    # A4 портрет
    PAGE_WIDTH_MM: float = 210.0
    PAGE_HEIGHT_MM: float = 297.0

    MARGIN_TOP_MM: float = 12.5
    MARGIN_BOTTOM_MM: float = 12.5
    MARGIN_LEFT_MM: float = 2.0  # сдвинуто на 3мм влево от стандартных 5мм
    MARGIN_RIGHT_MM: float = 5.0

    # Размер одной этикетки
    LABEL_WIDTH_MM: float = 63.5
    LABEL_HEIGHT_MM: float = 33.9

    # Промежутки между этикетками
    COLUMN_GUTTER_MM: float = 5.5  # 2.5мм стандарт + 3мм по замечанию клиента
    ROW_GUTTER_MM: float = 0.0

    ROWS: int = 8
    COLUMNS: int = 3

    # Допуск при проверке вместимости (погрешность float)
    FIT_TOLERANCE_MM: float = 1e-6

    # Итоговая подпись на последней странице (внутри нижнего поля)
    SUMMARY_FONT_SIZE_PT: float = 8.0
    SUMMARY_BASELINE_MM: float = 5.0  # от нижнего края листа
    SUMMARY_GRAY: float = 0.6

    # Рамки ячеек для отладки позиционирования
    DEBUG_BORDER_GRAY: float = 0.8
    DEBUG_BORDER_WIDTH_MM: float = 0.1


class RenderSettings:
    """
    Параметры растрового рендеринга одной этикетки.

    Внутреннее разрешение не зависит от физического размера:
    1000x500 пикселей, при вставке в PDF масштабируется до 63.5x33.9мм.
    """

    TILE_WIDTH_PX: int = 1000
    TILE_HEIGHT_PX: int = 500

    # Разрешение, в котором python-barcode строит символ
    SYMBOL_DPI: int = 300

    # Параметры символа CODE128 (мм при SYMBOL_DPI)
    BAR_MODULE_WIDTH_MM: float = 0.254  # ровно 3 пикселя при 300 DPI
    BAR_HEIGHT_MM: float = 12.0
    QUIET_ZONE_MM: float = 2.5
    SYMBOL_FONT_SIZE_PT: int = 10
    SYMBOL_TEXT_DISTANCE_MM: float = 3.0

    # Отступы области символа внутри плитки
    SYMBOL_MARGIN_PX: int = 30
    SYMBOL_MARGIN_BOTTOM_PX: int = 20
    SYMBOL_TOP_WITH_INFO_PX: int = 190
    SYMBOL_TOP_PX: int = 40

    # Текстовый блок над символом
    INFO_TOP_PX: int = 20
    INFO_FONT_SIZE_PX: int = 44
    VENDOR_FONT_SIZE_PX: int = 34
    INFO_LINE_GAP_PX: int = 10

    # Заглушка при ошибке
    ERROR_TEXT: str = "Error generating barcode"
    ERROR_FONT_SIZE_PX: int = 48
    ERROR_DETAIL_FONT_SIZE_PX: int = 32
    ERROR_FRAME_WIDTH_PX: int = 6

    # Цвета (строго чёрный на белом)
    COLOR_BLACK: str = "#000000"
    COLOR_WHITE: str = "#FFFFFF"
    COLOR_GRAY: str = "#808080"


class Settings(BaseSettings):
    """
    Настройки приложения из переменных окружения.

    Загружаются из .env файла или переменных окружения.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Приложение ===
    app_name: str = "LabelSheet API"
    app_version: str = "0.1.0"
    debug: bool = False

    # === CORS ===
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"]
    )

    # === Генерация ===
    render_workers: int = Field(default=4, ge=1)  # Потоки рендеринга плиток
    large_batch_threshold: int = 1000  # Выше — предупреждение о долгой генерации
    debug_borders: bool = False  # Рисовать рамки ячеек (отладка выравнивания)
    document_author: str = "LabelSheet"

    # === Логирование ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> Settings:
    """
    Получить настройки приложения (singleton).

    Использует кэширование для избежания повторного чтения .env
    """
    return Settings()


# Экспорт констант для удобства
PAYLOAD = PayloadSettings()
SHEET = SheetSettings()
RENDER = RenderSettings()
