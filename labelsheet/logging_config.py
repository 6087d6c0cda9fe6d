"""
Конфигурация логирования сервиса печати.

Сообщения с тегами [ASSEMBLE], [GENERATE], [PREFLIGHT], [RENDER] несут
структурированные поля через extra= (units, pages, placeholders, elapsed_s,
pdf_filename, errors, warnings, payload). JSON-формат выносит их в "extra",
человекочитаемый дописывает в конец строки как key=value.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from labelsheet.config import get_settings

# Всё, что есть у пустой записи, не считается extra
_RECORD_ATTRS = frozenset(logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
}

# Сторонние библиотеки, которые шумят на INFO
_QUIET_LOGGERS = ("PIL", "httpx", "uvicorn.access")


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Поля, переданные через extra= (в порядке добавления)."""
    return {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}


class JSONFormatter(logging.Formatter):
    """
    Структурированные JSON-логи для production.

    Формат:
    {"timestamp": "...", "level": "INFO", "logger": "labelsheet.services.document_assembler",
     "message": "[ASSEMBLE] Готово: ...", "extra": {"units": 50, "pages": 3, ...}}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = record_extras(record)
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, ensure_ascii=False, default=str)


class HumanFormatter(logging.Formatter):
    """Человекочитаемый формат для development: extra-поля в конце строки."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extra = record_extras(record)
        if not extra:
            return line

        fields = " ".join(f"{key}={value}" for key, value in extra.items())
        # Трассировка (если есть) остаётся последней
        head, sep, tail = line.partition("\n")
        return f"{head} | {fields}{sep}{tail}"


def setup_logging(level: str | None = None) -> None:
    """
    Настройка логирования приложения.

    debug=True: человекочитаемый формат и уровень DEBUG,
    иначе JSON и уровень из LOG_LEVEL.

    Args:
        level: Уровень вместо настроек ("DEBUG", "INFO", ...)
    """
    settings = get_settings()

    if level is not None:
        log_level = logging.getLevelName(level.upper())
    elif settings.debug:
        log_level = logging.DEBUG
    else:
        log_level = logging.getLevelName(settings.log_level)
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level}")

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(HumanFormatter() if settings.debug else JSONFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("labelsheet").setLevel(log_level)
