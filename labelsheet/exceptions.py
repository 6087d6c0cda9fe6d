"""
Иерархия ошибок движка печати штрихкодов.

- GenerationValidationError: pre-flight, блокирует генерацию целиком
- RenderError: ошибка одной этикетки, заменяется заглушкой
- LayoutConfigurationError: неверные константы раскладки (ошибка разработчика)
- AssemblyError: сбой PDF-бэкенда, генерация прерывается
"""


class LabelSheetError(Exception):
    """Базовая ошибка LabelSheet."""


class GenerationValidationError(LabelSheetError):
    """Запрос не прошёл pre-flight проверку."""

    def __init__(self, errors: list[str], warnings: list[str] | None = None):
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        super().__init__("; ".join(self.errors) or "Validation failed")


class RenderError(LabelSheetError):
    """Символ не удалось построить для конкретной строки."""

    def __init__(self, payload: str, reason: str):
        self.payload = payload
        self.reason = reason
        super().__init__(f"Cannot encode '{payload}': {reason}")


class LayoutConfigurationError(LabelSheetError):
    """Сетка этикеток не помещается на лист."""


class AssemblyError(LabelSheetError):
    """PDF-документ не удалось собрать."""


class GenerationCancelled(LabelSheetError):
    """Генерация отменена вызывающей стороной."""
