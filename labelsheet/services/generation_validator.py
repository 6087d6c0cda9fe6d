"""
Pre-flight проверка запроса на печать.

Проверяем ДО генерации, чтобы оператор увидел проблемы до печати:
- Ошибки (блокируют генерацию): пустой запрос, ноль этикеток, отрицательное количество
- Предупреждения: большая партия, нет поставщика, цена <= 0, обрезка имени,
  строка штрихкода не проходит проверку формата
"""

import logging

from labelsheet.config import get_settings
from labelsheet.exceptions import GenerationValidationError
from labelsheet.models.schemas import PrintRequest, ProductSnapshot, ValidationReport
from labelsheet.services.format_validator import FormatValidator
from labelsheet.services.text_encoder import TextEncoder

logger = logging.getLogger(__name__)


class GenerationValidator:
    """
    Pre-flight проверка запроса.

    Проверяет:
    1. Запрос не пустой и даёт хотя бы одну этикетку
    2. Количества неотрицательные
    3. Размер партии (предупреждение выше порога)
    4. Данные каждой позиции: поставщик, цена, имя, обрезка строки штрихкода
    """

    def __init__(
        self,
        encoder: TextEncoder | None = None,
        format_validator: FormatValidator | None = None,
        large_batch_threshold: int | None = None,
    ):
        self.encoder = encoder or TextEncoder()
        self.format_validator = format_validator or FormatValidator()
        if large_batch_threshold is None:
            large_batch_threshold = get_settings().large_batch_threshold
        self.large_batch_threshold = large_batch_threshold

    def validate(self, request: PrintRequest, vendor_prefix: str | None = None) -> ValidationReport:
        """
        Полная pre-flight проверка.

        Args:
            request: Позиции на печать
            vendor_prefix: Префикс, который будет передан кодировщику

        Returns:
            ValidationReport с ошибками и предупреждениями
        """
        errors: list[str] = []
        warnings: list[str] = []

        # 1. Пустой запрос
        if not request.items:
            errors.append("No products selected for barcode generation")
            return ValidationReport(errors=errors, warnings=warnings)

        # 2. Отрицательные количества
        for position, item in enumerate(request.items, start=1):
            if item.quantity < 0:
                errors.append(
                    f"Product {position} ({item.product.name!r}) has a negative quantity "
                    f"({item.quantity})"
                )

        # 3. Общее количество
        total_units = request.total_units
        if total_units == 0:
            errors.append("No barcodes to generate (all quantities are 0)")

        if total_units > self.large_batch_threshold:
            warnings.append(
                f"Large number of barcodes ({total_units}). Generation may take some time."
            )

        # 4. Данные позиций (только тех, что попадут на печать)
        for position, item in enumerate(request.items, start=1):
            if item.quantity > 0:
                warnings.extend(self._check_item(position, item.product, vendor_prefix))

        counts = {"errors": len(errors), "warnings": len(warnings)}
        if errors:
            logger.info(
                f"[PREFLIGHT] Отклонено: {len(errors)} ошибок, {len(warnings)} предупреждений",
                extra=counts,
            )
        elif warnings:
            logger.info(f"[PREFLIGHT] OK с предупреждениями: {len(warnings)}", extra=counts)

        return ValidationReport(errors=errors, warnings=warnings)

    def _check_item(
        self,
        position: int,
        product: ProductSnapshot,
        vendor_prefix: str | None,
    ) -> list[str]:
        """Предупреждения по одной позиции."""
        warnings: list[str] = []
        label = product.name or f"Product {position}"

        if not product.name:
            warnings.append(f"Product {position} is missing a name")

        if not product.vendor_label:
            warnings.append(f'Product "{label}" is missing vendor information')

        if product.effective_price <= 0:
            warnings.append(f'Product "{label}" has invalid pricing')

        encoded = self.encoder.encode_detailed(product, vendor_prefix)
        if encoded.degenerate:
            warnings.append(
                f'Product "{label}": vendor prefix and price leave no room for the name, '
                f'barcode "{encoded.payload}" ({len(encoded.payload)} characters)'
            )
        elif encoded.truncated:
            warnings.append(
                f'Product "{label}": name truncated to fit the barcode, '
                f'will print as "{encoded.payload}"'
            )

        check = self.format_validator.validate(encoded.payload)
        if not check.valid:
            warnings.append(
                f'Product "{label}": barcode "{encoded.payload}" may not scan '
                f"({'; '.join(check.errors)})"
            )

        return warnings

    def ensure_valid(self, request: PrintRequest, vendor_prefix: str | None = None) -> ValidationReport:
        """
        Проверка с исключением вместо отчёта.

        Raises:
            GenerationValidationError: Если есть блокирующие ошибки
        """
        report = self.validate(request, vendor_prefix)
        if not report.is_valid:
            raise GenerationValidationError(report.errors, report.warnings)
        return report
