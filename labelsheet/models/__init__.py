"""Модели данных: pydantic схемы и внутренние dataclass-типы."""
