from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from recordloader.errors import ConversionError

T = TypeVar("T")


@dataclass
class MapResult(Generic[T]):
    """
    Назначение:
        Результат маппинга строки: собранная запись либо первая ошибка конвертации.
    """

    line_no: int | None
    record: T | None = None
    error: ConversionError | None = None
    field: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
