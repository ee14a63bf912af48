from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Sequence, TypeVar

from recordloader.domain.convert.patterns import DatePattern, compile_pattern
from recordloader.errors import ConfigurationError, ConversionError

T = TypeVar("T")

ELEMENT_SEPARATOR = ";"

Header = Sequence[str]
RawRow = Sequence[str]


@dataclass(frozen=True)
class FormatConfig:
    """
    Назначение:
        Настройки формата: разделитель ячеек и шаблоны для date/datetime/time.

    Инварианты/гарантии:
        - Значений по умолчанию нет: незаданная опция выявляется ensure_complete().
        - Разделитель элементов массива фиксирован (';') и не настраивается.
        - После создания не меняется, безопасно разделяется между загрузками.
    """

    delimiter: str | None = None
    date_pattern: str | None = None
    datetime_pattern: str | None = None
    time_pattern: str | None = None

    @property
    def element_separator(self) -> str:
        return ELEMENT_SEPARATOR

    def missing_options(self) -> list[str]:
        missing = []
        if not self.delimiter:
            missing.append("delimiter")
        for option in ("date_pattern", "datetime_pattern", "time_pattern"):
            if not getattr(self, option):
                missing.append(option)
        return missing

    def ensure_complete(self) -> None:
        """
        Назначение:
            Проверить, что все опции заданы и шаблоны пригодны для разбора.
        """
        missing = self.missing_options()
        if "delimiter" in missing:
            raise ConfigurationError("Delimiter must be set before reading the input.", missing=missing)
        if missing:
            raise ConfigurationError(
                "Date and time patterns must be set before reading the input.",
                missing=missing,
            )
        for option in ("date_pattern", "datetime_pattern", "time_pattern"):
            self.compiled(option)

    def compiled(self, option: str) -> DatePattern:
        return compile_pattern(getattr(self, option) or "", option)


class ErrorPolicy(str, Enum):
    """
    Назначение:
        Реакция загрузчика на ошибку конвертации.

    Значения:
        FAIL_FAST: первая ошибка прерывает всю загрузку, записи не возвращаются
        COLLECT: строка с ошибкой пропускается, ошибка попадает в LoadResult.errors
    """

    FAIL_FAST = "fail_fast"
    COLLECT = "collect"


@dataclass(frozen=True)
class RowError:
    """
    Назначение:
        Ошибка конвертации с привязкой к строке и полю.
    """

    line_no: int | None
    field: str
    error: ConversionError

    @property
    def message(self) -> str:
        return f"line {self.line_no}, field '{self.field}': {self.error.message}"


@dataclass
class LoadResult(Generic[T]):
    """
    Назначение:
        Итог загрузки: записи в порядке входа и ошибки по строкам.
    """

    records: list[T] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors
