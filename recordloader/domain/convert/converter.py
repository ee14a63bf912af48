from __future__ import annotations

import datetime as dt
import decimal
import math
import re
import struct
import uuid
from dataclasses import dataclass
from typing import Any, Callable

from recordloader.domain.convert.patterns import DatePattern
from recordloader.domain.field_types import INTEGER_BOUNDS, INTEGER_KINDS, FieldKind, FieldType
from recordloader.domain.models import ELEMENT_SEPARATOR, FormatConfig
from recordloader.errors import ConversionError

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:NaN|Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_UUID_RE = re.compile(r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}")
_INSTANT_RE = re.compile(
    r"(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(?::\d{2})?)"
    r"(?:\.(?P<fraction>\d{1,9}))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})"
)

# Ошибки парсеров, которые превращаются в ConversionError.
_PARSE_ERRORS = (ValueError, OverflowError, decimal.InvalidOperation)


@dataclass(frozen=True)
class ConvertResult:
    """
    Назначение:
        Результат конвертации одной ячейки: значение (None = пустая ячейка) или ошибка.
    """

    value: Any = None
    error: ConversionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ValueConverter:
    """
    Назначение/ответственность:
        Преобразование текста ячейки в значение семантического типа поля.

    Контракт:
        - None или "" -> None для любого типа;
        - ошибка разбора -> ConversionError(raw_value, target_type, cause), без подстановки значения;
        - bool не падает никогда: всё, кроме "true" (без учёта регистра), даёт False;
        - неизвестный тип (PASSTHROUGH) получает строку как есть.
    """

    def __init__(self, config: FormatConfig) -> None:
        config.ensure_complete()
        self.config = config
        self._date_pattern = config.compiled("date_pattern")
        self._datetime_pattern = config.compiled("datetime_pattern")
        self._time_pattern = config.compiled("time_pattern")
        self._handlers: dict[FieldKind, Callable[[FieldType, str], Any]] = {
            FieldKind.INT8: self._parse_integer,
            FieldKind.INT16: self._parse_integer,
            FieldKind.INT32: self._parse_integer,
            FieldKind.INT64: self._parse_integer,
            FieldKind.BIGINT: self._parse_integer,
            FieldKind.FLOAT32: self._parse_float,
            FieldKind.FLOAT64: self._parse_float,
            FieldKind.BOOL: self._parse_bool,
            FieldKind.CHAR: self._parse_char,
            FieldKind.DECIMAL: self._parse_decimal,
            FieldKind.DATE: self._parse_date,
            FieldKind.DATETIME: self._parse_datetime,
            FieldKind.TIME: self._parse_time,
            FieldKind.INSTANT: self._parse_instant,
            FieldKind.UUID: self._parse_uuid,
            FieldKind.ENUM: self._parse_enum,
            FieldKind.STRING: self._passthrough,
            FieldKind.ARRAY: self._parse_array,
        }

    def try_convert(self, field_type: FieldType, raw: str | None) -> ConvertResult:
        if raw is None or raw == "":
            return ConvertResult()
        handler = self._handlers.get(field_type.kind, self._passthrough)
        try:
            return ConvertResult(value=handler(field_type, raw))
        except _PARSE_ERRORS as exc:
            return ConvertResult(error=ConversionError(raw, field_type.display_name, exc))

    def convert(self, field_type: FieldType, raw: str | None) -> Any:
        result = self.try_convert(field_type, raw)
        if result.error is not None:
            raise result.error
        return result.value

    @staticmethod
    def _passthrough(field_type: FieldType, text: str) -> str:
        return text

    @staticmethod
    def _parse_integer(field_type: FieldType, text: str) -> int:
        if not _INTEGER_RE.fullmatch(text):
            raise ValueError(f"invalid integer literal '{text}'")
        value = int(text)
        bounds = INTEGER_BOUNDS.get(field_type.kind)
        if bounds is not None and not bounds[0] <= value <= bounds[1]:
            raise ValueError(f"value '{text}' is out of range for {field_type.kind.value}")
        return value

    @staticmethod
    def _parse_float(field_type: FieldType, text: str) -> float:
        if not _FLOAT_RE.fullmatch(text):
            raise ValueError(f"invalid floating-point literal '{text}'")
        value = float(text)
        if field_type.kind is FieldKind.FLOAT32:
            try:
                return struct.unpack("f", struct.pack("f", value))[0]
            except OverflowError:
                return math.copysign(math.inf, value)
        return value

    @staticmethod
    def _parse_bool(field_type: FieldType, text: str) -> bool:
        return text.lower() == "true"

    @staticmethod
    def _parse_char(field_type: FieldType, text: str) -> str:
        return text[0]

    @staticmethod
    def _parse_decimal(field_type: FieldType, text: str) -> decimal.Decimal:
        if not _DECIMAL_RE.fullmatch(text):
            raise ValueError(f"invalid decimal literal '{text}'")
        return decimal.Decimal(text)

    def _parse_date(self, field_type: FieldType, text: str) -> dt.date:
        return _parse_temporal(self._date_pattern, text, date=True, time=False).date()

    def _parse_datetime(self, field_type: FieldType, text: str) -> dt.datetime:
        return _parse_temporal(self._datetime_pattern, text, date=True, time=True)

    def _parse_time(self, field_type: FieldType, text: str) -> dt.time:
        return _parse_temporal(self._time_pattern, text, date=False, time=True).time()

    @staticmethod
    def _parse_instant(field_type: FieldType, text: str) -> dt.datetime:
        match = _INSTANT_RE.fullmatch(text)
        if not match:
            raise ValueError(f"'{text}' is not an ISO-8601 instant with a UTC offset")
        iso = match.group("base")
        fraction = match.group("fraction")
        if fraction:
            iso += "." + fraction[:6].ljust(6, "0")
        offset = match.group("offset")
        iso += "+00:00" if offset in ("Z", "z") else offset
        return dt.datetime.fromisoformat(iso).astimezone(dt.timezone.utc)

    @staticmethod
    def _parse_uuid(field_type: FieldType, text: str) -> uuid.UUID:
        if not _UUID_RE.fullmatch(text):
            raise ValueError(f"invalid UUID string '{text}'")
        return uuid.UUID(text)

    @staticmethod
    def _parse_enum(field_type: FieldType, text: str) -> Any:
        enum_type = field_type.enum_type
        if enum_type is None:
            return text
        try:
            return enum_type[text]
        except KeyError:
            raise ValueError(f"No enum constant {enum_type.__name__}.{text}") from None

    def _parse_array(self, field_type: FieldType, text: str) -> list[Any]:
        parts = split_elements(text)
        element = field_type.element
        if element is None or element.kind is FieldKind.STRING:
            return parts
        if element.kind in INTEGER_KINDS:
            return [self._parse_integer(element, part) for part in parts]
        return [self._parse_float(element, part) for part in parts]


def _parse_temporal(pattern: DatePattern, text: str, *, date: bool, time: bool) -> dt.datetime:
    # Шаблон без нужных полей не даёт значения: недостающие части не подставляются.
    if date and not pattern.has_date:
        raise ValueError(f"pattern '{pattern.pattern}' has no year, month and day fields")
    if time and not pattern.has_time:
        raise ValueError(f"pattern '{pattern.pattern}' has no hour field")
    return pattern.parse(text)


def split_elements(text: str) -> list[str]:
    """
    Назначение:
        Разбить многозначную ячейку по ';'.

    Контракт:
        - пустые сегменты внутри сохраняются как "";
        - хвостовые пустые сегменты отбрасываются ("a;b;" -> ["a", "b"], ";" -> []).
    """
    parts = text.split(ELEMENT_SEPARATOR)
    while parts and parts[-1] == "":
        parts.pop()
    return parts
