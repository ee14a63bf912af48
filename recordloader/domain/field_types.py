from __future__ import annotations

import datetime as dt
import decimal
import types
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, NewType, Union, get_args, get_origin

# Маркеры разрядности/семантики поверх встроенных типов.
Int8 = NewType("Int8", int)
Int16 = NewType("Int16", int)
Int32 = NewType("Int32", int)
Int64 = NewType("Int64", int)
BigInt = NewType("BigInt", int)
Float32 = NewType("Float32", float)
Float64 = NewType("Float64", float)
Char = NewType("Char", str)
Instant = NewType("Instant", dt.datetime)


class FieldKind(str, Enum):
    """
    Назначение:
        Семантический тип поля записи (тег варианта для диспетчеризации конвертера).
    """

    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    BOOL = "bool"
    CHAR = "char"
    DECIMAL = "decimal"
    BIGINT = "bigint"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    INSTANT = "instant"
    UUID = "uuid"
    ENUM = "enum"
    STRING = "string"
    ARRAY = "array"
    PASSTHROUGH = "passthrough"


INTEGER_BOUNDS: dict[FieldKind, tuple[int, int]] = {
    FieldKind.INT8: (-(2**7), 2**7 - 1),
    FieldKind.INT16: (-(2**15), 2**15 - 1),
    FieldKind.INT32: (-(2**31), 2**31 - 1),
    FieldKind.INT64: (-(2**63), 2**63 - 1),
}

INTEGER_KINDS = frozenset({*INTEGER_BOUNDS, FieldKind.BIGINT})
FLOAT_KINDS = frozenset({FieldKind.FLOAT32, FieldKind.FLOAT64})
ARRAY_ELEMENT_KINDS = frozenset({FieldKind.STRING, *INTEGER_KINDS, *FLOAT_KINDS})


@dataclass(frozen=True)
class FieldType:
    """
    Назначение:
        Описание целевого типа поля.

    Поля:
        kind: тег варианта
        enum_type: класс перечисления (только для ENUM)
        element: тип элемента (только для ARRAY)
    """

    kind: FieldKind
    enum_type: type[Enum] | None = None
    element: FieldType | None = None

    @classmethod
    def enum_of(cls, enum_type: type[Enum]) -> FieldType:
        return cls(kind=FieldKind.ENUM, enum_type=enum_type)

    @classmethod
    def array_of(cls, element_kind: FieldKind) -> FieldType:
        if element_kind not in ARRAY_ELEMENT_KINDS:
            raise ValueError(f"Unsupported array element kind: {element_kind.value}")
        return cls(kind=FieldKind.ARRAY, element=cls(kind=element_kind))

    @property
    def display_name(self) -> str:
        if self.kind is FieldKind.ENUM and self.enum_type is not None:
            return self.enum_type.__name__
        if self.kind is FieldKind.ARRAY and self.element is not None:
            return f"list[{self.element.display_name}]"
        return self.kind.value


_SCALAR_KINDS: dict[Any, FieldKind] = {
    int: FieldKind.INT64,
    Int8: FieldKind.INT8,
    Int16: FieldKind.INT16,
    Int32: FieldKind.INT32,
    Int64: FieldKind.INT64,
    BigInt: FieldKind.BIGINT,
    float: FieldKind.FLOAT64,
    Float32: FieldKind.FLOAT32,
    Float64: FieldKind.FLOAT64,
    bool: FieldKind.BOOL,
    Char: FieldKind.CHAR,
    str: FieldKind.STRING,
    decimal.Decimal: FieldKind.DECIMAL,
    dt.date: FieldKind.DATE,
    dt.datetime: FieldKind.DATETIME,
    dt.time: FieldKind.TIME,
    Instant: FieldKind.INSTANT,
    uuid.UUID: FieldKind.UUID,
}

_PASSTHROUGH = FieldType(kind=FieldKind.PASSTHROUGH)


def resolve_field_type(annotation: Any) -> FieldType:
    """
    Назначение:
        Определить FieldType по аннотации поля.

    Контракт:
        - Optional[X] / X | None -> тип X;
        - list[X] поддерживается для строк, целых и вещественных X;
        - неизвестная аннотация -> PASSTHROUGH (строка без конвертации).
    """
    annotation = _unwrap_optional(annotation)

    kind = _SCALAR_KINDS.get(annotation)
    if kind is not None:
        return FieldType(kind=kind)

    if isinstance(annotation, type) and issubclass(annotation, Enum):
        return FieldType.enum_of(annotation)

    if get_origin(annotation) is list:
        args = get_args(annotation)
        element_kind = _SCALAR_KINDS.get(args[0]) if len(args) == 1 else None
        if element_kind in ARRAY_ELEMENT_KINDS:
            return FieldType.array_of(element_kind)

    return _PASSTHROUGH


def _unwrap_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation
