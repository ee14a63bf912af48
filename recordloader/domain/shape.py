from __future__ import annotations

import dataclasses
import inspect
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Callable, ClassVar, Generic, Mapping, TypeVar, get_origin, get_type_hints

from recordloader.domain.field_types import FieldType, resolve_field_type
from recordloader.errors import ShapeError

T = TypeVar("T")


@dataclass(frozen=True)
class FieldSpec:
    """
    Назначение:
        Поле формы записи: имя и целевой тип.
    """

    name: str
    field_type: FieldType


@dataclass(frozen=True)
class RecordShape(Generic[T]):
    """
    Назначение/ответственность:
        Неизменяемое описание целевого типа записи: таблица "имя поля -> FieldSpec"
        и фабрика, собирающая экземпляр из набора сконвертированных значений.

    Инварианты/гарантии:
        - Строится один раз на тип (см. shape_of) и переиспользуется для всех строк.
        - Поля, которых нет в values, остаются со значением по умолчанию (или None).
    """

    record_type: type[T]
    fields: Mapping[str, FieldSpec]
    builder: Callable[[Mapping[str, Any]], T]

    def get(self, name: str) -> FieldSpec | None:
        return self.fields.get(name)

    def build(self, values: Mapping[str, Any]) -> T:
        return self.builder(values)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(self.fields)


@lru_cache(maxsize=None)
def shape_of(record_type: type) -> RecordShape:
    """
    Назначение:
        Построить (и закэшировать) RecordShape для dataclass или обычного класса с аннотациями.

    Контракт:
        - типы полей берутся из typing.get_type_hints (работает с отложенными аннотациями);
        - у dataclass учитываются только поля с init=True;
        - обычный класс должен создаваться без аргументов;
        - ошибки описания типа -> ShapeError.
    """
    if not isinstance(record_type, type):
        raise ShapeError(f"Record type must be a class, got {record_type!r}")

    try:
        hints = get_type_hints(record_type)
    except Exception as exc:  # noqa: BLE001
        raise ShapeError(
            f"Cannot resolve field types of {record_type.__name__}: {exc}",
            record_type=record_type.__name__,
        ) from exc

    if dataclasses.is_dataclass(record_type):
        names = [f.name for f in dataclasses.fields(record_type) if f.init]
        builder = _dataclass_builder(record_type)
    else:
        names = [
            name
            for name, hint in hints.items()
            if not name.startswith("_") and get_origin(hint) is not ClassVar and hint is not ClassVar
        ]
        builder = _plain_builder(record_type, names)

    if not names:
        raise ShapeError(f"{record_type.__name__} declares no fields", record_type=record_type.__name__)

    fields = {name: FieldSpec(name=name, field_type=resolve_field_type(hints[name])) for name in names}
    return RecordShape(record_type=record_type, fields=MappingProxyType(fields), builder=builder)


def _dataclass_builder(record_type: type[T]) -> Callable[[Mapping[str, Any]], T]:
    required = [
        f.name
        for f in dataclasses.fields(record_type)
        if f.init and f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
    ]

    def build(values: Mapping[str, Any]) -> T:
        kwargs: dict[str, Any] = {name: None for name in required}
        kwargs.update(values)
        return record_type(**kwargs)

    return build


def _plain_builder(record_type: type[T], names: list[str]) -> Callable[[Mapping[str, Any]], T]:
    try:
        signature = inspect.signature(record_type)
    except ValueError:
        signature = None
    if signature is not None:
        try:
            signature.bind()
        except TypeError as exc:
            raise ShapeError(
                f"{record_type.__name__} must be a dataclass or be constructible without arguments",
                record_type=record_type.__name__,
            ) from exc

    def build(values: Mapping[str, Any]) -> T:
        record = record_type()
        for name in names:
            if name in values:
                setattr(record, name, values[name])
            elif not hasattr(record, name):
                setattr(record, name, None)
        return record

    return build
