from __future__ import annotations

from typing import Any, Generic, TypeVar

from recordloader.domain.convert.converter import ValueConverter
from recordloader.domain.mapping.map_result import MapResult
from recordloader.domain.models import Header, RawRow
from recordloader.domain.shape import FieldSpec, RecordShape

T = TypeVar("T")


class RecordMapper(Generic[T]):
    """
    Назначение/ответственность:
        Сборка одной записи из заголовка и строки ячеек.

    Контракт:
        - колонки заголовка без одноимённого поля пропускаются (не ошибка);
        - строка короче заголовка допустима: недостающие ячейки считаются пустыми;
        - записывается только непустой результат конвертации;
        - первая ошибка конвертации прерывает строку и возвращается как есть.
    """

    def __init__(self, shape: RecordShape[T], converter: ValueConverter) -> None:
        self.shape = shape
        self.converter = converter

    def bind_header(self, header: Header) -> list[tuple[int, FieldSpec]]:
        bound: list[tuple[int, FieldSpec]] = []
        for index, column in enumerate(header):
            spec = self.shape.get(column.strip())
            if spec is not None:
                bound.append((index, spec))
        return bound

    def map_row(self, header: Header, row: RawRow, line_no: int | None = None) -> MapResult[T]:
        return self.map_bound(self.bind_header(header), row, line_no)

    def map_bound(
        self,
        bound: list[tuple[int, FieldSpec]],
        row: RawRow,
        line_no: int | None = None,
    ) -> MapResult[T]:
        values: dict[str, Any] = {}
        for index, spec in bound:
            raw = row[index].strip() if index < len(row) else None
            result = self.converter.try_convert(spec.field_type, raw)
            if result.error is not None:
                return MapResult(line_no=line_no, error=result.error, field=spec.name)
            if result.value is not None:
                values[spec.name] = result.value
        return MapResult(line_no=line_no, record=self.shape.build(values))
