from __future__ import annotations

import logging
import time
import uuid
from os import PathLike
from typing import Generic, Iterable, TextIO, TypeVar

from recordloader.domain.convert.converter import ValueConverter
from recordloader.domain.mapping.record_mapper import RecordMapper
from recordloader.domain.models import ErrorPolicy, FormatConfig, LoadResult, RowError
from recordloader.domain.ports.sources import LineSource
from recordloader.domain.shape import shape_of
from recordloader.errors import EmptyInputError
from recordloader.infra.sources.line_source import (
    FileLineSource,
    StreamLineSource,
    TextLineSource,
    split_cells,
)
from recordloader.loggingSetup import createLoaderLogger, getLibraryLogger, logEvent

T = TypeVar("T")


class TableLoader(Generic[T]):
    """
    Назначение/ответственность:
        Оркестратор загрузки: строки источника -> заголовок + строки ячеек -> записи T.

    Контракт:
        - FormatConfig проверяется до чтения источника (ConfigurationError);
        - пустой источник -> EmptyInputError, заголовок без данных -> [];
        - одна запись на строку данных, порядок входа сохраняется;
        - FAIL_FAST (по умолчанию): первая ConversionError пробрасывается, частичного результата нет;
        - COLLECT: строки с ошибкой пропускаются, ошибки возвращаются в LoadResult.errors;
        - log_dir без явного logger: события пишутся в файл load_<run_id>.log этой загрузки.
    """

    def __init__(
        self,
        record_type: type[T],
        config: FormatConfig,
        error_policy: ErrorPolicy = ErrorPolicy.FAIL_FAST,
        logger: logging.Logger | None = None,
        run_id: str | None = None,
        log_dir: str | None = None,
        log_level: str = "INFO",
    ) -> None:
        self.record_type = record_type
        self.config = config
        self.error_policy = error_policy
        self.run_id = run_id or str(uuid.uuid4())
        self.log_path: str | None = None
        if logger is None and log_dir:
            logger, self.log_path = createLoaderLogger(log_dir, self.run_id, log_level)
        self.logger = logger or getLibraryLogger()

    def load(self, source: LineSource) -> list[T]:
        return self.load_result(source).records

    def load_path(self, path: str | PathLike[str], encoding: str = "utf-8-sig") -> list[T]:
        return self.load(FileLineSource(path, encoding=encoding))

    def load_text(self, text: str | Iterable[str]) -> list[T]:
        return self.load(TextLineSource(text))

    def load_stream(self, stream: TextIO) -> list[T]:
        return self.load(StreamLineSource(stream))

    def load_result(self, source: LineSource) -> LoadResult[T]:
        self.config.ensure_complete()
        mapper = RecordMapper(shape_of(self.record_type), ValueConverter(self.config))
        delimiter = self.config.delimiter or ""

        started = time.monotonic()
        lines = source.read_lines()
        if not lines:
            self._log(logging.ERROR, f"Input is empty: source={source.describe()}")
            raise EmptyInputError(source=source.describe())

        header = [column.strip() for column in split_cells(lines[0], delimiter)]
        bound = mapper.bind_header(header)
        ignored = [column for column in header if mapper.shape.get(column) is None]
        self._log(
            logging.INFO,
            f"Load started: source={source.describe()} type={self.record_type.__name__} "
            f"columns={len(header)} matched={len(bound)} rows={len(lines) - 1}",
        )
        if ignored:
            self._log(logging.DEBUG, f"Ignored columns: {', '.join(ignored)}", component="map")

        result: LoadResult[T] = LoadResult()
        for line_no, line in enumerate(lines[1:], start=2):
            mapped = mapper.map_bound(bound, split_cells(line, delimiter), line_no)
            if mapped.error is not None:
                self._log(
                    logging.ERROR,
                    f"Conversion failed: line={line_no} field={mapped.field} {mapped.error.message}",
                    component="map",
                )
                if self.error_policy is ErrorPolicy.FAIL_FAST:
                    raise mapped.error
                result.errors.append(RowError(line_no=line_no, field=mapped.field or "", error=mapped.error))
                continue
            result.records.append(mapped.record)

        duration_ms = int((time.monotonic() - started) * 1000)
        self._log(
            logging.INFO,
            f"Load finished: records={len(result.records)} errors={len(result.errors)} durationMs={duration_ms}",
        )
        return result

    def _log(self, level: int, message: str, component: str = "load") -> None:
        logEvent(self.logger, level, self.run_id, component, message)

    def close_log(self) -> None:
        """Закрыть файловый лог, созданный загрузчиком по log_dir."""
        if self.log_path is None:
            return
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)


def read_records(
    path: str | PathLike[str],
    record_type: type[T],
    config: FormatConfig,
    logger: logging.Logger | None = None,
    log_dir: str | None = None,
) -> list[T]:
    """
    Назначение:
        Прочитать файл целиком в список записей record_type (политика FAIL_FAST).
    """
    loader = TableLoader(record_type, config, logger=logger, log_dir=log_dir)
    try:
        return loader.load_path(path)
    finally:
        loader.close_log()
