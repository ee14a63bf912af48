from .config import LoadedFormatConfig, load_format_config
from .domain.convert.converter import ConvertResult, ValueConverter
from .domain.field_types import (
    BigInt,
    Char,
    FieldKind,
    FieldType,
    Float32,
    Float64,
    Instant,
    Int8,
    Int16,
    Int32,
    Int64,
    resolve_field_type,
)
from .domain.mapping.map_result import MapResult
from .domain.mapping.record_mapper import RecordMapper
from .domain.models import ErrorPolicy, FormatConfig, LoadResult, RowError
from .domain.shape import FieldSpec, RecordShape, shape_of
from .errors import AppError, ConfigurationError, ConversionError, EmptyInputError, ShapeError
from .infra.sources.line_source import FileLineSource, StreamLineSource, TextLineSource
from .loader import TableLoader, read_records
from .loggingSetup import getLibraryLogger

getLibraryLogger()

__all__ = [
    "AppError",
    "BigInt",
    "Char",
    "ConfigurationError",
    "ConversionError",
    "ConvertResult",
    "EmptyInputError",
    "ErrorPolicy",
    "FieldKind",
    "FieldSpec",
    "FieldType",
    "FileLineSource",
    "Float32",
    "Float64",
    "FormatConfig",
    "Instant",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "LoadResult",
    "LoadedFormatConfig",
    "MapResult",
    "RecordMapper",
    "RecordShape",
    "RowError",
    "ShapeError",
    "StreamLineSource",
    "TableLoader",
    "TextLineSource",
    "ValueConverter",
    "load_format_config",
    "read_records",
    "resolve_field_type",
    "shape_of",
]
