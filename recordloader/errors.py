from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from recordloader.domain.error_codes import ErrorCode


@dataclass
class AppError(Exception):
    """
    Унифицированная ошибка загрузчика.
    """

    category: str
    code: str
    message: str
    retryable: bool = False
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details or {},
        }


class ConfigurationError(AppError):
    """
    Назначение:
        Не задана (или не может быть использована) обязательная опция формата.
        Возникает до обработки первой строки.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.CONFIG_MISSING, **details: Any) -> None:
        super().__init__(category="config", code=code.value, message=message, details=details)


class EmptyInputError(AppError):
    """
    Назначение:
        Источник не содержит ни одной строки (нет даже заголовка).
    """

    def __init__(self, message: str = "The input is empty.", **details: Any) -> None:
        super().__init__(category="input", code=ErrorCode.EMPTY_INPUT.value, message=message, details=details)


class ShapeError(AppError):
    """
    Назначение:
        Целевой тип нельзя использовать как форму записи.
    """

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(category="config", code=ErrorCode.INVALID_SHAPE.value, message=message, details=details)


class ConversionError(AppError, ValueError):
    """
    Назначение:
        Значение ячейки не удалось преобразовать в объявленный тип поля.

    Поля:
        raw_value: исходный текст ячейки
        target_type: отображаемое имя целевого типа (например, int32, list[float64])
        cause: исходное исключение парсера
    """

    def __init__(self, raw_value: str, target_type: str, cause: BaseException) -> None:
        self.raw_value = raw_value
        self.target_type = target_type
        self.cause = cause
        super().__init__(
            category="data",
            code=ErrorCode.CONVERSION_FAILED.value,
            message=f"Error parsing value '{raw_value}' for type {target_type}: {cause}",
            details={"raw_value": raw_value, "target_type": target_type, "cause": str(cause)},
        )
        self.__cause__ = cause


__all__ = ["AppError", "ConfigurationError", "ConversionError", "EmptyInputError", "ShapeError"]
