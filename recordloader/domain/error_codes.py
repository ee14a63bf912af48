from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """
    Назначение:
        Единая таксономия кодов ошибок загрузчика.
    """

    CONFIG_MISSING = "CONFIG_MISSING"
    CONFIG_INVALID = "CONFIG_INVALID"
    EMPTY_INPUT = "EMPTY_INPUT"
    CONVERSION_FAILED = "CONVERSION_FAILED"
    INVALID_SHAPE = "INVALID_SHAPE"
