from __future__ import annotations

from typing import Protocol


class LineSource(Protocol):
    """
    Назначение/ответственность:
        Источник строк текста для загрузчика (файл, поток, строка в памяти).
    """

    def describe(self) -> str:
        """
        Контракт:
            Короткое описание источника для логов.
        """
        ...

    def read_lines(self) -> list[str]:
        """
        Контракт:
            Все строки источника без символов перевода строки; пустой источник -> [].
        """
        ...
