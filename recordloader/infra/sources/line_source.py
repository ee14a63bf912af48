from __future__ import annotations

import re
from os import PathLike
from typing import Iterable, TextIO

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> list[str]:
    """
    Назначение:
        Разбить текст на строки по \\n, \\r\\n и \\r; завершающий перевод строки не даёт пустой строки.
    """
    if text == "":
        return []
    lines = _LINE_BREAK_RE.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


def split_cells(line: str, delimiter: str) -> list[str]:
    """
    Назначение:
        Разбить строку на ячейки по литеральному разделителю.
        Кавычки и экранирование не поддерживаются.
    """
    return line.split(delimiter)


class FileLineSource:
    """
    Назначение/ответственность:
        Чтение строк из файла (по умолчанию utf-8-sig, BOM отбрасывается).
    """

    def __init__(self, path: str | PathLike[str], encoding: str = "utf-8-sig") -> None:
        self.path = path
        self.encoding = encoding

    def describe(self) -> str:
        return f"file:{self.path}"

    def read_lines(self) -> list[str]:
        with open(self.path, "r", encoding=self.encoding, newline="") as f:
            return split_lines(f.read())


class TextLineSource:
    """
    Назначение/ответственность:
        Строки из текста в памяти (или уже разбитого списка строк).
    """

    def __init__(self, text: str | Iterable[str]) -> None:
        self.text = text

    def describe(self) -> str:
        return "text"

    def read_lines(self) -> list[str]:
        if isinstance(self.text, str):
            return split_lines(self.text)
        return [line.rstrip("\r\n") for line in self.text]


class StreamLineSource:
    """
    Назначение/ответственность:
        Строки из открытого текстового потока; поток не закрывается.
    """

    def __init__(self, stream: TextIO, name: str | None = None) -> None:
        self.stream = stream
        self.name = name or getattr(stream, "name", None) or "stream"

    def describe(self) -> str:
        return f"stream:{self.name}"

    def read_lines(self) -> list[str]:
        return split_lines(self.stream.read())
