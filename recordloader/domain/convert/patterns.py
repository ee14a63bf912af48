from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from functools import lru_cache

from recordloader.domain.error_codes import ErrorCode
from recordloader.errors import ConfigurationError

_TEXT = r"[^\W\d_]+"
_OFFSET = r"Z|[+-]\d{2}:?\d{2}"
_YEAR = {1: ("%Y", r"\d{4}"), 2: ("%y", r"\d{2}"), 4: ("%Y", r"\d{4}")}
_OFFSET_WIDTHS = {1: ("%z", _OFFSET), 2: ("%z", _OFFSET), 3: ("%z", _OFFSET)}


def _two_digits(directive: str) -> dict[int, tuple[str, str]]:
    return {1: (directive, r"\d{1,2}"), 2: (directive, r"\d{2}")}


# Буква шаблона -> {число повторов: (директива strptime, регулярка ширины)}.
_LETTERS: dict[str, dict[int, tuple[str, str]]] = {
    "y": _YEAR,
    "u": _YEAR,
    "M": {**_two_digits("%m"), 3: ("%b", _TEXT), 4: ("%B", _TEXT)},
    "d": _two_digits("%d"),
    "H": _two_digits("%H"),
    "h": _two_digits("%I"),
    "m": _two_digits("%M"),
    "s": _two_digits("%S"),
    "a": {1: ("%p", _TEXT)},
    "E": {1: ("%a", _TEXT), 2: ("%a", _TEXT), 3: ("%a", _TEXT), 4: ("%A", _TEXT)},
    "D": {1: ("%j", r"\d{1,3}"), 2: ("%j", r"\d{2,3}"), 3: ("%j", r"\d{3}")},
    "X": _OFFSET_WIDTHS,
    "x": _OFFSET_WIDTHS,
    "Z": _OFFSET_WIDTHS,
}

# Базовый год для двухзначного года (yy): 00..99 -> 2000..2099.
TWO_DIGIT_YEAR_BASE = 2000

_TOKEN_RE = re.compile(r"'(?:[^']|'')*'|([A-Za-z])\1*|.", re.DOTALL)
_DIRECTIVE_RE = re.compile(r"%(.)", re.DOTALL)

_SAMPLE = dt.datetime(2001, 2, 3, 4, 5, 6, 789000, tzinfo=dt.timezone.utc)


@dataclass(frozen=True)
class DatePattern:
    """
    Назначение:
        Скомпилированный шаблон даты/времени.

    Инварианты/гарантии:
        - regex задан для буквенных шаблонов и проверяет ширину полей до strptime;
        - has_date: в шаблоне есть год и месяц+день (или день года);
        - has_time: в шаблоне есть час;
        - century_base задан, если год двухзначный (yy).
    """

    pattern: str
    strptime_format: str
    regex: re.Pattern[str] | None = None
    has_date: bool = False
    has_time: bool = False
    century_base: int | None = None

    def parse(self, text: str) -> dt.datetime:
        if self.regex is not None and not self.regex.fullmatch(text):
            raise ValueError(f"'{text}' does not match pattern '{self.pattern}'")
        value = dt.datetime.strptime(text, self.strptime_format)
        if self.century_base is not None:
            value = value.replace(year=self.century_base + value.year % 100)
        return value


def _invalid(message: str, option: str, pattern: str) -> ConfigurationError:
    return ConfigurationError(message, code=ErrorCode.CONFIG_INVALID, option=option, pattern=pattern)


def _check_round_trip(strptime_format: str, option: str, pattern: str) -> None:
    try:
        dt.datetime.strptime(_SAMPLE.strftime(strptime_format), strptime_format)
    except ValueError as exc:
        raise _invalid(f"Unusable {option}: {pattern!r} ({exc})", option, pattern) from exc


def _compile_strftime(pattern: str, option: str) -> DatePattern:
    directives = set(_DIRECTIVE_RE.findall(pattern.replace("%%", "")))
    has_year = bool(directives & {"Y", "y"})
    has_day = bool(directives & {"m", "b", "B"}) and "d" in directives or "j" in directives
    _check_round_trip(pattern, option, pattern)
    return DatePattern(
        pattern=pattern,
        strptime_format=pattern,
        has_date=has_year and has_day or bool(directives & {"c", "x"}),
        has_time=bool(directives & {"H", "I", "c", "X"}),
    )


def _compile_letters(pattern: str, option: str) -> DatePattern:
    directives: list[str] = []
    regex: list[str] = []
    letters: set[str] = set()
    century_base = None
    for match in _TOKEN_RE.finditer(pattern):
        token = match.group(0)
        if token.startswith("'"):
            literal = "'" if token == "''" else token[1:-1].replace("''", "'")
            directives.append(literal.replace("%", "%%"))
            regex.append(re.escape(literal))
            continue
        if not token.isalpha():
            directives.append(token.replace("%", "%%"))
            regex.append(re.escape(token))
            continue
        letter = token[0]
        letters.add(letter)
        if letter == "S":
            if len(token) > 6:
                raise _invalid(
                    f"Fractions finer than microseconds are not supported in {option}: {pattern!r}",
                    option,
                    pattern,
                )
            directives.append("%f")
            regex.append(rf"\d{{{len(token)}}}")
            continue
        widths = _LETTERS.get(letter)
        entry = None
        if widths:
            entry = widths.get(len(token)) or widths.get(max(widths))
        if entry is None:
            raise _invalid(f"Unsupported pattern letter '{token}' in {option}: {pattern!r}", option, pattern)
        directive, width = entry
        if directive == "%y":
            century_base = TWO_DIGIT_YEAR_BASE
        directives.append(directive)
        regex.append(f"(?:{width})")

    strptime_format = "".join(directives)
    _check_round_trip(strptime_format, option, pattern)
    has_year = bool(letters & {"y", "u"})
    return DatePattern(
        pattern=pattern,
        strptime_format=strptime_format,
        regex=re.compile("".join(regex)),
        has_date=has_year and ({"M", "d"} <= letters or "D" in letters),
        has_time=bool(letters & {"H", "h"}),
        century_base=century_base,
    )


@lru_cache(maxsize=None)
def compile_pattern(pattern: str, option: str = "pattern") -> DatePattern:
    """
    Назначение:
        Разобрать шаблон формата в DatePattern.

    Контракт:
        - шаблон с '%' считается strptime-форматом, проверяется пробным разбором;
        - иначе шаблон разбирается как буквенный (yyyy-MM-dd, HH:mm:ss.SSS, 'T'),
          ширина числовых полей проверяется строго (MM - ровно две цифры);
        - неизвестная буква или непригодный формат -> ConfigurationError(CONFIG_INVALID).
    """
    if "%" in pattern:
        return _compile_strftime(pattern, option)
    return _compile_letters(pattern, option)


def to_strptime_format(pattern: str, option: str = "pattern") -> str:
    return compile_pattern(pattern, option).strptime_format
