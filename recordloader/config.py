from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from recordloader.domain.models import FormatConfig

ENV_PREFIX = "RECORDLOADER_"

OPTIONS = ("delimiter", "date_pattern", "datetime_pattern", "time_pattern")


@dataclass(frozen=True)
class LoadedFormatConfig:
    config: FormatConfig
    sources_used: list[str]


def _read_yaml_config(path: Path) -> dict:
    if not path.exists():
        return {}
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            return {}
        return data


def _env_get(name: str, strip: bool = True) -> str | None:
    v = os.getenv(name)
    if v is None or v == "":
        return None
    # разделитель берётся как есть: табуляция или пробел допустимы
    if not strip:
        return v
    return v.strip() or None


def load_format_config(
    config_path: str | None = None,
    overrides: dict | None = None,
) -> LoadedFormatConfig:
    """
    Priority: overrides > ENV > config > unset

    Значений по умолчанию нет: опция, не заданная ни в одном слое, остаётся None
    и приводит к ConfigurationError при запуске загрузки.
    """
    sources: list[str] = []
    overrides = overrides or {}

    # 1) config file
    cfg: dict = {}
    if config_path:
        cfg = _read_yaml_config(Path(config_path))
        if cfg:
            sources.append("config")

    # 2) env
    env = {
        "delimiter": _env_get(f"{ENV_PREFIX}DELIMITER", strip=False),
        "date_pattern": _env_get(f"{ENV_PREFIX}DATE_PATTERN"),
        "datetime_pattern": _env_get(f"{ENV_PREFIX}DATETIME_PATTERN"),
        "time_pattern": _env_get(f"{ENV_PREFIX}TIME_PATTERN"),
    }
    if any(v is not None for v in env.values()):
        sources.append("env")

    merged: dict[str, str | None] = {}
    for option in OPTIONS:
        value = cfg.get(option)
        merged[option] = None if value is None else str(value)

    for option, value in env.items():
        if value is not None:
            merged[option] = value

    # 3) explicit overrides (only those actually passed)
    if any(overrides.get(option) is not None for option in OPTIONS):
        sources.append("overrides")

    for option in OPTIONS:
        value = overrides.get(option)
        if value is None:
            continue
        merged[option] = value

    config = FormatConfig(
        delimiter=merged["delimiter"],
        date_pattern=merged["date_pattern"],
        datetime_pattern=merged["datetime_pattern"],
        time_pattern=merged["time_pattern"],
    )
    return LoadedFormatConfig(config=config, sources_used=sources)
