from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
import tomllib

from .source import Source

CONFIG_FILE_NAME = "xer2.toml"
CONFIG_TABLE = "generator"
DEFAULT_N = 17
DEFAULT_GAP = 10
DEFAULT_SEED = 0


class ConfigError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class GeneratorConfig:
    n: int = DEFAULT_N
    gap: int = DEFAULT_GAP
    seed: int = DEFAULT_SEED

    def build(self) -> Source:
        return Source(self.n, self.gap, self.seed)


# Lag pairs known to give long periods for additive lagged-Fibonacci generators.
PRESETS: dict[str, GeneratorConfig] = {
    "17/10": GeneratorConfig(n=17, gap=10),
    "55/24": GeneratorConfig(n=55, gap=24),
    "607/334": GeneratorConfig(n=607, gap=334),
}

_CONFIG_KEYS = ("preset", "n", "gap", "seed")


def resolve_preset(name: str) -> GeneratorConfig:
    key = str(name).strip()
    config = PRESETS.get(key)
    if config is None:
        available = ", ".join(PRESETS)
        raise ConfigError(f"unknown preset {key!r}. Available: {available}")
    return config


def _int_field(table: dict[str, object], key: str) -> int | None:
    value = table.get(key)
    if value is None:
        return None
    # TOML booleans are ints to Python; reject them explicitly.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"[{CONFIG_TABLE}] {key} must be an integer, got {value!r}")
    return value


def config_from_table(table: dict[str, object]) -> GeneratorConfig:
    unknown = sorted(set(table) - set(_CONFIG_KEYS))
    if unknown:
        raise ConfigError(f"[{CONFIG_TABLE}] has unknown keys: {', '.join(unknown)}")

    preset = table.get("preset")
    if preset is None:
        config = GeneratorConfig()
    elif isinstance(preset, str):
        config = resolve_preset(preset)
    else:
        raise ConfigError(f"[{CONFIG_TABLE}] preset must be a string, got {preset!r}")

    overrides: dict[str, int] = {}
    for key in ("n", "gap", "seed"):
        value = _int_field(table, key)
        if value is not None:
            overrides[key] = value
    return replace(config, **overrides)


def load_generator_config(path: Path) -> GeneratorConfig:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"config file not found: {path}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(f"{path}: config file is not valid UTF-8") from exc
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc.strerror or exc}") from exc
    try:
        doc = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: {exc}") from exc

    table = doc.get(CONFIG_TABLE)
    if table is None:
        return GeneratorConfig()
    if not isinstance(table, dict):
        raise ConfigError(f"{path}: [{CONFIG_TABLE}] must be a table")
    return config_from_table(table)
