"""Run settings resolved from environment variables.

A ``.env`` file in the working directory is loaded first when present, so a
venue can keep its defaults next to ``source.txt``:

    BINGO_INPUT=source.txt
    BINGO_OUTPUT_DIR=output
    BINGO_BACKGROUND=Background.png
    BINGO_CARD_COUNT=20
    BINGO_MAX_ATTEMPTS=1000

Command-line flags override these values.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from trope_bingo.core.errors import ValidationError


DEFAULT_INPUT_FILENAME = "source.txt"
DEFAULT_OUTPUT_DIR = "output"
DEFAULT_BACKGROUND_FILENAME = "Background.png"
DEFAULT_CARD_COUNT = 20
DEFAULT_MAX_ATTEMPTS = 1000


@dataclass(frozen=True)
class Settings:
    input_path: Path
    output_dir: Path
    background_path: Path | None
    card_count: int = DEFAULT_CARD_COUNT
    max_attempts: int = DEFAULT_MAX_ATTEMPTS


def _normalize_env_value(value: str | None) -> str:
    v = (value or "").strip()
    if len(v) >= 2 and ((v[0] == v[-1] == '"') or (v[0] == v[-1] == "'")):
        v = v[1:-1].strip()
    return v


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = _normalize_env_value(env.get(name))
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a whole number, got {raw!r}") from None
    if value <= 0:
        raise ValidationError(f"{name} must be > 0, got {value}")
    return value


def settings_from_env(env: Mapping[str, str]) -> Settings:
    input_path = Path(_normalize_env_value(env.get("BINGO_INPUT")) or DEFAULT_INPUT_FILENAME).expanduser()
    output_dir = Path(_normalize_env_value(env.get("BINGO_OUTPUT_DIR")) or DEFAULT_OUTPUT_DIR).expanduser()

    background_raw = _normalize_env_value(env.get("BINGO_BACKGROUND"))
    background_path = Path(background_raw).expanduser() if background_raw else None

    return Settings(
        input_path=input_path,
        output_dir=output_dir,
        background_path=background_path,
        card_count=_positive_int(env, "BINGO_CARD_COUNT", DEFAULT_CARD_COUNT),
        max_attempts=_positive_int(env, "BINGO_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS),
    )


def load_settings(dotenv_path: Path | None = None) -> Settings:
    load_dotenv(dotenv_path=dotenv_path or Path.cwd() / ".env")
    return settings_from_env(os.environ)
