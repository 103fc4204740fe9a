from __future__ import annotations

import logging
import os
import pathlib
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import orjson

CONFIG_HOME = pathlib.Path(os.path.expanduser("~/.othello_core"))
CONFIG_PATH = CONFIG_HOME / "config.toml"
DEFAULTS_PATH = pathlib.Path(__file__).resolve().parents[1] / "config" / "defaults.toml"

HUMAN_CHOICES = ("black", "white", "none")
TIE_BREAKS = ("row-major", "random")

logger = logging.getLogger(__name__)


@dataclass
class PlayConfig:
    human: str = "black"
    ai_delay_ms: int = 300
    tie_break: str = "row-major"
    seed: Optional[int] = None
    log_level: str = "INFO"
    log_overwrite: bool = True


def ensure_config(path: pathlib.Path = CONFIG_PATH) -> bool:
    """Write the bundled defaults to ``path`` if nothing is there yet.

    Returns True when the file was created; reporting it is left to the caller.
    """
    if path.exists():
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULTS_PATH.read_text(encoding="utf-8"), encoding="utf-8")
    return True


def _parse_toml(path: pathlib.Path) -> Dict[str, Any]:
    # Parse TOML config; prefer stdlib tomllib (3.11+), else tomli
    try:
        import tomllib  # type: ignore[attr-defined]
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[no-redef]
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_config(path: Optional[pathlib.Path] = None) -> Dict[str, Any]:
    """Read the user config, falling back to the bundled defaults.

    A missing or malformed user file is logged and replaced by the defaults
    rather than aborting the program.
    """
    defaults = _parse_toml(DEFAULTS_PATH)
    if path is None:
        return defaults
    try:
        user = _parse_toml(path)
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return defaults
    except (OSError, ValueError) as exc:
        # tomllib.TOMLDecodeError subclasses ValueError
        logger.warning("Could not read config %s (%s), using defaults", path, exc)
        return defaults
    merged = {section: dict(values) for section, values in defaults.items()}
    for section, values in user.items():
        if isinstance(values, dict):
            merged.setdefault(section, {}).update(values)
        else:
            merged[section] = values
    return merged


def load_play_config(cfg: Dict[str, Any]) -> PlayConfig:
    """Build a validated PlayConfig from a parsed config mapping."""
    play = cfg.get("play", {})
    log_cfg = cfg.get("logging", {})
    if not isinstance(play, dict):
        raise ValueError(f"[play] must be a table, got {play!r}")
    if not isinstance(log_cfg, dict):
        raise ValueError(f"[logging] must be a table, got {log_cfg!r}")

    human = str(play.get("human", "black")).lower()
    if human not in HUMAN_CHOICES:
        raise ValueError(f"play.human must be one of {HUMAN_CHOICES}, got {human!r}")

    delay = play.get("ai_delay_ms", 300)
    if isinstance(delay, bool) or not isinstance(delay, int) or delay < 0:
        raise ValueError(f"play.ai_delay_ms must be a non-negative integer, got {delay!r}")

    tie_break = str(play.get("tie_break", "row-major")).lower()
    if tie_break not in TIE_BREAKS:
        raise ValueError(f"play.tie_break must be one of {TIE_BREAKS}, got {tie_break!r}")

    seed = play.get("seed")
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        raise ValueError(f"play.seed must be an integer, got {seed!r}")

    level = str(log_cfg.get("level", "INFO")).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"logging.level is not a logging level: {level!r}")

    return PlayConfig(
        human=human,
        ai_delay_ms=delay,
        tie_break=tie_break,
        seed=seed,
        log_level=level,
        log_overwrite=bool(log_cfg.get("overwrite", True)),
    )


def log_event(module: str, event: str, **kwargs) -> None:
    """Structured event logging through the central logger.

    Emits a single JSON line via the Python logging system so it reaches the
    log file configured by logging_setup.setup_logging().
    """
    payload = {"ts": time.time(), "module": module, "event": event}
    payload.update(kwargs)
    try:
        line = orjson.dumps(payload).decode("utf-8")
    except TypeError:
        logging.getLogger("event").exception("failed to log event: %s", {"module": module, "event": event})
        return
    logging.getLogger(f"event.{module}").info(line)
