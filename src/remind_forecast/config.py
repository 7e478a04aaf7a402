from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict
import yaml

from .errors import ConfigError

DEFAULT_WEEKS_OUT = 5

@dataclass
class RemindConfig:
    command: str
    reminders_file: str

@dataclass
class ICalBuddyConfig:
    command: str

@dataclass
class AppConfig:
    backend: str          # auto / remind / icalbuddy
    weeks_out: int
    order: str            # reverse / forward
    color: str            # auto / always / never
    log_level: str
    remind: RemindConfig
    icalbuddy: ICalBuddyConfig

def _mapping(value: Any, where: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{where} must be a mapping, got {type(value).__name__}")
    return value

def load_config(path: str) -> AppConfig:
    p = Path(path).expanduser()
    data: Dict[str, Any] = {}
    if p.exists():
        try:
            loaded = yaml.safe_load(p.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot load {p}: {e}") from None
        data = _mapping(loaded, str(p))

    remind = _mapping(data.get("remind"), "remind")
    icalbuddy = _mapping(data.get("icalbuddy"), "icalbuddy")

    try:
        weeks_out = int(data.get("weeks_out", DEFAULT_WEEKS_OUT))
    except (TypeError, ValueError):
        raise ConfigError(f"weeks_out must be an integer, got {data.get('weeks_out')!r}") from None

    return AppConfig(
        backend=str(data.get("backend", "auto")).lower(),
        weeks_out=weeks_out,
        order=str(data.get("order", "reverse")).lower(),
        color=str(data.get("color", "auto")).lower(),
        log_level=str(data.get("log_level", "WARNING")).upper(),
        remind=RemindConfig(
            command=str(remind.get("command", "remind")),
            reminders_file=str(remind.get("reminders_file", "~/.reminders")),
        ),
        icalbuddy=ICalBuddyConfig(
            command=str(icalbuddy.get("command", "icalBuddy")),
        ),
    )
