from __future__ import annotations

import logging
import os
import sys
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, TextIO

from dotenv import load_dotenv

from .config import AppConfig, load_config
from .errors import ConfigError, ForecastError
from .forecast import ANSI_PALETTE, PLAIN_PALETTE, Order, Palette, format_forecast
from .parsers import Backend, parse_events
from .source import CommandRunner, detect_backend, read_lines

CONFIG_PATH_DEFAULT = "~/.config/remind_forecast/config.yaml"
CONFIG_ENV = "REMIND_FORECAST_CONFIG"
LOG_LEVEL_ENV = "REMIND_FORECAST_LOG_LEVEL"

logger = logging.getLogger(__name__)


def _resolve_backend(name: str) -> Backend:
    if name == "auto":
        return detect_backend(sys.platform)
    try:
        return Backend(name)
    except ValueError:
        raise ForecastError(f"Unknown backend {name!r}; expected auto, remind or icalbuddy") from None


def _resolve_order(name: str) -> Order:
    try:
        return Order(name)
    except ValueError:
        raise ForecastError(f"Unknown order {name!r}; expected reverse or forward") from None


def _resolve_palette(color: str, out: TextIO) -> Palette:
    if color == "always":
        return ANSI_PALETTE
    if color == "never":
        return PLAIN_PALETTE
    isatty = getattr(out, "isatty", None)
    return ANSI_PALETTE if isatty is not None and isatty() else PLAIN_PALETTE


def _read_input(path: str) -> List[str]:
    if path == "-":
        return sys.stdin.read().splitlines()
    try:
        return Path(path).read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise ForecastError(f"Cannot read {path}: {e}") from None


def _apply_overrides(cfg: AppConfig, **overrides) -> AppConfig:
    if overrides.get("backend"):
        cfg.backend = overrides["backend"]
    if overrides.get("weeks_out") is not None:
        cfg.weeks_out = overrides["weeks_out"]
    if overrides.get("reminders_file"):
        cfg.remind.reminders_file = overrides["reminders_file"]
    if overrides.get("order"):
        cfg.order = overrides["order"]
    if overrides.get("color"):
        cfg.color = overrides["color"]
    return cfg


def run_once(
    config_path: str = CONFIG_PATH_DEFAULT,
    backend: Optional[str] = None,
    weeks_out: Optional[int] = None,
    reminders_file: Optional[str] = None,
    order: Optional[str] = None,
    color: Optional[str] = None,
    today: Optional[date] = None,
    input_path: Optional[str] = None,
    verbose: bool = False,
    runner: Optional[CommandRunner] = None,
    out: Optional[TextIO] = None,
) -> List[str]:
    out = out or sys.stdout
    cfg = _apply_overrides(
        load_config(config_path),
        backend=backend,
        weeks_out=weeks_out,
        reminders_file=reminders_file,
        order=order,
        color=color,
    )

    level = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV, cfg.log_level)
    try:
        logging.getLogger("remind_forecast").setLevel(level.upper())
    except ValueError:
        raise ConfigError(f"Unknown log level {level!r}") from None

    if cfg.weeks_out < 1:
        raise ConfigError(f"weeks_out must be at least 1, got {cfg.weeks_out}")

    selected = _resolve_backend(cfg.backend)
    if input_path:
        lines = _read_input(input_path)
    else:
        lines = read_lines(selected, cfg, runner)

    events = parse_events(lines, selected)
    today = today or date.today()
    rendered = format_forecast(
        events,
        today,
        palette=_resolve_palette(cfg.color, out),
        order=_resolve_order(cfg.order),
    )
    logger.debug("%d of %d events on or after %s", len(rendered), len(events), today.isoformat())

    for line in rendered:
        print(line, file=out)
    return rendered


def _parse_day(value: str) -> date:
    return datetime.strptime(value, "%Y-%m-%d").date()


def main():
    import argparse

    load_dotenv()

    ap = argparse.ArgumentParser(description="Print upcoming calendar events with relative dates")
    ap.add_argument("--config", default=os.environ.get(CONFIG_ENV, CONFIG_PATH_DEFAULT))
    ap.add_argument("--backend", choices=["auto", "remind", "icalbuddy"])
    ap.add_argument("--weeks", type=int, dest="weeks_out", help="look-ahead window in weeks")
    ap.add_argument("--reminders-file")
    ap.add_argument("--order", choices=[o.value for o in Order])
    color = ap.add_mutually_exclusive_group()
    color.add_argument("--color", dest="color", action="store_const", const="always")
    color.add_argument("--no-color", dest="color", action="store_const", const="never")
    ap.add_argument("--today", type=_parse_day, help="reference date, YYYY-MM-DD")
    ap.add_argument("--input", dest="input_path", help="read tool output from FILE ('-' for stdin)")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")

    try:
        run_once(
            config_path=args.config,
            backend=args.backend,
            weeks_out=args.weeks_out,
            reminders_file=args.reminders_file,
            order=args.order,
            color=args.color,
            today=args.today,
            input_path=args.input_path,
            verbose=args.verbose,
        )
    except ForecastError as e:
        print(f"remind-forecast: {e}", file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
