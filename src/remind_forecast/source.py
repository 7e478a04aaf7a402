from __future__ import annotations

import logging
import os
import subprocess
from typing import Callable, List

from .config import AppConfig
from .errors import SourceError
from .parsers import Backend

logger = logging.getLogger(__name__)

CommandRunner = Callable[[List[str]], subprocess.CompletedProcess[str]]

ICALBUDDY_DATE_FORMAT = "%b %d, %Y"
ICALBUDDY_TIME_FORMAT = "%H:%M"


def _run_command(cmd: List[str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(cmd, capture_output=True, text=True, check=False)


def detect_backend(platform: str) -> Backend:
    if platform == "darwin":
        return Backend.ICALBUDDY
    return Backend.REMIND


def build_command(backend: Backend, cfg: AppConfig) -> List[str]:
    if backend is Backend.REMIND:
        return [
            cfg.remind.command,
            "-q",
            "-g",
            f"-s+{cfg.weeks_out}",
            "-b1",
            "-l",
            os.path.expanduser(cfg.remind.reminders_file),
        ]
    if backend is Backend.ICALBUDDY:
        return [
            cfg.icalbuddy.command,
            "-nc",
            "-nrd",
            "-npn",
            "-b",
            "",
            "-iep",
            "title,datetime",
            "-df",
            ICALBUDDY_DATE_FORMAT,
            "-tf",
            ICALBUDDY_TIME_FORMAT,
            f"eventsToday+{cfg.weeks_out * 7}",
        ]
    raise ValueError(f"Unknown backend: {backend}")


def read_lines(backend: Backend, cfg: AppConfig, runner: CommandRunner | None = None) -> List[str]:
    """Run the calendar tool for ``backend`` and return its output lines."""
    runner = runner or _run_command
    cmd = build_command(backend, cfg)
    logger.debug("Running %s", " ".join(cmd))

    try:
        result = runner(cmd)
    except FileNotFoundError:
        raise SourceError(f"{cmd[0]} not installed", cmd) from None

    if result.returncode != 0:
        raise SourceError(f"{cmd[0]} exited with status {result.returncode}", cmd, (result.stderr or "").strip())
    if not (result.stdout or "").strip():
        raise SourceError(f"{cmd[0]} produced no output", cmd, (result.stderr or "").strip())
    return result.stdout.splitlines()
