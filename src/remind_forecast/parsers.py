"""Turn calendar tool output into Event records.

Two line formats are understood:

- ``remind -l`` output, where every data line is preceded by a
  ``# fileinfo <lineno> <path>`` marker. A marker repeating the previous one
  means the next data line continues the previous event (multi-day remind
  entries with ``THROUGH``/``*n`` repeat the same source line).
- icalBuddy output, a bare title line followed by indented date lines such as
  ``    Nov 29, 2014 at 19:30 - 20:30`` or ``    Nov 29, 2014 - Dec 1, 2014``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Iterable, List, Optional

from dateutil import parser as date_parser

from .errors import ParseError
from .models import Event

logger = logging.getLogger(__name__)

FILEINFO_RE = re.compile(r"^# fileinfo (.+)$")
DETAIL_RE = re.compile(r"^\s+(?P<date>\S.*?)(?:\s+(?:at|-)\s+(?P<extra>\S.*?))?\s*$")
CLOCK_RE = re.compile(r"^\d{1,2}:\d{2}")
# "19:30 - Dec 1, 2014 at 10:00": a timed event running into a later day
TIMED_SPAN_RE = re.compile(
    r"^(?P<time>\d{1,2}:\d{2}(?:\s*[AaPp][Mm])?)\s+-\s+(?P<end>.+?)(?:\s+at\s+\d{1,2}:\d{2}.*)?$"
)
BULLET_RE = re.compile(r"^[•*-]\s+")

REMIND_DATE_FORMAT = "%Y/%m/%d"
NO_TIME = "*"


class Backend(str, Enum):
    REMIND = "remind"
    ICALBUDDY = "icalbuddy"


@dataclass
class ParseState:
    previous_token: Optional[str] = None
    continue_last: bool = False
    last_event: Optional[Event] = None


def _parse_remind_date(value: str, lineno: int, line: str) -> date:
    try:
        return datetime.strptime(value, REMIND_DATE_FORMAT).date()
    except ValueError:
        raise ParseError(f"bad date {value!r}", lineno, line) from None


def _split_time(desc: str) -> tuple[str, str]:
    # remind puts the formatted time in front of the body; a body that is only
    # the time token leaves an empty description.
    parts = desc.split(None, 1)
    if not parts:
        return "", ""
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], parts[1]


def parse_remind(lines: Iterable[str]) -> List[Event]:
    """Parse ``remind -q -g -l`` output, merging continuation lines."""
    events: List[Event] = []
    state = ParseState()

    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue

        m = FILEINFO_RE.match(line)
        if m:
            token = m.group(1)
            state.continue_last = state.previous_token is not None and state.previous_token == token
            state.previous_token = token
            continue

        fields = line.strip().split(None, 5)
        if len(fields) < 6:
            raise ParseError("expected 6 fields", lineno, line)
        day_text, _, _, _, time_field, body = fields
        day = _parse_remind_date(day_text, lineno, line)

        if state.continue_last and state.last_event is not None:
            state.last_event.extend_to(day)
            state.continue_last = False
            continue

        event = Event.on(day, body)
        if time_field != NO_TIME:
            event.time, event.desc = _split_time(body)
        events.append(event)
        state.last_event = event
        state.continue_last = False

    logger.debug("Parsed %d remind events", len(events))
    return events


def _parse_calendar_date(value: str, lineno: int, line: str) -> date:
    try:
        return date_parser.parse(value).date()
    except (ValueError, OverflowError):
        raise ParseError(f"bad date {value!r}", lineno, line) from None


def parse_icalbuddy(lines: Iterable[str]) -> List[Event]:
    """Parse icalBuddy output; every date line becomes its own event."""
    events: List[Event] = []
    desc: Optional[str] = None

    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue

        if not line[0].isspace():
            desc = BULLET_RE.sub("", line.strip())
            continue

        m = DETAIL_RE.match(line)
        if m is None:
            raise ParseError("unrecognized date line", lineno, line)
        if desc is None:
            raise ParseError("date line without a title", lineno, line)

        event = Event.on(_parse_calendar_date(m.group("date"), lineno, line), desc)
        extra = m.group("extra")
        if extra:
            span = TIMED_SPAN_RE.match(extra)
            if span and not CLOCK_RE.match(span.group("end")):
                event.time = span.group("time")
                event.extend_to(_parse_calendar_date(span.group("end"), lineno, line))
            elif CLOCK_RE.match(extra):
                event.time = extra
            else:
                event.extend_to(_parse_calendar_date(extra, lineno, line))
        events.append(event)

    logger.debug("Parsed %d icalBuddy events", len(events))
    return events


def parse_events(lines: Iterable[str], backend: Backend) -> List[Event]:
    if backend is Backend.REMIND:
        return parse_remind(lines)
    if backend is Backend.ICALBUDDY:
        return parse_icalbuddy(lines)
    raise ValueError(f"Unknown backend: {backend}")
