from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Tuple

from .models import Event


class Tier(Enum):
    NORMAL = "normal"
    EMPHASIS = "emphasis"
    DIM_1 = "dim-1"
    DIM_2 = "dim-2"


class Order(str, Enum):
    REVERSE = "reverse"
    FORWARD = "forward"


# tier -> (start marker, reset marker)
Palette = Dict[Tier, Tuple[str, str]]

RESET = "\033[0m"

ANSI_PALETTE: Palette = {
    Tier.NORMAL: ("", ""),
    Tier.EMPHASIS: ("\033[1m", RESET),
    Tier.DIM_1: ("\033[2m", RESET),
    Tier.DIM_2: ("\033[2;90m", RESET),
}

PLAIN_PALETTE: Palette = {tier: ("", "") for tier in Tier}


@dataclass(frozen=True)
class Offset:
    weeks: int
    days: int


def relative_offset(start: date, today: date) -> Offset:
    """Split the distance from today into whole weeks and leftover days.

    Only distances beyond a week are split; anything up to seven days
    (including the past) stays in days with weeks == 0.
    """
    days = (start - today).days
    weeks = 0
    if days > 7:
        weeks = days // 7
        days -= weeks * 7
    return Offset(weeks=weeks, days=days)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def relative_phrase(offset: Offset) -> str:
    if offset.weeks > 0:
        out = f"in {_plural(offset.weeks, 'week')}"
        if offset.days > 0:
            out += f", {_plural(offset.days, 'day')}"
        return out

    days = offset.days
    if days < -1:
        return f"{_plural(abs(days), 'day')} ago"
    if days == -1:
        return "yesterday"
    if days == 0:
        return "today"
    if days == 1:
        return "tomorrow"
    return f"in {_plural(days, 'day')}"


def tier_for(offset: Offset) -> Tier:
    if offset.weeks == 0 and offset.days == 0:
        return Tier.EMPHASIS
    if offset.weeks == 1:
        return Tier.DIM_1
    if offset.weeks > 1:
        return Tier.DIM_2
    return Tier.NORMAL


def date_label(day: date) -> str:
    # "wed 10 jan"; the day number is not zero padded
    return f"{day.strftime('%a')} {day.day} {day.strftime('%b')}".lower()


def render_event(event: Event, today: date, palette: Palette = ANSI_PALETTE) -> str:
    offset = relative_offset(event.start, today)
    tier = tier_for(offset)
    begin, reset = palette[tier]

    out = f"{begin}{event.desc} {relative_phrase(offset)}"
    if event.time:
        out += f" at {event.time}"

    # emphasis only covers the phrase; dim tiers cover the whole line
    if tier is Tier.EMPHASIS:
        out += reset
        reset = ""

    out += f" ({date_label(event.start)}"
    if event.is_multi_day:
        out += f" to {date_label(event.end)}"
    out += ")"
    return out + reset


def upcoming(events: Iterable[Event], today: date) -> List[Event]:
    """Drop events that ended before today; in-progress events are kept."""
    return [e for e in events if not e.end < today]


def format_forecast(
    events: Iterable[Event],
    today: date,
    palette: Palette = ANSI_PALETTE,
    order: Order = Order.REVERSE,
) -> List[str]:
    lines = [render_event(e, today, palette) for e in upcoming(events, today)]
    if order is Order.REVERSE:
        lines.reverse()
    return lines
