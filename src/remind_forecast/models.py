from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Optional

@dataclass
class Event:
    start: date
    end: date
    desc: str
    time: Optional[str] = None  # "7:30am", "14:00 - 15:00"; None for all-day

    @classmethod
    def on(cls, day: date, desc: str, time: Optional[str] = None) -> Event:
        return cls(start=day, end=day, desc=desc, time=time)

    def extend_to(self, day: date) -> None:
        # end never precedes start
        self.end = max(self.start, day)

    @property
    def is_multi_day(self) -> bool:
        return self.end != self.start
