# clinic_booking/modules/appointments/slots.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator, List

WORK_START = time(9, 0)
WORK_END = time(17, 0)
SLOT_MINUTES = 30


@dataclass(frozen=True)
class SlotWindow:
    """
    Half-hour slot starts of one business day, lazily generated.

    The window is [start, end): a slot starting at `end` is never produced.
    Iterating twice yields the same sequence.
    """
    day: date
    start: time = WORK_START
    end: time = WORK_END
    step: timedelta = timedelta(minutes=SLOT_MINUTES)

    def __iter__(self) -> Iterator[datetime]:
        current = datetime.combine(self.day, self.start)
        stop = datetime.combine(self.day, self.end)
        while current < stop:
            yield current
            current += self.step


def hhmm(value: datetime) -> str:
    return value.strftime("%H:%M")


def free_slots(window: SlotWindow, taken: Iterable[datetime]) -> List[datetime]:
    """Slots of `window` whose HH:MM does not match any of `taken`, ascending."""
    taken_hhmm = {hhmm(t) for t in taken}
    return [slot for slot in window if hhmm(slot) not in taken_hhmm]
