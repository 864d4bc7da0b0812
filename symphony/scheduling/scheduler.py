"""
Simulated-clock scheduler for evaluation events.

Events are registered for a set of dates at a fixed time-of-day and fire,
in time order, as the backtest clock advances. The scheduler holds no
timers: the caller drives it with advance() and flush().
"""
import heapq
import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Callable, Iterable, List, Optional, Set, Tuple

import pandas as pd
import pytz

from .date_rules import CalendarRule
from .trading_calendar import DateLike
from ..shared.defaults import MARKET_TIMEZONE


logger = logging.getLogger(__name__)

EventCallback = Callable[[pd.Timestamp], None]


@dataclass(order=True)
class ScheduledEvent:
    """One pending callback at a naive market-time timestamp."""
    fire_time: pd.Timestamp
    sequence: int
    name: str = field(compare=False, default="")
    callback: Optional[EventCallback] = field(compare=False, default=None)


class Scheduler:
    """
    Fires callbacks at scheduled market times.

    Responsibilities:
    - Register one event per date at a time-of-day (duplicates ignored)
    - Fire every due event, oldest first, when the clock advances
    - Provide the current market date for open-ended runs
    """

    def __init__(self, timezone: str = MARKET_TIMEZONE):
        """
        Initialize scheduler.

        Args:
            timezone: Timezone of scheduled times (default: America/New_York)
        """
        self.tz = pytz.timezone(timezone)
        self._queue: List[ScheduledEvent] = []
        self._keys: Set[Tuple[str, pd.Timestamp]] = set()
        self._sequence = itertools.count()
        self.fired = 0

    def get_current_time(self) -> datetime:
        """Get current time in market timezone."""
        return datetime.now(self.tz)

    def today(self) -> pd.Timestamp:
        """Current market date as a naive Timestamp."""
        return pd.Timestamp(self.get_current_time().date())

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def next_fire_time(self) -> Optional[pd.Timestamp]:
        return self._queue[0].fire_time if self._queue else None

    def on(
        self,
        dates: Iterable[DateLike],
        time_of_day: time,
        callback: EventCallback,
        name: str = "evaluate",
    ) -> int:
        """
        Schedule `callback` on each date at `time_of_day`.

        Args:
            dates: Dates to fire on
            time_of_day: Market time at which to fire
            callback: Called with the fire time
            name: Event name; an event with the same name and time is only kept once

        Returns:
            Number of events added
        """
        offset = pd.Timedelta(
            hours=time_of_day.hour, minutes=time_of_day.minute, seconds=time_of_day.second
        )
        added = 0
        for day in dates:
            fire_time = pd.Timestamp(day).normalize() + offset
            if (name, fire_time) in self._keys:
                continue
            self._keys.add((name, fire_time))
            heapq.heappush(
                self._queue,
                ScheduledEvent(fire_time, next(self._sequence), name, callback),
            )
            added += 1
        logger.debug(f"Scheduled {added} '{name}' events at {time_of_day}")
        return added

    def on_rule(
        self,
        rule: CalendarRule,
        start: DateLike,
        end: DateLike,
        time_of_day: time,
        callback: EventCallback,
        name: str = "evaluate",
    ) -> int:
        """Schedule `callback` on every date the rule produces in [start, end]."""
        return self.on(rule.get_dates(start, end), time_of_day, callback, name)

    def advance(self, now: pd.Timestamp) -> int:
        """
        Fire every event with fire time <= now.

        Returns:
            Number of events fired
        """
        count = 0
        while self._queue and self._queue[0].fire_time <= now:
            event = heapq.heappop(self._queue)
            logger.debug(
                f"Firing '{event.name}' at "
                f"{self.tz.localize(event.fire_time.to_pydatetime()).strftime('%Y-%m-%d %H:%M %Z')}"
            )
            event.callback(event.fire_time)
            count += 1
            self.fired += 1
        return count

    def flush(self, until: Optional[pd.Timestamp] = None) -> int:
        """Fire remaining events (up to `until` when given) and drop the rest."""
        if until is not None:
            count = self.advance(until)
        else:
            count = self.advance(pd.Timestamp.max)
        dropped = len(self._queue)
        if dropped:
            logger.debug(f"Dropping {dropped} events after {until}")
        self._queue.clear()
        return count
