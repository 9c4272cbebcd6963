from datetime import date, datetime, time, timedelta
from typing import Dict, Iterator, Optional, Any
from zoneinfo import ZoneInfo

from pydantic import BaseModel, model_validator

from gymbooking.core.config_loader import DAY_NAMES, get_business_hours

class DayHours(BaseModel):
    open: int
    close: int

    @model_validator(mode="after")
    def check_interval(self):
        if not (0 <= self.open < self.close <= 24):
            raise ValueError(f"invalid opening hours {self.open}-{self.close}")
        return self

class WeeklyHours(BaseModel):
    """
    Static opening hours per weekday (0 = Monday ... 6 = Sunday), evaluated in
    the gym's timezone. A weekday without an entry is closed.
    """
    days: Dict[int, DayHours]
    timezone: str = "America/Santiago"

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "WeeklyHours":
        days = {}
        for weekday, day_name in enumerate(DAY_NAMES):
            hours = get_business_hours(config, day_name)
            if hours:
                days[weekday] = DayHours(**hours)
        return cls(days=days, timezone=config.get("timezone", "America/Santiago"))

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def localize(self, dt: datetime) -> datetime:
        # Naive timestamps are taken as gym-local wall time
        if dt.tzinfo is None:
            return dt.replace(tzinfo=self.tz)
        return dt.astimezone(self.tz)

    def hours_for(self, weekday: int) -> Optional[DayHours]:
        return self.days.get(weekday)

    def is_open(self, dt: datetime) -> bool:
        local = self.localize(dt)
        hours = self.hours_for(local.weekday())
        if not hours:
            return False
        return hours.open <= local.hour < hours.close

    def slot_starts(self, start_date: date, end_date: date, duration_minutes: int = 60) -> Iterator[datetime]:
        """Yields gym-local slot start times for every open day in [start_date, end_date]."""
        step = timedelta(minutes=duration_minutes)
        day = start_date
        while day <= end_date:
            hours = self.hours_for(day.weekday())
            if hours:
                current = datetime.combine(day, time(hours.open), tzinfo=self.tz)
                if hours.close == 24:
                    closing = datetime.combine(day + timedelta(days=1), time(0), tzinfo=self.tz)
                else:
                    closing = datetime.combine(day, time(hours.close), tzinfo=self.tz)
                while current < closing:
                    yield current
                    current += step
            day += timedelta(days=1)

    def as_config(self) -> Dict[str, Optional[Dict[str, int]]]:
        return {
            name: (self.days[i].model_dump() if i in self.days else None)
            for i, name in enumerate(DAY_NAMES)
        }
