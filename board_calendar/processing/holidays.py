"""Read-only holiday events overlaid on the calendar."""

import logging
import re
from datetime import date, datetime, time, timedelta
from functools import partial
from pathlib import Path
from typing import Protocol

from icalendar import Calendar

from board_calendar.colors import holiday_color
from board_calendar.models.event import Event, HolidayType
from board_calendar.processing import hebrew_dates

logger = logging.getLogger(__name__)

MONDAY, FRIDAY, SATURDAY, SUNDAY = 0, 4, 5, 6

# Source holiday name -> (display title, type)
HOLIDAYS_CONFIG: dict[str, tuple[str, HolidayType]] = {
    # Modern
    "Yom HaShoah": ("יום השואה", HolidayType.MODERN),
    "Yom HaZikaron": ("יום הזיכרון", HolidayType.MODERN),
    "Yom HaAtzma'ut": ("יום העצמאות", HolidayType.MODERN),
    "Yom Yerushalayim": ("יום ירושלים", HolidayType.MODERN),
    # Major
    "Rosh Hashana": ("ראש השנה", HolidayType.MAJOR),
    "Rosh Hashana I": ("ראש השנה א'", HolidayType.MAJOR),
    "Rosh Hashana II": ("ראש השנה ב'", HolidayType.MAJOR),
    "Yom Kippur": ("יום כיפור", HolidayType.MAJOR),
    "Sukkot": ("סוכות", HolidayType.MAJOR),
    "Sukkot I": ("סוכות א'", HolidayType.MAJOR),
    "Sukkot II": ("סוכות ב'", HolidayType.MAJOR),
    "Sukkot VII (Hoshana Raba)": ("הושענא רבא", HolidayType.MAJOR),
    "Shmini Atzeret": ("שמיני עצרת", HolidayType.MAJOR),
    "Simchat Torah": ("שמחת תורה", HolidayType.MAJOR),
    "Pesach": ("פסח", HolidayType.MAJOR),
    "Pesach I": ("פסח א'", HolidayType.MAJOR),
    "Pesach VII": ("שביעי של פסח", HolidayType.MAJOR),
    "Shavuot": ("שבועות", HolidayType.MAJOR),
    "Shavuot I": ("שבועות", HolidayType.MAJOR),
    # Minor
    "Chanukah": ("חנוכה", HolidayType.MINOR),
    "Chanukah: 1 Candle": ("חנוכה - נר ראשון", HolidayType.MINOR),
    "Chanukah: 8 Candles": ("חנוכה - נר שמיני", HolidayType.MINOR),
    "Chanukah: 8th Day": ("זאת חנוכה", HolidayType.MINOR),
    "Purim": ("פורים", HolidayType.MINOR),
    "Shushan Purim": ("שושן פורים", HolidayType.MINOR),
    "Tu BiShvat": ("ט״ו בשבט", HolidayType.MINOR),
    "Lag BaOmer": ("ל״ג בעומר", HolidayType.MINOR),
    "Tu B'Av": ("ט״ו באב", HolidayType.MINOR),
    "Tish'a B'Av": ("תשעה באב", HolidayType.MINOR),
}

# Trailing Hebrew year, e.g. "Rosh Hashana 5785"
_YEAR_SUFFIX = re.compile(r"\s+\d{4}$")


def holiday_event(day: date, title: str, holiday_type: HolidayType) -> Event:
    """All-day read-only holiday with an exclusive next-day end."""
    start = datetime.combine(day, time(0, 0))
    return Event(
        id=f"holiday-{day.isoformat()}-{title}",
        title=title,
        start=start,
        end=start + timedelta(days=1),
        all_day=True,
        is_holiday=True,
        holiday_type=holiday_type,
        read_only=True,
        color=holiday_color(holiday_type),
    )


def lookup_holiday(name: str) -> tuple[str, HolidayType] | None:
    """Configured title and type for a source holiday name."""
    name = name.strip()
    if name in HOLIDAYS_CONFIG:
        return HOLIDAYS_CONFIG[name]
    return HOLIDAYS_CONFIG.get(_YEAR_SUFFIX.sub("", name))


def dedupe_holidays(holidays: list[Event]) -> list[Event]:
    """Keep the first holiday per (start, title)."""
    seen = set()
    unique = []
    for holiday in holidays:
        key = (holiday.start, holiday.title)
        if key in seen:
            continue
        seen.add(key)
        unique.append(holiday)
    return unique


class HolidaySource(Protocol):
    """Civil/religious calendar providing holidays for a year."""

    def holidays_for_year(self, year: int) -> list[Event]:
        ...


class ICSHolidaySource:
    """Holiday source reading an ICS feed.

    Only holidays named in ``HOLIDAYS_CONFIG`` are kept. The feed is
    parsed once; an unreadable feed yields no holidays.
    """

    def __init__(self, path: Path):
        self.path = path
        self._calendar: Calendar | None = None
        self._loaded = False

    def _load(self) -> Calendar | None:
        if self._loaded:
            return self._calendar
        self._loaded = True
        if not self.path.exists():
            logger.warning(f"Holiday calendar does not exist: {self.path}")
            return None
        try:
            content = self.path.read_text(encoding="utf-8")
            if not content.strip():
                logger.warning(f"Holiday calendar is empty: {self.path}")
                return None
            self._calendar = Calendar.from_ical(content)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read holiday calendar {self.path}: {e}")
            return None
        logger.info(f"Loaded holiday calendar: {self.path}")
        return self._calendar

    def holidays_for_year(self, year: int) -> list[Event]:
        cal = self._load()
        if cal is None:
            return []

        holidays = []
        for component in cal.walk():
            if component.name != "VEVENT":
                continue
            summary = component.get("summary")
            dtstart = component.get("dtstart")
            if summary is None or dtstart is None:
                continue
            config = lookup_holiday(str(summary))
            if config is None:
                continue
            day = dtstart.dt.date() if isinstance(dtstart.dt, datetime) else dtstart.dt
            if day.year != year:
                continue
            title, holiday_type = config
            holidays.append(holiday_event(day, title, holiday_type))

        holidays.sort(key=lambda h: h.start)
        return dedupe_holidays(holidays)


def _shift(day: date, moves: dict[int, int]) -> date:
    """Move ``day`` by the offset configured for its weekday."""
    return day + timedelta(days=moves.get(day.weekday(), 0))


def _hebrew_year_holidays(year: int) -> list[tuple[date, str]]:
    """(day, source name) for every configured holiday of a Hebrew year, Israel schedule."""
    day = partial(hebrew_dates.to_gregorian, year)
    chanukah = day(hebrew_dates.KISLEV, 24)
    purim_month = hebrew_dates.last_month(year)

    # Yom HaAtzma'ut never falls on Friday or Saturday, nor right after Shabbat.
    atzmaut = _shift(day(hebrew_dates.IYYAR, 5), {FRIDAY: -1, SATURDAY: -2, MONDAY: 1})

    return [
        (day(hebrew_dates.TISHRI, 1), f"Rosh Hashana {year}"),
        (day(hebrew_dates.TISHRI, 2), "Rosh Hashana II"),
        (day(hebrew_dates.TISHRI, 10), "Yom Kippur"),
        (day(hebrew_dates.TISHRI, 15), "Sukkot I"),
        (day(hebrew_dates.TISHRI, 21), "Sukkot VII (Hoshana Raba)"),
        (day(hebrew_dates.TISHRI, 22), "Shmini Atzeret"),
        (chanukah, "Chanukah: 1 Candle"),
        (chanukah + timedelta(days=7), "Chanukah: 8 Candles"),
        (chanukah + timedelta(days=8), "Chanukah: 8th Day"),
        (day(hebrew_dates.SHEVAT, 15), "Tu BiShvat"),
        (day(purim_month, 14), "Purim"),
        (day(purim_month, 15), "Shushan Purim"),
        (day(hebrew_dates.NISAN, 15), "Pesach I"),
        (day(hebrew_dates.NISAN, 21), "Pesach VII"),
        (_shift(day(hebrew_dates.NISAN, 27), {FRIDAY: -1, SUNDAY: 1}), "Yom HaShoah"),
        (atzmaut - timedelta(days=1), "Yom HaZikaron"),
        (atzmaut, "Yom HaAtzma'ut"),
        (day(hebrew_dates.IYYAR, 18), "Lag BaOmer"),
        (day(hebrew_dates.IYYAR, 28), "Yom Yerushalayim"),
        (day(hebrew_dates.SIVAN, 6), "Shavuot"),
        (_shift(day(hebrew_dates.AV, 9), {SATURDAY: 1}), "Tish'a B'Av"),
        (day(hebrew_dates.AV, 15), "Tu B'Av"),
    ]


class HebrewCalendarSource:
    """Holiday source computing Israeli holidays from the Hebrew calendar.

    Used when no ICS feed is configured. A civil year spans the end of
    one Hebrew year and the start of the next, so both are computed.
    """

    def holidays_for_year(self, year: int) -> list[Event]:
        holidays = []
        for hebrew_year in (year + hebrew_dates.YEAR_OFFSET - 1, year + hebrew_dates.YEAR_OFFSET):
            for day, name in _hebrew_year_holidays(hebrew_year):
                config = lookup_holiday(name)
                if day.year != year or config is None:
                    continue
                title, holiday_type = config
                holidays.append(holiday_event(day, title, holiday_type))

        holidays.sort(key=lambda h: h.start)
        return dedupe_holidays(holidays)


def default_holiday_source(path: Path | None = None) -> HolidaySource:
    """ICS feed at ``path`` when given, else the computed Hebrew calendar."""
    if path is not None:
        return ICSHolidaySource(path)
    return HebrewCalendarSource()


class HolidayOverlay:
    """Holidays for date ranges, cached per calendar year.

    Each year's entry is written once and never modified, so reading one
    year never waits on populating another.
    """

    def __init__(self, source: HolidaySource):
        self.source = source
        self._cache: dict[int, list[Event]] = {}

    def _year(self, year: int) -> list[Event]:
        cached = self._cache.get(year)
        if cached is None:
            logger.debug(f"Computing holidays for {year}")
            cached = self._cache.setdefault(year, dedupe_holidays(self.source.holidays_for_year(year)))
        return cached

    def holidays_between(self, start: date, end: date) -> list[Event]:
        """Holidays whose day falls within ``[start, end]`` (civil dates)."""
        start_day = start.date() if isinstance(start, datetime) else start
        end_day = end.date() if isinstance(end, datetime) else end
        if end_day < start_day:
            return []

        holidays = []
        for year in range(start_day.year, end_day.year + 1):
            holidays.extend(h for h in self._year(year) if start_day <= h.start.date() <= end_day)
        return holidays

    @property
    def cached_years(self) -> list[int]:
        return sorted(self._cache)

    def clear_cache(self) -> None:
        self._cache = {}
