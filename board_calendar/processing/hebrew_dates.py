"""Hebrew calendar arithmetic.

Dates are converted through fixed day numbers, which are the proleptic
Gregorian ordinals of ``date.toordinal()``. The year length rules are the
arithmetic calendar of molad Tishri and its postponements.
"""

from datetime import date
from functools import lru_cache

NISAN = 1
IYYAR = 2
SIVAN = 3
TAMMUZ = 4
AV = 5
ELUL = 6
TISHRI = 7
MARHESHVAN = 8
KISLEV = 9
TEVET = 10
SHEVAT = 11
ADAR = 12
ADAR_II = 13

# Fixed day of 1 Tishri AM 1 (7 October 3761 BCE, Julian)
HEBREW_EPOCH = -1373427

# Hebrew year = Gregorian year + YEAR_OFFSET from 1 Tishri onwards
YEAR_OFFSET = 3761


def is_leap_year(year: int) -> bool:
    return (7 * year + 1) % 19 < 7


def last_month(year: int) -> int:
    return ADAR_II if is_leap_year(year) else ADAR


def _elapsed_days(year: int) -> int:
    """Days from the epoch to the molad Tishri of ``year``, with the weekday postponement."""
    months_elapsed = (235 * year - 234) // 19
    parts_elapsed = 12084 + 13753 * months_elapsed
    days = 29 * months_elapsed + parts_elapsed // 25920
    return days + 1 if (3 * (days + 1)) % 7 < 3 else days


def _year_length_correction(year: int) -> int:
    previous, current, following = (_elapsed_days(y) for y in (year - 1, year, year + 1))
    if following - current == 356:
        return 2
    if current - previous == 382:
        return 1
    return 0


@lru_cache(maxsize=256)
def new_year(year: int) -> int:
    """Fixed day of 1 Tishri."""
    return HEBREW_EPOCH + _elapsed_days(year) + _year_length_correction(year)


def days_in_year(year: int) -> int:
    return new_year(year + 1) - new_year(year)


def days_in_month(year: int, month: int) -> int:
    length = days_in_year(year)
    if month in (IYYAR, TAMMUZ, ELUL, TEVET, ADAR_II):
        return 29
    if month == ADAR and not is_leap_year(year):
        return 29
    if month == MARHESHVAN and length not in (355, 385):
        return 29
    if month == KISLEV and length in (353, 383):
        return 29
    return 30


def to_fixed(year: int, month: int, day: int) -> int:
    """Fixed day number of a Hebrew date. Months count from Nisan."""
    fixed = new_year(year) + day - 1
    if month < TISHRI:
        fixed += sum(days_in_month(year, m) for m in range(TISHRI, last_month(year) + 1))
        fixed += sum(days_in_month(year, m) for m in range(NISAN, month))
    else:
        fixed += sum(days_in_month(year, m) for m in range(TISHRI, month))
    return fixed


def to_gregorian(year: int, month: int, day: int) -> date:
    return date.fromordinal(to_fixed(year, month, day))
