"""
Calendar-day normalisation for exam and student dates.

Dates reach the system in three shapes: ISO strings (``2024-05-06`` or a full
timestamp), spreadsheet serial numbers (``45418``) and a fixed list of textual
formats (``06-05-2024``, ``May 06, 2024``, ...). ``classify_date`` tags the raw
value with its shape and ``parse_calendar_day`` resolves any of them to a
``datetime.date``. Timestamps carrying an offset are converted to UTC before
the day is taken, so the same instant always lands on the same day.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta

import pytz
from django.utils.dateparse import parse_date, parse_datetime

# Spreadsheet serial day 0; 1899-12-30 absorbs the 1900 leap-year quirk.
SPREADSHEET_EPOCH = date(1899, 12, 30)

TEXT_DATE_FORMATS = (
    "%d-%m-%Y",
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%d %b %Y",
    "%b %d, %Y",
    "%d-%m-%y",
    "%m/%d/%y",
)

ACCEPTABLE_FORMATS = [
    "YYYY-MM-DD", "DD-MM-YYYY", "MM/DD/YYYY",
    "YYYY/MM/DD", "DD MMM YYYY", "MMM DD, YYYY",
]


class InvalidDateError(ValueError):
    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid date format - {value}")


@dataclass(frozen=True)
class IsoDate:
    text: str


@dataclass(frozen=True)
class SerialDate:
    serial: float


@dataclass(frozen=True)
class TextDate:
    text: str
    format: str


def classify_date(value):
    """Tag a raw value as IsoDate, SerialDate or TextDate.

    Raises InvalidDateError when the value matches none of them.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidDateError(value)
    if isinstance(value, (int, float)):
        if value <= 0:
            raise InvalidDateError(value)
        return SerialDate(float(value))

    text = str(value).strip()
    if not text:
        raise InvalidDateError(value)
    try:
        if parse_datetime(text) or parse_date(text):
            return IsoDate(text)
    except ValueError:
        # well formed but out of range, e.g. 2024-02-30
        raise InvalidDateError(value)

    for fmt in TEXT_DATE_FORMATS:
        try:
            datetime.strptime(text, fmt)
        except ValueError:
            continue
        return TextDate(text, fmt)
    raise InvalidDateError(value)


def _day_of_datetime(value):
    if value.tzinfo is not None:
        value = value.astimezone(pytz.utc)
    return value.date()


def resolve_calendar_day(parsed):
    if isinstance(parsed, IsoDate):
        moment = parse_datetime(parsed.text)
        if moment is not None:
            return _day_of_datetime(moment)
        return parse_date(parsed.text)
    if isinstance(parsed, SerialDate):
        try:
            return SPREADSHEET_EPOCH + timedelta(days=int(parsed.serial))
        except OverflowError:
            raise InvalidDateError(parsed.serial)
    if isinstance(parsed, TextDate):
        return datetime.strptime(parsed.text, parsed.format).date()
    raise TypeError(f"Unsupported date representation: {parsed!r}")


def parse_calendar_day(value):
    """Normalise any supported date representation to a ``datetime.date``."""
    if isinstance(value, datetime):
        return _day_of_datetime(value)
    if isinstance(value, date):
        return value
    return resolve_calendar_day(classify_date(value))


def calendar_day_or_none(value):
    try:
        return parse_calendar_day(value)
    except InvalidDateError:
        return None


def utc_midnight(day):
    return pytz.utc.localize(datetime(day.year, day.month, day.day))


def day_bounds(day):
    """[start, end) of a calendar day as aware UTC datetimes."""
    start = utc_midnight(day)
    return start, start + timedelta(days=1)
