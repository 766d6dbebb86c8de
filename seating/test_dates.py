from datetime import date, datetime

import pytz
from django.test import SimpleTestCase

from seating.dates import (
    InvalidDateError,
    IsoDate,
    SerialDate,
    TextDate,
    calendar_day_or_none,
    classify_date,
    day_bounds,
    parse_calendar_day,
    utc_midnight,
)


class ClassifyDateTests(SimpleTestCase):
    def test_shapes(self):
        self.assertEqual(classify_date("2024-05-06"), IsoDate("2024-05-06"))
        self.assertEqual(classify_date(45418), SerialDate(45418.0))
        self.assertEqual(classify_date("06-05-2024"), TextDate("06-05-2024", "%d-%m-%Y"))

    def test_rejects_unparseable_values(self):
        for value in ["not a date", "", "   ", None, True, 0, -3, "2024-02-30"]:
            with self.subTest(value=value):
                with self.assertRaises(InvalidDateError):
                    classify_date(value)


class ParseCalendarDayTests(SimpleTestCase):
    def test_iso_day_and_timestamp(self):
        self.assertEqual(parse_calendar_day("2024-05-06"), date(2024, 5, 6))
        self.assertEqual(parse_calendar_day("2024-05-06T09:30:00"), date(2024, 5, 6))

    def test_offset_timestamp_takes_utc_day(self):
        # 23:30 at UTC-2 is 01:30 the next day in UTC
        self.assertEqual(parse_calendar_day("2024-05-06T23:30:00-02:00"), date(2024, 5, 7))
        moment = pytz.timezone("Asia/Kolkata").localize(datetime(2024, 5, 7, 3, 0))
        self.assertEqual(parse_calendar_day(moment), date(2024, 5, 6))

    def test_spreadsheet_serial(self):
        self.assertEqual(parse_calendar_day(45418), date(2024, 5, 6))
        self.assertEqual(parse_calendar_day(45418.75), date(2024, 5, 6))

    def test_text_formats(self):
        self.assertEqual(parse_calendar_day("06-05-2024"), date(2024, 5, 6))
        self.assertEqual(parse_calendar_day("05/06/2024"), date(2024, 5, 6))
        self.assertEqual(parse_calendar_day("2024/05/06"), date(2024, 5, 6))
        self.assertEqual(parse_calendar_day("06 May 2024"), date(2024, 5, 6))
        self.assertEqual(parse_calendar_day("May 06, 2024"), date(2024, 5, 6))

    def test_date_passes_through(self):
        self.assertEqual(parse_calendar_day(date(2024, 5, 6)), date(2024, 5, 6))

    def test_or_none(self):
        self.assertIsNone(calendar_day_or_none("garbage"))
        self.assertIsNone(calendar_day_or_none(None))


class DayBoundsTests(SimpleTestCase):
    def test_midnight_utc(self):
        start = utc_midnight(date(2024, 5, 6))
        self.assertEqual(start, datetime(2024, 5, 6, tzinfo=pytz.utc))

    def test_bounds_cover_one_day(self):
        start, end = day_bounds(date(2024, 5, 6))
        self.assertEqual(start, datetime(2024, 5, 6, tzinfo=pytz.utc))
        self.assertEqual(end, datetime(2024, 5, 7, tzinfo=pytz.utc))
