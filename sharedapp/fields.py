from rest_framework import serializers

from seating.dates import ACCEPTABLE_FORMATS, InvalidDateError, parse_calendar_day, utc_midnight


class CalendarDayField(serializers.Field):
    """
    Accepts any supported date representation and stores the calendar day as
    midnight UTC. Renders back as ``YYYY-MM-DD``.
    """

    default_error_messages = {
        "invalid": "Invalid date format - {value}. Acceptable formats: {formats}",
    }

    def to_internal_value(self, data):
        try:
            day = parse_calendar_day(data)
        except InvalidDateError:
            self.fail("invalid", value=data, formats=", ".join(ACCEPTABLE_FORMATS))
        return utc_midnight(day)

    def to_representation(self, value):
        if value is None:
            return None
        return parse_calendar_day(value).isoformat()
