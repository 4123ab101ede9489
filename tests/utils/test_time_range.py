"""Tests for time range resolution."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from collabbot.utils.time_range import (
    TimeRange,
    default_window,
    format_iso,
    parse_timestamp,
    resolve_deadline,
    resolve_time_range,
)


# Thursday
NOW = datetime(2024, 3, 7, 15, 0, tzinfo=timezone.utc)
MONDAY = datetime(2024, 3, 11, 10, 0, tzinfo=timezone.utc)


def _window(phrase, now=NOW):
    result = resolve_time_range(phrase, now)
    assert result is not None, phrase
    return result.start, result.end


class TestResolveTimeRange:
    """SUT: resolve_time_range"""

    class TestCalendarWords:
        """Calendar words resolve against the reference day."""

        def test_yesterday(self):
            """yesterday spans the previous calendar day."""
            assert _window("yesterday") == (datetime(2024, 3, 6), datetime(2024, 3, 7))

        def test_yesterday_in_sentence(self):
            """Phrases are found inside longer requests."""
            assert _window("What did we talk about Yesterday?") == (datetime(2024, 3, 6), datetime(2024, 3, 7))

        def test_today(self):
            """today runs from midnight to now."""
            assert _window("today") == (datetime(2024, 3, 7), datetime(2024, 3, 7, 15))

        def test_this_week(self):
            """this week starts on Monday."""
            assert _window("this week") == (datetime(2024, 3, 4), datetime(2024, 3, 7, 15))

        def test_last_week(self):
            """last week is the previous Monday-to-Monday span."""
            assert _window("last week") == (datetime(2024, 2, 26), datetime(2024, 3, 4))

        def test_last_month(self):
            """last month is the previous calendar month."""
            assert _window("last month") == (datetime(2024, 2, 1), datetime(2024, 3, 1))

        def test_this_morning(self):
            """this morning covers 06:00 to noon once noon has passed."""
            assert _window("this morning") == (datetime(2024, 3, 7, 6), datetime(2024, 3, 7, 12))

        def test_day_before_yesterday(self):
            """the day before yesterday is two days back."""
            assert _window("the day before yesterday") == (datetime(2024, 3, 5), datetime(2024, 3, 6))

    class TestRollingWindows:
        """Rolling windows end at now."""

        def test_past_three_days(self):
            """past 3 days is 72 hours back."""
            assert _window("past 3 days") == (datetime(2024, 3, 4, 15), datetime(2024, 3, 7, 15))

        def test_last_24_hours(self):
            """last 24 hours is one day back."""
            assert _window("last 24 hours") == (datetime(2024, 3, 6, 15), datetime(2024, 3, 7, 15))

        def test_past_hour(self):
            """A missing count means one unit."""
            assert _window("the past hour") == (datetime(2024, 3, 7, 14), datetime(2024, 3, 7, 15))

        def test_number_words(self):
            """Counts may be spelled out."""
            assert _window("last two days") == (datetime(2024, 3, 5, 15), datetime(2024, 3, 7, 15))

        def test_days_ago(self):
            """N days ago is that whole calendar day."""
            assert _window("2 days ago") == (datetime(2024, 3, 5), datetime(2024, 3, 6))

    class TestWeekdays:
        """Weekday names resolve to the most recent past occurrence."""

        def test_last_thursday_from_monday(self):
            """last Thursday seen from Monday is four days earlier."""
            assert _window("last Thursday", MONDAY) == (datetime(2024, 3, 7), datetime(2024, 3, 8))

        def test_last_thursday_on_thursday(self):
            """last Thursday on a Thursday is a week earlier."""
            assert _window("last thursday") == (datetime(2024, 2, 29), datetime(2024, 3, 1))

        def test_bare_weekday_on_same_day(self):
            """A bare weekday on that weekday means today, up to now."""
            assert _window("thursday") == (datetime(2024, 3, 7), datetime(2024, 3, 7, 15))

        def test_never_in_future(self):
            """friday seen from Thursday is the previous Friday."""
            start, end = _window("on friday")
            assert (start, end) == (datetime(2024, 3, 1), datetime(2024, 3, 2))
            assert end <= NOW.replace(tzinfo=None)

    class TestDates:
        """Explicit dates resolve to that calendar day."""

        def test_month_name(self):
            """March 5 is a full day."""
            assert _window("on March 5") == (datetime(2024, 3, 5), datetime(2024, 3, 6))

        def test_day_first(self):
            """5th of March is accepted."""
            assert _window("the 5th of march") == (datetime(2024, 3, 5), datetime(2024, 3, 6))

        def test_slash_date(self):
            """M/D is accepted."""
            assert _window("3/5") == (datetime(2024, 3, 5), datetime(2024, 3, 6))

        def test_iso_date(self):
            """ISO dates are accepted."""
            assert _window("2024-02-14") == (datetime(2024, 2, 14), datetime(2024, 2, 15))

        def test_yearless_future_date_uses_previous_year(self):
            """A year-less date later than now refers to last year."""
            assert _window("December 25") == (datetime(2023, 12, 25), datetime(2023, 12, 26))

        def test_invalid_date(self):
            """Impossible dates do not resolve."""
            assert resolve_time_range("2/30", NOW) is None

    class TestTimeZones:
        """Calendar boundaries follow the reference instant's zone."""

        def test_yesterday_in_new_york(self):
            """Midnight in New York is 05:00 UTC in March before DST."""
            now = NOW.astimezone(ZoneInfo("America/New_York"))
            assert _window("yesterday", now) == (datetime(2024, 3, 6, 5), datetime(2024, 3, 7, 5))

        def test_naive_now_is_utc(self):
            """A naive reference is read as UTC."""
            assert _window("yesterday", NOW.replace(tzinfo=None)) == (datetime(2024, 3, 6), datetime(2024, 3, 7))

    class TestUnrecognised:
        """Unknown phrases resolve to nothing."""

        def test_gibberish(self):
            """No time words means no range."""
            assert resolve_time_range("the budget discussion", NOW) is None

        def test_empty(self):
            """Empty and missing phrases resolve to nothing."""
            assert resolve_time_range("", NOW) is None
            assert resolve_time_range(None, NOW) is None

    def test_description_and_iso(self):
        """Results carry a description and millisecond ISO strings."""
        result = resolve_time_range("yesterday", NOW)
        assert result.description == "yesterday"
        assert result.start_iso == "2024-03-06T00:00:00.000Z"
        assert result.end_iso == "2024-03-07T00:00:00.000Z"


class TestResolveDeadline:
    """SUT: resolve_deadline"""

    def test_tomorrow(self):
        """tomorrow is the end of the next day."""
        assert resolve_deadline("tomorrow", NOW) == "2024-03-08T23:59:59.999Z"

    def test_end_of_week(self):
        """end of week is the coming Friday."""
        assert resolve_deadline("by end of week", NOW) == "2024-03-08T23:59:59.999Z"

    def test_next_week(self):
        """next week is the coming Monday."""
        assert resolve_deadline("next week", NOW) == "2024-03-11T23:59:59.999Z"

    def test_end_of_month(self):
        """end of month is the last day of the month."""
        assert resolve_deadline("end of month", NOW) == "2024-03-31T23:59:59.999Z"

    def test_weekday(self):
        """A weekday is its next occurrence."""
        assert resolve_deadline("next monday", NOW) == "2024-03-11T23:59:59.999Z"

    def test_slash_date_in_past_rolls_forward(self):
        """A passed M/D date means next year."""
        assert resolve_deadline("1/15", NOW) == "2025-01-15T23:59:59.999Z"

    def test_slash_date(self):
        """M/D in the future keeps this year."""
        assert resolve_deadline("3/15", NOW) == "2024-03-15T23:59:59.999Z"

    def test_iso_date(self):
        """ISO dates become end of day."""
        assert resolve_deadline("2024-04-01", NOW) == "2024-04-01T23:59:59.999Z"

    def test_iso_timestamp_kept(self):
        """Full ISO timestamps are normalised, not moved."""
        assert resolve_deadline("2024-04-01T10:00:00Z", NOW) == "2024-04-01T10:00:00.000Z"

    def test_end_of_day_follows_zone(self):
        """End of day is local to the reference zone."""
        now = NOW.astimezone(ZoneInfo("America/New_York"))
        assert resolve_deadline("tomorrow", now) == "2024-03-09T04:59:59.999Z"

    def test_unknown(self):
        """Unrecognised expressions give None."""
        assert resolve_deadline("whenever", NOW) is None
        assert resolve_deadline("", NOW) is None


class TestHelpers:
    """Tests for the timestamp helpers."""

    def test_parse_timestamp_z_suffix(self):
        """A trailing Z parses as UTC."""
        assert parse_timestamp("2024-03-06T10:00:00.000Z") == datetime(2024, 3, 6, 10)

    def test_parse_timestamp_offset(self):
        """Offsets are converted to naive UTC."""
        assert parse_timestamp("2024-03-06T10:00:00+02:00") == datetime(2024, 3, 6, 8)

    def test_parse_timestamp_empty(self):
        """Empty values parse to None."""
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None

    def test_format_iso(self):
        """format_iso emits milliseconds and Z."""
        assert format_iso(datetime(2024, 3, 6, 10, 5, 7, 123456)) == "2024-03-06T10:05:07.123Z"

    def test_default_window(self):
        """The default window is the last 24 hours."""
        window = default_window(NOW)
        assert isinstance(window, TimeRange)
        assert (window.start, window.end) == (datetime(2024, 3, 6, 15), datetime(2024, 3, 7, 15))
