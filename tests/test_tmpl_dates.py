from datetime import date as _date, datetime, timedelta, timezone

import pytest
from tmpl.tmpl_datatypes import ParseError, TypeMismatch
from tmpl.tmpl_dates import (
    SECOND, MINUTE, HOUR, DAY, ZERO_TIME,
    parse_duration, format_duration, now, date, date_in_zone, html_date, html_date_in_zone,
    must_date_modify, date_modify, date_ago, duration, duration_round,
    must_to_date, to_date, unix_epoch,
)

T = datetime(2021, 3, 4, 5, 6, 7, tzinfo=timezone.utc)


@pytest.mark.parametrize("text, ns", [
    ("0", 0),
    ("1h30m", 90 * MINUTE),
    ("1.5h", 90 * MINUTE),
    ("-15m", -15 * MINUTE),
    ("+2s", 2 * SECOND),
    ("300ms", 300_000_000),
    ("10us", 10_000),
    ("10µs", 10_000),
    ("7ns", 7),
    ("1h1m1s", HOUR + MINUTE + SECOND),
])
def test_parse_duration(text, ns):
    assert parse_duration(text) == ns


@pytest.mark.parametrize("text", ["", "5", "1x", "h", "1.2.3s", "-"])
def test_parse_duration_rejects_malformed_text(text):
    with pytest.raises(ParseError):
        parse_duration(text)


@pytest.mark.parametrize("ns, text", [
    (0, "0s"),
    (7, "7ns"),
    (1_500, "1.5µs"),
    (1_500_000, "1.5ms"),
    (SECOND, "1s"),
    (90 * SECOND, "1m30s"),
    (HOUR, "1h0m0s"),
    (72 * HOUR + 3 * MINUTE + SECOND // 2, "72h3m0.5s"),
    (-15 * MINUTE, "-15m0s"),
])
def test_format_duration(ns, text):
    assert format_duration(ns) == text


def test_now_is_aware():
    assert now().tzinfo is not None


def test_date_in_zone():
    assert date_in_zone("%Y-%m-%d %H:%M:%S", T, "UTC") == "2021-03-04 05:06:07"
    assert date_in_zone("%Y-%m-%d", 0, "UTC") == "1970-01-01"
    assert date_in_zone("%H:%M", 90, "") == "00:01"


def test_unknown_zone_falls_back_to_utc():
    assert date_in_zone("%H:%M", T, "Nowhere/Land") == "05:06"


def test_local_date_helpers_agree():
    local = T.astimezone()
    assert date("%Y-%m-%d %H:%M", T) == local.strftime("%Y-%m-%d %H:%M")
    assert html_date(T) == local.strftime("%Y-%m-%d")


def test_html_date_in_zone():
    assert html_date_in_zone(T, "UTC") == "2021-03-04"
    assert html_date_in_zone(_date(2020, 2, 29), "Local") == "2020-02-29"


def test_date_modify():
    assert date_modify("-1h30m", T) == T - timedelta(minutes=90)
    assert date_modify("24h", T) == T + timedelta(days=1)
    assert date_modify("1.5s", T) == T + timedelta(seconds=1.5)


def test_date_modify_leaves_time_unchanged_on_bad_duration():
    assert date_modify("soon", T) is T
    value, err = must_date_modify("soon", T)
    assert value is None
    assert isinstance(err, ParseError)


def test_must_date_modify_rejects_non_dates():
    out = must_date_modify("1h", "yesterday")
    assert isinstance(out.error, TypeMismatch)


def test_date_ago():
    assert date_ago(now() - timedelta(seconds=65)) == "1m5s"
    assert date_ago(now()) == "0s"


@pytest.mark.parametrize("sec, text", [
    (3600, "1h0m0s"),
    ("90", "1m30s"),
    (1.9, "1s"),
    (None, "0s"),
    ("soon", "0s"),
])
def test_duration(sec, text):
    assert duration(sec) == text


@pytest.mark.parametrize("value, text", [
    ("2h", "2h"),
    ("-3h", "3h"),
    ("1h", "60m"),
    ("90s", "1m"),
    (400 * DAY, "1y"),
    (45 * DAY, "1mo"),
    (3 * DAY, "3d"),
    (0, "0s"),
    ("soon", "0s"),
    (None, "0s"),
])
def test_duration_round(value, text):
    assert duration_round(value) == text


def test_duration_round_of_datetime_uses_time_since():
    assert duration_round(now() - timedelta(days=3, hours=1)) == "3d"


def test_to_date():
    parsed = to_date("%Y-%m-%d", "2020-02-03")
    assert (parsed.year, parsed.month, parsed.day) == (2020, 2, 3)
    assert parsed.tzinfo is not None


def test_to_date_returns_zero_time_on_error():
    assert to_date("%Y-%m-%d", "not a date") == ZERO_TIME
    assert ZERO_TIME.isoformat() == "0001-01-01T00:00:00+00:00"
    out = must_to_date("%Y-%m-%d", "not a date")
    assert isinstance(out.error, ParseError)


def test_unix_epoch():
    assert unix_epoch(datetime(1970, 1, 2, tzinfo=timezone.utc)) == "86400"
    assert unix_epoch(T) == "1614834367"
    assert unix_epoch(0) == "0"


@pytest.mark.parametrize("text", ["2562048h", "-20000000h", "9223372036854775808ns"])
def test_parse_duration_rejects_out_of_range(text):
    with pytest.raises(ParseError):
        parse_duration(text)


def test_parse_duration_accepts_int64_bounds():
    assert parse_duration("9223372036854775807ns") == 2**63 - 1
    assert parse_duration("-9223372036854775808ns") == -(2**63)


def test_date_modify_out_of_range_leaves_time_unchanged():
    assert date_modify("-20000000h", T) is T
    assert isinstance(must_date_modify("-20000000h", T).error, ParseError)
    earliest = datetime(1, 1, 1, tzinfo=timezone.utc)
    assert date_modify("-1h", earliest) is earliest
    assert isinstance(must_date_modify("-1h", earliest).error, TypeMismatch)
