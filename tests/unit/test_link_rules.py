from datetime import datetime, timezone, timedelta

import pytest

from shorturlapi.core.link_rules import MAX_URL_LENGTH, as_utc, expiry_errors, is_expired, url_errors


def test_is_expired_false_when_no_expires_at():
    now = datetime.now(timezone.utc)
    assert is_expired(None, now) is False


def test_is_expired_true_when_now_is_past_expires_at():
    now = datetime.now(timezone.utc)
    expires_at = now - timedelta(seconds=1)
    assert is_expired(expires_at, now) is True


def test_is_expired_true_when_equal_boundary():
    now = datetime.now(timezone.utc)
    assert is_expired(now, now) is True


def test_is_expired_false_when_expiry_in_future():
    now = datetime.now(timezone.utc)
    assert is_expired(now + timedelta(minutes=1), now) is False


def test_as_utc_tags_naive_datetimes_as_utc():
    naive = datetime(2026, 5, 1, 8, 30)
    assert as_utc(naive) == datetime(2026, 5, 1, 8, 30, tzinfo=timezone.utc)


def test_as_utc_converts_other_offsets():
    plus_two = timezone(timedelta(hours=2))
    value = datetime(2026, 5, 1, 10, 0, tzinfo=plus_two)
    converted = as_utc(value)
    assert converted.tzinfo == timezone.utc
    assert converted.hour == 8


def test_as_utc_passes_none_through():
    assert as_utc(None) is None


@pytest.mark.parametrize(
    "good_url",
    [
        "http://example.com",
        "https://example.com/path?q=1",
        "https://sub.example.co.uk:8443/a/b#frag",
    ],
)
def test_url_errors_accepts_http_https_urls(good_url: str):
    assert url_errors(good_url) == []


@pytest.mark.parametrize(
    "bad_url",
    [
        "example.com",
        "ftp://example.com",
        "javascript:alert(1)",
        "://missing.scheme",
        "http://",
    ],
)
def test_url_errors_rejects_non_absolute_http_urls(bad_url: str):
    assert url_errors(bad_url) == ["The url must be a valid absolute http or https URL."]


@pytest.mark.parametrize("missing", [None, "", "   ", 42])
def test_url_errors_requires_a_string(missing):
    assert url_errors(missing) == ["The url field is required."]


def test_url_errors_enforces_max_length():
    url = "https://example.com/" + "a" * MAX_URL_LENGTH
    assert url_errors(url) == [f"The url may not be greater than {MAX_URL_LENGTH} characters."]


def test_url_errors_accepts_url_at_max_length():
    prefix = "https://example.com/"
    url = prefix + "a" * (MAX_URL_LENGTH - len(prefix))
    assert len(url) == MAX_URL_LENGTH
    assert url_errors(url) == []


def test_url_errors_uses_given_field_name():
    assert url_errors("nope", field="original_url") == [
        "The original_url must be a valid absolute http or https URL."
    ]


def test_expiry_errors_none_is_fine():
    assert expiry_errors(None, datetime.now(timezone.utc)) == []


def test_expiry_errors_rejects_past_and_now():
    now = datetime.now(timezone.utc)
    assert expiry_errors(now - timedelta(seconds=1), now)
    assert expiry_errors(now, now)


def test_expiry_errors_accepts_future():
    now = datetime.now(timezone.utc)
    assert expiry_errors(now + timedelta(seconds=1), now) == []
