import pytest

from futurefind_client.utils.helpers import format_duration, truncate_text


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(None, "unknown"), (59, "59s"), (65, "1m 5s"), (3605, "1h 0m 5s"), (90000, "1d 1h 0m 0s")],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_truncate_text():
    assert truncate_text("  hi  ", 10) == "hi"
    assert truncate_text("   ", 10) is None
    assert truncate_text("x" * 10, 10) is None
