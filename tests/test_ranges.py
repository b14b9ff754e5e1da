import pytest

from mediaserver import config
from mediaserver.ranges import RangeWindow, compute_range, parse_range_start


def test_no_range_header_serves_full_body():
    window = compute_range(None, 1_000_000)
    assert window == RangeWindow(0, 1_000_000, 0)
    assert not window.partial


def test_open_range_is_capped_to_chunk_size():
    window = compute_range("bytes=500000-", 1_000_000)
    assert window == RangeWindow(500_000, 500_000 + config.CHUNK_SIZE, 1_000_000)
    assert window.partial


def test_explicit_end_is_ignored_in_favour_of_chunk():
    assert compute_range("bytes=0-99", 1_000_000) == RangeWindow(0, config.CHUNK_SIZE, 1_000_000)


@pytest.mark.parametrize("start", [900_000, 999_999])
def test_range_reaching_total_ends_one_before(start):
    assert compute_range(f"bytes={start}-", 1_000_000) == RangeWindow(start, 999_999, 1_000_000)


def test_tiny_file_end_is_clamped_to_minimum():
    assert compute_range("bytes=0-", 10) == RangeWindow(0, config.MIN_RANGE_END, 10)


def test_token_may_appear_after_other_text():
    assert parse_range_start("x bytes=42-") == 42


@pytest.mark.parametrize("header", ["bytes=abc-", "bytes=-500", "items=0-10", "bytes=", "bytes= -1"])
def test_malformed_range_falls_back_to_full_body(header):
    assert compute_range(header, 5000) == RangeWindow(0, 5000, 0)


@pytest.mark.parametrize("start", [1_000_000, 2_000_000])
def test_start_at_or_past_end_serves_full_body(start):
    window = compute_range(f"bytes={start}-", 1_000_000)
    assert window == RangeWindow(0, 1_000_000, 0)
    assert window.start <= window.end <= 1_000_000


def test_range_on_empty_file_serves_full_body():
    assert compute_range("bytes=0-", 0) == RangeWindow(0, 0, 0)
