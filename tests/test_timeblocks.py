"""Tests for splitting lesson ranges into hourly blocks."""

import math

import pytest
from pydantic import ValidationError

from registro_formazione.dates import parse_time
from registro_formazione.models import ExclusionWindow
from registro_formazione.timeblocks import (
    LUNCH_BREAK,
    duration_hours,
    format_hours,
    split_into_hourly_blocks,
)


def _spans(blocks):
    return [(b.start, b.end) for b in blocks]


class TestLunchBreak:
    """Blocks overlapping 13:00-14:00 are dropped whole."""

    def test_full_day_skips_lunch_hour(self):
        blocks = split_into_hourly_blocks("09:00", "17:00", LUNCH_BREAK)

        assert _spans(blocks) == [
            ("09:00", "10:00"),
            ("10:00", "11:00"),
            ("11:00", "12:00"),
            ("12:00", "13:00"),
            ("14:00", "15:00"),
            ("15:00", "16:00"),
            ("16:00", "17:00"),
        ]
        assert all(b.duration == "1" for b in blocks)

    def test_afternoon_is_unaffected(self):
        blocks = split_into_hourly_blocks("14:00", "18:00", LUNCH_BREAK)

        assert _spans(blocks) == [
            ("14:00", "15:00"),
            ("15:00", "16:00"),
            ("16:00", "17:00"),
            ("17:00", "18:00"),
        ]

    def test_partially_overlapping_blocks_disappear(self):
        # 12:30-13:30 and 13:30-14:30 both touch the break
        blocks = split_into_hourly_blocks("12:30", "15:30", LUNCH_BREAK)

        assert _spans(blocks) == [("14:30", "15:30")]

    def test_no_block_overlaps_exclusion(self):
        blocks = split_into_hourly_blocks("08:15", "18:45", LUNCH_BREAK)
        lunch_start, lunch_end = parse_time("13:00"), parse_time("14:00")

        for block in blocks:
            assert not (parse_time(block.start) < lunch_end and parse_time(block.end) > lunch_start)

    def test_custom_window(self):
        window = ExclusionWindow(start="12:00", end="13:00")
        blocks = split_into_hourly_blocks("10:00", "15:00", window)

        assert _spans(blocks) == [
            ("10:00", "11:00"),
            ("11:00", "12:00"),
            ("13:00", "14:00"),
            ("14:00", "15:00"),
        ]

    def test_without_exclusion_every_hour_is_kept(self):
        assert len(split_into_hourly_blocks("09:00", "17:00")) == 8


class TestCoverage:
    """Without exclusion the blocks tile [start, end) exactly."""

    @pytest.mark.parametrize(
        "start,end",
        [("09:00", "12:00"), ("08:30", "11:00"), ("14:10", "14:50"), ("7:00", "19:20")],
    )
    def test_blocks_cover_range(self, start, end):
        blocks = split_into_hourly_blocks(start, end)
        minutes = parse_time(end) - parse_time(start)

        assert len(blocks) == math.ceil(minutes / 60)
        assert parse_time(blocks[0].start) == parse_time(start)
        assert parse_time(blocks[-1].end) == parse_time(end)
        for current, following in zip(blocks, blocks[1:]):
            assert current.end == following.start

    def test_start_is_zero_padded(self):
        blocks = split_into_hourly_blocks("9:00", "10:00")

        assert _spans(blocks) == [("09:00", "10:00")]


class TestPartialHours:
    """A trailing block shorter than an hour carries its real duration."""

    def test_short_range_yields_one_partial_block(self):
        blocks = split_into_hourly_blocks("09:00", "09:40")

        assert len(blocks) == 1
        assert (blocks[0].start, blocks[0].end, blocks[0].duration) == ("09:00", "09:40", "0.67")

    def test_trailing_half_hour(self):
        blocks = split_into_hourly_blocks("09:30", "12:00", LUNCH_BREAK)

        assert [(b.start, b.end, b.duration) for b in blocks] == [
            ("09:30", "10:30", "1"),
            ("10:30", "11:30", "1"),
            ("11:30", "12:00", "0.5"),
        ]

    @pytest.mark.parametrize(
        "minutes,label", [(60, "1"), (30, "0.5"), (40, "0.67"), (45, "0.75"), (540, "9")]
    )
    def test_format_hours(self, minutes, label):
        assert format_hours(minutes) == label


class TestMalformedInput:
    """Bad input degrades to an empty list, never an exception."""

    @pytest.mark.parametrize(
        "start,end",
        [
            ("9", "10:00"),
            ("", "10:00"),
            ("09:00", ""),
            (None, "10:00"),
            ("25:00", "26:00"),
            ("09:60", "10:00"),
            ("10:00", "10:00"),
            ("11:00", "10:00"),
            ("nove", "dieci"),
            ("09:00:00", "10:00:00"),
            ("٠٩:٠٠", "١٠:٠٠"),
        ],
    )
    def test_returns_empty(self, start, end):
        assert split_into_hourly_blocks(start, end, LUNCH_BREAK) == []

    def test_duration_hours_of_invalid_range(self):
        assert duration_hours("10:00", "09:00") == 0.0
        assert duration_hours("09:00", "10:30") == 1.5


class TestExclusionWindow:
    def test_rejects_malformed_times(self):
        with pytest.raises(ValidationError):
            ExclusionWindow(start="1300", end="14:00")

    def test_rejects_inverted_window(self):
        with pytest.raises(ValidationError):
            ExclusionWindow(start="14:00", end="13:00")

    def test_overlap_is_half_open(self):
        assert not LUNCH_BREAK.overlaps(parse_time("12:00"), parse_time("13:00"))
        assert not LUNCH_BREAK.overlaps(parse_time("14:00"), parse_time("15:00"))
        assert LUNCH_BREAK.overlaps(parse_time("12:59"), parse_time("13:01"))
