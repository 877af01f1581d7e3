from __future__ import annotations

import pytest

from mediafocus.domain.enums.frame_type import FrameType
from mediafocus.services.frames.parser import FrameLineParser, is_frame_line, parse_lines


def test_frame_line_scenario():
    rec = FrameLineParser().parse_line("n:120 pts_time:4.000 type:I iskey:1 pkt_size:51200")
    assert rec is not None
    assert rec.frame_number == 120
    assert rec.presentation_time_seconds == 4.0
    assert rec.frame_type == FrameType.I
    assert rec.is_key_frame is True
    assert rec.size_bytes == 51200
    assert rec.estimated_bitrate_kbps == pytest.approx(12288.0)


def test_showinfo_line(make_showinfo_line):
    rec = FrameLineParser(24.0).parse_line(make_showinfo_line(12, frame_type="B", size=2048))
    assert rec.frame_number == 12
    assert rec.presentation_time_seconds == pytest.approx(0.5)
    assert rec.frame_type == FrameType.B
    assert rec.is_key_frame is False
    assert rec.size_bytes == 2048
    assert rec.estimated_bitrate_kbps == pytest.approx(2048 * 8 * 24 / 1000)


def test_defaults_for_missing_attributes():
    rec = FrameLineParser().parse_line("n:60")
    assert rec.frame_type == FrameType.P
    assert rec.is_key_frame is False
    assert rec.presentation_time_seconds == pytest.approx(2.0)
    assert rec.size_bytes is None
    assert rec.estimated_bitrate_kbps is None


def test_key_flag_defaults_from_type():
    rec = FrameLineParser().parse_line("n:3 type:I")
    assert rec.is_key_frame is True


def test_alternate_attribute_spellings():
    rec = FrameLineParser().parse_line("n:7 pict_type=B key_frame=1 pkt_size=100")
    assert rec.frame_type == FrameType.B
    assert rec.is_key_frame is True
    assert rec.size_bytes == 100


def test_frame_zero_has_no_bitrate():
    rec = FrameLineParser().parse_line("n:0 pts_time:0 type:I iskey:1 pkt_size:51200")
    assert rec.estimated_bitrate_kbps is None


@pytest.mark.parametrize(
    "line",
    [
        "",
        "  Duration: 00:01:30.50, start: 0.000000, bitrate: 4194 kb/s",
        "Stream #0:0(und): Video: h264 (High), yuv420p, 1920x1080, 24 fps",
        "Press [q] to stop, [?] for help",
    ],
)
def test_non_frame_lines_are_ignored(line):
    assert not is_frame_line(line)
    assert FrameLineParser().parse_line(line) is None


def test_malformed_frame_lines_are_counted_not_raised():
    seen = []
    p = FrameLineParser(on_malformed=seen.append)
    assert p.feed("n: pts_time:1.0 type:P") is None
    assert p.feed("n:abc") is None
    assert p.malformed_lines == 2
    assert p.frame_lines == 2
    assert len(seen) == 2
    assert len(p) == 0


def test_duplicate_frame_number_overwrites():
    p = FrameLineParser()
    p.feed("n:10 type:P pkt_size:100")
    p.feed("n:10 type:B pkt_size:200")
    assert p.duplicates == 1
    (only,) = p.frames()
    assert only.frame_type == FrameType.B
    assert only.size_bytes == 200


def test_frames_sorted_by_number():
    frames = parse_lines(["n:3", "n:1", "noise", "n:2"])
    assert [f.frame_number for f in frames] == [1, 2, 3]


def test_true_rate_changes_derived_values():
    p = FrameLineParser()
    assert p.frame_rate_assumed
    p.set_frame_rate(25.0)
    assert not p.frame_rate_assumed
    rec = p.parse_line("n:50 pkt_size:1000")
    assert rec.presentation_time_seconds == pytest.approx(2.0)
    assert rec.estimated_bitrate_kbps == pytest.approx(200.0)


def test_set_frame_rate_ignores_unknown():
    p = FrameLineParser(24.0)
    p.set_frame_rate(None)
    p.set_frame_rate(0)
    assert p.frame_rate == 24.0


def test_assumed_rate_must_be_positive():
    with pytest.raises(ValueError):
        FrameLineParser(assumed_frame_rate=0)


def test_refeeding_identical_line_changes_nothing():
    line = "n:42 pts_time:1.75 type:B iskey:0 pkt_size:3000"
    p = FrameLineParser(24.0)
    p.feed("n:41 type:P")
    p.feed(line)
    before = p.frames()
    p.feed(line)
    assert p.frames() == before
    assert len(p) == 2


@pytest.mark.parametrize(
    "line, expected",
    [
        ("[Parsed_showinfo_0 @ 0x1] n:5 pts:0", True),
        ("n:0", True),
        ("Duration: 00:00:01.00", False),
        ("version:3 n:", True),
        ("x.n:3", False),
        ("pn:3", False),
    ],
)
def test_frame_marker(line, expected):
    assert is_frame_line(line) is expected
