from __future__ import annotations

import pytest

from mediafocus.domain.entities.media import MediaMetadata, VideoStream
from mediafocus.domain.policies.progress import ProgressEstimator, estimate_total


def _metadata(duration=None, fps=None) -> MediaMetadata:
    from datetime import datetime, timezone

    return MediaMetadata(
        file_name="clip.mp4",
        file_size_bytes=1,
        mime_type="video/mp4",
        last_modified_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        duration_seconds=duration,
        video=VideoStream(frame_rate_fps=fps) if fps is not None else None,
    )


def test_estimate_total_from_duration_and_fps():
    assert estimate_total(_metadata(90.5, 24.0)) == 2172
    assert estimate_total(_metadata(10.0, 29.97)) == 300


@pytest.mark.parametrize("md", [None, _metadata(), _metadata(90.5, None), _metadata(None, 24.0), _metadata(0.0, 24.0)])
def test_estimate_total_falls_back(md):
    assert estimate_total(md) == 1000
    assert estimate_total(md, fallback=42) == 42


def test_thousand_frames_report_every_fifty_and_stay_below_hundred():
    est = ProgressEstimator(1000)
    emitted = [s for s in (est.on_frame_observed(n) for n in range(1000)) if s is not None]

    assert [s.processed_frames for s in emitted] == list(range(0, 1000, 50))
    assert all(0 <= s.percent <= 99 for s in emitted)
    assert emitted[-1].percent == 95

    done = est.complete()
    assert done is not None and done.percent == 100
    assert done.processed_frames == 1000
    assert est.complete() is None


def test_overshoot_is_clamped():
    est = ProgressEstimator(100)
    snap = est.on_frame_observed(250)
    assert snap is not None and snap.percent == 99


def test_same_frame_never_reported_twice():
    est = ProgressEstimator(1000)
    assert est.on_frame_observed(50) is not None
    assert est.on_frame_observed(50) is None


def test_non_multiples_are_silent():
    est = ProgressEstimator(1000)
    assert all(est.on_frame_observed(n) is None for n in (1, 49, 51, 99))


def test_nothing_after_completion():
    est = ProgressEstimator(1000)
    est.complete()
    assert est.on_frame_observed(100) is None


def test_retarget_changes_denominator():
    est = ProgressEstimator(1000)
    est.retarget(200)
    snap = est.on_frame_observed(100)
    assert snap.estimated_total_frames == 200
    assert snap.percent == 50


def test_report_every_must_be_positive():
    with pytest.raises(ValueError):
        ProgressEstimator(100, report_every=0)
