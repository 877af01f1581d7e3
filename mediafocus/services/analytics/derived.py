# mediafocus/services/analytics/derived.py
from __future__ import annotations

from collections import defaultdict
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from mediafocus.domain.dataclasses.analytics import BitrateSeries, FrameAnalytics, FrameTypeBuckets
from mediafocus.domain.dataclasses.outcome import NotApplicable, Outcome
from mediafocus.domain.entities.frame import LAYOUT_MODULUS, FrameRecord
from mediafocus.domain.entities.media import MediaMetadata
from mediafocus.domain.enums.frame_type import FrameType

ASSUMED_FRAME_RATE = 30.0


# ---- per-frame bitrate -------------------------------------------------------------
def estimate_frame_bitrate_kbps(size_bytes: Optional[int], frame_rate: float = ASSUMED_FRAME_RATE) -> Optional[float]:
    """size * 8 / frame_duration, with frame_duration = 1 / frame_rate. In kb/s (1000 bits)."""
    if size_bytes is None or frame_rate <= 0:
        return None
    return size_bytes * 8 * frame_rate / 1000.0


def resolve_frame_rate(
    metadata: Optional[MediaMetadata],
    *,
    prefer_true_frame_rate: bool = True,
    assumed_frame_rate: float = ASSUMED_FRAME_RATE,
) -> Tuple[float, bool]:
    """(rate, assumed?) - the probed rate when known and preferred, else the assumed one."""
    fps = metadata.frame_rate_fps if metadata else None
    if prefer_true_frame_rate and fps and fps > 0:
        return fps, False
    return assumed_frame_rate, True


def apply_bitrate_estimates(frames: Sequence[FrameRecord], frame_rate: float) -> Tuple[FrameRecord, ...]:
    """Recompute estimated_bitrate_kbps with `frame_rate`. Frame 0 and unknown sizes stay unset."""
    out: List[FrameRecord] = []
    for frame in frames:
        kbps = estimate_frame_bitrate_kbps(frame.size_bytes, frame_rate) if frame.frame_number > 0 else None
        if kbps == frame.estimated_bitrate_kbps:
            out.append(frame)
        else:
            out.append(replace(frame, estimated_bitrate_kbps=kbps))
    return tuple(out)


def bitrate_series(frames: Iterable[FrameRecord]) -> BitrateSeries:
    points = tuple(
        (f.frame_number, f.estimated_bitrate_kbps)
        for f in frames
        if f.estimated_bitrate_kbps is not None
    )
    if not points:
        return BitrateSeries()
    values = [kbps for _, kbps in points]
    return BitrateSeries(
        points=points,
        min_kbps=min(values),
        max_kbps=max(values),
        avg_kbps=sum(values) / len(values),
    )


# ---- layout bucketing ----------------------------------------------------------------
def layout_bucket(frame_number: int, modulus: int = LAYOUT_MODULUS) -> int:
    """Display-density bucket. Pure function of the index; carries no meaning beyond layout."""
    return frame_number % modulus


def group_by_layout_bucket(frames: Iterable[FrameRecord], modulus: int = LAYOUT_MODULUS) -> Dict[int, List[int]]:
    buckets: Dict[int, List[int]] = defaultdict(list)
    for f in frames:
        buckets[layout_bucket(f.frame_number, modulus)].append(f.frame_number)
    return dict(buckets)


# ---- frame types / GOP -------------------------------------------------------------
def classify_frame_types(frames: Iterable[FrameRecord]) -> FrameTypeBuckets:
    by_type: Dict[FrameType, List[int]] = {FrameType.I: [], FrameType.P: [], FrameType.B: []}
    keys: List[int] = []
    for f in frames:
        by_type[f.frame_type].append(f.frame_number)
        if f.is_key_frame:
            keys.append(f.frame_number)
    return FrameTypeBuckets(
        i_frames=tuple(by_type[FrameType.I]),
        p_frames=tuple(by_type[FrameType.P]),
        b_frames=tuple(by_type[FrameType.B]),
        key_frames=tuple(keys),
    )


def key_frame_intervals(frames: Iterable[FrameRecord]) -> Tuple[int, ...]:
    """Distances (in frames) between consecutive key frames, i.e. GOP lengths."""
    keys = [f.frame_number for f in frames if f.is_key_frame]
    return tuple(b - a for a, b in zip(keys, keys[1:]))


# ---- A/V sync ------------------------------------------------------------------------
def av_sync_offsets(frames: Sequence[FrameRecord], metadata: Optional[MediaMetadata] = None) -> Outcome:
    """
    Offsets need frame reports from both the audio and the video stream; only one
    stream's reports are observed, so this never yields a series. Zeros would read
    as "perfectly in sync".
    """
    if not frames:
        return NotApplicable("no frame reports were captured")
    if metadata is None or metadata.audio is None:
        return NotApplicable("no audio stream was detected")
    if metadata.video is None:
        return NotApplicable("no video stream was detected")
    return NotApplicable("only one stream's frame reports are observed; A/V offset cannot be computed")


def summarize(
    frames: Sequence[FrameRecord],
    metadata: Optional[MediaMetadata],
    *,
    prefer_true_frame_rate: bool = True,
    assumed_frame_rate: float = ASSUMED_FRAME_RATE,
    layout_modulus: int = LAYOUT_MODULUS,
) -> FrameAnalytics:
    rate, assumed = resolve_frame_rate(
        metadata,
        prefer_true_frame_rate=prefer_true_frame_rate,
        assumed_frame_rate=assumed_frame_rate,
    )
    intervals = key_frame_intervals(frames)
    video = metadata.video if metadata else None
    return FrameAnalytics(
        aspect_ratio=video.aspect_ratio if video else None,
        frame_rate_used=rate,
        frame_rate_assumed=assumed,
        frame_types=classify_frame_types(frames),
        key_frame_intervals=intervals,
        average_gop_length=(sum(intervals) / len(intervals)) if intervals else None,
        bitrate=bitrate_series(frames),
        layout_buckets=group_by_layout_bucket(frames, layout_modulus),
        av_sync=av_sync_offsets(frames, metadata),
    )

