# Timeline Manager - Segment model and absolute <-> virtual time mapping
# Simulates cuts by remapping one continuously playing media file

import math
import uuid
from typing import Iterable, List, Optional, Sequence, Tuple
from dataclasses import dataclass, replace


MERGE_EPSILON = 0.001
FALLBACK_DURATION = 0.1


def safe_duration(value: Optional[float], fallback: float = FALLBACK_DURATION) -> float:
    """Unknown, NaN or non-positive durations become a small positive fallback"""
    if value is None:
        return fallback
    try:
        value = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(value) or value <= 0:
        return fallback
    return value


def _segment_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class Segment:
    """A kept range of absolute (physical) media time"""
    start_time: float
    end_time: float
    is_deleted: bool = False
    id: str = ''

    def __post_init__(self):
        if not self.id:
            object.__setattr__(self, 'id', _segment_id())

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def contains(self, timestamp: float) -> bool:
        """Check if timestamp is within this segment (closed interval)"""
        return self.start_time <= timestamp <= self.end_time

    def overlaps(self, start: float, end: float) -> bool:
        return self.start_time < end and start < self.end_time

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'isDeleted': self.is_deleted,
        }


def normalize_segments(segments: Iterable[Segment]) -> List[Segment]:
    """
    Restore the ordering/non-overlap invariant after a manual edit

    Negative bounds are clamped to 0, degenerate entries dropped, the rest
    sorted by start and any pair where next.start <= prev.end + epsilon merged
    (the merged record keeps the first id).

    Args:
        segments: Segments in any order, possibly overlapping

    Returns:
        Sorted, non-overlapping list
    """
    cleaned = []
    for seg in segments:
        start = max(0.0, seg.start_time)
        end = max(0.0, seg.end_time)
        if end > start:
            cleaned.append(replace(seg, start_time=start, end_time=end))

    cleaned.sort(key=lambda s: s.start_time)

    merged: List[Segment] = []
    for seg in cleaned:
        if merged and seg.start_time <= merged[-1].end_time + MERGE_EPSILON:
            last = merged[-1]
            merged[-1] = replace(last, end_time=max(last.end_time, seg.end_time))
        else:
            merged.append(seg)

    return merged


def partition_segments(
    boundaries: Iterable[float],
    deleted_ranges: Sequence[Tuple[float, float]] = ()
) -> List[Segment]:
    """
    Build one segment per consecutive pair of boundaries

    Touching pieces stay separate (that is what a split is). A piece that
    lies inside one of deleted_ranges is created soft-deleted.
    """
    points = sorted(set(boundaries))
    pieces: List[Segment] = []

    for start, end in zip(points, points[1:]):
        if end - start <= MERGE_EPSILON:
            continue
        deleted = any(
            lo - MERGE_EPSILON <= start and end <= hi + MERGE_EPSILON
            for lo, hi in deleted_ranges
        )
        pieces.append(Segment(start, end, is_deleted=deleted))

    return pieces


class TimelineManager:
    """
    Read model over the segment list

    Handles:
    - Locating the segment under a playback position
    - Mapping absolute media time to the edited (virtual) timeline and back
    - Effective duration after soft deletes

    The segment tuple is only ever swapped whole, so a reader holding the
    previous tuple never observes a half-applied edit.
    """

    def __init__(self, segments: Iterable[Segment] = (), fallback_duration: float = FALLBACK_DURATION):
        self._segments: Tuple[Segment, ...] = tuple(segments)
        self._active: Tuple[Segment, ...] = tuple(s for s in self._segments if not s.is_deleted)
        self.fallback_duration = fallback_duration

    def replace(self, segments: Iterable[Segment]) -> None:
        """Swap in a new segment list"""
        new_segments = tuple(segments)
        new_active = tuple(s for s in new_segments if not s.is_deleted)
        self._segments, self._active = new_segments, new_active

    @property
    def segments(self) -> Tuple[Segment, ...]:
        return self._segments

    @property
    def active_segments(self) -> Tuple[Segment, ...]:
        return self._active

    @property
    def is_initialized(self) -> bool:
        return bool(self._segments)

    def get(self, segment_id: str) -> Optional[Segment]:
        return next((s for s in self._segments if s.id == segment_id), None)

    def find_segment_index_at(self, timestamp: float) -> int:
        """
        Index into active segments for a playback position

        Returns the containing segment, else the first segment starting after
        the timestamp, else the last segment; -1 when nothing is active.
        """
        active = self._active
        for i, seg in enumerate(active):
            if seg.contains(timestamp):
                return i
        for i, seg in enumerate(active):
            if seg.start_time > timestamp:
                return i
        return len(active) - 1

    def get_effective_duration(self) -> float:
        """Total length of the edited video"""
        return sum(s.duration for s in self._active)

    def to_virtual_time(self, absolute: float) -> float:
        """
        Map a timestamp from the original media to the edited timeline

        A timestamp inside a gap (deleted or never included footage) maps to
        the virtual position of the next kept segment's start; past the last
        segment it maps to the effective duration.

        Args:
            absolute: Timestamp in the original media

        Returns:
            Timestamp on the edited timeline
        """
        accumulated = 0.0
        for seg in self._active:
            if absolute < seg.start_time:
                break
            if absolute <= seg.end_time:
                return accumulated + (absolute - seg.start_time)
            accumulated += seg.duration
        return accumulated

    def to_absolute_time(self, virtual: float) -> float:
        """
        Map a timestamp on the edited timeline back to the original media

        Args:
            virtual: Timestamp on the edited timeline

        Returns:
            Absolute media time, clamped to the kept footage
        """
        active = self._active
        if not active:
            return max(0.0, min(self.fallback_duration, virtual))

        if virtual <= 0:
            return active[0].start_time

        remaining = virtual
        for seg in active:
            if remaining <= seg.duration:
                return seg.start_time + remaining
            remaining -= seg.duration

        return active[-1].end_time

    def validate_timestamp(self, timestamp: float) -> bool:
        """True if the timestamp falls in kept footage"""
        return any(seg.contains(timestamp) for seg in self._active)

    def deleted_ranges(self) -> List[Tuple[float, float]]:
        return [(s.start_time, s.end_time) for s in self._segments if s.is_deleted]

    def get_summary(self) -> dict:
        """Get summary of the current edit"""
        deleted = [s for s in self._segments if s.is_deleted]
        return {
            'segments': len(self._segments),
            'active_segments': len(self._active),
            'deleted_segments': len(deleted),
            'effective_duration': self.get_effective_duration(),
            'total_removed': sum(s.duration for s in deleted),
        }


def project_overlay_windows(overlays: Iterable, timeline: TimelineManager) -> List[dict]:
    """
    Map overlay windows onto the edited timeline for export

    Args:
        overlays: Records with startTime/endTime in absolute media time
        timeline: TimelineManager holding the current segments

    Returns:
        List of dicts (id, kind, startTime, endTime in virtual time) for the
        overlays that still show at least partly
    """
    projected = []

    for overlay in overlays:
        start = overlay.startTime
        end = overlay.endTime

        # Skip overlays that only cover removed footage
        if not any(seg.overlaps(start, end) for seg in timeline.active_segments):
            continue

        new_start = timeline.to_virtual_time(start)
        new_end = timeline.to_virtual_time(end)

        if new_end > new_start:
            projected.append({
                'id': overlay.id,
                'kind': getattr(overlay, 'kind', None),
                'startTime': new_start,
                'endTime': new_end,
            })

    return projected
