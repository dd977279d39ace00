# Split Engine - Split points, segment soft-delete and range delete

import logging
import math
from typing import List, Optional, Tuple

from collaborators import ConfirmationPrompt, MediaPlayer
from edit_models import EditMode, EditNotice, SplitPoint
from edit_state import EditState
from timeline_manager import MERGE_EPSILON, Segment, partition_segments

logger = logging.getLogger(__name__)

SPLIT_TOLERANCE = 0.1


class SplitEngine:
    """Mutate the segment model in response to split and delete actions"""

    def __init__(
        self,
        state: EditState,
        player: Optional[MediaPlayer] = None,
        confirm: Optional[ConfirmationPrompt] = None,
    ):
        self.state = state
        self.player = player
        self.confirm = confirm

    def handle_split(self, current_time: float) -> EditNotice:
        """
        Cut the trimmed range at the given absolute time

        Args:
            current_time: Absolute media time of the cut

        Returns:
            EditNotice describing the outcome
        """
        state = self.state
        trim_start = state.trim_start
        trim_end = state.effective_trim_end

        if not math.isfinite(current_time) or current_time <= trim_start or current_time >= trim_end:
            logger.info(f"Split at {current_time}s rejected: outside trim ({trim_start:.2f}-{trim_end:.2f})")
            return EditNotice.rejected(
                'Split',
                'Move the playhead inside the video to split it.'
            )

        if any(abs(p.time - current_time) <= SPLIT_TOLERANCE for p in state.split_points):
            logger.info(f"Split at {current_time:.2f}s rejected: too close to an existing split")
            return EditNotice.rejected(
                'Split',
                'There is already a split at this position.'
            )

        if any(s.is_deleted and s.start_time < current_time < s.end_time for s in state.timeline.segments):
            logger.info(f"Split at {current_time:.2f}s rejected: inside deleted footage")
            return EditNotice.rejected(
                'Split',
                'This part of the video has been deleted.'
            )

        new_point = SplitPoint(time=current_time)
        state.split_points = tuple(sorted(state.split_points + (new_point,), key=lambda p: p.time))
        self.recompute_segments()
        state.mode = EditMode.SPLIT

        logger.info(
            f"✂️  Split at {current_time:.2f}s -> {len(state.timeline.active_segments)} active segments"
        )
        return EditNotice.success('Split', f'Video split at {current_time:.2f}s.')

    def recompute_segments(self) -> None:
        """Rebuild the partition from trim bounds, split points and deleted ranges"""
        state = self.state
        trim_start = state.trim_start
        trim_end = state.effective_trim_end

        deleted = [
            (max(lo, trim_start), min(hi, trim_end))
            for lo, hi in state.timeline.deleted_ranges()
            if hi > trim_start and lo < trim_end
        ]

        boundaries = [trim_start, trim_end]
        boundaries.extend(p.time for p in state.split_points if trim_start < p.time < trim_end)
        for lo, hi in deleted:
            boundaries.extend((lo, hi))

        state.timeline.replace(partition_segments(boundaries, deleted))

    def handle_segment_delete(self, segment_id: str) -> EditNotice:
        """
        Soft-delete one segment after confirmation

        Split points on the deleted segment's edges go with it. When the
        playhead was inside, it moves to the nearest remaining segment.
        """
        state = self.state
        segment = state.timeline.get(segment_id)

        if segment is None or segment.is_deleted:
            logger.debug(f"Delete ignored, no active segment {segment_id}")
            return EditNotice.ignored(f'No active segment {segment_id}')

        if self.confirm is not None and not self.confirm.confirm(
            'Delete Segment',
            f'Delete {segment.start_time:.1f}s - {segment.end_time:.1f}s from the video?'
        ):
            return EditNotice.ignored('Delete cancelled')

        was_playing_inside = segment.contains(state.current_time)
        if self.player is not None:
            was_playing_inside = was_playing_inside or segment.contains(self.player.current_time)

        state.timeline.replace(
            Segment(s.start_time, s.end_time, is_deleted=True, id=s.id) if s.id == segment_id else s
            for s in state.timeline.segments
        )
        state.split_points = tuple(
            p for p in state.split_points
            if not (segment.start_time <= p.time <= segment.end_time)
        )

        if was_playing_inside:
            self._relocate_after(segment.start_time, segment.end_time)

        remaining = state.timeline.get_effective_duration()
        logger.info(
            f"🗑️  Segment {segment.start_time:.2f}-{segment.end_time:.2f}s deleted, "
            f"effective duration {remaining:.2f}s"
        )
        return EditNotice.success('Delete', 'Segment deleted.')

    def handle_range_delete(self, start: float, end: float) -> EditNotice:
        """Cut an arbitrary [start, end] range out of the kept footage"""
        state = self.state
        trim_start = state.trim_start
        trim_end = state.effective_trim_end
        start = max(trim_start, min(start, trim_end))
        end = max(start, min(end, trim_end))

        if end - start <= MERGE_EPSILON:
            return EditNotice.rejected('Delete', 'Select a range to delete.')
        if not state.timeline.active_segments:
            return EditNotice.ignored('Nothing left to delete')

        updated: List[Segment] = []
        for seg in state.timeline.segments:
            if seg.is_deleted or not seg.overlaps(start, end):
                updated.append(seg)
                continue
            if start > seg.start_time:
                updated.append(Segment(seg.start_time, start, id=seg.id))
            updated.append(Segment(max(start, seg.start_time), min(end, seg.end_time), is_deleted=True))
            if end < seg.end_time:
                updated.append(Segment(end, seg.end_time))

        state.timeline.replace(updated)
        state.mode = EditMode.SPLIT

        active = state.timeline.active_segments
        if active:
            self._seek(active[0].start_time)
        elif self.player is not None:
            self.player.pause()

        logger.info(f"🗑️  Range {start:.2f}-{end:.2f}s deleted, {len(active)} segments remain")
        return EditNotice.success('Delete', 'Selected range deleted.')

    def reset_splits(self) -> EditNotice:
        """Drop every split and deletion, back to one segment over the trim"""
        state = self.state
        state.split_points = ()
        state.active_split_for_transition = None
        state.timeline.replace([Segment(state.trim_start, state.effective_trim_end)])
        state.mode = EditMode.UNCUT if state.is_full_range() else EditMode.TRIMMED
        logger.info("Splits cleared")
        return EditNotice.success('Split', 'All splits removed.')

    def _relocate_after(self, deleted_start: float, deleted_end: float) -> None:
        active = self.state.timeline.active_segments
        if not active:
            if self.player is not None:
                self.player.pause()
            return

        following = [s for s in active if s.start_time >= deleted_end - MERGE_EPSILON]
        target = following[0] if following else active[-1]
        self._seek(target.start_time)

    def _seek(self, absolute_time: float) -> None:
        self.state.current_time = absolute_time
        if self.player is not None:
            self.player.current_time = absolute_time

    def split_times(self) -> Tuple[float, ...]:
        return tuple(p.time for p in self.state.split_points)
