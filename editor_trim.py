# Trim Controller - Narrow the segment model to one contiguous range

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from collaborators import FrameExtractor, MediaPlayer, Notifier
from config import EditorConfig
from edit_models import EditMode, EditNotice, VideoFrame
from edit_state import EditState
from timeline_manager import Segment, normalize_segments, safe_duration

logger = logging.getLogger(__name__)

MIN_THUMBNAILS = 8


@dataclass(frozen=True)
class FrameRequest:
    """Thumbnail request tagged with the trim range it was issued for"""
    sequence: int
    start_time: float
    end_time: float
    count: int

    @property
    def interval(self) -> float:
        return (self.end_time - self.start_time) / self.count


class ThumbnailStrip:
    """Timeline thumbnails; only the newest request may replace the strip"""

    def __init__(self):
        self.frames: List[VideoFrame] = []
        self._sequence = 0
        self.pending: Optional[FrameRequest] = None

    def begin(self, start_time: float, end_time: float) -> FrameRequest:
        self._sequence += 1
        count = max(MIN_THUMBNAILS, math.ceil(max(0.0, end_time - start_time)))
        self.pending = FrameRequest(self._sequence, start_time, end_time, count)
        return self.pending

    def complete(self, request: FrameRequest, frames: List[VideoFrame]) -> bool:
        """Accept frames for the latest request, discard anything stale"""
        if self.pending is None or request != self.pending:
            logger.debug(
                f"Discarding stale thumbnails for {request.start_time:.2f}-{request.end_time:.2f}s"
            )
            return False
        self.frames = list(frames)
        self.pending = None
        return True

    def refresh(
        self,
        extractor: FrameExtractor,
        media_uri: str,
        start_time: float,
        end_time: float,
    ) -> EditNotice:
        request = self.begin(start_time, end_time)
        try:
            frames = extractor.extract_frames(
                media_uri, request.count, request.interval, start_time, end_time
            )
        except Exception as e:
            logger.error(f"Thumbnail extraction failed: {e}", exc_info=True)
            if self.pending == request:
                self.pending = None
            return EditNotice.rejected('Thumbnails', 'Could not load timeline previews.')

        self.complete(request, frames)
        return EditNotice.success('Thumbnails', f'{len(frames)} previews loaded.')


class TrimController:
    """Trim start/end handling; trimming and splitting are exclusive modes"""

    def __init__(
        self,
        state: EditState,
        config: Optional[EditorConfig] = None,
        player: Optional[MediaPlayer] = None,
        thumbnails: Optional[ThumbnailStrip] = None,
        extractor: Optional[FrameExtractor] = None,
        media_uri: str = '',
        notifier: Optional[Notifier] = None,
    ):
        self.state = state
        self.config = config or EditorConfig()
        self.player = player
        self.thumbnails = thumbnails or ThumbnailStrip()
        self.extractor = extractor
        self.media_uri = media_uri
        self.notifier = notifier

    def initialize_trim(self) -> EditNotice:
        """Default 'no trim' state for freshly loaded media"""
        state = self.state
        full = safe_duration(state.full_duration, self.config.fallback_duration)
        state.full_duration = full
        state.trim_start = 0.0
        state.trim_end = full
        state.split_points = ()
        state.active_split_for_transition = None
        state.timeline.replace([Segment(0.0, full)])
        state.mode = EditMode.UNCUT
        self._seek(0.0)

        logger.info(f"Trim initialized: 0.00-{full:.2f}s")
        self._refresh_thumbnails()
        return EditNotice.success('Trim', 'Trim reset to the full video.')

    def set_trim_start(self, new_start: float) -> EditNotice:
        if self.state.mode == EditMode.SPLIT:
            return self._split_mode_notice()

        state = self.state
        full = safe_duration(state.full_duration, self.config.fallback_duration)
        end = min(state.effective_trim_end, full)
        start = max(0.0, min(new_start, end - self.config.min_trim_gap))

        state.trim_start = start
        self._apply_trim(start, end)
        self._seek(start)
        return EditNotice.success('Trim', f'Trim start set to {start:.2f}s.')

    def set_trim_end(self, new_end: float) -> EditNotice:
        if self.state.mode == EditMode.SPLIT:
            return self._split_mode_notice()

        state = self.state
        full = safe_duration(state.full_duration, self.config.fallback_duration)
        start = state.trim_start
        end = min(full, max(new_end, start + self.config.min_trim_gap))

        state.trim_end = end
        self._apply_trim(start, end)

        position = self.player.current_time if self.player is not None else state.current_time
        if position > end or position < start:
            self._seek(start)
        return EditNotice.success('Trim', f'Trim end set to {end:.2f}s.')

    def _apply_trim(self, start: float, end: float) -> None:
        state = self.state
        state.split_points = ()
        state.timeline.replace(normalize_segments([Segment(start, end)]))
        state.mode = EditMode.UNCUT if state.is_full_range() else EditMode.TRIMMED
        logger.info(f"Trim applied: {start:.2f}-{end:.2f}s ({end - start:.2f}s)")
        self._refresh_thumbnails()

    def _refresh_thumbnails(self) -> None:
        if self.extractor is None or not self.media_uri:
            return
        notice = self.thumbnails.refresh(
            self.extractor, self.media_uri, self.state.trim_start, self.state.effective_trim_end
        )
        if not notice.ok and self.notifier is not None:
            self.notifier.notify(notice.title, notice.message)

    def _seek(self, absolute_time: float) -> None:
        self.state.current_time = absolute_time
        if self.player is not None:
            self.player.current_time = absolute_time

    def _split_mode_notice(self) -> EditNotice:
        logger.info("Trim rejected: video already split")
        return EditNotice.rejected(
            'Trim',
            'Remove the splits before changing the trim.'
        )
