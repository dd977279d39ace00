# Edit Session - Wire the timeline engines, overlays and playback for one video

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from collaborators import (
    AlwaysConfirm, AudioMixerService, ConfirmationPrompt, FrameExtractor,
    LoggingNotifier, MediaPlayer, Notifier
)
from config import EditorConfig
from edit_models import ActiveTransition, EditNotice, OverlayRecord, VideoMetadata
from edit_state import EditState
from editor_split import SplitEngine
from editor_trim import ThumbnailStrip, TrimController
from overlay_registry import OverlayRegistry
from playback_sync import PlaybackSynchronizer, TickScheduler
from timeline_manager import TimelineManager, project_overlay_windows, safe_duration
from transitions import TransitionAnnotator

logger = logging.getLogger(__name__)


@dataclass
class FrameState:
    """What the preview renders after one tick"""
    absolute_time: float
    virtual_time: float
    overlays: List[OverlayRecord] = field(default_factory=list)
    transition: Optional[ActiveTransition] = None


class EditSession:
    """One loaded video with its trim, splits, overlays and transitions"""

    def __init__(
        self,
        media_uri: str,
        player: MediaPlayer,
        config: Optional[EditorConfig] = None,
        extractor: Optional[FrameExtractor] = None,
        mixer: Optional[AudioMixerService] = None,
        confirm: Optional[ConfirmationPrompt] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.media_uri = media_uri
        self.player = player
        self.config = config or EditorConfig()
        self.extractor = extractor
        self.mixer = mixer
        self.notifier = notifier or LoggingNotifier()
        confirm = confirm or AlwaysConfirm()

        self.state = EditState(timeline=TimelineManager(fallback_duration=self.config.fallback_duration))
        self.metadata: Optional[VideoMetadata] = None

        self.thumbnails = ThumbnailStrip()
        self.trim = TrimController(
            self.state, self.config, player, self.thumbnails, extractor, media_uri, self.notifier
        )
        self.splits = SplitEngine(self.state, player, confirm)
        self.transitions = TransitionAnnotator(self.state)
        self.overlays = OverlayRegistry(lambda: self.state.duration, self.config, confirm)
        self.sync = PlaybackSynchronizer(self.state, player, self.transitions)

        self.scheduler = TickScheduler(self.config.tick_interval)
        self.scheduler.add(self.tick)

    @property
    def timeline(self) -> TimelineManager:
        return self.state.timeline

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, metadata: VideoMetadata) -> EditNotice:
        """Reset the edit for freshly loaded media"""
        self.metadata = metadata
        self.state.full_duration = safe_duration(metadata.duration, self.config.fallback_duration)
        if metadata.duration <= 0:
            logger.warning(f"⚠️  No usable duration for {self.media_uri}, using {self.state.full_duration}s")

        logger.info(f"🎬 Loaded {self.media_uri} ({self.state.full_duration:.2f}s, {metadata.width}x{metadata.height})")
        return self.report(self.trim.initialize_trim())

    def load_from_probe(self, extractor: Optional[FrameExtractor] = None) -> EditNotice:
        extractor = extractor or self.extractor
        if extractor is None:
            return self.report(EditNotice.rejected('Load', 'No media probe available.'))

        try:
            metadata = extractor.probe(self.media_uri)
        except Exception as e:
            logger.error(f"❌ Probe failed for {self.media_uri}: {e}", exc_info=True)
            return self.report(EditNotice.rejected('Load', 'Could not read the video.'))

        return self.load(metadata)

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def tick(self) -> FrameState:
        """Enforce the player position, then resolve what is on screen"""
        enforced = self.sync.tick()
        absolute = self.state.current_time if enforced is None else enforced

        return FrameState(
            absolute_time=absolute,
            virtual_time=self.timeline.to_virtual_time(absolute),
            overlays=self.overlays.visible_at(absolute),
            transition=self.state.active_transition,
        )

    def scrubber_duration(self) -> float:
        if self.timeline.is_initialized:
            return self.timeline.get_effective_duration()
        return self.state.duration

    def scrubber_position(self) -> float:
        if self.timeline.is_initialized:
            return self.timeline.to_virtual_time(self.state.current_time)
        return self.state.current_time

    def seek(self, virtual_time: float) -> float:
        """Scrubber drag: position given on the edited timeline"""
        virtual_time = max(0.0, min(virtual_time, self.scrubber_duration()))
        if self.timeline.is_initialized:
            absolute = self.timeline.to_absolute_time(virtual_time)
        else:
            absolute = virtual_time

        self.state.current_time = absolute
        self.player.current_time = absolute
        return absolute

    def play(self) -> None:
        if self.timeline.is_initialized and not self.timeline.active_segments:
            self.report(EditNotice.rejected('Play', 'Every segment has been deleted.'))
            return
        self.player.play()

    def pause(self) -> None:
        self.player.pause()

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def split_at_playhead(self) -> EditNotice:
        return self.report(self.splits.handle_split(self.player.current_time))

    def delete_segment(self, segment_id: str) -> EditNotice:
        return self.report(self.splits.handle_segment_delete(segment_id))

    def delete_range(self, start: float, end: float) -> EditNotice:
        return self.report(self.splits.handle_range_delete(start, end))

    def reset_splits(self) -> EditNotice:
        return self.report(self.splits.reset_splits())

    def set_trim(self, start: Optional[float] = None, end: Optional[float] = None) -> EditNotice:
        notice = EditNotice.ignored('Nothing to trim')
        if start is not None:
            notice = self.report(self.trim.set_trim_start(start))
            if not notice.ok:
                return notice
        if end is not None:
            notice = self.report(self.trim.set_trim_end(end))
        return notice

    def report(self, notice: EditNotice) -> EditNotice:
        """Forward user-facing failures to the notifier"""
        if not notice.ok and not notice.silent:
            self.notifier.notify(notice.title, notice.message)
        return notice

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_audio(self, video_path: str, output_path: str) -> EditNotice:
        """Mix every audio overlay into the video and write the result to output_path"""
        audio = self.overlays.audio_overlays()
        if not audio:
            return EditNotice.ignored('No audio overlays')
        if self.mixer is None:
            return self.report(EditNotice.rejected('Export', 'Audio mixing is not available.'))

        try:
            result = self.mixer.mix_overlays(str(video_path), audio, str(output_path))
        except Exception as e:
            logger.error(f"❌ Audio export failed: {e}", exc_info=True)
            return self.report(EditNotice.rejected('Export', 'Failed to mix audio into the video.'))

        logger.info(f"✅ Exported {len(audio)} audio overlays -> {Path(result).name}")
        return EditNotice.success('Export', result)

    def get_summary(self) -> dict:
        summary = self.timeline.get_summary()
        summary.update({
            'media_uri': self.media_uri,
            'mode': self.state.mode.value,
            'full_duration': self.state.duration,
            'trim_start': self.state.trim_start,
            'trim_end': self.state.effective_trim_end,
            'split_points': len(self.state.split_points),
            'overlays': len(self.overlays.overlays),
            'transitions': len(self.transitions.effects),
            'projected_overlays': project_overlay_windows(self.overlays.overlays, self.timeline),
        })
        return summary
