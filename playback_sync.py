# Playback Sync - Keep the player inside kept footage on every tick

import logging
import math
import threading
from typing import Callable, List, Optional

from collaborators import MediaPlayer
from edit_state import EditState
from transitions import TransitionAnnotator

logger = logging.getLogger(__name__)

END_TOLERANCE = 0.05
PUBLISH_THRESHOLD = 0.1


class PlaybackSynchronizer:
    """
    Reconcile the player's reported time against the segment model

    Runs every tick rather than seeking once, which is what makes deleted
    footage unreachable during playback.
    """

    def __init__(self, state: EditState, player: MediaPlayer, transitions: Optional[TransitionAnnotator] = None):
        self.state = state
        self.player = player
        self.transitions = transitions

    def enforce_position(self, player_time: float) -> float:
        """
        Clamp, advance or loop a rounded player time

        Args:
            player_time: Player time rounded to 0.1s

        Returns:
            The absolute time playback should be at
        """
        state = self.state
        timeline = state.timeline
        segments = timeline.active_segments

        if segments:
            idx = timeline.find_segment_index_at(player_time)
            if idx == -1:
                return segments[0].start_time
            seg = segments[idx]
            if player_time < seg.start_time:
                return seg.start_time
            if player_time >= seg.end_time - END_TOLERANCE:
                next_idx = idx + 1 if idx + 1 < len(segments) else 0
                return segments[next_idx].start_time
            return player_time

        # Trim-only mode, no segment model yet
        start_bound = state.trim_start or 0.0
        end_bound = state.effective_trim_end
        if player_time < start_bound:
            return start_bound
        if end_bound > start_bound and player_time >= end_bound - END_TOLERANCE:
            return start_bound
        return player_time

    def _is_playable(self, absolute_time: float) -> bool:
        state = self.state
        if state.timeline.active_segments:
            return state.timeline.validate_timestamp(absolute_time)
        return state.trim_start <= absolute_time <= state.effective_trim_end

    def tick(self) -> Optional[float]:
        """One synchronisation pass; returns the enforced time or None"""
        raw = self.player.current_time
        if raw is None or not isinstance(raw, (int, float)) or not math.isfinite(raw):
            return None

        state = self.state
        if state.timeline.is_initialized and not state.timeline.active_segments:
            # Everything was deleted, nothing is playable
            if self.player.playing:
                self.player.pause()
            return None

        player_time = round(raw * 10) / 10
        enforced = self.enforce_position(player_time)

        # Rounding can put a time just inside a gap back on a boundary
        if enforced != player_time or not self._is_playable(raw):
            logger.debug(f"Player at {raw:.2f}s moved to {enforced:.2f}s")
            self.player.current_time = enforced

        state.publish_time(enforced, PUBLISH_THRESHOLD)

        if self.transitions is not None:
            state.active_transition = self.transitions.active_at(enforced)

        return enforced


class TickScheduler:
    """Single fixed-period tick shared by every per-frame listener"""

    def __init__(self, interval: float = 0.1):
        self.interval = interval
        self.listeners: List[Callable[[], object]] = []
        self.ticks = 0

    def add(self, listener: Callable[[], object]) -> None:
        self.listeners.append(listener)

    def remove(self, listener: Callable[[], object]) -> None:
        if listener in self.listeners:
            self.listeners.remove(listener)

    def step(self) -> None:
        self.ticks += 1
        for listener in list(self.listeners):
            try:
                listener()
            except Exception as e:
                logger.error(f"Tick listener {listener!r} failed: {e}", exc_info=True)

    def run(self, stop_event: threading.Event) -> None:
        """Tick until stop_event is set"""
        logger.info(f"▶️  Tick scheduler started ({self.interval * 1000:.0f}ms)")
        while not stop_event.is_set():
            self.step()
            stop_event.wait(self.interval)
        logger.info("⏹️  Tick scheduler stopped")
