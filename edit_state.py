# Edit State - Mutable editor state shared by the timeline engines

from dataclasses import dataclass, field
from typing import Optional, Tuple

from edit_models import ActiveTransition, EditMode, SplitPoint, TrimRange
from timeline_manager import TimelineManager, safe_duration


@dataclass
class EditState:
    """
    Everything the edit engines read and write for one loaded video

    Collections are tuples and are replaced whole on each edit so the
    playback tick never sees a partially applied change.
    """
    full_duration: float = 0.0
    trim_start: float = 0.0
    trim_end: Optional[float] = None
    timeline: TimelineManager = field(default_factory=TimelineManager)
    split_points: Tuple[SplitPoint, ...] = ()
    mode: EditMode = EditMode.UNCUT
    current_time: float = 0.0
    active_transition: Optional[ActiveTransition] = None
    active_split_for_transition: Optional[str] = None

    @property
    def duration(self) -> float:
        return safe_duration(self.full_duration)

    @property
    def effective_trim_end(self) -> float:
        return self.duration if self.trim_end is None else self.trim_end

    @property
    def trim_range(self) -> TrimRange:
        return TrimRange(startSec=self.trim_start, endSec=self.trim_end)

    def is_full_range(self) -> bool:
        return self.trim_start <= 0 and self.effective_trim_end >= self.duration

    def publish_time(self, absolute_time: float, threshold: float = 0.0) -> bool:
        """Update the UI-facing position when it moved by more than threshold"""
        if abs(round(absolute_time, 1) - round(self.current_time, 1)) > threshold:
            self.current_time = absolute_time
            return True
        return False
