# Transitions - Standalone effects, split-point transitions and style curves

import logging
import math
from dataclasses import dataclass, asdict
from typing import Optional, Tuple, get_args

from edit_models import ActiveTransition, EditNotice, SplitPoint, TransitionEffect, TransitionName
from edit_state import EditState

logger = logging.getLogger(__name__)

SPLIT_TRANSITION_DURATION = 0.5
TRANSITION_NAMES = frozenset(get_args(TransitionName))


@dataclass
class TransitionStyle:
    """Overlay drawn over the video while a transition runs"""
    color: Tuple[int, int, int] = (0, 0, 0)
    alpha: float = 0.0
    translate_x: float = 0.0
    translate_y: float = 0.0
    scale: float = 1.0
    rotate_deg: float = 0.0

    @property
    def background_color(self) -> str:
        r, g, b = self.color
        return f"rgba({r}, {g}, {b}, {round(self.alpha, 4)})"

    def to_dict(self) -> dict:
        data = asdict(self)
        data['backgroundColor'] = self.background_color
        return data


def get_transition_style(name: str, progress: float, width: float, height: float) -> TransitionStyle:
    """Map transition progress (0..1) to the overlay's visual parameters"""
    progress = max(0.0, min(1.0, progress))
    bell = math.sin(progress * math.pi)

    if name == 'fade':
        # Fade to black, then back
        alpha = progress * 2 if progress < 0.5 else 2 - progress * 2
        return TransitionStyle(alpha=alpha)

    if name in ('slide-left', 'slide-right', 'slide-up', 'slide-down'):
        if progress < 0.5:
            return TransitionStyle(alpha=1.0)
        remaining = 1 - (progress - 0.5) * 2
        if name == 'slide-left':
            return TransitionStyle(alpha=1.0, translate_x=width * remaining)
        if name == 'slide-right':
            return TransitionStyle(alpha=1.0, translate_x=-width * remaining)
        if name == 'slide-up':
            return TransitionStyle(alpha=1.0, translate_y=height * remaining)
        return TransitionStyle(alpha=1.0, translate_y=-height * remaining)

    if name == 'zoom-in':
        if progress < 0.3:
            return TransitionStyle(alpha=1.0)
        zoom = (progress - 0.3) / 0.7
        return TransitionStyle(alpha=1 - zoom, scale=0.1 + zoom * 0.9)

    if name == 'zoom-out':
        return TransitionStyle(alpha=progress * 0.8, scale=1 + progress * 2)

    if name == 'spin':
        return TransitionStyle(alpha=bell * 0.8, rotate_deg=progress * 720)

    if name == 'blur':
        # White wash plus a slight scale stands in for blur
        return TransitionStyle(color=(255, 255, 255), alpha=bell * 0.6, scale=1 + bell * 0.1)

    return TransitionStyle(alpha=progress)


class TransitionAnnotator:
    """Standalone transition effects plus transitions attached to split points"""

    def __init__(self, state: EditState, split_window: float = SPLIT_TRANSITION_DURATION):
        self.state = state
        self.split_window = split_window
        self.effects: Tuple[TransitionEffect, ...] = ()

    def add_effect(self, name: str, timestamp: float, duration: float = 1.0, icon: str = '') -> TransitionEffect:
        effect = TransitionEffect(name=name, timestamp=timestamp, duration=duration, icon=icon)
        self.effects = self.effects + (effect,)
        logger.info(f"Transition '{name}' added at {timestamp:.2f}s ({duration:.2f}s)")
        return effect

    def remove_effect(self, effect_id: str) -> bool:
        remaining = tuple(e for e in self.effects if e.id != effect_id)
        removed = len(remaining) != len(self.effects)
        self.effects = remaining
        return removed

    def begin_split_transition(self, split_id: str) -> EditNotice:
        """Target a split point for the transition picker"""
        if not any(p.id == split_id for p in self.state.split_points):
            return EditNotice.ignored(f'No split point {split_id}')
        self.state.active_split_for_transition = split_id
        return EditNotice.success('Transition', 'Pick a transition for this cut.')

    def commit_split_transition(self, transition_type: str) -> EditNotice:
        state = self.state
        target = state.active_split_for_transition
        if target is None:
            return EditNotice.rejected('Transition', 'Select a split point first.')

        if not any(p.id == target for p in state.split_points):
            # Split was deleted while the picker was open
            state.active_split_for_transition = None
            return EditNotice.ignored(f'Split point {target} no longer exists')

        if transition_type not in TRANSITION_NAMES:
            logger.info(f"Unknown transition '{transition_type}' for split {target}")
            return EditNotice.rejected('Transition', f'Unknown transition: {transition_type}')

        state.split_points = tuple(
            SplitPoint.model_validate({**p.model_dump(), 'transitionType': transition_type})
            if p.id == target else p
            for p in state.split_points
        )
        state.active_split_for_transition = None
        logger.info(f"Transition '{transition_type}' attached to split {target}")
        return EditNotice.success('Transition', f'{transition_type} transition applied.')

    def cancel_split_transition(self) -> None:
        self.state.active_split_for_transition = None

    def active_at(self, absolute_time: float) -> Optional[ActiveTransition]:
        """Transition on screen at an absolute time, standalone effects first"""
        for effect in self.effects:
            if effect.timestamp <= absolute_time <= effect.timestamp + effect.duration:
                progress = (absolute_time - effect.timestamp) / effect.duration
                return ActiveTransition(
                    id=effect.id,
                    name=effect.name,
                    progress=max(0.0, min(1.0, progress)),
                )

        half = self.split_window / 2
        for point in self.state.split_points:
            if point.transitionType == 'none':
                continue
            window_start = point.time - half
            if window_start <= absolute_time <= point.time + half:
                progress = (absolute_time - window_start) / self.split_window
                return ActiveTransition(
                    id=point.id,
                    name=point.transitionType,
                    progress=max(0.0, min(1.0, progress)),
                    splitPointId=point.id,
                )

        return None
