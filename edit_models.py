# Edit Models - Pydantic schemas for the non-destructive timeline editor

import uuid
from enum import Enum
from pydantic import BaseModel, Field, model_validator
from typing import Optional, Literal, Union, Annotated


def new_id() -> str:
    return uuid.uuid4().hex[:12]


class EditMode(str, Enum):
    """Which edit family currently owns the segment model"""
    UNCUT = 'uncut'
    TRIMMED = 'trimmed'
    SPLIT = 'split'


# ============================================================================
# Timeline Models
# ============================================================================

TransitionName = Literal[
    'none', 'fade', 'slide-left', 'slide-right', 'slide-up', 'slide-down',
    'zoom-in', 'zoom-out', 'spin', 'blur'
]


class SplitPoint(BaseModel):
    """Cut location inside the trimmed range"""
    id: str = Field(default_factory=new_id)
    time: float = Field(ge=0)
    transitionType: TransitionName = 'none'


class TrimRange(BaseModel):
    """Sub-range of the full media; endSec None means 'to end of media'"""
    startSec: float = Field(default=0.0, ge=0)
    endSec: Optional[float] = None

    def resolve_end(self, full_duration: float) -> float:
        return full_duration if self.endSec is None else self.endSec


class TransitionEffect(BaseModel):
    """Fixed-duration visual effect anchored at an absolute time"""
    id: str = Field(default_factory=new_id)
    name: TransitionName = 'fade'
    icon: str = ''
    timestamp: float = Field(ge=0)
    duration: float = Field(default=1.0, gt=0, le=5.0)


class ActiveTransition(BaseModel):
    """Transition currently on screen"""
    id: str
    name: str
    progress: float = Field(ge=0.0, le=1.0)
    splitPointId: Optional[str] = None


# ============================================================================
# Overlay Models
# ============================================================================

class OverlayBase(BaseModel):
    """Fields shared by every time-anchored overlay"""
    id: str = Field(default_factory=new_id)
    startTime: float = Field(ge=0)
    endTime: float = Field(ge=0)
    isSelected: bool = False

    @model_validator(mode='after')
    def check_window(self):
        if self.endTime <= self.startTime:
            raise ValueError(
                f"Invalid overlay window: end ({self.endTime}) <= start ({self.startTime})"
            )
        return self

    def is_visible_at(self, absolute_time: float) -> bool:
        return self.startTime <= absolute_time <= self.endTime


class TextOverlay(OverlayBase):
    kind: Literal['text'] = 'text'
    text: str = 'Sample Text'
    x: float = 0.0
    y: float = 0.0
    fontSize: int = Field(default=24, ge=12, le=72)
    color: str = '#FFFFFF'
    fontFamily: str = 'System'
    alignment: Literal['left', 'center', 'right'] = 'center'
    animation: Literal['fade', 'slide', 'bounce', 'zoom', 'rotate', 'scale-in', 'none'] = 'fade'


class StickerOverlay(OverlayBase):
    kind: Literal['sticker'] = 'sticker'
    sticker: str
    x: float = 0.0
    y: float = 0.0
    size: int = Field(default=50, ge=20, le=100)
    rotation: float = 0.0


class ImageOverlay(OverlayBase):
    kind: Literal['image'] = 'image'
    imageUri: str
    x: float = 0.0
    y: float = 0.0
    width: int = Field(default=150, ge=50, le=300)
    height: int = Field(default=150, ge=50, le=300)
    rotation: float = 0.0


class AudioOverlay(OverlayBase):
    kind: Literal['audio'] = 'audio'
    audioUri: str
    name: str = ''
    volume: float = Field(default=0.5, ge=0.0, le=1.0)
    fadeIn: float = Field(default=0.0, ge=0.0)
    fadeOut: float = Field(default=0.0, ge=0.0)


OverlayRecord = Annotated[
    Union[TextOverlay, StickerOverlay, ImageOverlay, AudioOverlay],
    Field(discriminator='kind')
]


# ============================================================================
# Collaborator Payloads
# ============================================================================

class VideoMetadata(BaseModel):
    """Probe result for the loaded media"""
    duration: float = 0.0
    width: int = 0
    height: int = 0


class VideoFrame(BaseModel):
    """Timeline thumbnail"""
    id: str
    time: float
    thumbnailRef: str


class MixOptions(BaseModel):
    """Window and levels for mixing one audio clip into the video"""
    startTime: float = Field(ge=0)
    endTime: float = Field(ge=0)
    volume: float = Field(default=0.5, ge=0.0, le=1.0)
    fadeIn: float = Field(default=0.0, ge=0.0)
    fadeOut: float = Field(default=0.0, ge=0.0)
    videoVolume: float = Field(default=1.0, ge=0.0, le=1.0)

    @model_validator(mode='after')
    def check_window(self):
        if self.endTime <= self.startTime:
            raise ValueError("Mix window must have positive length")
        return self

    @property
    def duration(self) -> float:
        return self.endTime - self.startTime

    @classmethod
    def from_overlay(cls, overlay: AudioOverlay) -> 'MixOptions':
        return cls(
            startTime=overlay.startTime,
            endTime=overlay.endTime,
            volume=overlay.volume,
            fadeIn=overlay.fadeIn,
            fadeOut=overlay.fadeOut,
        )


class EditNotice(BaseModel):
    """Outcome of an edit request, shown to the user when not ok"""
    ok: bool
    title: str = ''
    message: str = ''
    silent: bool = False

    @classmethod
    def success(cls, title: str, message: str = '') -> 'EditNotice':
        return cls(ok=True, title=title, message=message)

    @classmethod
    def rejected(cls, title: str, message: str) -> 'EditNotice':
        return cls(ok=False, title=title, message=message)

    @classmethod
    def ignored(cls, message: str = '') -> 'EditNotice':
        """Benign no-op (e.g. stale id), never surfaced"""
        return cls(ok=False, message=message, silent=True)
