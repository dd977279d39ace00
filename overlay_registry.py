# Overlay Registry - Text, sticker, image and audio overlays anchored in absolute time

import logging
from typing import Callable, List, Optional, Tuple

from collaborators import ConfirmationPrompt
from config import EditorConfig
from edit_models import (
    AudioOverlay, EditNotice, ImageOverlay, OverlayRecord, StickerOverlay, TextOverlay
)

logger = logging.getLogger(__name__)

TEXT_BOX_WIDTH = 100
TEXT_BOX_HEIGHT = 40

# (min, max) per resizable kind
SIZE_LIMITS = {
    'text': (12, 72),
    'sticker': (20, 100),
    'image': (50, 300),
}


class OverlayRegistry:
    """
    Overlay records keyed by id

    Timing is always absolute media time and never follows the segment
    model; a trimmed or deleted range simply hides whatever is anchored there.
    """

    def __init__(
        self,
        duration_source: Callable[[], float],
        config: Optional[EditorConfig] = None,
        confirm: Optional[ConfirmationPrompt] = None,
    ):
        self.duration_source = duration_source
        self.config = config or EditorConfig()
        self.confirm = confirm
        self.overlays: Tuple[OverlayRecord, ...] = ()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _window(self, current_time: float, end_time: Optional[float]) -> Tuple[float, float]:
        full = self.duration_source()
        start = max(0.0, min(current_time, full))
        if end_time is None:
            end = min(start + self.config.default_overlay_duration, full)
        else:
            end = min(max(end_time, 0.0), full)

        if end <= start:
            # Playhead at the very end, keep a window of positive length
            start = max(0.0, end - self.config.default_overlay_duration)
            if end <= start:
                end = start + self.config.default_overlay_duration
        return start, end

    def _append(self, overlay: OverlayRecord) -> OverlayRecord:
        self.overlays = self.overlays + (overlay,)
        logger.info(
            f"➕ {overlay.kind} overlay {overlay.id} at {overlay.startTime:.2f}-{overlay.endTime:.2f}s"
        )
        return overlay

    def add_text(
        self,
        text: str,
        current_time: float,
        end_time: Optional[float] = None,
        style: Optional[dict] = None,
    ) -> TextOverlay:
        start, end = self._window(current_time, end_time)
        style = {k: v for k, v in (style or {}).items() if k in ('fontSize', 'color', 'fontFamily', 'alignment', 'animation')}
        if 'fontSize' in style:
            lo, hi = SIZE_LIMITS['text']
            style['fontSize'] = int(max(lo, min(hi, style['fontSize'])))
        overlay = TextOverlay(
            text=text or 'Sample Text',
            startTime=start,
            endTime=end,
            x=self.config.screen_width * 0.1,
            y=100.0,
            **style,
        )
        return self._append(overlay)

    def add_sticker(self, sticker: str, current_time: float, size: int = 50, end_time: Optional[float] = None) -> StickerOverlay:
        start, end = self._window(current_time, end_time)
        lo, hi = SIZE_LIMITS['sticker']
        overlay = StickerOverlay(
            sticker=sticker,
            size=max(lo, min(hi, size)),
            startTime=start,
            endTime=end,
            x=self.config.screen_width / 2,
            y=self.config.screen_height / 4,
        )
        return self._append(overlay)

    def add_image(self, image_uri: str, current_time: float, size: int = 150, end_time: Optional[float] = None) -> ImageOverlay:
        start, end = self._window(current_time, end_time)
        lo, hi = SIZE_LIMITS['image']
        size = max(lo, min(hi, size))
        overlay = ImageOverlay(imageUri=image_uri, width=size, height=size, startTime=start, endTime=end)
        return self._append(overlay)

    def add_audio(
        self,
        audio_uri: str,
        name: str,
        current_time: float,
        end_time: Optional[float] = None,
        volume: float = 0.5,
    ) -> AudioOverlay:
        start, end = self._window(current_time, end_time)
        overlay = AudioOverlay(
            audioUri=audio_uri,
            name=name,
            volume=max(0.0, min(1.0, volume)),
            startTime=start,
            endTime=end,
        )
        return self._append(overlay)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def get(self, overlay_id: str) -> Optional[OverlayRecord]:
        return next((o for o in self.overlays if o.id == overlay_id), None)

    def _update(self, overlay_id: str, **changes) -> Optional[OverlayRecord]:
        updated = None
        records = []
        for overlay in self.overlays:
            if overlay.id == overlay_id:
                overlay = overlay.model_copy(update=changes)
                updated = overlay
            records.append(overlay)
        self.overlays = tuple(records)
        return updated

    def remove(self, overlay_id: str) -> EditNotice:
        overlay = self.get(overlay_id)
        if overlay is None:
            return EditNotice.ignored(f'No overlay {overlay_id}')

        if self.confirm is not None and not self.confirm.confirm(
            f'Remove {overlay.kind.capitalize()}',
            f'Are you sure you want to remove this {overlay.kind}?'
        ):
            return EditNotice.ignored('Remove cancelled')

        self.overlays = tuple(o for o in self.overlays if o.id != overlay_id)
        logger.info(f"🗑️  {overlay.kind} overlay {overlay_id} removed")
        return EditNotice.success('Remove', f'{overlay.kind.capitalize()} removed successfully!')

    def select(self, overlay_id: str) -> None:
        """Toggle selection on one overlay and clear it on the rest"""
        self.overlays = tuple(
            o.model_copy(update={'isSelected': (not o.isSelected) if o.id == overlay_id else False})
            for o in self.overlays
        )

    def _footprint(self, overlay: OverlayRecord) -> Tuple[float, float]:
        if overlay.kind == 'text':
            return TEXT_BOX_WIDTH, TEXT_BOX_HEIGHT
        if overlay.kind == 'sticker':
            return overlay.size, overlay.size
        return overlay.width, overlay.height

    def reposition(self, overlay_id: str, x: float, y: float) -> Optional[OverlayRecord]:
        overlay = self.get(overlay_id)
        if overlay is None or overlay.kind == 'audio':
            return None

        width, height = self._footprint(overlay)
        bounded_x = max(0.0, min(self.config.screen_width - width, x))
        bounded_y = max(0.0, min(self.config.screen_height - height, y))
        return self._update(overlay_id, x=bounded_x, y=bounded_y)

    def resize(self, overlay_id: str, size: float) -> Optional[OverlayRecord]:
        overlay = self.get(overlay_id)
        if overlay is None or overlay.kind not in SIZE_LIMITS:
            return None

        lo, hi = SIZE_LIMITS[overlay.kind]
        bounded = int(max(lo, min(hi, size)))
        if overlay.kind == 'text':
            return self._update(overlay_id, fontSize=bounded)
        if overlay.kind == 'sticker':
            return self._update(overlay_id, size=bounded)
        return self._update(overlay_id, width=bounded, height=bounded)

    def set_volume(self, overlay_id: str, volume: float) -> Optional[OverlayRecord]:
        overlay = self.get(overlay_id)
        if overlay is None or overlay.kind != 'audio':
            return None
        return self._update(overlay_id, volume=max(0.0, min(1.0, volume)))

    def retime(self, overlay_id: str, start_time: float, end_time: float) -> EditNotice:
        """Move an overlay's window (timeline drag), absolute media time"""
        overlay = self.get(overlay_id)
        if overlay is None:
            return EditNotice.ignored(f'No overlay {overlay_id}')

        full = self.duration_source()
        start = max(0.0, min(start_time, full))
        end = max(0.0, min(end_time, full))
        if end <= start:
            return EditNotice.rejected('Timing', 'An overlay must end after it starts.')

        self._update(overlay_id, startTime=start, endTime=end)
        return EditNotice.success('Timing', f'{overlay.kind.capitalize()} shows {start:.1f}s - {end:.1f}s.')

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def visible_at(self, absolute_time: float) -> List[OverlayRecord]:
        return [o for o in self.overlays if o.is_visible_at(absolute_time)]

    def audio_overlays(self) -> List[AudioOverlay]:
        return [o for o in self.overlays if o.kind == 'audio']

    def of_kind(self, kind: str) -> List[OverlayRecord]:
        return [o for o in self.overlays if o.kind == kind]
