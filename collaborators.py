# Collaborators - Interfaces for the services the timeline core talks to

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol, runtime_checkable

from edit_models import AudioOverlay, MixOptions, VideoFrame, VideoMetadata

logger = logging.getLogger(__name__)


@runtime_checkable
class MediaPlayer(Protocol):
    """Video player the core enforces positions on"""
    current_time: float
    duration: float
    playing: bool

    def play(self) -> None: ...

    def pause(self) -> None: ...


class FrameExtractor(Protocol):
    def probe(self, media_uri: str) -> VideoMetadata: ...

    def extract_frames(
        self, media_uri: str, count: int, interval: float, start_time: float, end_time: float
    ) -> List[VideoFrame]: ...


class AudioMixerService(Protocol):
    def mix(self, video_path: str, audio_path: str, options: MixOptions) -> str: ...

    def mix_overlays(self, video_path: str, overlays: List[AudioOverlay], output_path: str) -> str: ...


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...


class ConfirmationPrompt(Protocol):
    def confirm(self, title: str, message: str) -> bool: ...


class Notifier(Protocol):
    def notify(self, title: str, message: str) -> None: ...


class AlwaysConfirm:
    """Confirmation prompt for headless use"""

    def confirm(self, title: str, message: str) -> bool:
        logger.debug(f"Auto-confirmed: {title}")
        return True


class LoggingNotifier:
    """Notifier that only writes notices to the log"""

    def __init__(self):
        self.history: List[Dict[str, str]] = []

    def notify(self, title: str, message: str) -> None:
        self.history.append({'title': title, 'message': message})
        logger.info(f"🔔 {title}: {message}")


class InMemoryKeyValueStore:
    def __init__(self):
        self._data: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStore:
    """Key-value store persisted as one JSON object on disk"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning(f"Key-value file {self.path} is corrupt, starting empty: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f)
