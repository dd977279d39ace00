# Audio Processor - Mix audio overlays into the video with FFmpeg

import ffmpeg
import logging
import shutil
import uuid
from pathlib import Path
from typing import List, Optional

from edit_models import AudioOverlay, MixOptions
from performance_utils import memory_monitor, temp_file_cleanup

logger = logging.getLogger(__name__)


class AudioMixError(RuntimeError):
    pass


class AudioMixer:
    """Offline audio mixing for audio overlays"""

    def __init__(self, temp_dir: Path):
        self.temp_dir = Path(temp_dir) / "audio"
        self.temp_dir.mkdir(parents=True, exist_ok=True)

    def build_mix(self, video_path: str, audio_path: str, output_path: str, options: MixOptions):
        """
        Build the ffmpeg graph for one mix

        The clip is cut to the window length, levelled, faded, delayed to the
        window start and mixed over the original track; video is copied.
        """
        duration = options.duration
        delay_ms = int(round(options.startTime * 1000))

        video_in = ffmpeg.input(str(video_path))
        music = (
            ffmpeg.input(str(audio_path)).audio
            .filter('atrim', start=0, duration=duration)
            .filter('asetpts', 'PTS-STARTPTS')
            .filter('volume', options.volume)
        )

        if options.fadeIn > 0:
            music = music.filter('afade', t='in', st=0, d=min(options.fadeIn, duration))
        if options.fadeOut > 0:
            fade_out = min(options.fadeOut, duration)
            music = music.filter('afade', t='out', st=duration - fade_out, d=fade_out)

        music = music.filter('adelay', f'{delay_ms}|{delay_ms}')
        original = video_in.audio.filter('volume', options.videoVolume)
        mixed = ffmpeg.filter([original, music], 'amix', inputs=2, duration='first')

        return (
            ffmpeg
            .output(video_in.video, mixed, str(output_path), vcodec='copy', acodec='aac',
                    audio_bitrate='128k', loglevel='error')
            .overwrite_output()
        )

    def mix(self, video_path: str, audio_path: str, options: MixOptions, output_dir: Optional[Path] = None) -> str:
        """Mix one clip into the video window, returns the output path"""
        output_dir = Path(output_dir) if output_dir is not None else self.temp_dir
        output = output_dir / f"{Path(video_path).stem}_mix_{int(options.startTime * 1000)}.mp4"

        logger.info(
            f"Mixing {Path(audio_path).name} at {options.startTime:.2f}-{options.endTime:.2f}s "
            f"(volume {options.volume:.2f})"
        )

        try:
            with memory_monitor('audio mix'):
                self.build_mix(video_path, audio_path, str(output), options).run()
        except ffmpeg.Error as e:
            logger.error(f"Audio mixing failed: {e}")
            raise AudioMixError(f"Failed to mix audio: {e}") from e

        logger.info("✅ Audio mix complete")
        return str(output)

    def mix_overlays(self, video_path: str, overlays: List[AudioOverlay], output_path: str) -> str:
        """Apply every audio overlay in turn; intermediates are removed"""
        if not overlays:
            return str(video_path)

        work_dir = self.temp_dir / f"chain_{uuid.uuid4().hex[:8]}"
        work_dir.mkdir(parents=True, exist_ok=True)

        with temp_file_cleanup(work_dir):
            current = str(video_path)
            for overlay in sorted(overlays, key=lambda o: o.startTime):
                current = self.mix(current, overlay.audioUri, MixOptions.from_overlay(overlay), work_dir)
            shutil.copy2(current, output_path)

        logger.info(f"✅ {len(overlays)} audio overlays mixed into {output_path}")
        return str(output_path)
