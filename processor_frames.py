# Frame Processor - Probe media and extract timeline thumbnails with FFmpeg

import ffmpeg
import logging
from pathlib import Path
from typing import List

from edit_models import VideoFrame, VideoMetadata
from performance_utils import check_disk_space

logger = logging.getLogger(__name__)


class FrameExtractionError(RuntimeError):
    pass


class FFmpegFrameExtractor:
    """Frame extraction service backed by ffmpeg-python"""

    def __init__(self, temp_dir: Path, thumbnail_width: int = 160):
        self.temp_dir = Path(temp_dir) / "frames"
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        self.thumbnail_width = thumbnail_width

    def probe(self, media_uri: str) -> VideoMetadata:
        """Get video metadata"""
        try:
            probe = ffmpeg.probe(str(media_uri))
            video_stream = next(s for s in probe['streams'] if s['codec_type'] == 'video')

            metadata = VideoMetadata(
                width=int(video_stream.get('width', 0)),
                height=int(video_stream.get('height', 0)),
                duration=float(video_stream.get('duration', probe['format'].get('duration', 0))),
            )
            logger.debug(f"Video info: {metadata.width}x{metadata.height}, {metadata.duration:.2f}s")
            return metadata

        except (ffmpeg.Error, StopIteration, KeyError, ValueError) as e:
            logger.error(f"Failed to probe video: {e}", exc_info=True)
            raise FrameExtractionError(f"Cannot read video metadata: {e}") from e

    def sample_times(self, count: int, interval: float, start_time: float, end_time: float) -> List[float]:
        """One sample per slot, centred in its interval and kept inside the range"""
        times = []
        for i in range(max(0, count)):
            t = start_time + interval * i + interval / 2
            times.append(round(min(t, end_time), 3))
        return times

    def extract_frames(
        self,
        media_uri: str,
        count: int,
        interval: float,
        start_time: float,
        end_time: float,
    ) -> List[VideoFrame]:
        """
        Extract one scaled JPEG per sample time

        Frames that fail are skipped; the strip just shows fewer previews.
        """
        if not check_disk_space(self.temp_dir):
            raise FrameExtractionError("Insufficient disk space for thumbnails")

        frames: List[VideoFrame] = []
        tag = f"{start_time:.2f}_{end_time:.2f}".replace('.', '-')

        for i, t in enumerate(self.sample_times(count, interval, start_time, end_time)):
            output = self.temp_dir / f"frame_{tag}_{i:03d}.jpg"
            try:
                (
                    ffmpeg
                    .input(str(media_uri), ss=t)
                    .output(
                        str(output),
                        vframes=1,
                        vf=f'scale={self.thumbnail_width}:-1',
                        loglevel='error'
                    )
                    .overwrite_output()
                    .run()
                )
            except ffmpeg.Error as e:
                logger.warning(f"Frame at {t:.2f}s failed: {e}")
                continue

            frames.append(VideoFrame(id=f"frame_{i}", time=t, thumbnailRef=str(output)))

        logger.info(f"✅ Extracted {len(frames)}/{count} thumbnails for {start_time:.2f}-{end_time:.2f}s")
        return frames
