# Performance Utilities - Memory, disk and temp file guards for ffmpeg work

import psutil
import logging
import gc
from pathlib import Path
from contextlib import contextmanager
from typing import Generator
import shutil

logger = logging.getLogger(__name__)


@contextmanager
def memory_monitor(label: str) -> Generator[None, None, None]:
    """
    Log resident memory around a heavy ffmpeg step

    Usage:
        with memory_monitor('audio mix'):
            mixer.mix(...)
    """
    process = psutil.Process()
    start_mem = process.memory_info().rss / 1024 / 1024  # MB

    logger.debug(f"💾 [{label}] memory at start: {start_mem:.1f}MB")

    try:
        yield
    finally:
        end_mem = process.memory_info().rss / 1024 / 1024
        logger.debug(f"💾 [{label}] memory at end: {end_mem:.1f}MB (Δ{end_mem - start_mem:+.1f}MB)")
        gc.collect()


def get_disk_space(path: Path) -> dict:
    """Get disk space info for the volume holding path"""
    stat = psutil.disk_usage(str(path))
    return {
        'total_gb': stat.total / (1024**3),
        'used_gb': stat.used / (1024**3),
        'free_gb': stat.free / (1024**3),
        'percent': stat.percent,
    }


def check_disk_space(path: Path, required_gb: float = 0.5) -> bool:
    """Check if enough disk space is available before writing media"""
    path = Path(path)
    probe_path = path if path.exists() else path.parent if path.parent.exists() else Path('.')
    space = get_disk_space(probe_path)

    if space['free_gb'] < required_gb:
        logger.error(f"❌ Insufficient disk space: {space['free_gb']:.2f}GB < {required_gb}GB")
        return False

    return True


@contextmanager
def temp_file_cleanup(*paths: Path) -> Generator[None, None, None]:
    """
    Remove intermediate files even if a step fails

    Usage:
        with temp_file_cleanup(intermediate):
            # mix into intermediate, then into the final output
            pass
    """
    try:
        yield
    finally:
        for path in paths:
            try:
                if path.exists():
                    if path.is_file():
                        path.unlink()
                        logger.debug(f"🗑️  Cleaned up: {path.name}")
                    elif path.is_dir():
                        shutil.rmtree(path)
                        logger.debug(f"🗑️  Cleaned up dir: {path.name}")
            except OSError as e:
                logger.warning(f"Failed to cleanup {path}: {e}")
