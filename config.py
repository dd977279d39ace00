# Config - Editor and upload settings, injected instead of held globally

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_REGION = 'us-east-1'
DEFAULT_PREFIX = 'user-uploads/'
DEFAULT_EXPIRY_SECONDS = 900


def _first_nonempty(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def normalize_prefix(raw: Optional[str]) -> str:
    """Key prefix always ends with '/'; trailing '*' wildcards are stripped"""
    if not raw:
        return DEFAULT_PREFIX
    if raw.endswith('/') or raw.endswith('*'):
        return raw.rstrip('*')
    return f"{raw}/"


def parse_expiry(raw: Optional[str]) -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return DEFAULT_EXPIRY_SECONDS
    return value if value > 0 else DEFAULT_EXPIRY_SECONDS


@dataclass
class EditorConfig:
    tick_interval: float = 0.1
    default_overlay_duration: float = 3.0
    min_trim_gap: float = 0.1
    fallback_duration: float = 0.1
    screen_width: float = 390.0
    screen_height: float = 844.0
    thumbnail_width: int = 160
    temp_dir: Path = field(default_factory=lambda: Path('temp'))

    @classmethod
    def from_env(cls) -> "EditorConfig":
        load_dotenv()
        return cls(
            tick_interval=_float_env('EDITOR_TICK_INTERVAL', 0.1),
            default_overlay_duration=_float_env('EDITOR_OVERLAY_DURATION', 3.0),
            min_trim_gap=_float_env('EDITOR_MIN_TRIM_GAP', 0.1),
            screen_width=_float_env('EDITOR_SCREEN_WIDTH', 390.0),
            screen_height=_float_env('EDITOR_SCREEN_HEIGHT', 844.0),
            temp_dir=Path(_first_nonempty(os.getenv('EDITOR_TEMP_DIR'), 'temp') or 'temp'),
        )


@dataclass
class UploadConfig:
    bucket: Optional[str] = None
    region: str = DEFAULT_REGION
    prefix: str = DEFAULT_PREFIX
    presigned_expiry_seconds: int = DEFAULT_EXPIRY_SECONDS
    credentials_provided: bool = False
    allowed_origin: str = '*'
    access_key_id: Optional[str] = field(default=None, repr=False)
    secret_access_key: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_env(cls) -> "UploadConfig":
        load_dotenv()
        access_key = _first_nonempty(os.getenv('AWS_ACCESS_KEY_ID'))
        secret_key = _first_nonempty(os.getenv('AWS_SECRET_ACCESS_KEY'))

        return cls(
            bucket=_first_nonempty(os.getenv('AWS_S3_BUCKET')),
            region=_first_nonempty(
                os.getenv('AWS_REGION'),
                os.getenv('AWS_S3_REGION'),
                os.getenv('AWS_DEFAULT_REGION'),
            ) or DEFAULT_REGION,
            prefix=normalize_prefix(os.getenv('AWS_S3_PREFIX')),
            presigned_expiry_seconds=parse_expiry(os.getenv('PRESIGNED_URL_EXPIRY')),
            credentials_provided=bool(access_key and secret_key),
            allowed_origin=_first_nonempty(os.getenv('ALLOWED_ORIGIN')) or '*',
            access_key_id=access_key,
            secret_access_key=secret_key,
        )
