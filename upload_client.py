# Upload Client - Ask the backend for a presigned URL and PUT the video to S3

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests

logger = logging.getLogger(__name__)

CHUNK_SIZE = 256 * 1024

ProgressCallback = Callable[[int], None]


class UploadTargetError(RuntimeError):
    pass


@dataclass
class UploadTarget:
    url: str
    key: str
    expiresIn: int


@dataclass
class UploadResult:
    success: bool
    key: Optional[str] = None
    url: Optional[str] = None
    error: Optional[str] = None


class _ProgressFile:
    """File wrapper that reports read progress as a percentage"""

    def __init__(self, path: Path, on_progress: Optional[ProgressCallback] = None):
        self._file = open(path, 'rb')
        self._size = os.path.getsize(path)
        self._read = 0
        self._last_percent = -1
        self._on_progress = on_progress

    def __len__(self) -> int:
        return self._size

    def __iter__(self):
        while True:
            chunk = self.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk

    def read(self, size: int = -1) -> bytes:
        chunk = self._file.read(size)
        self._read += len(chunk)
        self._report()
        return chunk

    def _report(self):
        if self._on_progress is None:
            return
        percent = 100 if self._size == 0 else min(100, int(self._read * 100 / self._size))
        if percent != self._last_percent:
            self._last_percent = percent
            self._on_progress(percent)

    def close(self):
        self._file.close()


class UploadClient:
    """Direct-to-S3 uploads through the presign backend"""

    def __init__(self, base_url: str, timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def request_upload_target(self, file_name: str, content_type: str = 'video/mp4') -> UploadTarget:
        response = self.session.post(
            f"{self.base_url}/api/get-presigned-url",
            json={'fileName': file_name, 'contentType': content_type},
            timeout=self.timeout,
        )

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.ok or not data.get('success'):
            message = data.get('error') or f"Presign request failed with status {response.status_code}"
            raise UploadTargetError(message)

        return UploadTarget(url=data['presignedUrl'], key=data['key'], expiresIn=int(data.get('expiresIn', 0)))

    def put_object(
        self,
        url: str,
        local_path: str,
        content_type: str = 'video/mp4',
        on_progress: Optional[ProgressCallback] = None,
    ) -> UploadResult:
        """PUT the file to a presigned URL, reporting 0-100 progress"""
        path = Path(local_path)
        if not path.exists():
            return UploadResult(success=False, error=f"File not found: {local_path}")

        body = _ProgressFile(path, on_progress)
        try:
            response = self.session.put(
                url,
                data=body,
                headers={'Content-Type': content_type, 'Content-Length': str(len(body))},
                timeout=None,
            )
        except requests.RequestException as e:
            logger.error(f"❌ Upload of {path.name} failed: {e}")
            return UploadResult(success=False, url=url, error=str(e))
        finally:
            body.close()

        if not response.ok:
            logger.error(f"❌ Upload of {path.name} rejected: {response.status_code}")
            return UploadResult(success=False, url=url, error=f"Upload failed with status {response.status_code}")

        return UploadResult(success=True, url=url.split('?')[0])

    def upload(
        self,
        local_path: str,
        content_type: str = 'video/mp4',
        on_progress: Optional[ProgressCallback] = None,
    ) -> UploadResult:
        """Request a target and upload; failures come back in the result"""
        try:
            target = self.request_upload_target(Path(local_path).name, content_type)
        except (UploadTargetError, requests.RequestException) as e:
            logger.error(f"❌ Could not get upload target: {e}")
            return UploadResult(success=False, error=str(e))

        result = self.put_object(target.url, local_path, content_type, on_progress)
        result.key = target.key
        if result.success:
            logger.info(f"☁️  Uploaded {local_path} as {target.key}")
        return result
