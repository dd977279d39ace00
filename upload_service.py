# Upload Service - Presigned S3 PUT URLs for direct uploads from the app

import re
import time
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from config import UploadConfig

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = 'video/mp4'
DEFAULT_METADATA = {'uploaded-by': 'teleprompter-module'}

_UNSAFE_CHARS = re.compile(r'[^a-zA-Z0-9._-]')


class HttpError(Exception):
    """Error carrying the HTTP status and optional details for the response"""

    def __init__(self, status_code: int, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details


def iso_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def sanitize_file_name(file_name: str) -> str:
    return _UNSAFE_CHARS.sub('_', file_name)[-200:]


def safe_content_type(content_type: Any) -> str:
    if isinstance(content_type, str) and content_type.strip():
        return content_type.strip()
    return DEFAULT_CONTENT_TYPE


def build_success_response(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {'success': True, **payload}


def build_error_response(message: str, details: Optional[str] = None) -> Dict[str, Any]:
    response: Dict[str, Any] = {'success': False, 'error': message}
    if details:
        response['details'] = details
    return response


class PresignService:
    """Issue presigned upload targets under the configured prefix"""

    def __init__(self, config: UploadConfig, s3_client=None):
        self.config = config
        self._client = s3_client

    @property
    def client(self):
        if self._client is None:
            kwargs: Dict[str, Any] = {'region_name': self.config.region}
            if self.config.credentials_provided:
                kwargs['aws_access_key_id'] = self.config.access_key_id
                kwargs['aws_secret_access_key'] = self.config.secret_access_key
            self._client = boto3.client('s3', **kwargs)
        return self._client

    def build_key(self, file_name: str) -> str:
        timestamp = int(time.time() * 1000)
        return f"{self.config.prefix}{timestamp}-{sanitize_file_name(file_name)}"

    def health_payload(self) -> Dict[str, Any]:
        config = self.config
        return {
            'status': 'OK' if config.bucket else 'MISSING_CONFIG',
            'config': {
                'bucket': config.bucket,
                'region': config.region,
                'prefix': config.prefix,
                'hasCredentials': config.credentials_provided,
                'presignedExpirySeconds': config.presigned_expiry_seconds,
                'allowedOrigin': config.allowed_origin,
            },
            'timestamp': iso_timestamp(),
        }

    def generate_presigned_upload(self, file_name: Any, content_type: Any = None) -> Dict[str, Any]:
        """
        Create a presigned PUT target for one upload

        Args:
            file_name: Client-side file name, sanitised into the key
            content_type: MIME type, defaults to video/mp4

        Returns:
            Dict with presignedUrl, key, bucket, region, expiresIn

        Raises:
            HttpError: 500 when no bucket is configured, 400 on a bad file name
        """
        config = self.config
        if not config.bucket:
            raise HttpError(
                500,
                'AWS_S3_BUCKET is not configured on the backend.',
                'Set the AWS_S3_BUCKET environment variable before requesting presigned URLs.'
            )

        if not file_name or not isinstance(file_name, str):
            raise HttpError(400, 'fileName is required and must be a string.')

        key = self.build_key(file_name)
        try:
            presigned_url = self.client.generate_presigned_url(
                'put_object',
                Params={
                    'Bucket': config.bucket,
                    'Key': key,
                    'ContentType': safe_content_type(content_type),
                    'Metadata': {**DEFAULT_METADATA, 'upload-timestamp': iso_timestamp()},
                },
                ExpiresIn=config.presigned_expiry_seconds,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Presigning failed for {key}: {e}", exc_info=True)
            raise

        logger.info(f"🔑 Presigned upload issued for {key} ({config.presigned_expiry_seconds}s)")
        return {
            'presignedUrl': presigned_url,
            'key': key,
            'bucket': config.bucket,
            'region': config.region,
            'expiresIn': config.presigned_expiry_seconds,
        }
