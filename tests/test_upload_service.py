"""
Tests for presigned upload URL issuance
"""

import re
import sys
from pathlib import Path
from unittest.mock import MagicMock

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from config import UploadConfig
from upload_service import (
    HttpError, PresignService, build_error_response, build_success_response,
    iso_timestamp, safe_content_type, sanitize_file_name
)


@pytest.fixture
def s3_client():
    client = MagicMock()
    client.generate_presigned_url.return_value = 'https://bucket.s3.amazonaws.com/signed'
    return client


@pytest.fixture
def config():
    return UploadConfig(
        bucket='pitch-videos',
        region='eu-west-1',
        prefix='user-uploads/',
        presigned_expiry_seconds=600,
        credentials_provided=True,
    )


class TestKeyBuilding:

    def test_sanitize_replaces_unsafe_characters(self):
        assert sanitize_file_name('my pitch (final).mp4') == 'my_pitch__final_.mp4'

    def test_sanitize_keeps_last_200_characters(self):
        name = 'a' * 250 + '.mp4'
        result = sanitize_file_name(name)
        assert len(result) == 200
        assert result.endswith('.mp4')

    def test_key_has_prefix_and_timestamp(self, config, s3_client):
        key = PresignService(config, s3_client).build_key('clip.mp4')
        assert re.fullmatch(r'user-uploads/\d{13}-clip\.mp4', key)

    def test_content_type_default(self):
        assert safe_content_type(None) == 'video/mp4'
        assert safe_content_type('  ') == 'video/mp4'
        assert safe_content_type(42) == 'video/mp4'
        assert safe_content_type('video/quicktime') == 'video/quicktime'


class TestGeneratePresignedUpload:

    def test_success_payload(self, config, s3_client):
        service = PresignService(config, s3_client)
        payload = service.generate_presigned_upload('clip.mp4', 'video/quicktime')

        assert payload['presignedUrl'] == 'https://bucket.s3.amazonaws.com/signed'
        assert payload['bucket'] == 'pitch-videos'
        assert payload['region'] == 'eu-west-1'
        assert payload['expiresIn'] == 600
        assert payload['key'].startswith('user-uploads/')

    def test_s3_called_with_put_object_params(self, config, s3_client):
        service = PresignService(config, s3_client)
        payload = service.generate_presigned_upload('clip.mp4')

        args, kwargs = s3_client.generate_presigned_url.call_args
        assert args[0] == 'put_object'
        params = kwargs['Params']
        assert params['Bucket'] == 'pitch-videos'
        assert params['Key'] == payload['key']
        assert params['ContentType'] == 'video/mp4'
        assert params['Metadata']['uploaded-by'] == 'teleprompter-module'
        assert params['Metadata']['upload-timestamp'].endswith('Z')
        assert kwargs['ExpiresIn'] == 600

    def test_missing_bucket_is_server_error(self, config, s3_client):
        config.bucket = None
        with pytest.raises(HttpError) as exc_info:
            PresignService(config, s3_client).generate_presigned_upload('clip.mp4')

        assert exc_info.value.status_code == 500
        assert exc_info.value.details
        s3_client.generate_presigned_url.assert_not_called()

    @pytest.mark.parametrize("file_name", [None, '', 123, ['a.mp4']])
    def test_bad_file_name_is_client_error(self, config, s3_client, file_name):
        with pytest.raises(HttpError) as exc_info:
            PresignService(config, s3_client).generate_presigned_upload(file_name)
        assert exc_info.value.status_code == 400


class TestHealthPayload:

    def test_ok_status(self, config, s3_client):
        payload = PresignService(config, s3_client).health_payload()

        assert payload['status'] == 'OK'
        assert payload['config'] == {
            'bucket': 'pitch-videos',
            'region': 'eu-west-1',
            'prefix': 'user-uploads/',
            'hasCredentials': True,
            'presignedExpirySeconds': 600,
            'allowedOrigin': '*',
        }

    def test_missing_config_status(self, s3_client):
        payload = PresignService(UploadConfig(), s3_client).health_payload()
        assert payload['status'] == 'MISSING_CONFIG'

    def test_timestamp_format(self):
        assert re.fullmatch(r'\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z', iso_timestamp())


class TestResponses:

    def test_success_response(self):
        assert build_success_response({'key': 'k'}) == {'success': True, 'key': 'k'}

    def test_error_response(self):
        assert build_error_response('bad') == {'success': False, 'error': 'bad'}
        assert build_error_response('bad', 'why') == {'success': False, 'error': 'bad', 'details': 'why'}
