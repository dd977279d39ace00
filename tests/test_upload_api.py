"""
Tests for the upload HTTP API
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from fastapi.testclient import TestClient
from config import UploadConfig
from pydantic import ValidationError
from upload_api import GENERIC_FAILURE, PresignRequest, create_app
from upload_service import PresignService


@pytest.fixture
def s3_client():
    client = MagicMock()
    client.generate_presigned_url.return_value = 'https://signed.example/put'
    return client


def make_client(s3_client, **overrides):
    settings = {'bucket': 'pitch-videos', 'region': 'us-east-1', 'allowed_origin': 'https://app.example'}
    settings.update(overrides)
    config = UploadConfig(**settings)
    return TestClient(create_app(config, PresignService(config, s3_client)))


class TestHealthEndpoint:

    def test_health(self, s3_client):
        response = make_client(s3_client).get('/health')

        assert response.status_code == 200
        data = response.json()
        assert data['status'] == 'OK'
        assert data['config']['bucket'] == 'pitch-videos'
        assert data['config']['allowedOrigin'] == 'https://app.example'

    def test_health_missing_bucket(self, s3_client):
        data = make_client(s3_client, bucket=None).get('/health').json()
        assert data['status'] == 'MISSING_CONFIG'


class TestPresignEndpoint:

    def test_success(self, s3_client):
        response = make_client(s3_client).post(
            '/api/get-presigned-url', json={'fileName': 'pitch.mp4', 'contentType': 'video/mp4'}
        )

        assert response.status_code == 200
        data = response.json()
        assert data['success'] is True
        assert data['presignedUrl'] == 'https://signed.example/put'
        assert data['key'].endswith('-pitch.mp4')
        assert data['bucket'] == 'pitch-videos'
        assert data['expiresIn'] == 900

    def test_missing_file_name(self, s3_client):
        response = make_client(s3_client).post('/api/get-presigned-url', json={})

        assert response.status_code == 400
        assert response.json()['success'] is False
        assert 'fileName' in response.json()['error']

    def test_invalid_json_treated_as_empty(self, s3_client):
        response = make_client(s3_client).post(
            '/api/get-presigned-url', content=b'not json', headers={'Content-Type': 'application/json'}
        )
        assert response.status_code == 400

    @pytest.mark.parametrize("body", [{'fileName': 123}, {'fileName': ['a.mp4']}, ['pitch.mp4'], 'pitch.mp4'])
    def test_invalid_body_is_client_error(self, s3_client, body):
        response = make_client(s3_client).post('/api/get-presigned-url', json=body)

        assert response.status_code == 400
        assert response.json() == {'success': False, 'error': 'fileName is required and must be a string.'}
        s3_client.generate_presigned_url.assert_not_called()

    def test_non_string_content_type_uses_default(self, s3_client):
        response = make_client(s3_client).post(
            '/api/get-presigned-url', json={'fileName': 'pitch.mp4', 'contentType': 42}
        )

        assert response.status_code == 200
        params = s3_client.generate_presigned_url.call_args[1]['Params']
        assert params['ContentType'] == 'video/mp4'

    def test_missing_bucket(self, s3_client):
        response = make_client(s3_client, bucket=None).post(
            '/api/get-presigned-url', json={'fileName': 'pitch.mp4'}
        )

        assert response.status_code == 500
        data = response.json()
        assert data['success'] is False
        assert 'details' in data

    def test_unexpected_error_is_generic(self, s3_client):
        s3_client.generate_presigned_url.side_effect = RuntimeError('credentials exploded')
        response = make_client(s3_client).post('/api/get-presigned-url', json={'fileName': 'pitch.mp4'})

        assert response.status_code == 500
        assert response.json() == {'success': False, 'error': GENERIC_FAILURE}

    def test_cors_preflight(self, s3_client):
        response = make_client(s3_client).options(
            '/api/get-presigned-url',
            headers={
                'Origin': 'https://app.example',
                'Access-Control-Request-Method': 'POST',
                'Access-Control-Request-Headers': 'Content-Type',
            },
        )
        assert response.status_code == 200
        assert response.headers['access-control-allow-origin'] == 'https://app.example'


class TestPresignRequest:

    def test_fields_optional(self):
        request = PresignRequest.model_validate({})
        assert request.fileName is None
        assert request.contentType is None

    def test_file_name_must_be_string(self):
        with pytest.raises(ValidationError):
            PresignRequest.model_validate({'fileName': 7})
