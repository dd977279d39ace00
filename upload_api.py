from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from typing import Any, Optional
from pydantic import BaseModel, StrictStr, ValidationError
import json
import logging

from config import UploadConfig
from upload_service import (
    HttpError,
    PresignService,
    build_error_response,
    build_success_response,
)

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

GENERIC_FAILURE = 'Failed to generate presigned URL. Please try again later.'


class PresignRequest(BaseModel):
    """Body of a presign request; a bad fileName is reported as a 400 by the service"""
    fileName: Optional[StrictStr] = None
    contentType: Any = None


def create_app(config: Optional[UploadConfig] = None, service: Optional[PresignService] = None) -> FastAPI:
    """Build the upload API around one presign service"""
    config = config or UploadConfig.from_env()
    service = service or PresignService(config)

    app = FastAPI(
        title="Pitch Video Upload Service",
        description="Presigned S3 upload URLs for recorded pitch videos",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.allowed_origin],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.get("/health")
    def health_check():
        return service.health_payload()

    @app.post("/api/get-presigned-url")
    async def get_presigned_url(request: Request):
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            body = {}

        try:
            presign_request = PresignRequest.model_validate(body)
        except ValidationError as e:
            logger.warning(f"Invalid presign request body: {e.error_count()} errors")
            presign_request = PresignRequest()

        try:
            payload = service.generate_presigned_upload(presign_request.fileName, presign_request.contentType)
            return build_success_response(payload)

        except HttpError as e:
            logger.warning(f"Presign rejected ({e.status_code}): {e.message}")
            return JSONResponse(
                status_code=e.status_code,
                content=build_error_response(e.message, e.details)
            )

        except Exception as e:
            logger.error(f"❌ Error generating presigned URL: {e}", exc_info=True)
            return JSONResponse(status_code=500, content=build_error_response(GENERIC_FAILURE))

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    print("=" * 70)
    print("☁️  Pitch Video Upload Service")
    print("=" * 70)
    print(f"🌐 Server: http://localhost:8000")
    print(f"📊 Health check: http://localhost:8000/health")
    print("=" * 70)

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info",
        access_log=True
    )
