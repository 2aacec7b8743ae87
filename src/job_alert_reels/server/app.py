"""HTTP API for job extraction, storage and reel generation."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator
from starlette.exceptions import HTTPException as StarletteHTTPException

from job_alert_reels import __version__
from job_alert_reels.config import AppSettings, load_settings
from job_alert_reels.exceptions import DatastoreError, ExtractionError, JobAlertError
from job_alert_reels.extraction import GeminiJobExtractor, JobFields
from job_alert_reels.service import ReelService
from job_alert_reels.storage import SupabaseJobStore

logger = logging.getLogger("job_alert_reels.server")


class ExtractRequest(BaseModel):
    message: str


class GenerateVideoRequest(BaseModel):
    id: Optional[Any] = None
    company_name: Optional[str] = None
    designation: Optional[str] = None
    location: Optional[str] = None
    batch: Optional[str] = None
    apply_link: Optional[str] = None
    instagram_caption: Optional[str] = None

    @field_validator(
        "company_name", "designation", "location", "batch", "apply_link", "instagram_caption",
        mode="before",
    )
    @classmethod
    def _numbers_as_text(cls, value: Any) -> Any:
        # Batches often arrive as numbers, e.g. 2025
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def to_fields(self) -> JobFields:
        return JobFields(**self.model_dump(exclude={"id"}))


# =============================================================================
# Dependencies
# =============================================================================


def get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_reel_service(settings: AppSettings = Depends(get_settings)) -> ReelService:
    try:
        return ReelService(settings)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


def get_extractor(settings: AppSettings = Depends(get_settings)) -> GeminiJobExtractor:
    try:
        return GeminiJobExtractor(api_key=settings.gemini_api_key, model=settings.gemini_model)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def get_job_store(settings: AppSettings = Depends(get_settings)) -> SupabaseJobStore:
    try:
        return SupabaseJobStore(
            url=settings.supabase_url,
            service_key=settings.supabase_service_key,
            table=settings.supabase_table,
            columns=settings.supabase_columns,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


# =============================================================================
# Application
# =============================================================================


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title="Job Alert Reels",
        description="Turn job postings into Instagram reels",
        version=__version__,
    )
    app.state.settings = settings or load_settings()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content={"error": "Not found"})
        return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'][1:]) or 'body'}: {error['msg']}"
            for error in exc.errors()
        )
        return JSONResponse(status_code=400, content={"success": False, "error": f"Invalid request body: {problems}"})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Something went wrong!"})

    @app.get("/")
    async def index() -> dict:
        return {
            "service": "job-alert-reels",
            "version": __version__,
            "endpoints": [
                "GET /health",
                "GET /api/config",
                "POST /api/extract",
                "POST /api/jobs",
                "POST /api/generate-video",
            ],
        }

    @app.get("/health")
    async def health() -> dict:
        return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/api/config")
    async def api_config(settings: AppSettings = Depends(get_settings)) -> dict:
        return settings.public_config()

    @app.post("/api/extract")
    async def extract(body: ExtractRequest, extractor: GeminiJobExtractor = Depends(get_extractor)):
        try:
            fields = await extractor.extract(body.message)
        except ValueError as e:
            return JSONResponse(status_code=400, content={"success": False, "error": str(e)})
        except ExtractionError as e:
            logger.error(f"Extraction error: {e}")
            return JSONResponse(
                status_code=502,
                content={"success": False, "error": f"Failed to extract information: {e}"},
            )
        return {"success": True, "data": fields.model_dump()}

    @app.post("/api/jobs")
    async def insert_job(fields: JobFields, store: SupabaseJobStore = Depends(get_job_store)):
        try:
            row_id = await store.insert(fields)
        except DatastoreError as e:
            logger.error(f"Database insertion error: {e}")
            return JSONResponse(
                status_code=502,
                content={"success": False, "error": f"Failed to insert into database: {e}"},
            )
        return {"success": True, "id": row_id}

    @app.post("/api/generate-video")
    async def generate_video(
        body: GenerateVideoRequest,
        service: ReelService = Depends(get_reel_service),
    ):
        logger.info(f"Generating video for job ID: {body.id}")
        try:
            result = await service.generate_and_publish(
                body.to_fields(),
                caption=body.instagram_caption or None,
            )
        except (JobAlertError, ValueError) as e:
            logger.error(f"Video generation error: {e}")
            return JSONResponse(
                status_code=500,
                content={"success": False, "error": str(e) or "Failed to generate video"},
            )
        return result.to_response()

    return app
