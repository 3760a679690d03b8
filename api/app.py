# Path: api/app.py
# Purpose: Expose a FastAPI application for image upload and similarity search.
# Layer: api.
# Details: Thin routing over ImageSearchService; domain errors map to distinct HTTP statuses.

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from core.errors import (
    DecodeError,
    ImageNotFoundError,
    ImageSearchError,
    InvalidRequestError,
    StoreError,
    StructuralError,
)
from core.search.service import ImageSearchService

ERROR_STATUS = {
    InvalidRequestError: 400,
    ImageNotFoundError: 404,
    DecodeError: 422,
    StructuralError: 422,
    StoreError: 503,
}


def status_for(exc: ImageSearchError) -> int:
    """Return the HTTP status for a domain error, 500 for anything unmapped."""

    for error_type, status in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status
    return 500


def create_app(service: Optional[ImageSearchService] = None) -> FastAPI:
    """Create a FastAPI app instance configured with the provided search service."""

    app = FastAPI(title="imgsearch API", version="1.0.0")

    def _service() -> ImageSearchService:
        if service is None:
            raise HTTPException(status_code=500, detail="Search service is not configured.")
        return service

    @app.exception_handler(ImageSearchError)
    async def domain_error(request: Request, exc: ImageSearchError) -> JSONResponse:
        return JSONResponse(
            status_code=status_for(exc),
            content={"success": False, "error": type(exc).__name__, "message": str(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def request_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Malformed query or form fields map to the same 400 as InvalidRequestError.
        fields = ", ".join(".".join(str(part) for part in error.get("loc", ())) for error in exc.errors())
        return JSONResponse(
            status_code=ERROR_STATUS[InvalidRequestError],
            content={"success": False, "error": InvalidRequestError.__name__, "message": f"Invalid request: {fields}"},
        )

    @app.get("/health")
    def health() -> Dict[str, Any]:
        """Return service health; backend failures surface as 503."""

        return {"success": True, **_service().health()}

    @app.post("/upload")
    async def upload(image: UploadFile = File(...)) -> Dict[str, Any]:
        data = await image.read()
        record = _service().upload(data, image.filename or "")
        return {
            "success": True,
            "message": "Image uploaded.",
            "image_id": record.id,
            "image_path": record.stored_path.name,
        }

    @app.post("/search")
    async def search(image: UploadFile = File(...), top_k: int = Query(default=10)) -> Dict[str, Any]:
        data = await image.read()
        hits = _service().search(data, image.filename or "", top_k=top_k)
        results = [
            {
                "image_id": hit.image_id,
                "score": hit.score,
                "distance": hit.distance,
                "image_path": hit.image_path,
                "similarity": hit.similarity,
            }
            for hit in hits
        ]
        return {"success": True, "message": "Search completed.", "results": results, "total": len(results)}

    @app.get("/images/{image_id}")
    def info(image_id: str) -> Dict[str, Any]:
        details = _service().info(image_id)
        return {
            "success": True,
            "image_id": image_id,
            "filename": details.filename,
            "size": details.size,
            "width": details.width,
            "height": details.height,
            "format": details.format,
        }

    @app.delete("/images/{image_id}")
    def delete(image_id: str) -> Dict[str, Any]:
        _service().delete(image_id)
        return {"success": True, "message": "Image deleted."}

    @app.get("/stats")
    def stats() -> Dict[str, Any]:
        return {"success": True, **_service().stats()}

    if service is not None:
        upload_root: Path = service.storage.ensure_root()
        app.mount("/uploads", StaticFiles(directory=str(upload_root)), name="uploads")

    return app
