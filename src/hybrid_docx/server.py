"""
HTTP job API for the hybrid PDF to DOCX converter.

Endpoints:
    POST /convert              Upload a PDF (multipart field ``pdf``), start a job
    GET  /progress/{job_id}    Latest status of a job
    GET  /download/{filename}  Download a finished DOCX

Run with:
    hybrid-docx-server
"""

import logging
import shutil
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, File, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse

from .config import get_config
from .utils.io import ensure_dir
from .utils.jobs import ArtifactNotFoundError, ConversionService, JobNotFoundError

logger = logging.getLogger(__name__)

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _store_upload(upload: UploadFile, upload_dir: Path) -> Path:
    """Persist an upload under a collision-free name."""
    ensure_dir(upload_dir)
    safe_name = Path(upload.filename or "document.pdf").name
    path = upload_dir / f"{uuid.uuid4().hex}_{safe_name}"
    with open(path, "wb") as buffer:
        shutil.copyfileobj(upload.file, buffer)
    return path


def create_app(service: Optional[ConversionService] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        service: Conversion service to expose; a default one is created
            from ``get_config()`` when omitted
    """
    service = service or ConversionService(get_config())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"Conversion service ready (workers={service.config.service.max_workers}, "
            f"outputs={service.output_dir})"
        )
        yield
        logger.info("Shutting down conversion service...")
        service.shutdown(wait=False)

    app = FastAPI(
        title="Hybrid PDF to DOCX API",
        description="Rebuilds paragraphs and tables from PDF text and OCR of embedded scans",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/convert")
    async def convert(pdf: Optional[UploadFile] = File(None)):
        """Store the uploaded PDF and start converting it in the background."""
        if pdf is None or not pdf.filename:
            return PlainTextResponse("No file uploaded.", status_code=400)

        input_path = _store_upload(pdf, Path(service.config.service.upload_dir))
        job_id = service.submit(input_path, pdf.filename)
        logger.info(f"Uploaded '{pdf.filename}' as job {job_id}")
        return {"success": True, "jobId": job_id}

    @app.get("/progress/{job_id}")
    async def progress(job_id: str):
        try:
            status = service.get_status(job_id)
        except JobNotFoundError:
            return JSONResponse({"message": "Job not found"}, status_code=404)
        return status.to_dict()

    @app.get("/download/{filename}")
    async def download(filename: str):
        try:
            path = service.artifact_path(filename)
        except ArtifactNotFoundError:
            return PlainTextResponse("File not found.", status_code=404)
        return FileResponse(str(path), media_type=DOCX_MEDIA_TYPE, filename=path.name)

    return app


def main():
    """Run the API with uvicorn."""
    import uvicorn

    config = get_config()
    logger.info(f"Server running on http://localhost:{config.service.port}")
    uvicorn.run(
        create_app(ConversionService(config)),
        host=config.service.host,
        port=config.service.port
    )


if __name__ == "__main__":
    main()
