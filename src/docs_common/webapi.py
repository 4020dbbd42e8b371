import asyncio
import logging
import os
from pathlib import Path

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.responses import Response

from docs_common.conversion import Converter, DocumentConversionError, LicenseGuard, LicensedConverterFactory
from docs_common.conversion.adapters import (
    MEDIA_TYPES,
    DoclingStrategy,
    FileLicenseConfiguration,
    OutputFormat,
    PlainTextStrategy,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Document Conversion Utilities",
    version=os.getenv("DOCS_COMMON_VERSION", "0.1.0"),
    description="Converts uploaded documents through the licensed conversion pipeline.",
)

# Global configuration defaults
LICENSE_PATH = os.getenv("DOCS_LICENSE_PATH") or None
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "50"))
TEXT_EXTENSIONS = {".txt", ".md"}

# One guard per process, shared by all factories
GUARD: LicenseGuard = LicenseGuard.from_configuration(FileLicenseConfiguration(LICENSE_PATH))
TEXT_FACTORY = LicensedConverterFactory(GUARD, lambda: Converter(PlainTextStrategy()))


def _docling_factory(filename: str) -> LicensedConverterFactory:
    return LicensedConverterFactory(GUARD, lambda: Converter(DoclingStrategy(source_name=filename)))


@app.on_event("startup")
async def _startup() -> None:
    GUARD.load_license()


@app.get("/health")
def health() -> dict[str, str]:
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.get("/license")
def license_status() -> dict[str, object]:
    lic = GUARD.license
    return {
        "licensed": lic is not None,
        "fingerprint": getattr(lic, "fingerprint", None),
    }


@app.post("/convert")
async def convert(file: UploadFile = File(...), format: str = Query("pdf")) -> Response:
    """Convert an uploaded document and return the result in the requested format.

    Text uploads (.txt, .md) are handled as plain text, everything else is
    loaded with Docling.
    """
    try:
        fmt = OutputFormat.from_name(format)
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"code": "unsupported_format", "message": str(e)})

    filename = file.filename or "upload"
    data = bytearray()
    CHUNK = 1024 * 1024
    max_bytes = MAX_UPLOAD_MB * 1024 * 1024
    while True:
        chunk = await file.read(CHUNK)
        if not chunk:
            break
        data.extend(chunk)
        if len(data) > max_bytes:
            raise HTTPException(status_code=413, detail={"code": "payload_too_large", "message": f"upload exceeds {MAX_UPLOAD_MB} MB"})

    if Path(filename).suffix.lower() in TEXT_EXTENSIONS:
        factory = TEXT_FACTORY
    else:
        factory = _docling_factory(filename)

    try:
        # Docling and ReportLab block, keep them off the event loop
        content = await asyncio.to_thread(factory.get, lambda: factory.convert().from_bytes(data).to(fmt).as_bytes())
    except DocumentConversionError as e:
        logger.warning("conversion of %s failed: %s (%s)", filename, e, e.cause)
        raise HTTPException(status_code=422, detail={"code": "conversion_failed", "message": str(e)})
    return Response(content=content, media_type=MEDIA_TYPES[fmt])


def run() -> None:
    """Run a development ASGI server using uvicorn.

    Exposes the app at host:port (default 0.0.0.0:8080). Set PORT env var to override.
    """
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8080"))
    # Enable reload in dev unless explicitly disabled
    reload = os.getenv("RELOAD", "true").lower() in {"1", "true", "yes", "on"}

    uvicorn.run("docs_common.webapi:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    run()
