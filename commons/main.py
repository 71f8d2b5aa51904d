"""FastAPI application entrypoint. No business logic; only wiring, middleware and error rendering."""

from dotenv import load_dotenv

load_dotenv()

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from commons.api import router as api_router
from commons.api.errors import http_error
from commons.core.config import settings
from commons.core.errors import ServiceError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Commons API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=422,
        content={"error": f"{location}: {message}" if location else message},
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Service errors raised outside a router's own handling (e.g. from dependencies)."""
    return await http_exception_handler(request, http_error(exc))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra={"path": request.url.path})
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


app.include_router(api_router, prefix=settings.API_PREFIX)

# Relative STATIC_DIR values are taken from the project root, not the working directory
PROJECT_ROOT = Path(__file__).resolve().parent.parent


def resolve_static_dir(static_dir: str) -> Path:
    path = Path(static_dir)
    return path.resolve() if path.is_absolute() else (PROJECT_ROOT / path).resolve()


STATIC_DIR = resolve_static_dir(settings.STATIC_DIR)
INDEX_FILE = STATIC_DIR / "index.html"


@app.get("/", response_model=None)
def root() -> Response | dict[str, str]:
    """Single-page entry document, or a minimal discovery payload when no static site is deployed."""
    if INDEX_FILE.is_file():
        return FileResponse(INDEX_FILE)
    return {"message": "Commons API"}


# Mounted last so API routes take precedence
if STATIC_DIR.is_dir():
    app.mount("/", StaticFiles(directory=str(STATIC_DIR), html=True), name="static")
else:
    logger.warning("Static directory not found; serving API only", extra={"static_dir": str(STATIC_DIR)})
