from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from staff_portal.api.routes.financial import router as financial_router
from staff_portal.api.routes.planday import router as planday_router
from staff_portal.core.config import settings
from staff_portal.core.errors import ValidationError
from staff_portal.core.logging import configure_logging
from staff_portal.planday.client import PlandayClient
from staff_portal.planday.format_log import FormatKind, format_log
from staff_portal.planday.token_cache import TokenCache
from staff_portal.services.sheets import SheetsClient

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    http = httpx.AsyncClient(timeout=settings.upstream_timeout_seconds)
    tokens = TokenCache(
        http,
        client_id=settings.planday_client_id,
        refresh_token=settings.planday_refresh_token,
        token_url=settings.planday_token_url,
    )
    app.state.token_cache = tokens
    app.state.planday_client = PlandayClient(
        http,
        tokens,
        client_id=settings.planday_client_id,
        api_base=settings.planday_api_base,
    )
    app.state.sheets_client = SheetsClient(
        http,
        spreadsheet_id=settings.google_sheet_id,
        api_key=settings.google_api_key,
        api_base=settings.sheets_api_base,
    )
    try:
        yield
    finally:
        await http.aclose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Staff portal backend: Planday shift and revenue proxy plus financial KPIs.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _describe_validation_errors(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        return "Invalid JSON"
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": _describe_validation_errors(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


app.include_router(planday_router)
app.include_router(financial_router)


@app.get("/health", tags=["system"])
def health() -> dict:
    return {
        "status": "ok",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "planday_configured": bool(settings.planday_client_id and settings.planday_refresh_token),
        "sheets_configured": bool(settings.google_sheet_id and settings.google_api_key),
    }


@app.get("/formats", tags=["system"])
def formats(
    kind: FormatKind | None = Query(default=None),
    limit: int = Query(default=25, ge=1, le=100),
) -> dict:
    return {
        "accepted": format_log.summary(),
        "recent": [outcome.as_dict() for outcome in format_log.recent(kind, limit)],
    }
