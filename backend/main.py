"""SEO Analyzer API – FastAPI app and endpoints."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from database import delete_report, get_report, init_db, list_reports
from errors import InvalidInput, NotFound, SeoAnalyzerError
from pipeline import run_analysis
from rate_limit import enforce_rate_limit
from schemas import (
    AnalysisResponse,
    AnalyzeRequest,
    DeleteResponse,
    Pagination,
    ReportListResponse,
    ReportPage,
    ReportSummary,
    SeoReport,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 50


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database ready at %s", config.DB_PATH)
    yield


app = FastAPI(
    title="SEO Analyzer API",
    description="Single-page SEO metadata extraction with AI critique",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SeoAnalyzerError)
async def seo_error_handler(request: Request, exc: SeoAnalyzerError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        message = str(errors[0].get("msg") or message).removeprefix("Value error, ")
    return JSONResponse(status_code=400, content={"success": False, "error": message})


def _require_id(report_id: str) -> str:
    cleaned = report_id.strip()
    if not cleaned:
        raise InvalidInput("Report ID is required")
    return cleaned


@app.post("/api/analyze", response_model=AnalysisResponse, dependencies=[Depends(enforce_rate_limit)])
def analyze(body: AnalyzeRequest) -> AnalysisResponse:
    """
    Pipeline: normalize url -> fetch page -> extract metadata -> AI analysis -> store report.
    """
    try:
        report = run_analysis(body.url)
    except SeoAnalyzerError:
        raise
    except Exception as e:
        logger.exception("Unexpected error in analyze for %s", body.url)
        raise SeoAnalyzerError("Failed to analyze website") from e

    return AnalysisResponse(data=SeoReport(**report))


@app.get("/api/reports", response_model=ReportListResponse)
def get_reports(limit: int = 10, offset: int = 0, url: str | None = None) -> ReportListResponse:
    """Return saved reports newest first, optionally filtered by url substring."""
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise InvalidInput(f"Limit must be between 1 and {MAX_PAGE_SIZE}")
    if offset < 0:
        raise InvalidInput("Offset must be non-negative")

    try:
        rows, total = list_reports(limit=limit, offset=offset, url_filter=url or None)
    except Exception as e:
        logger.exception("Unexpected error listing reports")
        raise SeoAnalyzerError("Failed to fetch reports") from e

    return ReportListResponse(
        data=ReportPage(
            reports=[ReportSummary(**row) for row in rows],
            pagination=Pagination(total=total, limit=limit, offset=offset, has_more=offset + limit < total),
        )
    )


@app.get("/api/reports/{report_id}", response_model=AnalysisResponse)
def get_report_by_id(report_id: str) -> AnalysisResponse:
    """Return one full report, including its display score."""
    report_id = _require_id(report_id)
    try:
        row = get_report(report_id)
    except Exception as e:
        logger.exception("Unexpected error fetching report %s", report_id)
        raise SeoAnalyzerError("Failed to fetch report") from e

    if row is None:
        raise NotFound("Report not found")
    return AnalysisResponse(data=SeoReport(**row))


@app.delete("/api/reports/{report_id}", response_model=DeleteResponse)
def delete_report_by_id(report_id: str) -> DeleteResponse:
    report_id = _require_id(report_id)
    try:
        deleted = delete_report(report_id)
    except Exception as e:
        logger.exception("Unexpected error deleting report %s", report_id)
        raise SeoAnalyzerError("Failed to delete report") from e

    if not deleted:
        raise NotFound("Report not found")
    logger.info("Deleted report %s", report_id)
    return DeleteResponse(message="Report deleted successfully")


@app.get("/health")
def health() -> dict:
    """Health check for deployment."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
