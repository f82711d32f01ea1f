import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse

from analyzer.copywriting import augment_copy, copy_example
from analyzer.fetcher import PageFetchError, check_robots, fetch_page
from analyzer.urls import InvalidURLError, has_http_scheme, normalize_url
from api.models import (
    AnalyzeRequest,
    CopyAugmentRequest,
    CopyAugmentResponse,
    CopyExampleRequest,
    PdfRequest,
)
from config import settings
from core.pipeline import AnalysisPipeline
from core.relay import AnalysisRelay, RelayConfig
from utils.clients.anthropic import (
    CROModelClient,
    MissingCredentialError,
    ModelFallbackExhausted,
    ModelRequestError,
)
from utils.clients.email import EmailDeliveryError, send_report_email
from utils.parsing.json import ModelOutputError
from utils.reporting.pdf import generate_pdf, suggest_filename
from utils.screenshots import capture_screenshot, screenshot_url
from utils.sse import SSE_HEADERS

logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


# ======================
# Dependencies
# ======================

def get_model_client() -> CROModelClient:
    return CROModelClient.from_settings(settings)


def get_page_fetcher():
    return fetch_page


def get_relay_config() -> RelayConfig:
    return RelayConfig.from_settings(settings)


def _mode(value) -> str:
    return "full" if str(value or "").strip().lower() == "full" else "free"


def _status_for(error: Exception) -> int:
    if isinstance(error, (InvalidURLError, PageFetchError)):
        return 400
    if isinstance(error, ModelOutputError):
        return 422
    if isinstance(error, (ModelRequestError, ModelFallbackExhausted)):
        return 502
    return 500


def _ok_false(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message})


@router.get("/")
async def root():
    return {
        "service": "CRO Audit",
        "status": "running",
        "endpoints": {
            "analyze": "/api/analyze (POST, GET)",
            "analyze_stream": "/api/analyze-stream (GET, POST; text/event-stream)",
            "copy_augment": "/api/copy-augment (POST)",
            "copy_example": "/api/copy-example (POST)",
            "pdf": "/api/pdf (POST)",
            "screenshot": "/api/screenshot?url= (GET)",
            "model_check": "/api/model-check (GET)",
        },
    }


@router.get("/health")
async def health_check():
    return {"status": "healthy"}


@router.get("/status/detailed")
async def detailed_status_check():
    """Configuration health of the external collaborators"""
    return {
        "api": "healthy",
        "anthropic_api": "configured" if settings.ANTHROPIC_API_KEY else "missing",
        "email": "configured" if settings.email_enabled else "disabled",
        "models": settings.model_candidates,
        "screenshots": "remote" if settings.SCREENSHOT_WS_ENDPOINT else "local",
        "overall_status": "healthy" if settings.ANTHROPIC_API_KEY else "degraded",
    }


# ======================
# Analysis
# ======================

async def _run_analysis(url: str, mode: str, model_client: CROModelClient, fetch) -> dict:
    pipeline = AnalysisPipeline(settings, model_client, fetch=fetch)
    try:
        result = await asyncio.to_thread(pipeline.run, url, mode)
    except (InvalidURLError, PageFetchError, MissingCredentialError, ModelRequestError,
            ModelFallbackExhausted, ModelOutputError) as e:
        logger.error(f"❌ Analysis failed for {url}: {e}")
        raise HTTPException(status_code=_status_for(e), detail=str(e))
    except Exception as e:
        logger.exception(f"❌ Unexpected failure for {url}")
        raise HTTPException(status_code=500, detail=f"Analysis failed: {str(e)}")

    robots = await asyncio.to_thread(check_robots, result.final_url)
    payload = result.report.model_dump(mode="json")
    payload["signals"] = result.signals.to_dict()
    payload["robots"] = robots
    return payload


@router.post("/api/analyze")
async def analyze_website(
    request: AnalyzeRequest,
    model_client: CROModelClient = Depends(get_model_client),
    fetch=Depends(get_page_fetcher),
):
    """
    Analyzes a landing page for CRO issues and returns the report in one response.

    mode="free" returns score, summary, key findings and quick wins.
    mode="full" adds the prioritized backlog and the content audit.
    """
    return await _run_analysis(request.url, _mode(request.mode), model_client, fetch)


@router.get("/api/analyze")
async def analyze_website_get(
    url: str = Query(""),
    mode: str = Query("free"),
    model_client: CROModelClient = Depends(get_model_client),
    fetch=Depends(get_page_fetcher),
):
    return await _run_analysis(url, _mode(mode), model_client, fetch)


def _stream_response(url: str, mode: str, model_client: CROModelClient, fetch, config: RelayConfig):
    relay = AnalysisRelay(AnalysisPipeline(settings, model_client, fetch=fetch), config)
    return StreamingResponse(
        relay.stream(url, mode),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("/api/analyze-stream")
async def analyze_stream(
    url: str = Query(""),
    mode: str = Query("free"),
    model_client: CROModelClient = Depends(get_model_client),
    fetch=Depends(get_page_fetcher),
    config: RelayConfig = Depends(get_relay_config),
):
    """
    Event-stream analysis.

    Emits ``progress`` {value}, ``ping`` {t} and finally exactly one of
    ``result`` (the report) or ``error`` {message}, both with ``progress: 100``.
    A dropped connection is not resumable; the client starts a new analysis.
    """
    return _stream_response(url, _mode(mode), model_client, fetch, config)


@router.post("/api/analyze-stream")
async def analyze_stream_post(
    request: AnalyzeRequest,
    model_client: CROModelClient = Depends(get_model_client),
    fetch=Depends(get_page_fetcher),
    config: RelayConfig = Depends(get_relay_config),
):
    return _stream_response(request.url, _mode(request.mode), model_client, fetch, config)


# ======================
# Copywriting
# ======================

@router.post("/api/copy-augment", response_model=CopyAugmentResponse)
async def copy_augment(
    request: CopyAugmentRequest,
    model_client: CROModelClient = Depends(get_model_client),
    fetch=Depends(get_page_fetcher),
):
    """Up to five rewrite suggestions for the page's key copy fields"""
    if not model_client.configured:
        return _ok_false(501, "Model API is not configured")
    try:
        rows = await asyncio.to_thread(augment_copy, model_client, request.url, request.meta, fetch)
    except (InvalidURLError, PageFetchError, ModelRequestError, ModelFallbackExhausted, ModelOutputError) as e:
        logger.error(f"❌ Copy augmentation failed for {request.url}: {e}")
        return _ok_false(_status_for(e), str(e))
    return CopyAugmentResponse(rows=rows)


@router.post("/api/copy-example")
async def copy_example_endpoint(
    request: CopyExampleRequest,
    model_client: CROModelClient = Depends(get_model_client),
):
    if not model_client.configured:
        return _ok_false(501, "Model API is not configured")
    try:
        example = await asyncio.to_thread(copy_example, model_client, request)
    except (ModelRequestError, ModelFallbackExhausted, ModelOutputError) as e:
        return _ok_false(_status_for(e), str(e))
    return {"ok": True, "example": example}


@router.get("/api/model-check")
async def model_check(model_client: CROModelClient = Depends(get_model_client)):
    """Which of the configured model identifiers currently answers"""
    if not model_client.configured:
        return _ok_false(500, "ANTHROPIC_API_KEY is not set")
    result = await asyncio.to_thread(model_client.probe)
    headers = {"x-model-used": result["chosen_model"]} if result.get("ok") else None
    return JSONResponse(content=result, headers=headers)


# ======================
# Export
# ======================

@router.post("/api/pdf")
async def generate_pdf_report(request: PdfRequest):
    """
    Render a finished report to PDF.

    With an ``email`` and a configured email provider the PDF is sent as an
    attachment; otherwise it is returned as a download.
    """
    if not request.report:
        raise HTTPException(status_code=400, detail="Missing 'report' JSON")

    filename = suggest_filename(request.report.get("url"))
    try:
        pdf_buffer = generate_pdf(request.report)
    except Exception as e:
        logger.exception("❌ PDF generation failed")
        raise HTTPException(status_code=500, detail=f"PDF generation failed: {str(e)}")

    if request.email and settings.email_enabled:
        try:
            await asyncio.to_thread(
                send_report_email,
                request.email,
                pdf_buffer.getvalue(),
                filename,
                settings.RESEND_API_KEY,
                settings.FROM_EMAIL,
            )
        except EmailDeliveryError as e:
            raise HTTPException(status_code=502, detail=str(e))
        return {"ok": True, "emailed": True}

    return StreamingResponse(
        pdf_buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ======================
# Screenshots
# ======================

@router.get("/api/screenshot")
async def screenshot(url: str = Query("")):
    """Full-page PNG of ``url`` from a headless browser"""
    if not has_http_scheme(url):
        return PlainTextResponse("Bad url", status_code=400)
    try:
        png = await capture_screenshot(
            url,
            ws_endpoint=settings.SCREENSHOT_WS_ENDPOINT,
            width=settings.VIEWPORT_WIDTH,
            height=settings.VIEWPORT_HEIGHT,
            timeout_ms=settings.SCREENSHOT_TIMEOUT,
        )
    except Exception as e:
        logger.error(f"❌ Screenshot failed for {url}: {e}")
        return PlainTextResponse(str(e) or "snap error", status_code=500)
    return Response(
        content=png,
        media_type="image/png",
        headers={"Cache-Control": "public, max-age=3600"},
    )


@router.get("/api/screenshot-url")
async def screenshot_service_url(url: str = Query("")):
    """Screenshot service URL for ``url`` without capturing anything"""
    try:
        normalized = normalize_url(url)
    except InvalidURLError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"url": normalized, "screenshot_url": screenshot_url(normalized, settings.SCREENSHOT_URL_TMPL)}
