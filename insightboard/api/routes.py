import logging
import time
from typing import List
from fastapi import APIRouter, UploadFile, File, HTTPException, Request
from insightboard.api.limiter import limiter, upload_rate_limit
from insightboard.services.parser import parse_upload
from insightboard.services.pipeline import analyze_dataset, analyze_sample
from insightboard.services.samples import list_samples
from insightboard.services.session import AnalysisSession
from insightboard.core.schemas import AnalysisResult, SampleInfo
from insightboard.core.errors import AnalysisError, ErrorCodes, get_error_response
from insightboard.core.sanitization import sanitize_filename, sanitize_for_logging

logger = logging.getLogger(__name__)

router = APIRouter()


def get_session(request: Request) -> AnalysisSession:
    return request.app.state.session


def to_http_exception(error: AnalysisError, request: Request) -> HTTPException:
    """Convert a pipeline error into the structured error response."""
    error_info = get_error_response(error.code, error.detail)
    error_info['correlation_id'] = getattr(request.state, 'correlation_id', 'unknown')
    return HTTPException(status_code=error.status_code, detail=error_info)


def _unexpected_error(request: Request) -> HTTPException:
    error_info = get_error_response(ErrorCodes.UNKNOWN_ERROR)
    error_info['correlation_id'] = getattr(request.state, 'correlation_id', 'unknown')
    return HTTPException(status_code=500, detail=error_info)


@router.get("/health")
async def health_check():
    return {"status": "ok"}


async def _process_upload(file: UploadFile, request: Request, vega: bool) -> AnalysisResult:
    session = get_session(request)
    safe_filename = sanitize_filename(file.filename) if file.filename else 'unknown'
    logger.info(f"Processing file: {sanitize_for_logging(safe_filename)}")

    token = session.begin(safe_filename)
    start = time.perf_counter()
    try:
        dataset = await parse_upload(file)
        result = analyze_dataset(dataset, safe_filename, include_vega=vega, started_at=start)
    except AnalysisError as e:
        session.fail(token, e)
        raise to_http_exception(e, request)
    except Exception as e:
        session.fail(token, e)
        logger.error(f"Unexpected error processing file {sanitize_for_logging(safe_filename)}: {e}", exc_info=True)
        raise _unexpected_error(request)
    except BaseException as e:
        # Cancelled (timeout or client disconnect): never leave the session processing
        session.fail(token, e)
        logger.warning(f"Processing of {sanitize_for_logging(safe_filename)} was cancelled")
        raise

    session.complete(token, result)
    return result


@router.post("/upload", response_model=AnalysisResult)
@limiter.limit(upload_rate_limit)
async def upload_file(
    request: Request,
    file: UploadFile = File(...),
    vega: bool = False
):
    """
    Upload a CSV or JSON file and analyze it.

    Args:
        file: CSV or JSON file to analyze
        vega: If True, attach a Vega-Lite spec to every chart

    Rate limited per client IP (RATE_LIMIT_PER_MINUTE).
    """
    return await _process_upload(file, request, vega)


@router.get("/samples", response_model=List[SampleInfo])
async def get_samples():
    """List the built-in sample datasets."""
    return list_samples()


@router.post("/samples/{name}", response_model=AnalysisResult)
async def analyze_sample_endpoint(name: str, request: Request, vega: bool = False):
    """Analyze one of the built-in sample datasets."""
    session = get_session(request)
    try:
        return session.run(name, lambda: analyze_sample(name, include_vega=vega))
    except AnalysisError as e:
        raise to_http_exception(e, request)
    except Exception as e:
        logger.error(f"Unexpected error analyzing sample {sanitize_for_logging(name)}: {e}", exc_info=True)
        raise _unexpected_error(request)
