"""Meta endpoints for the gitslice API."""

import logging
from typing import Optional, Tuple

from fastapi import APIRouter

from .. import __version__
from ...errors import GitVersionUnsupportedError
from ...vcs import detect_git_version, minimum_git_version
from ..models import HealthResponse, VersionResponse

router = APIRouter(tags=["meta"])

logger = logging.getLogger(__name__)


def _git_status() -> Tuple[bool, Optional[str]]:
    """Run the same git version gate the slicer uses at startup."""
    try:
        return True, detect_git_version()
    except GitVersionUnsupportedError as exc:
        detected = exc.details["detected_version"]
        if detected in ("unavailable", "unknown"):
            detected = None
        return False, detected


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Report whether slices can be served with the installed git."""
    git_available, git_version = _git_status()
    logger.info(
        "Health check invoked",
        extra={"git_available": git_available, "git_version": git_version},
    )
    return HealthResponse(
        status="healthy" if git_available else "degraded",
        version=__version__,
        git_available=git_available,
        git_version=git_version,
        minimum_git_version=minimum_git_version(),
    )


@router.get("/version", response_model=VersionResponse)
def version_info() -> VersionResponse:
    _, git_version = _git_status()
    return VersionResponse(
        version=__version__,
        api_version="v1",
        git_version=git_version,
        minimum_git_version=minimum_git_version(),
    )


@router.get("/", include_in_schema=False)
def root() -> dict:
    """Root endpoint providing basic API metadata."""
    return {
        "name": "gitslice API",
        "version": __version__,
        "description": "Package git commit or branch changes into a single XML document",
        "endpoints": {
            "slice": "POST /slice - Create XML slice",
            "health": "GET /health - Health check",
            "version": "GET /version - Version information",
        },
    }
