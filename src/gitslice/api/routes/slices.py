"""Slice routes for the gitslice API."""

import logging

from fastapi import APIRouter
from fastapi.responses import Response

from ..models import SliceRequest
from ..services import SliceService

router = APIRouter(tags=["slice"])

logger = logging.getLogger(__name__)

slice_service = SliceService()


@router.post("/slice", response_class=Response)
def create_slice(request: SliceRequest) -> Response:
    """Create the XML document for a commit or a branch comparison."""
    logger.info(
        "Received slice request",
        extra={
            "repo_path": request.repo_path,
            "commit": request.commit,
            "branch_compare": request.branch_compare,
        },
    )

    xml = slice_service.render(
        repo_path=request.repo_path,
        commit=request.commit,
        branch_compare=request.branch_compare,
        split_cdata=request.split_cdata,
        strict_hunk_headers=request.strict_hunk_headers,
    )
    return Response(content=xml, media_type="application/xml")
