"""Service layer for the gitslice API."""

import logging
from typing import Optional

from ...config import SliceConfig
from ...slicer import render_slice
from ...vcs import GitRepository

logger = logging.getLogger(__name__)


class SliceService:
    """Service class that encapsulates building a slice for a request."""

    def render(
        self,
        repo_path: str,
        commit: Optional[str] = None,
        branch_compare: Optional[str] = None,
        split_cdata: bool = False,
        strict_hunk_headers: bool = False,
        repository: Optional[GitRepository] = None,
    ) -> str:
        """Build the requested document and return it as XML text.

        Run-level failures propagate as ``GitSliceError``.
        """
        config = SliceConfig(
            repo_path=repo_path,
            commit=commit,
            branch_range=branch_compare,
            split_cdata=split_cdata,
            strict_hunk_headers=strict_hunk_headers,
        )
        logger.info("Processing slice request", extra=config.to_log_dict())

        xml = render_slice(config, repository)

        logger.info(
            "Slice request succeeded",
            extra={"repo_path": repo_path, "bytes": len(xml)},
        )
        return xml
