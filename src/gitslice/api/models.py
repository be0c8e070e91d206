"""Pydantic models for gitslice API requests and responses."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..errors import InvalidRangeError
from ..vcs import parse_branch_range


class SliceRequest(BaseModel):
    """Request model for the slice endpoint."""

    repo_path: str = Field(
        ...,
        description="Absolute path of a local git working copy",
        examples=["/srv/repos/project"],
    )
    commit: Optional[str] = Field(
        None,
        description="Commit to analyze",
        examples=["ba7765dd48c0ba51f4fd12cde48fd100aecdb743"],
    )
    branch_compare: Optional[str] = Field(
        None,
        description="Branch comparison in source..target form",
        examples=["main..feature/new-feature"],
    )
    split_cdata: bool = Field(
        False,
        description="Split file content on ']]>' so the document stays well-formed",
    )
    strict_hunk_headers: bool = Field(
        False,
        description="Treat malformed hunk headers as a per-file failure",
    )

    @field_validator("repo_path")
    @classmethod
    def repo_path_must_be_absolute(cls, v):
        """Basic validation for the repository path."""
        v = v.strip()
        if not v:
            raise ValueError("repo_path cannot be empty")
        if not (v.startswith("/") or (len(v) > 2 and v[1] == ":")):
            raise ValueError("repo_path must be an absolute path")
        return v

    @field_validator("branch_compare")
    @classmethod
    def branch_compare_must_be_range(cls, v):
        """Validate source..target format."""
        if v is None:
            return v
        try:
            parse_branch_range(v.strip())
        except InvalidRangeError as exc:
            raise ValueError(exc.message) from exc
        return v.strip()

    @model_validator(mode="after")
    def exactly_one_selector(self):
        """Require exactly one of commit and branch_compare."""
        if bool(self.commit) == bool(self.branch_compare):
            raise ValueError("exactly one of commit or branch_compare is required")
        return self


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str = Field(..., examples=["healthy", "degraded"])
    version: str = Field(..., examples=["1.0.0"])
    git_available: bool = Field(..., description="Installed git meets the minimum version")
    git_version: Optional[str] = Field(None, examples=["2.34.1"])
    minimum_git_version: str = Field(..., examples=["2.30"])


class VersionResponse(BaseModel):
    """Response model for version endpoint."""

    version: str = Field(..., examples=["1.0.0"])
    api_version: str = Field(..., examples=["v1"])
    git_version: Optional[str] = Field(None, examples=["2.34.1"])
    minimum_git_version: str = Field(..., examples=["2.30"])
    supported_features: list = Field(
        default_factory=lambda: [
            "commit_slice",
            "branch_comparison",
            "modification_grouping",
            "cdata_splitting",
        ]
    )
