"""Error definitions and handling for gitslice."""

from typing import Any, Dict, Optional


class GitSliceError(Exception):
    """Base exception for gitslice errors."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize error with code, message, and optional details."""
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        result = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class GitVersionUnsupportedError(GitSliceError):
    """Git version is not supported."""

    def __init__(self, detected_version: str, required_version: str = "2.30"):
        super().__init__(
            code="GIT_VERSION_UNSUPPORTED",
            message=f"Git version {detected_version} is not supported. "
            f"Minimum required: {required_version}",
            details={
                "detected_version": detected_version,
                "required_version": required_version,
            },
        )


class RepositoryNotFoundError(GitSliceError):
    """The target directory is not a git work tree."""

    def __init__(self, repo_path: str, reason: str):
        super().__init__(
            code="REPOSITORY_NOT_FOUND",
            message=f"Not a git repository: {repo_path}",
            details={"repo_path": repo_path, "reason": reason},
        )


class RangeResolutionError(GitSliceError):
    """The requested commit or branch range cannot be resolved."""

    def __init__(
        self,
        revision_range: str,
        reason: str,
        code: str = "RANGE_RESOLUTION_FAILED",
        message: Optional[str] = None,
    ):
        super().__init__(
            code=code,
            message=message or f"Cannot resolve {revision_range}: {reason}",
            details={"range": revision_range, "reason": reason},
        )


class InvalidRangeError(RangeResolutionError):
    """Branch range string is not of the form source..target."""

    def __init__(self, revision_range: str):
        super().__init__(
            revision_range,
            "expected source..target",
            code="INVALID_RANGE",
            message='Branch comparison format should be "source..target"',
        )


class MergeConflictError(RangeResolutionError):
    """Merging the two branches would produce conflicts."""

    def __init__(self, source: str, target: str):
        super().__init__(
            f"{source}..{target}",
            "conflict markers reported by merge-tree",
            code="MERGE_CONFLICT",
            message="Merge conflicts detected between branches",
        )


class FileRetrievalError(GitSliceError):
    """Fetching content or diff text for a single file failed."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            code="FILE_RETRIEVAL_FAILED",
            message=f"Failed to retrieve {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class MalformedHunkHeaderError(GitSliceError):
    """A line starting with @@ is not a valid hunk header."""

    def __init__(self, header: str, line_index: int):
        super().__init__(
            code="MALFORMED_HUNK_HEADER",
            message=f"Malformed hunk header at diff line {line_index + 1}: {header!r}",
            details={"header": header, "line_index": line_index},
        )


class OutputWriteError(GitSliceError):
    """The rendered document could not be written."""

    def __init__(self, output_path: str, reason: str):
        super().__init__(
            code="OUTPUT_WRITE_FAILED",
            message=f"Failed to write {output_path}: {reason}",
            details={"output_path": output_path, "reason": reason},
        )
