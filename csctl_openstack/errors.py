"""Error types for the node image pipeline.

Every error carries a stable ``code`` for programmatic handling. All of
them are terminal for the current run: the CLI reports the message and
exits with status 1.
"""

from __future__ import annotations

# Error code constants
VALIDATION_ERROR = "validation"
MISSING_RESOURCE_ERROR = "missing_resource"
BUILD_ERROR = "build_failed"
PUBLISH_ERROR = "publish_error"
UPDATE_ERROR = "update_error"


class PipelineError(Exception):
    """Base error for node image pipeline operations."""

    def __init__(self, message: str, code: str = "pipeline_error") -> None:
        super().__init__(message)
        self.code = code


class ValidationError(PipelineError):
    """Raised when a manifest, registry or cluster stack config is invalid."""

    def __init__(self, message: str, code: str = VALIDATION_ERROR) -> None:
        super().__init__(message, code=code)


class MissingResourceError(PipelineError):
    """Raised when an expected file or directory does not exist."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        code: str = MISSING_RESOURCE_ERROR,
    ) -> None:
        super().__init__(message, code=code)
        self.path = path


class BuildFailure(PipelineError):
    """Raised when the image builder fails."""

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        code: str = BUILD_ERROR,
    ) -> None:
        super().__init__(message, code=code)
        self.exit_code = exit_code


class PublishError(PipelineError):
    """Raised when uploading an artifact to object storage fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str = PUBLISH_ERROR,
    ) -> None:
        super().__init__(message, code=code)
        self.status_code = status_code


class UpdateError(PipelineError):
    """Raised when the manifest cannot be re-read or rewritten."""

    def __init__(self, message: str, code: str = UPDATE_ERROR) -> None:
        super().__init__(message, code=code)


__all__ = [
    "BUILD_ERROR",
    "MISSING_RESOURCE_ERROR",
    "PUBLISH_ERROR",
    "UPDATE_ERROR",
    "VALIDATION_ERROR",
    "BuildFailure",
    "MissingResourceError",
    "PipelineError",
    "PublishError",
    "UpdateError",
    "ValidationError",
]
