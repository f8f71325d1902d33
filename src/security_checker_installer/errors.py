"""Error types raised while provisioning the checker binary."""
import logging
from typing import Any, Dict, Optional

from mcp.types import ErrorData, INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Log an error with context."""
    logger = logger or logging.getLogger("security_checker_installer.errors")

    error_info: Dict[str, Any] = {
        "error_type": error.__class__.__name__,
        "error_message": str(error),
    }
    if context:
        error_info["context"] = context
    if isinstance(error, InstallerError):
        error_info["code"] = error.code
        error_info["details"] = error.details

    logger.error("Checker installation failed", extra={"data": error_info})


class InstallerError(Exception):
    """Base error class for the installer."""

    def __init__(
        self,
        message: str,
        code: int = INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_error_data(self) -> ErrorData:
        """Convert to ErrorData format."""
        return ErrorData(code=self.code, message=str(self), data=self.details)


class DirectoryCreationError(InstallerError):
    """Binary directory could not be created."""

    def __init__(self, path: str):
        super().__init__(
            f"Could not create binary directory: [{path}].",
            code=INVALID_PARAMS,
            details={"path": path},
        )


class TargetNotADirectoryError(InstallerError, NotADirectoryError):
    """Binary directory path exists but is not a directory."""

    def __init__(self, path: str):
        InstallerError.__init__(
            self,
            f"Binary directory is not a directory: [{path}].",
            code=INVALID_PARAMS,
            details={"path": path},
        )


class TargetNotWritableError(InstallerError, PermissionError):
    """Binary directory is not writable."""

    def __init__(self, path: str):
        InstallerError.__init__(
            self,
            f"Could not write to binary directory: [{path}].",
            code=INVALID_PARAMS,
            details={"path": path},
        )


class UnsupportedPlatformError(InstallerError):
    """Current OS or architecture has no published checker build."""

    def __init__(self, message: str, os_name: str, architecture: str):
        super().__init__(
            message,
            code=INVALID_REQUEST,
            details={"os": os_name, "architecture": architecture},
        )


class ManifestFetchError(InstallerError):
    """Checksum manifest could not be downloaded."""

    def __init__(self, url: str, reason: str):
        super().__init__(
            f"Could not download checksum manifest from [{url}]: {reason}",
            details={"url": url, "reason": reason},
        )


class AssetFetchError(InstallerError):
    """Checker binary could not be downloaded."""

    def __init__(self, url: str, reason: str):
        super().__init__(
            f"Could not download binary from [{url}]: {reason}",
            details={"url": url, "reason": reason},
        )


class IntegrityError(InstallerError):
    """Downloaded binary digest does not match the manifest."""

    def __init__(self, url: str, expected: str, actual: str):
        super().__init__(
            f"Downloaded binary hash does not match manifest for [{url}].",
            details={"url": url, "expected": expected, "actual": actual},
        )


class FilesystemWriteError(InstallerError):
    """Writing the binary or setting its permissions failed."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Could not write binary [{path}]: {reason}",
            details={"path": path, "reason": reason},
        )


class ConfigurationError(InstallerError):
    """Host configuration could not be read."""

    def __init__(self, source: str, reason: str):
        super().__init__(
            f"Invalid installer configuration in [{source}]: {reason}",
            code=INVALID_PARAMS,
            details={"source": source, "reason": reason},
        )


class UnknownEventError(InstallerError, KeyError):
    """Lifecycle event name has no registered handler."""

    def __init__(self, event_name: str):
        InstallerError.__init__(
            self,
            f"No handler registered for event: [{event_name}].",
            code=INVALID_REQUEST,
            details={"event": event_name},
        )

    def __str__(self) -> str:
        return self.message
