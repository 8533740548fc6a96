"""
Custom exception handlers and error types
"""

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import logging
import traceback
from typing import Optional

logger = logging.getLogger(__name__)


class ConverterError(Exception):
    """Base exception for converter errors"""

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class InputNotFoundError(ConverterError):
    """Exception raised when the input media file does not exist"""

    def __init__(self, message: Optional[str] = None, file_path: Optional[str] = None):
        self.file_path = file_path
        msg = message or f"Input file does not exist: {file_path}"
        super().__init__(msg, "INPUT_NOT_FOUND")


class UnsupportedPlatformError(ConverterError):
    """Exception raised when no ffmpeg artifact exists for this platform"""

    def __init__(self, platform_id: str):
        self.platform_id = platform_id
        super().__init__(f"Unsupported platform: {platform_id}", "UNSUPPORTED_PLATFORM")


class DownloadError(ConverterError):
    """Exception raised when an artifact download fails (network or HTTP status)

    Args:
        message (str): Error message
        url (Optional[str]): Artifact URL
        status (Optional[int]): HTTP status code, when a response was received
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status: Optional[int] = None,
    ):
        super().__init__(message, "DOWNLOAD_ERROR")
        self.url = url
        self.status = status


class DecompressionError(ConverterError):
    """Exception raised when a downloaded artifact is not a valid gzip stream"""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message, "DECOMPRESSION_ERROR")
        self.url = url


class InstallError(ConverterError):
    """Exception raised when the install directory or file cannot be written"""

    def __init__(self, message: str, target: Optional[str] = None):
        super().__init__(message, "INSTALL_ERROR")
        self.target = target


class ExecutePermissionError(ConverterError):
    """Exception raised when the execute bit cannot be set.

    Non-fatal: the installer logs it and carries on.
    """

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, "PERMISSION_ERROR")
        self.file_path = file_path


class ProbeError(ConverterError):
    """Exception raised when ffprobe fails or returns malformed output"""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, "PROBE_ERROR")
        self.file_path = file_path


class ConversionError(ConverterError):
    """Exception raised when ffmpeg exits non-zero without being cancelled"""

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        super().__init__(message, "CONVERSION_ERROR")
        self.returncode = returncode
        self.stderr = stderr


class CancellationError(ConverterError):
    """Exception raised when a conversion is cancelled on request"""

    def __init__(self, message: str = "Conversion cancelled"):
        super().__init__(message, "CANCELLED")


class ConversionInProgressError(ConverterError):
    """Exception raised when a conversion starts while another is running"""

    def __init__(self, message: str = "A conversion is already running"):
        super().__init__(message, "CONVERSION_IN_PROGRESS")


_STATUS_BY_ERROR = {
    InputNotFoundError: 404,
    ProbeError: 422,
    ConversionInProgressError: 409,
    CancellationError: 409,
    UnsupportedPlatformError: 501,
    DownloadError: 502,
}


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors"""
    logger.warning(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={
            "detail": {
                "error": "Validation error",
                "details": "Invalid request data",
                "errors": exc.errors(),
            }
        },
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with consistent format"""
    logger.warning(f"HTTP exception: {exc.status_code} - {exc.detail}")

    if isinstance(exc.detail, dict):
        detail = exc.detail
    else:
        detail = {"error": "HTTP Error", "details": str(exc.detail)}

    return JSONResponse(status_code=exc.status_code, content={"detail": detail})


async def converter_exception_handler(request: Request, exc: ConverterError):
    """Handle converter errors"""
    status_code = next(
        (code for cls, code in _STATUS_BY_ERROR.items() if isinstance(exc, cls)),
        500,
    )
    if status_code >= 500:
        logger.error(f"Converter error: {exc.message}")
    else:
        logger.warning(f"Converter error: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": {
                "error": "Operation failed",
                "details": exc.message,
                "error_code": exc.error_code,
            }
        },
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors"""
    logger.error(f"Unexpected error: {type(exc).__name__}: {str(exc)}")
    logger.error(f"Traceback: {traceback.format_exc()}")

    return JSONResponse(
        status_code=500,
        content={
            "detail": {
                "error": "Internal server error",
                "details": "An unexpected error occurred",
            }
        },
    )
