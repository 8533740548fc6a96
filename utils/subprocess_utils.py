"""
Shared subprocess utilities for ffmpeg/ffprobe invocation
"""

import subprocess
import logging
import sys
from typing import Optional, Any, Dict

logger = logging.getLogger(__name__)

# subprocess.CREATE_NO_WINDOW only exists on Windows builds of Python
CREATE_NO_WINDOW = 0x08000000


class SubprocessError(Exception):
    """
    Custom exception for subprocess errors.

    This exception is raised when a subprocess command fails to execute properly.
    It provides a descriptive error message about the failure.
    """

    def __init__(self, message, command=None, returncode=None, stderr=None):
        """
        Initialize the exception with error details.

        Args:
            message: Primary error message
            command: Optional command that was executed (list or str)
            returncode: Optional exit code from the process
            stderr: Optional error output from the process
        """
        self.message = message
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(self.message)

    def __str__(self):
        """Format the error message with available details."""
        parts = [self.message]
        if self.command:
            cmd_str = (
                " ".join(str(x) for x in self.command)
                if isinstance(self.command, (list, tuple))
                else self.command
            )
            parts.append(f"Command: {cmd_str}")
        if self.returncode is not None:
            parts.append(f"Exit code: {self.returncode}")
        if self.stderr:
            stderr = str(self.stderr)
            if len(stderr) > 500:  # Limit stderr length
                stderr = stderr[:500] + "... [truncated]"
            parts.append(f"Error output: {stderr}")

        return "\n".join(parts)


def hidden_window_kwargs() -> Dict[str, Any]:
    """Popen kwargs that keep a child from opening a console or waiting on stdin.

    On Windows the console window is suppressed; on every platform stdin is
    bound to the null device.
    """
    kwargs: Dict[str, Any] = {"stdin": subprocess.DEVNULL}
    if sys.platform == "win32":
        kwargs["creationflags"] = CREATE_NO_WINDOW
    return kwargs


def safe_subprocess_run(
    cmd,
    operation_name="FFmpeg operation",
    custom_logger: Optional[Any] = None,
    failure_level: int = logging.ERROR,
):
    """
    Safely run subprocess with proper error handling

    Args:
        cmd: Command to run as list of strings
        operation_name: Descriptive name for the operation (for logging)
        custom_logger: Optional logger to use instead of default
        failure_level: Log level for failures; probes that expect a missing
            binary pass logging.DEBUG

    Returns:
        subprocess.CompletedProcess result

    Raises:
        SubprocessError: If subprocess fails or the binary is not found
    """
    active_logger = custom_logger or logger

    try:
        if active_logger:
            active_logger.debug(
                "Running %s: %s", operation_name, " ".join(str(x) for x in cmd)
            )
        result = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            # ffprobe writes UTF-8 whatever the locale codec is
            encoding="utf-8",
            errors="replace",
            check=True,
            **hidden_window_kwargs(),
        )
        return result
    except subprocess.CalledProcessError as e:
        error_msg = f"{operation_name} failed with return code {e.returncode}"

        # Windows-specific error code handling
        if e.returncode == -2147024896:  # 0x80004005 as signed int
            error_msg += " (Windows Error 0x80004005 - Access Denied or File in Use)"

        if e.stderr:
            error_msg += f"\nstderr: {e.stderr}"
        if active_logger:
            active_logger.log(failure_level, error_msg)
        raise SubprocessError(error_msg, cmd, e.returncode, e.stderr) from e
    except (OSError, PermissionError) as e:
        if isinstance(e, FileNotFoundError):
            error_msg = (
                f"{operation_name} failed: {cmd[0]} not found. "
                "Install it or let the app download it."
            )
        else:
            error_msg = f"{operation_name} failed with OS/Permission error: {e}"
        if active_logger:
            active_logger.log(failure_level, error_msg)
        raise SubprocessError(error_msg, cmd) from e
