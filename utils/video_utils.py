"""
Video conversion helper functions.
"""

import logging
import os
from typing import Optional

from app.core.config import settings

logger = logging.getLogger(__name__)


def clamp_quality(quality: int) -> int:
    """Clamp a CRF value into the VP9 range instead of rejecting it."""
    low = settings.conversion_min_quality
    high = settings.conversion_max_quality
    return max(low, min(int(quality), high))


def build_output_path(
    input_path: str, output_folder: Optional[str] = None, extension: Optional[str] = None
) -> str:
    """Derive the output path for ``input_path``.

    The base name is kept and the extension replaced. An empty
    ``output_folder`` means "next to the input".

    Example:
        >>> build_output_path("/videos/clip.mov", "")
        '/videos/clip.webm'
        >>> build_output_path("/videos/clip.mov", "/out")
        '/out/clip.webm'
    """
    ext = extension or settings.conversion_output_extension
    stem = os.path.splitext(os.path.basename(input_path))[0]
    folder = output_folder or os.path.dirname(input_path)
    return os.path.join(folder, stem + ext)


def remove_partial_output(path: str) -> bool:
    """Delete a partially written output file. Returns True when one was removed."""
    try:
        if os.path.exists(path):
            os.remove(path)
            logger.debug("✅ Removed partial output: %s", path)
            return True
    except (OSError, PermissionError) as e:
        logger.warning("Failed to remove partial output %s: %s", path, str(e))
    return False
