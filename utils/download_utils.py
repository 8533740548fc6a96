"""
Download utility functions.
"""

import asyncio
import logging
import os
import zlib
from pathlib import Path
from typing import Callable, Optional, Union

import aiofiles
import aiohttp

from app.core.config import settings
from app.core.exceptions import DecompressionError, DownloadError, InstallError
from app.core.models import DownloadProgress

logger = logging.getLogger(__name__)

# wbits for a gzip header + trailer
GZIP_WBITS = 16 + zlib.MAX_WBITS

ProgressCallback = Callable[[DownloadProgress], None]


def estimate_fraction(
    bytes_written: int, content_length: int, expansion_factor: int = 3
) -> float:
    """Estimate completion of a gzip download from decompressed bytes.

    The decompressed size is unknown until the stream ends, so the compressed
    length times ``expansion_factor`` stands in for it. The estimate never
    reaches 100 on its own; only the end of the stream does.
    """
    if content_length <= 0:
        return 0.0
    fraction = bytes_written / (content_length * expansion_factor) * 100
    return min(fraction, 99.0)


async def download_gzip_file(
    url: str,
    destination: Union[str, Path],
    on_progress: Optional[ProgressCallback] = None,
    **kwargs,
) -> int:
    """
    Download a gzip-compressed file and write its decompressed bytes.

    Args:
        url: Source URL of the gzip artifact
        destination: Local file path for the decompressed output
        on_progress: Called after every written chunk with a DownloadProgress
        **kwargs: Additional download options
            - chunk_size: int - write size in bytes (default: settings.download_chunk_size)
            - expansion_factor: int - compressed-to-raw size ratio guess
            - timeout: float | None - total timeout in seconds (default: none)

    Returns:
        Number of decompressed bytes written

    Raises:
        DownloadError: network failure or non-200 response
        DecompressionError: corrupt or truncated gzip stream
        InstallError: destination cannot be written
    """
    chunk_size = kwargs.get("chunk_size") or settings.download_chunk_size
    expansion_factor = (
        kwargs.get("expansion_factor") or settings.download_expansion_factor
    )
    timeout = aiohttp.ClientTimeout(
        total=kwargs.get("timeout", settings.download_timeout)
    )
    dest_path = str(destination)

    try:
        # The CDN serves raw .gz bodies; never let aiohttp unpack them for us
        async with aiohttp.ClientSession(
            timeout=timeout, auto_decompress=False
        ) as session:
            async with session.get(url) as response:
                if response.status != 200:
                    raise DownloadError(
                        f"HTTP error: {response.status}", url=url, status=response.status
                    )
                content_length = response.content_length or 0
                logger.debug(
                    "Streaming %s (%d compressed bytes) to %s",
                    url,
                    content_length,
                    dest_path,
                )

                decompressor = zlib.decompressobj(GZIP_WBITS)
                written = 0

                def report() -> None:
                    if on_progress is not None and content_length > 0:
                        on_progress(
                            DownloadProgress(
                                bytes_written=written,
                                estimated_fraction=estimate_fraction(
                                    written, content_length, expansion_factor
                                ),
                            )
                        )

                async with aiofiles.open(dest_path, "wb") as out:
                    async for compressed in response.content.iter_chunked(chunk_size):
                        data = compressed
                        while True:
                            chunk = decompressor.decompress(data, chunk_size)
                            data = decompressor.unconsumed_tail
                            if chunk:
                                await out.write(chunk)
                                written += len(chunk)
                                report()
                            if not data and len(chunk) < chunk_size:
                                break
                        if decompressor.eof:
                            break

                    tail = decompressor.flush()
                    if tail:
                        await out.write(tail)
                        written += len(tail)
                        report()

                if not decompressor.eof:
                    raise DecompressionError(
                        f"Truncated gzip stream from {url}", url=url
                    )

    except zlib.error as e:
        logger.error("Failed to decompress %s: %s", url, e)
        raise DecompressionError(f"Failed to decompress {url}: {e}", url=url) from e
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error("Failed to download %s: %s", url, e)
        raise DownloadError(f"Failed to download {url}: {e}", url=url) from e
    except OSError as e:
        logger.error("File operation error downloading %s: %s", url, e)
        raise InstallError(
            f"File operation error writing {dest_path}: {e}", target=dest_path
        ) from e

    if on_progress is not None:
        on_progress(DownloadProgress(bytes_written=written, estimated_fraction=100.0))

    logger.debug("✅ Downloaded %s to %s (%d bytes)", url, dest_path, written)
    return written


def ensure_directory(path: Union[str, Path]) -> str:
    """Create ``path`` recursively; raise InstallError when it cannot be created."""
    try:
        os.makedirs(str(path), exist_ok=True)
    except OSError as e:
        raise InstallError(f"Failed to create directory {path}: {e}", target=str(path)) from e
    return str(path)
