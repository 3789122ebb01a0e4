"""Utility functions for loading Python source.

This module provides functions for loading module source from files
and URLs with proper error handling and validation.
"""

from pathlib import Path
from urllib.parse import urlparse

import requests

from .logging_config import get_logger

logger = get_logger(__name__)


class SourceLoadError(Exception):
    """Custom exception for source loading errors."""

    pass


def load_source_from_file(file_path: str | Path) -> tuple[str, str]:
    """Load Python source from a local file.

    Args:
        file_path: Path to the module.

    Returns:
        Tuple of (source description, source text).

    Raises:
        FileNotFoundError: If file doesn't exist.
        SourceLoadError: If file cannot be read or decoded.
    """
    file_path = Path(file_path)
    logger.debug(f"Attempting to load source from file: {file_path}")

    if not file_path.exists():
        logger.error(f"File not found: {file_path}")
        raise FileNotFoundError(f"File not found: {file_path}")

    if file_path.suffix.lower() not in {".py", ".pyi"}:
        logger.warning(f"File does not have a Python extension: {file_path}")
        # Don't raise, just warn - might still be valid Python

    try:
        # newline="" keeps \r\n intact for the caller to see
        with file_path.open("r", encoding="utf-8", newline="") as f:
            source = f.read()
        logger.info(f"Loaded source from {file_path}")
        return str(file_path), source
    except UnicodeDecodeError as e:
        logger.error(f"File {file_path} is not valid UTF-8: {e}")
        raise SourceLoadError(f"File {file_path} is not valid UTF-8: {e}") from e
    except OSError as e:
        logger.error(f"Error reading file {file_path}: {e}", exc_info=True)
        raise SourceLoadError(f"Error reading file {file_path}: {e}") from e


def load_source_from_url(url: str, timeout: int = 30) -> tuple[str, str]:
    """Load Python source from a URL.

    Args:
        url: URL to fetch the module from.
        timeout: Request timeout in seconds.

    Returns:
        Tuple of (source description, source text).

    Raises:
        SourceLoadError: If URL is invalid or the request fails.
    """
    logger.debug(f"Attempting to load source from URL: {url}")

    parsed_url = urlparse(url)
    if not all([parsed_url.scheme, parsed_url.netloc]):
        logger.error(f"Invalid URL format: {url}")
        raise SourceLoadError(f"Invalid URL: {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()

        content_type = response.headers.get("content-type", "").lower()
        if "python" not in content_type and "text/plain" not in content_type:
            logger.warning(f"URL {url} does not have a text content type: {content_type}")

        logger.info(f"Loaded source from {url}")
        return url, response.text

    except requests.exceptions.Timeout:
        logger.error(f"Request timeout for URL: {url}")
        raise SourceLoadError(f"Request timeout for URL: {url}")
    except requests.exceptions.ConnectionError as e:
        logger.error(f"Connection error for URL {url}: {e}")
        raise SourceLoadError(f"Connection error for URL: {url}") from e
    except requests.exceptions.HTTPError as e:
        logger.error(f"HTTP error {e.response.status_code} for URL: {url}")
        raise SourceLoadError(
            f"HTTP error {e.response.status_code} for URL: {url}"
        ) from e
    except requests.exceptions.RequestException as e:
        logger.error(f"Request error for URL {url}: {e}", exc_info=True)
        raise SourceLoadError(f"Request error for URL {url}: {e}") from e


def load_source(
    file_path: str | Path | None = None,
    url: str | None = None,
    timeout: int = 30,
) -> tuple[str, str]:
    """Load Python source from either a file or URL.

    Args:
        file_path: Path to a local module (mutually exclusive with url).
        url: URL to fetch the module from (mutually exclusive with file_path).
        timeout: Request timeout in seconds (only used for URLs).

    Returns:
        Tuple of (source description, source text).

    Raises:
        SourceLoadError: If neither or both parameters are provided, or loading fails.
        FileNotFoundError: If file doesn't exist.
    """
    if not file_path and not url:
        logger.error("Neither file_path nor url provided")
        raise SourceLoadError("Either file_path or url must be provided")

    if file_path and url:
        logger.error("Both file_path and url provided")
        raise SourceLoadError("Cannot specify both file_path and url")

    if file_path:
        return load_source_from_file(file_path)
    else:
        return load_source_from_url(url, timeout)
