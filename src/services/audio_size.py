"""
Audio file size lookup via HTTP HEAD requests.

RSS enclosures need the byte length of the audio file. When a creator
does not supply it, the size is read from the Content-Length header of
the audio URL.
"""

import logging
import time
from typing import Callable, Dict, Optional

import httpx

from src.db.repository import PodcastHubRepositoryInterface

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def parse_content_length(headers: httpx.Headers) -> Optional[int]:
    """Return Content-Length as an int, or None if missing or malformed."""
    value = headers.get("content-length")
    if value is None:
        return None
    try:
        size = int(value.strip())
    except ValueError:
        return None
    return size if size >= 0 else None


def fetch_audio_file_size(url: str, timeout: float = DEFAULT_TIMEOUT) -> Optional[int]:
    """
    Fetch the size of a remote audio file.

    Args:
        url: The audio URL.
        timeout: Request timeout in seconds.

    Returns:
        The size in bytes, or None if it could not be determined.
    """
    try:
        with httpx.Client(timeout=timeout, follow_redirects=True) as client:
            response = client.head(url)
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch size for {url}: {e}")
        return None

    size = parse_content_length(response.headers)
    if size is None:
        logger.warning(f"No Content-Length header for {url}")
    return size


async def fetch_audio_file_size_async(
    url: str, timeout: float = DEFAULT_TIMEOUT
) -> Optional[int]:
    """Async variant of `fetch_audio_file_size` for use inside request handlers."""
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            response = await client.head(url)
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch size for {url}: {e}")
        return None

    size = parse_content_length(response.headers)
    if size is None:
        logger.warning(f"No Content-Length header for {url}")
    return size


def backfill_audio_sizes(
    repository: PodcastHubRepositoryInterface,
    delay: float = 0.5,
    fetch: Callable[[str], Optional[int]] = fetch_audio_file_size,
    sleep: Callable[[float], None] = time.sleep,
) -> Dict[str, int]:
    """
    Fill in `audio_file_size` for every episode that is missing it.

    Args:
        repository: Repository to read and update episodes.
        delay: Seconds to wait between requests.
        fetch: Size lookup, replaceable in tests.
        sleep: Sleep function, replaceable in tests.

    Returns:
        Dict with `success`, `failure` and `total` counts.
    """
    episodes = repository.get_episodes_missing_audio_size()
    logger.info(f"Found {len(episodes)} episodes without audio file size")

    success_count = 0
    failure_count = 0

    for index, episode in enumerate(episodes):
        logger.info(f"Fetching size for episode {episode.id}: {episode.title}")
        size = fetch(episode.audio_url)

        if size is not None:
            repository.update_episode(episode.id, audio_file_size=size)
            logger.info(f"Updated episode {episode.id} with size {size} bytes")
            success_count += 1
        else:
            logger.warning(f"Failed to get size for episode {episode.id}")
            failure_count += 1

        if delay and index < len(episodes) - 1:
            sleep(delay)

    return {
        "success": success_count,
        "failure": failure_count,
        "total": len(episodes),
    }
