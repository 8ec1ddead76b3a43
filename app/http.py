"""
Retry-wrapped HTTP GET used for every upstream Steam call.
"""
import logging
import time
from typing import Any, Callable, Dict, Optional

import requests

from app.errors import UpstreamError

logger = logging.getLogger("http")


def fetch_with_retry(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    retries: int = 2,
    backoff_ms: int = 300,
    session: Optional[requests.Session] = None,
    timeout: float = 15.0,
    sleep: Callable[[float], None] = time.sleep,
) -> requests.Response:
    """
    GET a URL, retrying failures with exponential backoff.

    Any non-2xx response counts as a failure. Attempt ``n`` (0-based) is
    followed by a delay of ``backoff_ms * 2**n`` before the next one, so a
    call makes at most ``retries + 1`` requests.

    Args:
        url: Absolute URL to fetch
        params: Query parameters
        retries: Extra attempts after the first one
        backoff_ms: Base backoff in milliseconds
        session: requests session to use (a plain ``requests.get`` otherwise)
        timeout: Per-request timeout in seconds
        sleep: Delay function, replaceable in tests

    Returns:
        The successful response

    Raises:
        UpstreamError: The last failure once retries are exhausted
    """
    getter = session.get if session is not None else requests.get
    last_error: Optional[UpstreamError] = None

    for attempt in range(retries + 1):
        try:
            response = getter(url, params=params, timeout=timeout)
            if not 200 <= response.status_code < 300:
                raise UpstreamError(
                    f"Request failed ({response.status_code})",
                    upstream_status=response.status_code,
                )
            return response
        except UpstreamError as e:
            last_error = e
        except requests.RequestException as e:
            last_error = UpstreamError(f"Request failed ({e})")

        if attempt == retries:
            break
        delay = backoff_ms * (2 ** attempt) / 1000.0
        logger.debug(f"Retrying {url} in {delay:.2f}s after: {last_error}")
        sleep(delay)

    logger.warning(f"Giving up on {url} after {retries + 1} attempts: {last_error}")
    raise last_error
