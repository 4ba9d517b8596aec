"""
Back-off for npm registry, downloads and GitHub API requests.
"""

import asyncio

import aiohttp
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

TRANSIENT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


def retry_on_transient_errors(max_attempts=3):
    """
    Retry a coroutine on connection failures, 5xx answers and timeouts,
    waiting 0.5s, 1s, 2s... (capped at 4s) between attempts. The last
    exception is re-raised unchanged.
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        reraise=True,
    )
