# fulfillment/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import requests


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(requests.RequestException),
    )


def backoff_countdown(retries: int, base: int) -> int:
    """Delay before the next queue attempt: base, 2*base, 4*base..."""
    return base * (2 ** retries)
