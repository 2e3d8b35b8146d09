"""
Shared HTTP plumbing for the signature sources.

Every request is bounded by a timeout and retried at most once, with
backoff, on connection errors and 429/5xx answers.
"""

from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from txdecode import __version__
from txdecode.utils.exceptions import LookupUnavailableError

RETRY_STATUS_CODES = (429, 500, 502, 503, 504)


def build_session(retries: int = 1, backoff_factor: float = 0.5) -> requests.Session:
    """Create a requests session with a bounded retry policy."""
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=backoff_factor,
        status_forcelist=RETRY_STATUS_CODES,
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session = requests.Session()
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers["User-Agent"] = f"txdecode/{__version__}"
    return session


def http_get(
    session: requests.Session,
    url: str,
    params: Dict[str, Any],
    timeout: float,
    source: str
) -> requests.Response:
    """
    GET ``url`` and return the response, whatever its status.

    Raises:
        LookupUnavailableError: On timeouts and transport failures
    """
    try:
        return session.get(url, params=params, timeout=timeout)
    except requests.Timeout as e:
        raise LookupUnavailableError(
            f"{source} did not answer within {timeout}s", source=source, url=url
        ) from e
    except requests.RequestException as e:
        raise LookupUnavailableError(
            f"{source} request failed: {e}", source=source, url=url
        ) from e


def json_body(response: requests.Response, source: str, url: Optional[str] = None) -> Any:
    """Decode a JSON body, treating garbage as an unavailable source."""
    try:
        return response.json()
    except ValueError as e:
        raise LookupUnavailableError(
            f"{source} returned invalid JSON", source=source, url=url
        ) from e
