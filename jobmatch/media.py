"""Client for the document/media store that holds candidate CVs and photos."""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import requests

from .logger import get_logger
from .retry import CircuitBreaker, RetryError, exponential_backoff, should_retry_http_status

logger = get_logger()

CV_PATH = "/users/{user_id}/cv"
PHOTO_PATH = "/users/{user_id}/photos"


class MediaStoreError(ValueError):
    """Media store request failed in a way retrying won't fix."""


class TransientMediaError(Exception):
    """Retryable HTTP status from the media store."""


def has_primary(items: Iterable[Mapping[str, Any]]) -> bool:
    """True when any document is flagged primary."""
    return any(bool(item.get("isPrimary", item.get("is_primary"))) for item in items)


class MediaStoreClient:
    """
    Reads a candidate's CV and photo listings to derive the primary flags
    used by profile completeness.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 15.0,
        breaker: Optional[CircuitBreaker] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {"Accept": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
        self.breaker = breaker or CircuitBreaker(
            failure_threshold=5,
            recovery_timeout=60,
            expected_exception=RetryError,
        )

    @exponential_backoff(
        max_retries=3,
        base_delay=1.0,
        exceptions=(requests.exceptions.Timeout, requests.exceptions.ConnectionError, TransientMediaError),
    )
    def _fetch_with_retry(self, url: str):
        resp = requests.get(url, headers=self.headers, timeout=self.timeout)
        if should_retry_http_status(resp.status_code):
            raise TransientMediaError(f"{resp.status_code} from {url}")
        return resp

    def _get_json(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        logger.record_media_request()
        try:
            resp = self.breaker.call(self._fetch_with_retry, url)
            resp.raise_for_status()
        except RetryError as e:
            logger.record_media_failure(type(e.last_exception).__name__)
            logger.warning("Media store unavailable after retries", url=url, error=str(e))
            raise
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "HTTPError"
            logger.record_media_failure(f"HTTPError_{status}")
            logger.error("Media store request failed", url=url, status=status)
            raise MediaStoreError(f"Media store request failed ({status}): {url}")
        except requests.exceptions.RequestException as e:
            logger.record_media_failure(type(e).__name__)
            logger.error("Media store request error", url=url, error=str(e))
            raise MediaStoreError(f"Media store request error: {e}")

        try:
            return resp.json()
        except ValueError:
            logger.record_media_failure("InvalidJSON")
            raise MediaStoreError(f"Media store returned invalid JSON: {url}")

    def _list(self, path: str) -> List[Dict[str, Any]]:
        payload = self._get_json(path)
        # Both bare lists and {"data": [...]} envelopes are served
        if isinstance(payload, Mapping):
            payload = payload.get("data", [])
        if not isinstance(payload, list):
            raise MediaStoreError(f"Unexpected media listing shape at {path}")
        return [item for item in payload if isinstance(item, Mapping)]

    def list_cvs(self, user_id: str) -> List[Dict[str, Any]]:
        return self._list(CV_PATH.format(user_id=user_id))

    def list_photos(self, user_id: str) -> List[Dict[str, Any]]:
        return self._list(PHOTO_PATH.format(user_id=user_id))

    def primary_flags(self, user_id: str) -> Tuple[bool, bool]:
        """Return (has_primary_cv, has_primary_photo) for a candidate."""
        return (has_primary(self.list_cvs(user_id)), has_primary(self.list_photos(user_id)))
