"""Remote page source: one HTTP request per 1-based page of the collection."""

from typing import Iterable, Optional

import requests

from .config import DEFAULT_API_URL, DEFAULT_PAGE_SIZE, DEFAULT_TIMEOUT
from .logger import get_logger
from .models import Page, Pagination, Record
from .schema import validate_page_payload

logger = get_logger()


class PageFetchError(ValueError):
    """Raised when a page cannot be fetched or its payload is unusable."""

    def __init__(self, message: str, page: Optional[int] = None, status: Optional[int] = None):
        super().__init__(message)
        self.page = page
        self.status = status


class PageSource:
    """
    Fetches pages of ``{data: [...], pagination: {...}}`` from a collection endpoint.

    The page size is fixed for the lifetime of the source so page
    boundaries stay consistent across calls.
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_API_URL,
        page_size: int = DEFAULT_PAGE_SIZE,
        fields: Optional[Iterable[str]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self.endpoint = endpoint
        self.page_size = page_size
        self.fields = list(fields) if fields else []
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def _params(self, page: int) -> dict:
        params = {"page": page, "limit": self.page_size}
        if self.fields:
            params["fields"] = ",".join(self.fields)
        return params

    def fetch(self, page: int) -> Page:
        """Fetch a single page.

        Args:
            page: 1-based page number

        Returns:
            Page with records in the order the endpoint returned them

        Raises:
            PageFetchError: On any HTTP error, timeout, request failure or malformed payload
        """
        if page < 1:
            raise PageFetchError(f"Page numbers start at 1, got {page}", page=page)

        logger.record_fetch_attempt()
        logger.record_api_call()
        logger.debug("Fetching page", url=self.endpoint, page=page)
        try:
            resp = self.session.get(self.endpoint, params=self._params(page), timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.record_fetch_failure(f"HTTPError_{status or 'unknown'}")
            if status == 404:
                logger.warning("Page not found", url=self.endpoint, page=page, status=404)
                raise PageFetchError(f"Page {page} not found (404): {self.endpoint}", page=page, status=404)
            logger.error("Page request failed", url=self.endpoint, page=page, status=status)
            raise PageFetchError(f"Page {page} request failed ({status}): {self.endpoint}", page=page, status=status)
        except requests.exceptions.Timeout:
            logger.record_fetch_failure("Timeout")
            logger.warning("Page request timed out", url=self.endpoint, page=page)
            raise PageFetchError(f"Page {page} request timed out. Try again later.", page=page)
        except requests.exceptions.RequestException as e:
            # Also covers JSON decode errors raised by resp.json()
            logger.record_fetch_failure(type(e).__name__)
            logger.error("Page request error", url=self.endpoint, page=page, error=str(e))
            raise PageFetchError(f"Page {page} request error: {e}", page=page)

        errors = validate_page_payload(payload)
        if errors:
            logger.record_fetch_failure("InvalidPayload")
            logger.error("Malformed page payload", url=self.endpoint, page=page, errors=errors)
            raise PageFetchError(f"Page {page} payload is malformed: {'; '.join(errors)}", page=page)

        logger.record_fetch_success()
        pag = payload["pagination"]
        return Page(
            records=tuple(Record.from_dict(item) for item in payload["data"]),
            pagination=Pagination(
                current_page=pag["current_page"],
                total_pages=pag["total_pages"],
                total=pag["total"],
                limit=pag["limit"] if isinstance(pag.get("limit"), int) else self.page_size,
            ),
        )

    def close(self) -> None:
        self.session.close()
