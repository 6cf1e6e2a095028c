"""Google Custom Search JSON API client."""

from typing import Any, Optional

import httpx

from config.config import is_configured
from models.errors import ConfigurationError, TransportError
from research.contracts import SearchPage
from utils.logger import get_logger

logger = get_logger(__name__)

GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
MAX_PAGE_SIZE = 10  # API limit per request


class GoogleSearchClient:
    """
    Fetches one page of web results per call.

    Items are handed back as the provider sent them; normalization happens in
    SearchGateway.
    """

    provider = "google_search"

    def __init__(
        self,
        api_key: Optional[str],
        engine_id: Optional[str],
        http_client: Optional[httpx.Client] = None,
        timeout_s: float = 60.0,
    ):
        self.api_key = api_key
        self.engine_id = engine_id
        self._http = http_client or httpx.Client(timeout=timeout_s)

    def validate_credentials(self) -> None:
        if not is_configured(self.api_key):
            raise ConfigurationError("Google Search API key not configured")
        if not is_configured(self.engine_id):
            raise ConfigurationError("Google Custom Search Engine ID not configured")

    def search_page(self, query: str, start_index: int = 1, page_size: int = MAX_PAGE_SIZE) -> SearchPage:
        """
        Fetch a single page of results.

        Args:
            query: Search query (operators such as filetype: and site: pass through)
            start_index: 1-based rank of the first result
            page_size: Requested number of items, clamped to the API's limit of 10

        Raises:
            ConfigurationError: credentials missing
            TransportError: network failure or non-success status
        """
        self.validate_credentials()
        if start_index < 1:
            raise ValueError(f"start_index must be >= 1, got {start_index}")

        params = {
            "key": self.api_key,
            "cx": self.engine_id,
            "q": query,
            "start": str(start_index),
            "num": str(max(1, min(page_size, MAX_PAGE_SIZE))),
        }

        logger.debug(
            "Google search page request",
            extra={"extra_fields": {"start_index": start_index, "page_size": page_size}},
        )

        try:
            response = self._http.get(GOOGLE_SEARCH_URL, params=params)
        except httpx.HTTPError as e:
            logger.error(
                "Google search request failed",
                extra={"extra_fields": {"error": str(e), "error_type": type(e).__name__}},
            )
            raise TransportError(str(e), provider=self.provider) from e

        if response.status_code >= 400:
            logger.error(
                "Google Search API returned an error status",
                extra={"extra_fields": {"status": response.status_code, "start_index": start_index}},
            )
            raise TransportError(response.text, status=response.status_code, provider=self.provider)

        try:
            data: dict[str, Any] = response.json() if response.content else {}
        except ValueError as e:
            raise TransportError("Malformed response body", status=response.status_code, provider=self.provider) from e

        items = [item for item in (data.get("items") or []) if isinstance(item, dict)]
        information = data.get("searchInformation") or {}
        try:
            estimate = int(information.get("totalResults") or 0)
        except (TypeError, ValueError):
            estimate = 0

        return SearchPage(items=items, total_results_estimate=estimate)
