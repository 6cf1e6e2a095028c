"""Paginated result aggregation on top of a one-page-per-call search provider."""

import math
import uuid
from typing import Any, Protocol
from urllib.parse import urlparse

from utils.logger import get_logger

from .contracts import SearchPage, SearchResultItem

logger = get_logger(__name__)

PAGE_SIZE = 10  # provider maximum per call


class SearchProvider(Protocol):
    def validate_credentials(self) -> None: ...

    def search_page(self, query: str, start_index: int = 1, page_size: int = PAGE_SIZE) -> SearchPage: ...


def _text(value: Any) -> str:
    return str(value or "").strip()


def _random_token() -> str:
    return uuid.uuid4().hex[:12]


class SearchGateway:
    """
    Aggregates up to `max_results` items across sequential page calls.

    Pages are requested one after another because a short page ends the walk:
    the provider has no more results past it. Any page failure aborts the whole
    search; there is no partial result.
    """

    def __init__(self, provider: SearchProvider, default_max_results: int = 10):
        self.provider = provider
        self.default_max_results = default_max_results

    def search(self, refined_query: str, max_results: int | None = None) -> list[SearchResultItem]:
        max_results = self.default_max_results if max_results is None else max_results
        if max_results < 1:
            raise ValueError(f"max_results must be at least 1, got {max_results}")

        # Checked up front so a missing key never turns into a half-issued search
        self.provider.validate_credentials()

        page_count = math.ceil(max_results / PAGE_SIZE)
        items: list[SearchResultItem] = []
        seen_urls: set[str] = set()
        seen_ids: set[str] = set()

        for page in range(page_count):
            start_index = page * PAGE_SIZE + 1
            page_size = min(PAGE_SIZE, max_results - page * PAGE_SIZE)

            result = self.provider.search_page(refined_query, start_index=start_index, page_size=page_size)

            # A provider may over-deliver; only the requested slice counts toward the cap
            for raw in result.items[:page_size]:
                item = self._normalize(raw, start_index, seen_ids)
                if item.url and item.url in seen_urls:
                    continue
                seen_urls.add(item.url)
                seen_ids.add(item.id)
                items.append(item)

            if len(result.items) < page_size:
                logger.info(
                    "Search results exhausted",
                    extra={"extra_fields": {"page": page + 1, "returned": len(result.items), "requested": page_size}},
                )
                break

        logger.info(
            f"Search aggregated {len(items)} items",
            extra={"extra_fields": {"max_results": max_results, "pages_planned": page_count}},
        )
        return items

    @staticmethod
    def _normalize(raw: dict[str, Any], start_index: int, seen_ids: set[str]) -> SearchResultItem:
        url = _text(raw.get("link") or raw.get("url"))
        cache_id = _text(raw.get("cacheId")) or None
        domain = _text(raw.get("displayLink") or raw.get("displayDomain")) or urlparse(url).netloc

        item_id = f"{start_index}-{cache_id or _random_token()}"
        while item_id in seen_ids:
            item_id = f"{start_index}-{_random_token()}"

        return SearchResultItem(
            id=item_id,
            title=_text(raw.get("title")),
            url=url,
            snippet=_text(raw.get("snippet")),
            source_domain=domain,
            display_url=_text(raw.get("formattedUrl")) or None,
            cache_id=cache_id,
        )
