# src/providers/marketplace_provider.py

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from providers.base import LogisticsSearchProvider
from core.models import QuoteRequest, Quote
from services.api_client import BackendApiClient
from services.errors import NetworkError

logger = logging.getLogger(__name__)

SEARCH_FAILED = "search failed"

# Keys a wrapping object may carry the quote list under
_LIST_KEYS = ("data", "quotes", "providers", "results", "catalog")


def _unwrap_quote_list(payload: Any) -> List[Dict[str, Any]]:
    """
    Accept either a bare JSON array or an object wrapping one.
    Also looks one level down into `message`, which protocol-style responses use.
    """
    if payload is None:
        return []
    if isinstance(payload, list):
        return [r for r in payload if isinstance(r, dict)]
    if not isinstance(payload, dict):
        raise NetworkError(SEARCH_FAILED)

    for key in _LIST_KEYS:
        value = payload.get(key)
        if isinstance(value, list):
            return [r for r in value if isinstance(r, dict)]
        if isinstance(value, dict):
            nested = _find_list(value)
            if nested is not None:
                return nested

    message = payload.get("message")
    if isinstance(message, dict):
        nested = _find_list(message)
        if nested is not None:
            return nested

    return []


def _find_list(d: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
    for key in _LIST_KEYS:
        value = d.get(key)
        if isinstance(value, list):
            return [r for r in value if isinstance(r, dict)]
    return None


def _parse_quote(record: Dict[str, Any]) -> Optional[Quote]:
    quote = Quote.from_dict(record)
    if not quote.name and not quote.company:
        return None
    return quote


class MarketplaceProvider(LogisticsSearchProvider):
    """
    Live provider: POSTs the request to the logistics marketplace search endpoint.
    """

    def __init__(self, client: BackendApiClient, search_path: str = "/lsp/search"):
        self.client = client
        self.search_path = search_path

    def search(self, request: QuoteRequest) -> List[Quote]:
        payload = self.client.post(
            self.search_path,
            json=request.to_payload(),
            fallback_message=SEARCH_FAILED,
        )

        records = _unwrap_quote_list(payload)

        quotes: List[Quote] = []
        for r in records:
            q = _parse_quote(r)
            if q is None:
                logger.warning("Skipping quote record without provider identity: %s", r)
                continue
            quotes.append(q)

        logger.info(
            "Marketplace returned %d quote(s) for %s (%s)",
            len(quotes),
            request.city or "-",
            request.area_code or "-",
        )
        return quotes
