# src/services/draft_order_repository.py

from __future__ import annotations

import logging
from typing import Any, List, Sequence

from core.models import DraftOrder, DraftOrderPage, is_valid_retail_order_id
from services.api_client import BackendApiClient

logger = logging.getLogger(__name__)


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class DraftOrderRepository:
    """
    Remote store of draft orders (the backend owns persistence).

    Endpoints:
      - GET  /draft_orders/get/{id}           -> {"data": {...}}
      - GET  /draft_orders?per_page=&page_no= -> {"meta": {"pagination": ...}, "data": [...]}
      - POST /draft_orders/create             -> {"data": {...}}
      - POST /draft_orders/delete             <- {"ids": [...]}
    """

    def __init__(self, client: BackendApiClient):
        self.client = client

    def get(self, draft_order_id: str) -> DraftOrder:
        payload = self.client.get(
            f"/draft_orders/get/{draft_order_id}",
            fallback_message="Failed to fetch draft order",
        )
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            data = {}
        # Some responses omit the id inside `data`
        order = DraftOrder.from_dict({"id": draft_order_id, **data})
        logger.info("Fetched draft order %s", order.id)
        return order

    def list(self, page: int = 1, per_page: int = 10) -> DraftOrderPage:
        payload = self.client.get(
            "/draft_orders",
            params={"per_page": per_page, "page_no": page},
            fallback_message="Failed to fetch draft orders",
        )

        if isinstance(payload, list):
            # Bare array of draft orders, no pagination envelope
            rows, meta = payload, {}
        elif isinstance(payload, dict):
            rows, meta = payload.get("data"), payload.get("meta")
        else:
            rows, meta = [], {}
        if not isinstance(rows, list):
            rows = []
        pagination = meta.get("pagination") if isinstance(meta, dict) else None
        if not isinstance(pagination, dict):
            pagination = {}

        orders: List[DraftOrder] = [DraftOrder.from_dict(r) for r in rows if isinstance(r, dict)]
        return DraftOrderPage(
            orders=orders,
            page_no=_as_int(pagination.get("page_no"), page),
            per_page=_as_int(pagination.get("per_page"), per_page),
            total_rows=_as_int(pagination.get("total_rows"), len(orders)),
            total_pages=_as_int(pagination.get("total_pages"), 1 if orders else 0),
        )

    def create(self, draft_order: DraftOrder) -> DraftOrder:
        retail_id = draft_order.order_details.retail_order_id
        if retail_id and not is_valid_retail_order_id(retail_id):
            raise ValueError(
                f"Retail order id must be 1-16 alphanumeric characters, got {retail_id!r}"
            )

        payload = self.client.post(
            "/draft_orders/create",
            json=draft_order.to_payload(),
            fallback_message="Failed to create draft order",
        )
        data = payload.get("data") if isinstance(payload, dict) else None
        created = DraftOrder.from_dict(data if isinstance(data, dict) else payload)
        logger.info("Draft order saved (id=%s)", created.id or "?")
        return created

    def delete(self, draft_order_ids: Sequence[str]) -> None:
        ids = [str(i) for i in draft_order_ids if i]
        if not ids:
            return
        self.client.post(
            "/draft_orders/delete",
            json={"ids": ids},
            fallback_message="Failed to delete draft orders",
        )
        logger.info("Deleted %d draft order(s)", len(ids))
