# src/services/quote_bridge.py

from typing import List, Dict, Any, Sequence

import pandas as pd

from core.aggregation import format_duration
from core.models import Quote, DraftOrder

QUOTE_COLUMNS = [
    "name",
    "company",
    "delivery_type",
    "delivery_mode",
    "distance",
    "expected_pickup",
    "estimated_delivery",
    "shipping_charges",
    "rto_charges",
    "total_charges",
]


def quotes_to_rows(quotes: Sequence[Quote]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []

    for q in quotes:
        rows.append(
            {
                "name": q.name,
                "company": q.company,
                "delivery_type": q.delivery_type,
                "delivery_mode": q.delivery_mode,
                "distance": q.distance,
                "expected_pickup": format_duration(q.expected_pickup),
                "estimated_delivery": format_duration(q.estimated_delivery),
                "shipping_charges": round(q.shipping_charges, 2),
                "rto_charges": round(q.rto_charges, 2),
                "total_charges": round(q.total_charges, 2),
            }
        )

    return rows


def quotes_to_frame(quotes: Sequence[Quote]) -> pd.DataFrame:
    """Results table, in display order (no re-sorting here)."""
    return pd.DataFrame(quotes_to_rows(quotes), columns=QUOTE_COLUMNS)


def draft_orders_to_frame(orders: Sequence[DraftOrder]) -> pd.DataFrame:
    rows = []
    for o in orders:
        rows.append(
            {
                "id": o.id,
                "retail_order_id": o.order_details.retail_order_id,
                "from": o.pickup_address.city if o.pickup_address else "",
                "to": o.delivery_address.city if o.delivery_address else "",
                "amount": str(o.order_details.amount),
                "category": o.order_details.category.label,
                "ready_to_ship": o.ready_to_ship,
            }
        )
    return pd.DataFrame(
        rows,
        columns=["id", "retail_order_id", "from", "to", "amount", "category", "ready_to_ship"],
    )
