# src/services/booking.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from core.models import DraftOrder, Quote

logger = logging.getLogger(__name__)

CONFIRMATION_INSTRUCTIONS_ROUTE = "/confirmation-instructions"
CONFIRMATION_DETAILS_ROUTE = "/confirmation-details"

PICKUP_CONFIRMATION_TYPES = ["Merchant order no", "Order preparation time", "OTP"]
DELIVERY_CONFIRMATION_TYPES = ["Order confirmation code"]


@dataclass(frozen=True)
class BookingContext:
    """What the confirmation flow receives when a quote is booked."""

    quote: Quote
    draft_order: Optional[DraftOrder]
    route: str = CONFIRMATION_INSTRUCTIONS_ROUTE


Navigate = Callable[[str, BookingContext], None]


class BookingInitiator:
    """Hands a selected quote over to the confirmation flow."""

    def __init__(self, navigate: Navigate):
        self.navigate = navigate

    def initiate(self, quote: Optional[Quote], draft_order: Optional[DraftOrder]) -> BookingContext:
        if quote is None:
            raise ValueError("A quote must be selected before booking")

        ctx = BookingContext(quote=quote, draft_order=draft_order)
        logger.info(
            "Booking %s (%s) for draft order %s",
            quote.name,
            quote.delivery_mode,
            draft_order.id if draft_order and draft_order.id else "-",
        )
        self.navigate(ctx.route, ctx)
        return ctx


@dataclass(frozen=True)
class ConfirmationInstructions:
    """Pickup/delivery confirmation details collected after booking."""

    pickup_type: str = ""
    pickup_code: str = ""
    pickup_description: str = ""
    delivery_type: str = ""
    delivery_code: str = ""
    delivery_description: str = ""

    def pickup_code_label(self) -> str:
        return {
            "Merchant order no": "Merchant Order Number",
            "Order preparation time": "Preparation Time (minutes)",
            "OTP": "OTP Code",
        }.get(self.pickup_type, "Confirmation Code")

    def delivery_code_label(self) -> str:
        return "Confirmation Code"

    def missing_fields(self) -> list:
        missing = []
        if not self.pickup_type:
            missing.append("pickup_type")
        if not self.delivery_type:
            missing.append("delivery_type")
        return missing
