# src/providers/mock_provider.py

from __future__ import annotations

from typing import Any, Dict, List

from core.models import Quote, QuoteRequest
from providers.base import LogisticsSearchProvider


def generate_dummy_quotes(request: QuoteRequest) -> List[Dict[str, Any]]:
    """
    Simulate a multi-provider marketplace answer.

    Respects:
      - payload weight (heavier parcels cost more)
      - intercity vs hyperlocal (intercity carriers only when start/end area codes differ)

    Returns raw camelCase records, the same shape the marketplace sends.
    """
    weight_kg = max(0.0, float(request.weight.value or 0.0))
    weight_surcharge = round(weight_kg * 2, 2)

    quotes: List[Dict[str, Any]] = [
        {
            "name": "ONDC Test Courier Services",
            "domain": "ondc-mock-server-dev.thewitslab.com",
            "company": "ONDC Test Courier Services Inc",
            "distance": "25 kilometer",
            "deliveryType": "Same Day delivery",
            "expectedPickup": "P1D",
            "estimatedDelivery": "P1D",
            "deliveryMode": "Hyperlocal -P2P",
            "shippingCharges": 1.00,
            "rtoCharges": 1.00,
        },
        {
            "name": "Quick Dash Riders",
            "domain": "quickdash.example.in",
            "company": "Quick Dash Logistics Pvt Ltd",
            "distance": "8 kilometer",
            "deliveryType": "Immediate delivery",
            "expectedPickup": "PT15M",
            "estimatedDelivery": "PT1H",
            "deliveryMode": "Hyperlocal -P2H2P",
            "shippingCharges": 45.00 + weight_surcharge,
            "rtoCharges": 20.00,
        },
    ]

    start_code = request.start.area_code
    end_code = request.end.area_code
    if end_code and start_code != end_code:
        quotes.append(
            {
                "name": "Intercity Express Cargo",
                "domain": "iec.example.in",
                "company": "Intercity Express Cargo Ltd",
                "distance": "340 kilometer",
                "deliveryType": "Standard delivery",
                "expectedPickup": "P1D",
                "estimatedDelivery": "P3D",
                "deliveryMode": "Intercity -P2H2P",
                "shippingCharges": 120.00 + weight_surcharge * 3,
                "rtoCharges": 60.00,
            }
        )

    return quotes


class MockProvider(LogisticsSearchProvider):
    """
    Deterministic offline provider for dev/testing.
    Generates raw quote records and wraps them into Quote objects.
    """

    def search(self, request: QuoteRequest) -> List[Quote]:
        return [Quote.from_dict(d) for d in generate_dummy_quotes(request)]
