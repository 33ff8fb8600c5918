import json as jsonlib
from typing import Any, List, Optional

import pytest

from core.models import Quote
from services.api_client import BackendApiClient
from services.credentials import StaticCredentialProvider


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        if text is not None:
            self.text = text
        elif body is None:
            self.text = ""
        else:
            self.text = jsonlib.dumps(body)
        self.content = self.text.encode("utf-8")

    def json(self):
        return jsonlib.loads(self.text)


class FakeSession:
    """Stands in for requests.Session; replays queued responses and records calls."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: List[dict] = []

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append(
            {
                "method": method,
                "url": url,
                "params": params,
                "json": json,
                "headers": headers or {},
                "timeout": timeout,
            }
        )
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


class StubProvider:
    """Search provider returning canned results (or raising) in order."""

    def __init__(self, *results):
        self.results = list(results)
        self.requests = []
        self.on_search = None

    def search(self, request):
        self.requests.append(request)
        if self.on_search is not None:
            self.on_search()
        nxt = self.results.pop(0)
        if isinstance(nxt, BaseException):
            raise nxt
        return nxt


class StubRepository:
    def __init__(self, *results):
        self.results = list(results)
        self.requested_ids = []

    def get(self, draft_order_id):
        self.requested_ids.append(draft_order_id)
        nxt = self.results.pop(0)
        if isinstance(nxt, BaseException):
            raise nxt
        return nxt


def make_quote(name, shipping, rto, mode="Hyperlocal -P2P", **kwargs) -> Quote:
    return Quote(
        name=name,
        delivery_mode=mode,
        shipping_charges=shipping,
        rto_charges=rto,
        **kwargs,
    )


@pytest.fixture
def make_client():
    def _make(*responses, token="test-token"):
        session = FakeSession(*responses)
        client = BackendApiClient(
            "https://api.example.test/v1/",
            StaticCredentialProvider(token),
            timeout_seconds=15,
            session=session,
        )
        return client, session

    return _make


@pytest.fixture
def full_draft_payload():
    return {
        "id": "do_123",
        "draft_order": {
            "pickupAddressId": "addr_p",
            "pickupAddress": {
                "id": "addr_p",
                "name": "Warehouse",
                "building": "Prestige Tech Park",
                "locality": "Kadubeesanahalli",
                "city": "Bengaluru",
                "state": "Karnataka",
                "pincode": "560103",
                "phone": "7569316575",
                "email": "ops@example.in",
                "location": {"gps": "12.95,77.70"},
            },
            "deliveryAddress": {
                "id": "addr_d",
                "name": "Customer",
                "building": "Prestige Tech Park Road",
                "locality": "Kadubeesanahalli",
                "city": "Mysuru",
                "state": "Karnataka",
                "pincode": "570001",
                "phone": "9638527410",
                "location": {"gps": "12.30,76.64"},
            },
            "packageDetails": {
                "height": "10",
                "weight": {"value": "0.3", "type": "kilogram"},
                "breadth": "20",
                "length": "25",
                "hazardous": True,
            },
            "orderDetails": {
                "retail_order_payment_method": "POST-FULFILLMENT",
                "retail_order_id": "ORD12345",
                "retail_order_amount": "250.50",
                "retail_order_category": {"value": "Grocery", "label": "Grocery"},
                "retail_order_preparation_time": {"value": "PT30M", "label": "Within 30 minutes"},
                "retail_order_category_type": {"value": "Immediate Delivery", "label": "Immediate Delivery"},
            },
            "readytoShip": True,
            "rto": False,
        },
    }
