from decimal import Decimal

import pytest

from core.models import Address, DraftOrder, OrderDetails, PackageDetails, Weight
from core.request_builder import RequestDefaults, build


def _leaves(obj, path=""):
    if isinstance(obj, dict):
        for k, v in obj.items():
            yield from _leaves(v, f"{path}.{k}")
    else:
        yield path, obj


def test_full_draft_order_maps_every_field(full_draft_payload):
    request = build(DraftOrder.from_dict(full_draft_payload))
    payload = request.to_payload()

    assert payload["context"] == {
        "city": "Mysuru",
        "core_version": "1.2.0",
        "area_code": "570001",
    }

    msg = payload["message"]
    assert msg["category_id"] == "Immediate Delivery"
    assert msg["fulfillment_type"] == "Delivery"
    assert msg["provider"]["time"] == {
        "days": "1,2,3,4,5,6,7",
        "schedule": {"holidays": []},
        "duration": "PT45M",
        "range": {"start": "0000", "end": "2300"},
    }
    assert msg["fulfillment"]["start"] == {"gps": "12.95,77.70", "area_code": "560103"}
    assert msg["fulfillment"]["end"] == {"gps": "12.30,76.64", "area_code": "570001"}
    assert msg["payment"] == {"type": "POST-FULFILLMENT"}
    assert msg["payload_details"] == {
        "weight": {"value": 0.3, "unit": "kilogram"},
        "length": {"value": 25.0, "unit": "centimeter"},
        "breadth": {"value": 20.0, "unit": "centimeter"},
        "height": {"value": 10.0, "unit": "centimeter"},
    }
    assert msg["product_category"] == "Grocery"
    assert msg["value"] == {"value": "250.50", "currency": "INR"}


def test_hazardous_flag_is_not_forwarded(full_draft_payload):
    order = DraftOrder.from_dict(full_draft_payload)
    assert order.package_details.hazardous is True

    assert build(order).dangerous_goods is False


def test_missing_pickup_gps_uses_fallback_coordinate():
    order = DraftOrder(
        pickup_address=Address(city="Bengaluru"),
        delivery_address=Address(city="Bengaluru", pincode="560103"),
    )

    request = build(order)

    assert request.start.gps == "12.9423572,77.696726"
    assert request.area_code == "560103"


def test_no_draft_order_resolves_to_defaults():
    request = build(None)

    assert request.city == ""
    assert request.area_code == ""
    assert request.start.gps == "12.9423572,77.696726"
    assert request.start.area_code == "560103"
    assert request.end.gps == "12.9394125,77.68924140000001"
    assert request.end.area_code == ""
    assert request.category_id == ""
    assert request.payment_type == ""
    assert request.value == "0"
    assert request.currency == "INR"
    assert request.weight.unit == "kilogram"
    assert request.length.value == 0.0


@pytest.mark.parametrize(
    "raw",
    [
        {},
        {"draft_order": {}},
        {"draft_order": {"pickupAddress": None, "deliveryAddress": None}},
        {"draft_order": {"deliveryAddress": {"city": "Pune"}}},
        {"draft_order": {"packageDetails": {"weight": "2", "length": None}}},
        {"draft_order": {"orderDetails": {"retail_order_amount": "not-a-number"}}},
        {"draft_order": {"orderDetails": {"retail_order_category": "Food"}}},
        {"draft_order": {"packageDetails": "garbage", "orderDetails": []}},
        "not even a mapping",
        None,
    ],
)
def test_partial_draft_orders_always_produce_a_complete_request(raw):
    request = build(DraftOrder.from_dict(raw))

    for path, value in _leaves(request.to_payload()):
        assert value is not None, path


@pytest.mark.parametrize(
    "amount, expected",
    [
        (Decimal("199"), "199"),
        (Decimal("250.50"), "250.50"),
        (Decimal("0"), "0"),
    ],
)
def test_order_amount_is_sent_as_string_in_inr(amount, expected):
    order = DraftOrder(order_details=OrderDetails(amount=amount))

    request = build(order)

    assert request.value == expected
    assert request.to_payload()["message"]["value"] == {"value": expected, "currency": "INR"}


def test_dimension_unit_is_forced_regardless_of_weight_unit():
    order = DraftOrder(
        package_details=PackageDetails(
            length=1, breadth=2, height=3, weight=Weight(value=500, unit="gram")
        )
    )

    request = build(order)

    assert request.weight.unit == "gram"
    assert {request.length.unit, request.breadth.unit, request.height.unit} == {"centimeter"}


def test_request_defaults_are_configurable():
    defaults = RequestDefaults(
        core_version="1.1.0",
        start_gps="0,0",
        provider_duration="PT30M",
        dangerous_goods=True,
    )

    request = build(DraftOrder(), defaults)

    assert request.core_version == "1.1.0"
    assert request.start.gps == "0,0"
    assert request.provider_time.duration == "PT30M"
    assert request.dangerous_goods is True


def test_build_does_not_mutate_the_draft_order(full_draft_payload):
    order = DraftOrder.from_dict(full_draft_payload)
    before = repr(order)

    build(order)

    assert repr(order) == before
