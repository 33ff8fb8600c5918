# src/core/request_builder.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.models import (
    Address,
    DraftOrder,
    FulfillmentEndpoint,
    Measure,
    ProviderTime,
    QuoteRequest,
)


@dataclass(frozen=True)
class RequestDefaults:
    """
    Values the marketplace request needs but the draft order does not carry.

    These reproduce the console's long-standing behaviour and are sent to a
    third-party marketplace, so changing any of them changes request semantics:
      - provider operating window is a fixed 7-day, 00:00-23:00 schedule
      - start/end GPS fall back to fixed Bengaluru coordinates
      - every dimension is labelled `dimension_unit` whatever unit was stored
      - the package hazard flag is not forwarded; `dangerous_goods` is sent
    """

    core_version: str = "1.2.0"
    fulfillment_type: str = "Delivery"
    currency: str = "INR"

    provider_days: str = "1,2,3,4,5,6,7"
    provider_holidays: tuple = ()
    provider_time_start: str = "0000"
    provider_time_end: str = "2300"
    provider_duration: str = "PT45M"

    start_gps: str = "12.9423572,77.696726"
    start_area_code: str = "560103"
    end_gps: str = "12.9394125,77.68924140000001"
    end_area_code: str = ""

    dimension_unit: str = "centimeter"
    default_weight_unit: str = "kilogram"
    dangerous_goods: bool = False


DEFAULT_REQUEST_DEFAULTS = RequestDefaults()


def build(
    draft_order: Optional[DraftOrder],
    defaults: RequestDefaults = DEFAULT_REQUEST_DEFAULTS,
) -> QuoteRequest:
    """
    Normalize a (possibly partial) draft order into a marketplace QuoteRequest.

    Never raises on missing data: absent addresses, dimensions or order details
    resolve to defaults so a speculative search can still get indicative quotes.
    """
    order = draft_order or DraftOrder()
    pickup = order.pickup_address or Address()
    delivery = order.delivery_address or Address()
    pkg = order.package_details
    details = order.order_details

    return QuoteRequest(
        city=delivery.city,
        core_version=defaults.core_version,
        area_code=delivery.pincode,
        category_id=details.category_type.value,
        fulfillment_type=defaults.fulfillment_type,
        provider_time=ProviderTime(
            days=defaults.provider_days,
            holidays=tuple(defaults.provider_holidays),
            start=defaults.provider_time_start,
            end=defaults.provider_time_end,
            duration=defaults.provider_duration,
        ),
        start=FulfillmentEndpoint(
            gps=pickup.gps or defaults.start_gps,
            area_code=pickup.pincode or defaults.start_area_code,
        ),
        end=FulfillmentEndpoint(
            gps=delivery.gps or defaults.end_gps,
            area_code=delivery.pincode or defaults.end_area_code,
        ),
        payment_type=details.payment_method,
        weight=Measure(
            value=pkg.weight.value,
            unit=pkg.weight.unit or defaults.default_weight_unit,
        ),
        length=Measure(pkg.length, defaults.dimension_unit),
        breadth=Measure(pkg.breadth, defaults.dimension_unit),
        height=Measure(pkg.height, defaults.dimension_unit),
        product_category=details.category.value,
        value=str(details.amount),
        currency=defaults.currency,
        dangerous_goods=defaults.dangerous_goods,
    )
