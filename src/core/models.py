# src/core/models.py

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, List, Dict, Any, Mapping


RETAIL_ORDER_ID_PATTERN = re.compile(r"^[A-Za-z0-9]{1,16}$")


class DeliveryModeFilter(str, Enum):
    HYPERLOCAL = "hyperlocal"
    INTERCITY = "intercity"


class PriceSort(str, Enum):
    ASC = "asc"
    DESC = "desc"


class DeliveryType(str, Enum):
    """Delivery speed chips shown above the search button."""

    NEXT_DAY = "next_day"
    STANDARD = "standard"
    EXPRESS = "express"
    IMMEDIATE = "immediate"
    SAME_DAY = "same_day"

    @property
    def label(self) -> str:
        return DELIVERY_TYPE_LABELS[self]


DELIVERY_TYPE_LABELS: Dict[DeliveryType, str] = {
    DeliveryType.NEXT_DAY: "Next Day Delivery",
    DeliveryType.STANDARD: "Standard Delivery",
    DeliveryType.EXPRESS: "Express Delivery",
    DeliveryType.IMMEDIATE: "Immediate Delivery",
    DeliveryType.SAME_DAY: "Same Day Delivery",
}


class PaymentMethod(str, Enum):
    POST_FULFILLMENT = "POST-FULFILLMENT"
    PRE_FULFILLMENT = "PRE-FULFILLMENT"
    ON_FULFILLMENT = "ON-FULFILLMENT"


# -----------------------------------------------------------------------------
# Loose-JSON helpers
# -----------------------------------------------------------------------------


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _first(d: Mapping[str, Any], *keys: str) -> Any:
    """First non-None value among `keys`."""
    for k in keys:
        v = d.get(k)
        if v is not None:
            return v
    return None


def _to_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _to_float(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_decimal(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        return Decimal(str(value).strip() or "0")
    except InvalidOperation:
        return Decimal("0")


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def is_valid_retail_order_id(value: Optional[str]) -> bool:
    return bool(value) and bool(RETAIL_ORDER_ID_PATTERN.match(str(value)))


# -----------------------------------------------------------------------------
# Draft order
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class LabeledValue:
    """Lookup-backed value/label pair (category, category type, ...)."""

    value: str = ""
    label: str = ""

    @classmethod
    def from_raw(cls, raw: Any) -> "LabeledValue":
        if isinstance(raw, Mapping):
            value = _to_str(raw.get("value"))
            return cls(value=value, label=_to_str(raw.get("label")) or value)
        # Older drafts stored a bare string
        text = _to_str(raw)
        return cls(value=text, label=text)

    def to_dict(self) -> Dict[str, str]:
        return {"value": self.value, "label": self.label}


@dataclass(frozen=True)
class Address:
    name: str = ""
    building: str = ""
    locality: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""
    phone: str = ""
    email: str = ""
    gps: str = ""  # "lat,lng"
    id: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> "Address":
        d = _as_mapping(raw)
        location = _as_mapping(d.get("location"))
        contact = _as_mapping(d.get("contact"))
        return cls(
            id=_to_str(d.get("id")),
            name=_to_str(d.get("name")),
            building=_to_str(_first(d, "building", "address")),
            locality=_to_str(_first(d, "locality", "landmark")),
            city=_to_str(d.get("city")),
            state=_to_str(d.get("state")),
            pincode=_to_str(_first(d, "pincode", "area_code")),
            phone=_to_str(d.get("phone") or contact.get("phone")),
            email=_to_str(d.get("email") or contact.get("email")),
            gps=_to_str(_first(location, "gps") or d.get("gps")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "building": self.building,
            "locality": self.locality,
            "city": self.city,
            "state": self.state,
            "pincode": self.pincode,
            "phone": self.phone,
            "email": self.email,
            "location": {"gps": self.gps},
        }

    def one_line(self) -> str:
        parts = [p for p in (self.building, self.locality) if p]
        head = ", ".join(parts)
        if self.pincode:
            return f"{head} - {self.pincode}" if head else self.pincode
        return head


@dataclass(frozen=True)
class Weight:
    value: float = 0.0
    unit: str = "kilogram"


@dataclass(frozen=True)
class PackageDetails:
    """Dimensions are centimeters."""

    length: float = 0.0
    breadth: float = 0.0
    height: float = 0.0
    weight: Weight = field(default_factory=Weight)
    hazardous: bool = False

    @classmethod
    def from_dict(cls, raw: Any) -> "PackageDetails":
        d = _as_mapping(raw)
        w = d.get("weight")
        if isinstance(w, Mapping):
            weight = Weight(
                value=_to_float(w.get("value")),
                unit=_to_str(_first(w, "unit", "type")) or "kilogram",
            )
        else:
            weight = Weight(value=_to_float(w))
        return cls(
            length=_to_float(d.get("length")),
            breadth=_to_float(_first(d, "breadth", "width")),
            height=_to_float(d.get("height")),
            weight=weight,
            hazardous=_to_bool(_first(d, "hazardous", "fragile")),
        )


@dataclass(frozen=True)
class OrderDetails:
    retail_order_id: str = ""
    amount: Decimal = Decimal("0")  # INR by convention
    category: LabeledValue = field(default_factory=LabeledValue)
    category_type: LabeledValue = field(default_factory=LabeledValue)
    payment_method: str = ""
    preparation_time: str = ""  # ISO-8601 duration, e.g. "PT30M"

    @classmethod
    def from_dict(cls, raw: Any) -> "OrderDetails":
        d = _as_mapping(raw)
        prep = _first(d, "preparationTime", "retail_order_preparation_time")
        if isinstance(prep, Mapping):
            prep = prep.get("value")
        return cls(
            retail_order_id=_to_str(_first(d, "retailOrderId", "retail_order_id")),
            amount=_to_decimal(_first(d, "amount", "retail_order_amount")),
            category=LabeledValue.from_raw(
                _first(d, "category", "retail_order_category")),
            category_type=LabeledValue.from_raw(
                _first(d, "categoryType", "retail_order_category_type")),
            payment_method=_to_str(
                _first(d, "paymentMethod", "retail_order_payment_method")),
            preparation_time=_to_str(prep),
        )


@dataclass(frozen=True)
class DraftOrder:
    """A provisional order awaiting carrier selection. Read-only for the search flow."""

    id: str = ""
    pickup_address: Optional[Address] = None
    delivery_address: Optional[Address] = None
    package_details: PackageDetails = field(default_factory=PackageDetails)
    order_details: OrderDetails = field(default_factory=OrderDetails)
    ready_to_ship: bool = False
    rto: bool = False

    @property
    def has_addresses(self) -> bool:
        return self.pickup_address is not None and self.delivery_address is not None

    @classmethod
    def from_dict(cls, raw: Any) -> "DraftOrder":
        """
        Parse a draft order as returned by the backend. Accepts:
          - the {"draft_order": {...}} envelope used on create
          - camelCase keys or the retail_order_* keys the order form writes
        Missing fields become defaults; this never raises on partial data.
        """
        outer = _as_mapping(raw)
        d = _as_mapping(outer.get("draft_order")) or outer

        pickup = _first(d, "pickupAddress", "pickup_address")
        delivery = _first(d, "deliveryAddress", "delivery_address")

        return cls(
            id=_to_str(_first(outer, "id", "_id") or _first(d, "id", "_id")),
            pickup_address=Address.from_dict(pickup) if isinstance(pickup, Mapping) else None,
            delivery_address=Address.from_dict(delivery) if isinstance(delivery, Mapping) else None,
            package_details=PackageDetails.from_dict(
                _first(d, "packageDetails", "package_details")),
            order_details=OrderDetails.from_dict(
                _first(d, "orderDetails", "order_details")),
            ready_to_ship=_to_bool(_first(d, "readytoShip", "ready_to_ship")),
            rto=_to_bool(d.get("rto")),
        )

    def to_payload(self) -> Dict[str, Any]:
        """Body for POST /draft_orders/create, in the order form's wire shape."""
        pkg = self.package_details
        od = self.order_details
        body: Dict[str, Any] = {
            "packageDetails": {
                "length": _num_str(pkg.length),
                "breadth": _num_str(pkg.breadth),
                "height": _num_str(pkg.height),
                "weight": {"value": _num_str(pkg.weight.value), "type": pkg.weight.unit},
                "hazardous": pkg.hazardous,
            },
            "orderDetails": {
                "retail_order_payment_method": od.payment_method,
                "retail_order_id": od.retail_order_id,
                "retail_order_amount": str(od.amount),
                "retail_order_category": od.category.to_dict(),
                "retail_order_preparation_time": {
                    "value": od.preparation_time,
                    "label": _prep_time_label(od.preparation_time),
                },
                "retail_order_category_type": od.category_type.to_dict(),
            },
            "readytoShip": self.ready_to_ship,
            "rto": self.rto,
        }
        if self.pickup_address is not None:
            body["pickupAddressId"] = self.pickup_address.id
            body["pickupAddress"] = self.pickup_address.to_dict()
        if self.delivery_address is not None:
            body["deliveryAddressId"] = self.delivery_address.id
            body["deliveryAddress"] = self.delivery_address.to_dict()
        return {"draft_order": body}


def _num_str(value: float) -> str:
    f = float(value)
    return str(int(f)) if f.is_integer() else str(f)


def _prep_time_label(duration: str) -> str:
    m = re.fullmatch(r"PT(\d+)M", duration or "")
    return f"Within {m.group(1)} minutes" if m else duration


# -----------------------------------------------------------------------------
# Ad-hoc search parameters (no draft order)
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class SearchOverrides:
    """Location/dimension parameters for a search started without a draft order."""

    from_city: str = "Bengaluru"
    to_city: str = "Bengaluru"
    length: float = 20.0
    breadth: float = 20.0
    height: float = 10.0
    weight: float = 0.3  # kg
    from_pincode: str = ""
    to_pincode: str = ""
    from_gps: str = ""
    to_gps: str = ""

    @classmethod
    def from_query_params(cls, params: Mapping[str, Any]) -> "SearchOverrides":
        base = cls()

        def num(key: str, default: float) -> float:
            raw = params.get(key)
            if raw in (None, ""):
                return default
            return _to_float(raw)

        return cls(
            from_city=_to_str(params.get("from")) or base.from_city,
            to_city=_to_str(params.get("to")) or base.to_city,
            length=num("length", base.length),
            breadth=num("breadth", base.breadth),
            height=num("height", base.height),
            weight=num("weight", base.weight),
            from_pincode=_to_str(params.get("from_pincode")),
            to_pincode=_to_str(params.get("to_pincode")),
            from_gps=_to_str(params.get("from_gps")),
            to_gps=_to_str(params.get("to_gps")),
        )

    def to_draft_order(self) -> DraftOrder:
        return DraftOrder(
            pickup_address=Address(
                city=self.from_city, pincode=self.from_pincode, gps=self.from_gps),
            delivery_address=Address(
                city=self.to_city, pincode=self.to_pincode, gps=self.to_gps),
            package_details=PackageDetails(
                length=self.length,
                breadth=self.breadth,
                height=self.height,
                weight=Weight(value=self.weight),
            ),
        )


# -----------------------------------------------------------------------------
# Marketplace request
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Measure:
    value: float
    unit: str

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "unit": self.unit}


@dataclass(frozen=True)
class ProviderTime:
    days: str
    holidays: tuple
    start: str
    end: str
    duration: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "days": self.days,
            "schedule": {"holidays": list(self.holidays)},
            "duration": self.duration,
            "range": {"start": self.start, "end": self.end},
        }


@dataclass(frozen=True)
class FulfillmentEndpoint:
    gps: str
    area_code: str

    def to_dict(self) -> Dict[str, str]:
        return {"gps": self.gps, "area_code": self.area_code}


@dataclass(frozen=True)
class QuoteRequest:
    """Canonical marketplace search payload. Built once, never mutated."""

    city: str
    core_version: str
    area_code: str
    category_id: str
    fulfillment_type: str
    provider_time: ProviderTime
    start: FulfillmentEndpoint
    end: FulfillmentEndpoint
    payment_type: str
    weight: Measure
    length: Measure
    breadth: Measure
    height: Measure
    product_category: str
    value: str
    currency: str
    dangerous_goods: bool

    def to_payload(self) -> Dict[str, Any]:
        return {
            "context": {
                "city": self.city,
                "core_version": self.core_version,
                "area_code": self.area_code,
            },
            "message": {
                "category_id": self.category_id,
                "fulfillment_type": self.fulfillment_type,
                "provider": {"time": self.provider_time.to_dict()},
                "fulfillment": {
                    "start": self.start.to_dict(),
                    "end": self.end.to_dict(),
                },
                "payment": {"type": self.payment_type},
                "payload_details": {
                    "weight": self.weight.to_dict(),
                    "length": self.length.to_dict(),
                    "breadth": self.breadth.to_dict(),
                    "height": self.height.to_dict(),
                },
                "product_category": self.product_category,
                "value": {"value": self.value, "currency": self.currency},
                "dangerous_goods": self.dangerous_goods,
            },
        }


# -----------------------------------------------------------------------------
# Quote
# -----------------------------------------------------------------------------


def _charge(value: Any) -> float:
    return max(0.0, _to_float(value))


@dataclass(frozen=True)
class Quote:
    """One logistics provider's offer for a search."""

    name: str
    domain: str = ""
    company: str = ""
    distance: str = ""
    delivery_type: str = ""
    expected_pickup: str = ""  # ISO-8601 duration
    estimated_delivery: str = ""  # ISO-8601 duration
    delivery_mode: str = ""  # e.g. "Hyperlocal -P2P"
    shipping_charges: float = 0.0
    rto_charges: float = 0.0
    raw: Optional[Dict[str, Any]] = field(default=None, compare=False, repr=False)

    @property
    def total_charges(self) -> float:
        return self.shipping_charges + self.rto_charges

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Quote":
        d = _as_mapping(raw)
        return cls(
            name=_to_str(d.get("name")),
            domain=_to_str(d.get("domain")),
            company=_to_str(d.get("company")),
            distance=_to_str(d.get("distance")),
            delivery_type=_to_str(_first(d, "deliveryType", "delivery_type")),
            expected_pickup=_to_str(_first(d, "expectedPickup", "expected_pickup")),
            estimated_delivery=_to_str(
                _first(d, "estimatedDelivery", "estimated_delivery")),
            delivery_mode=_to_str(_first(d, "deliveryMode", "delivery_mode")),
            shipping_charges=_charge(_first(d, "shippingCharges", "shipping_charges")),
            rto_charges=_charge(_first(d, "rtoCharges", "rto_charges")),
            raw=dict(d),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "domain": self.domain,
            "company": self.company,
            "distance": self.distance,
            "deliveryType": self.delivery_type,
            "expectedPickup": self.expected_pickup,
            "estimatedDelivery": self.estimated_delivery,
            "deliveryMode": self.delivery_mode,
            "shippingCharges": self.shipping_charges,
            "rtoCharges": self.rto_charges,
        }


@dataclass(frozen=True)
class DraftOrderPage:
    orders: List[DraftOrder] = field(default_factory=list)
    page_no: int = 1
    per_page: int = 10
    total_rows: int = 0
    total_pages: int = 0
