# src/core/aggregation.py

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Union

from core.models import DeliveryModeFilter, PriceSort, Quote


ModeArg = Union[DeliveryModeFilter, str, None]
SortArg = Union[PriceSort, str, None]


def _mode_keyword(mode: ModeArg) -> Optional[str]:
    if mode is None:
        return None
    if isinstance(mode, DeliveryModeFilter):
        return mode.value
    # Free-text keywords are matched the same way as the two known modes
    return str(mode).strip().lower()


def matches_delivery_mode(quote: Quote, mode: ModeArg) -> bool:
    keyword = _mode_keyword(mode)
    if keyword is None:
        return True
    return keyword in (quote.delivery_mode or "").lower()


def apply(
    quotes: Sequence[Quote],
    delivery_mode_filter: ModeArg = None,
    price_sort: SortArg = None,
) -> List[Quote]:
    """
    Filter then sort a quote list for display.

      - filter keeps quotes whose delivery_mode contains the keyword (case-insensitive)
      - sort orders by total charges; equal totals keep their input order
      - None for either leaves that step out (server order is the default ranking)
    """
    out = [q for q in quotes if matches_delivery_mode(q, delivery_mode_filter)]

    if price_sort is None:
        return out

    direction = PriceSort(price_sort)
    # sorted() is stable, and reverse=True keeps equal keys in original order
    return sorted(
        out,
        key=lambda q: q.total_charges,
        reverse=(direction == PriceSort.DESC),
    )


def toggle(current, selected):
    """Chip semantics: selecting the active value clears it."""
    if selected is None or current == selected:
        return None
    return selected


def count_by_delivery_mode(quotes: Sequence[Quote]) -> Dict[DeliveryModeFilter, int]:
    return {
        mode: sum(1 for q in quotes if matches_delivery_mode(q, mode))
        for mode in DeliveryModeFilter
    }


def pick_cheapest(quotes: Sequence[Quote]) -> Optional[Quote]:
    if not quotes:
        return None
    return min(quotes, key=lambda q: q.total_charges)


def parse_iso8601_duration_minutes(duration: Optional[str]) -> Optional[int]:
    """
    Parse durations like 'PT45M', 'PT1H30M' or 'P1D' into total minutes.
    """
    if not duration or not isinstance(duration, str):
        return None
    if not duration.startswith("P"):
        return None

    days = hours = minutes = 0
    in_time = False
    num = ""
    for ch in duration[1:]:
        if ch.isdigit():
            num += ch
            continue
        if ch == "T":
            in_time = True
        elif ch == "D" and num:
            days = int(num)
        elif ch == "H" and num and in_time:
            hours = int(num)
        elif ch == "M" and num and in_time:
            minutes = int(num)
        num = ""

    return days * 24 * 60 + hours * 60 + minutes


def format_duration(duration: Optional[str]) -> str:
    total = parse_iso8601_duration_minutes(duration)
    if total is None:
        return duration or "N/A"
    if total and total % (24 * 60) == 0:
        n = total // (24 * 60)
        return f"{n} day" if n == 1 else f"{n} days"
    hours, minutes = divmod(total, 60)
    if hours and minutes:
        return f"{hours}h {minutes}m"
    if hours:
        return f"{hours}h"
    return f"{minutes}m"


def format_quote_label(quote: Quote) -> str:
    """Card heading: provider name, delivery mode and total in rupees."""
    name = quote.name or quote.company or "Unknown provider"
    mode = quote.delivery_mode or "N/A"
    return f"{name} · {mode} · ₹ {quote.total_charges:.2f}"
