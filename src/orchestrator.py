# src/orchestrator.py

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List, Optional, Union

from core import aggregation
from core.models import (
    DeliveryModeFilter,
    DeliveryType,
    DraftOrder,
    PriceSort,
    Quote,
    SearchOverrides,
)
from core.request_builder import DEFAULT_REQUEST_DEFAULTS, RequestDefaults, build
from providers.base import LogisticsSearchProvider
from services.booking import BookingContext, BookingInitiator
from services.draft_order_repository import DraftOrderRepository
from services.errors import NetworkError

logger = logging.getLogger(__name__)


class SearchState(str, Enum):
    IDLE = "idle"
    LOADING_DRAFT_ORDER = "loading_draft_order"
    READY_TO_SEARCH = "ready_to_search"
    SEARCHING = "searching"
    RESULTS_SHOWN = "results_shown"


class OrchestratorStateError(RuntimeError):
    """Operation not allowed in the current search state."""


def _failure_message(exc: Exception, fallback: str) -> str:
    if isinstance(exc, NetworkError):
        return exc.message
    # Anything else is a bug in a collaborator; keep the traceback in the logs
    logger.exception("Unexpected failure: %s", exc)
    return fallback


class SearchOrchestrator:
    """
    Drives one search screen: draft order -> request -> marketplace -> aggregated view.

    Network failures never escape `load_draft_order` / `trigger_search`; they land
    in `error` and the matching failure transition. Filter and sort are local and
    re-applied to whatever quote set is current.
    """

    def __init__(
        self,
        provider: LogisticsSearchProvider,
        repository: Optional[DraftOrderRepository] = None,
        booking: Optional[BookingInitiator] = None,
        request_defaults: RequestDefaults = DEFAULT_REQUEST_DEFAULTS,
    ):
        self.provider = provider
        self.repository = repository
        self.booking = booking
        self.request_defaults = request_defaults
        self._clear()
        self._generation = 0

    def _clear(self) -> None:
        self.state = SearchState.IDLE
        self.draft_order: Optional[DraftOrder] = None
        self.overrides: Optional[SearchOverrides] = None
        self.selected_delivery_type = DeliveryType.SAME_DAY
        self.delivery_mode_filter: Optional[DeliveryModeFilter] = None
        self.price_sort: Optional[PriceSort] = None
        self.search_triggered = False
        self.error: Optional[str] = None
        self.last_booking: Optional[BookingContext] = None
        self._quotes: List[Quote] = []

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------

    @property
    def quotes(self) -> List[Quote]:
        return list(self._quotes)

    @property
    def visible_quotes(self) -> List[Quote]:
        if not self.search_triggered or self.state != SearchState.RESULTS_SHOWN:
            return []
        return aggregation.apply(self._quotes, self.delivery_mode_filter, self.price_sort)

    @property
    def is_busy(self) -> bool:
        return self.state in (SearchState.LOADING_DRAFT_ORDER, SearchState.SEARCHING)

    @property
    def has_no_results(self) -> bool:
        """Successful search that returned no quotes at all (distinct from an error)."""
        return self.state == SearchState.RESULTS_SHOWN and not self._quotes

    @property
    def has_no_matches(self) -> bool:
        """Quotes arrived but the delivery mode filter hides every one of them."""
        return (
            self.state == SearchState.RESULTS_SHOWN
            and bool(self._quotes)
            and not self.visible_quotes
        )

    @property
    def delivery_mode_counts(self) -> Dict[DeliveryModeFilter, int]:
        return aggregation.count_by_delivery_mode(self._quotes)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Navigation away: back to IDLE, late results from older calls are dropped."""
        self._generation += 1
        self._clear()
        logger.debug("Search screen reset (generation %d)", self._generation)

    def load_draft_order(self, draft_order_id: str) -> bool:
        if self.is_busy:
            logger.info("Ignoring draft order load while %s", self.state.value)
            return False
        if self.repository is None:
            raise OrchestratorStateError("No draft order repository configured")

        generation = self._generation
        self.state = SearchState.LOADING_DRAFT_ORDER
        self.error = None
        # Quotes belong to the previously loaded order
        self.search_triggered = False
        self._quotes = []

        try:
            order = self.repository.get(draft_order_id)
        except Exception as e:
            if generation != self._generation:
                return False
            message = _failure_message(e, "Failed to fetch draft order")
            logger.warning("Draft order %s could not be loaded: %s", draft_order_id, message)
            self.draft_order = None
            self.state = SearchState.IDLE
            self.error = message
            return False
        except BaseException:
            if generation == self._generation:
                self.draft_order = None
                self.state = SearchState.IDLE
            raise

        if generation != self._generation:
            logger.debug("Discarding late draft order %s", draft_order_id)
            return False

        self.draft_order = order
        self.state = SearchState.READY_TO_SEARCH
        return True

    def use_overrides(self, overrides: SearchOverrides) -> None:
        """Search without a draft order, from ad-hoc location/dimension values."""
        if self.is_busy:
            raise OrchestratorStateError(f"Cannot change search parameters while {self.state.value}")
        self.overrides = overrides
        if self.state == SearchState.IDLE:
            self.state = SearchState.READY_TO_SEARCH

    def set_delivery_type(self, delivery_type: Union[DeliveryType, str]) -> None:
        self.selected_delivery_type = DeliveryType(delivery_type)

    def trigger_search(self) -> bool:
        """Run one search. Returns True when quotes (possibly none) arrived."""
        if self.is_busy:
            logger.info("Search already in flight; ignoring trigger")
            return False
        if self.state not in (SearchState.READY_TO_SEARCH, SearchState.RESULTS_SHOWN):
            raise OrchestratorStateError(f"Cannot search while {self.state.value}")

        generation = self._generation
        previous_state = self.state
        source = self.draft_order
        if source is None and self.overrides is not None:
            source = self.overrides.to_draft_order()

        request = build(source, self.request_defaults)

        self.state = SearchState.SEARCHING
        self.search_triggered = True
        self.error = None

        try:
            quotes = self.provider.search(request)
        except Exception as e:
            if generation != self._generation:
                return False
            message = _failure_message(e, "search failed")
            logger.warning("LSP search failed: %s", message)
            self.error = message
            self.search_triggered = False
            self.state = SearchState.READY_TO_SEARCH
            return False
        except BaseException:
            # Interrupted (e.g. KeyboardInterrupt); never leave the screen stuck in SEARCHING
            if generation == self._generation:
                self.search_triggered = False
                self.state = SearchState.READY_TO_SEARCH
            raise

        if generation != self._generation:
            logger.debug("Discarding late search results")
            return False

        self._quotes = list(quotes)
        self.state = SearchState.RESULTS_SHOWN
        logger.info(
            "Search finished with %d quote(s) (was %s)", len(self._quotes), previous_state.value
        )
        return True

    # ------------------------------------------------------------------
    # Local toggles (no network)
    # ------------------------------------------------------------------

    def set_delivery_mode_filter(self, mode: Union[DeliveryModeFilter, str, None]) -> None:
        self.delivery_mode_filter = DeliveryModeFilter(mode) if mode is not None else None

    def toggle_delivery_mode_filter(self, mode: Union[DeliveryModeFilter, str]) -> None:
        self.delivery_mode_filter = aggregation.toggle(
            self.delivery_mode_filter, DeliveryModeFilter(mode))

    def set_price_sort(self, direction: Union[PriceSort, str, None]) -> None:
        self.price_sort = PriceSort(direction) if direction is not None else None

    def toggle_price_sort(self, direction: Union[PriceSort, str]) -> None:
        self.price_sort = aggregation.toggle(self.price_sort, PriceSort(direction))

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    def select_quote(self, quote: Optional[Quote]) -> BookingContext:
        if self.state != SearchState.RESULTS_SHOWN:
            raise OrchestratorStateError(f"Cannot book while {self.state.value}")
        if self.booking is None:
            raise OrchestratorStateError("No booking initiator configured")
        # Booking navigates; the search screen stays in RESULTS_SHOWN
        self.last_booking = self.booking.initiate(quote, self.draft_order)
        return self.last_booking
