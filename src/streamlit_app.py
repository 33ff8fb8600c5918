import streamlit as st

from core.aggregation import format_duration, format_quote_label
from core.models import (
    DeliveryModeFilter,
    DeliveryType,
    PriceSort,
    SearchOverrides,
)
from logging_config import configure_logging
from orchestrator import SearchOrchestrator, SearchState
from providers.marketplace_provider import MarketplaceProvider
from providers.mock_provider import MockProvider
from services.api_client import BackendApiClient
from services.booking import (
    BookingInitiator,
    ConfirmationInstructions,
    DELIVERY_CONFIRMATION_TYPES,
    PICKUP_CONFIRMATION_TYPES,
)
from services.credentials import EnvCredentialProvider
from services.draft_order_repository import DraftOrderRepository
from services.errors import NetworkError
from services.quote_bridge import draft_orders_to_frame, quotes_to_frame
from settings import load_settings

st.set_page_config(
    page_title="Search Logistics",
    layout="wide",
)

settings = load_settings()
configure_logging(settings.log_level)

DELIVERY_TYPE_ICONS = {
    DeliveryType.NEXT_DAY: "📅",
    DeliveryType.STANDARD: "🚚",
    DeliveryType.EXPRESS: "⚡",
    DeliveryType.IMMEDIATE: "🏃",
    DeliveryType.SAME_DAY: "📦",
}


def _navigate(route, context):
    st.session_state["route"] = route
    st.session_state["booking"] = context


@st.cache_resource
def _api_client() -> BackendApiClient:
    return BackendApiClient(
        settings.api_base_url,
        EnvCredentialProvider(settings.api_token_var),
        timeout_seconds=settings.search_timeout_s,
    )


def _orchestrator() -> SearchOrchestrator:
    if "orchestrator" not in st.session_state:
        client = _api_client()
        if settings.use_mock_provider:
            provider = MockProvider()
        else:
            provider = MarketplaceProvider(client, settings.search_path)
        st.session_state["orchestrator"] = SearchOrchestrator(
            provider=provider,
            repository=DraftOrderRepository(client),
            booking=BookingInitiator(_navigate),
        )
    return st.session_state["orchestrator"]


orch = _orchestrator()


def _render_confirmation() -> None:
    ctx = st.session_state["booking"]
    quote = ctx.quote

    if st.button("← Back to results"):
        st.session_state["route"] = "/search-logistics"
        st.rerun()

    st.title("Confirmation instructions")
    st.caption(f"{format_quote_label(quote)} · {quote.delivery_type}")

    col_p, col_d = st.columns(2)
    with col_p:
        st.subheader("Pickup Confirmation Instructions")
        pickup_type = st.selectbox("Pickup Confirmation Type", [""] + PICKUP_CONFIRMATION_TYPES)
        draft = ConfirmationInstructions(pickup_type=pickup_type)
        pickup_code = st.text_input(draft.pickup_code_label())
        pickup_description = st.text_area("Pickup description")
    with col_d:
        st.subheader("Delivery Confirmation Instructions")
        delivery_type = st.selectbox("Delivery Confirmation Type", [""] + DELIVERY_CONFIRMATION_TYPES)
        delivery_code = st.text_input("Confirmation Code")
        delivery_description = st.text_area("Delivery description")

    instructions = ConfirmationInstructions(
        pickup_type=pickup_type,
        pickup_code=pickup_code,
        pickup_description=pickup_description,
        delivery_type=delivery_type,
        delivery_code=delivery_code,
        delivery_description=delivery_description,
    )

    if st.button("Next", type="primary"):
        missing = instructions.missing_fields()
        if missing:
            st.error(f"Please fill in: {', '.join(missing)}")
        else:
            st.session_state["confirmation"] = instructions
            st.success("Instructions saved. Continue to confirmation details.")


if st.session_state.get("route") == "/confirmation-instructions" and st.session_state.get("booking"):
    _render_confirmation()
    st.stop()


st.title("🚚 Search Logistics")

with st.sidebar:
    st.header("Shipment")

    source = st.radio("Search from", options=["Draft order", "Ad-hoc parameters"], index=0)

    if source == "Draft order":
        draft_id = st.text_input("Draft order id", st.query_params.get("draft_order_id", ""))
        if st.button("Load draft order", disabled=orch.is_busy or not draft_id):
            orch.reset()
            with st.spinner("Loading draft order..."):
                orch.load_draft_order(draft_id.strip())

        if st.checkbox("Browse saved draft orders"):
            page_no = st.number_input("Page", min_value=1, value=1, step=1)
            try:
                page = orch.repository.list(page=int(page_no), per_page=10)
            except NetworkError as e:
                st.caption(f"Could not load draft orders: {e.message}")
            else:
                st.dataframe(draft_orders_to_frame(page.orders), width="stretch")
                st.caption(f"Page {page.page_no} of {max(page.total_pages, 1)} · {page.total_rows} draft(s)")
    else:
        if orch.draft_order is not None and not orch.is_busy:
            orch.reset()
        defaults = SearchOverrides.from_query_params(st.query_params)
        from_city = st.text_input("From", defaults.from_city)
        from_pincode = st.text_input("From pincode", defaults.from_pincode)
        to_city = st.text_input("To", defaults.to_city)
        to_pincode = st.text_input("To pincode", defaults.to_pincode)
        length = st.number_input("Length (cm)", min_value=0.0, value=defaults.length)
        breadth = st.number_input("Breadth (cm)", min_value=0.0, value=defaults.breadth)
        height = st.number_input("Height (cm)", min_value=0.0, value=defaults.height)
        weight = st.number_input("Weight (kg)", min_value=0.0, value=defaults.weight)

        if not orch.is_busy:
            orch.use_overrides(
                SearchOverrides(
                    from_city=from_city,
                    to_city=to_city,
                    length=length,
                    breadth=breadth,
                    height=height,
                    weight=weight,
                    from_pincode=from_pincode,
                    to_pincode=to_pincode,
                )
            )

    if settings.use_mock_provider:
        st.caption("Mock provider enabled (USE_MOCK_PROVIDER).")

if orch.error:
    st.error(orch.error)

# Location details
draft = orch.draft_order
if draft is not None or orch.overrides is not None:
    src = draft if draft is not None else orch.overrides.to_draft_order()
    pickup = src.pickup_address
    delivery = src.delivery_address
    pkg = src.package_details

    col_from, col_to, col_pkg = st.columns(3)
    with col_from:
        st.caption("From")
        st.markdown(f"**{pickup.city if pickup else 'Unknown'}**")
        if pickup:
            st.write(pickup.one_line())
            st.caption(pickup.phone)
    with col_to:
        st.caption("To")
        st.markdown(f"**{delivery.city if delivery else 'Unknown'}**")
        if delivery:
            st.write(delivery.one_line())
            st.caption(delivery.phone)
    with col_pkg:
        st.caption("Package Dimensions")
        st.write(f"L: {pkg.length:g}cm · B: {pkg.breadth:g}cm · H: {pkg.height:g}cm")
        st.write(f"Weight: {pkg.weight.value:g} {pkg.weight.unit}")

    if draft is not None and not draft.has_addresses:
        st.warning("This draft order is missing an address; quotes will use default locations.")
else:
    st.info("Load a draft order or enter ad-hoc parameters in the sidebar to search. 🚀")

# Delivery type chips
chip_cols = st.columns(len(DeliveryType))
for col, dt in zip(chip_cols, DeliveryType):
    with col:
        active = orch.selected_delivery_type == dt
        if st.button(
            f"{DELIVERY_TYPE_ICONS[dt]} {dt.label}",
            key=f"dt-{dt.value}",
            type="primary" if active else "secondary",
        ):
            orch.set_delivery_type(dt)
            st.rerun()

can_search = orch.state in (SearchState.READY_TO_SEARCH, SearchState.RESULTS_SHOWN)
if st.button("SEARCH LOGISTICS", type="primary", disabled=orch.is_busy or not can_search):
    with st.spinner("Searching logistics providers..."):
        orch.trigger_search()
    st.rerun()

# Filter / sort chips
counts = orch.delivery_mode_counts
f1, f2, f3, f4 = st.columns(4)
with f1:
    if st.button(
        f"Hyperlocal ({counts[DeliveryModeFilter.HYPERLOCAL]})",
        type="primary" if orch.delivery_mode_filter == DeliveryModeFilter.HYPERLOCAL else "secondary",
    ):
        orch.toggle_delivery_mode_filter(DeliveryModeFilter.HYPERLOCAL)
        st.rerun()
with f2:
    if st.button(
        f"Intercity ({counts[DeliveryModeFilter.INTERCITY]})",
        type="primary" if orch.delivery_mode_filter == DeliveryModeFilter.INTERCITY else "secondary",
    ):
        orch.toggle_delivery_mode_filter(DeliveryModeFilter.INTERCITY)
        st.rerun()
with f3:
    if st.button("Low to High", type="primary" if orch.price_sort == PriceSort.ASC else "secondary"):
        orch.toggle_price_sort(PriceSort.ASC)
        st.rerun()
with f4:
    if st.button("High to Low", type="primary" if orch.price_sort == PriceSort.DESC else "secondary"):
        orch.toggle_price_sort(PriceSort.DESC)
        st.rerun()

# Results
if orch.search_triggered and orch.state == SearchState.RESULTS_SHOWN:
    visible = orch.visible_quotes

    if orch.has_no_results:
        st.warning("No logistics providers found for this shipment.")
    elif orch.has_no_matches:
        st.info("No quotes match this delivery mode filter.")

    for idx, quote in enumerate(visible):
        with st.container(border=True):
            c1, c2, c3 = st.columns(3)
            with c1:
                st.markdown(f"### {quote.name}")
                st.caption(quote.domain)
                st.write(quote.company)
                st.caption(f"Rider Distance: {quote.distance}")
            with c2:
                st.markdown(f"**{quote.delivery_type}**")
                st.caption(f"Expected Pickup - {format_duration(quote.expected_pickup)}")
                st.caption(f"Estimated Delivery - {format_duration(quote.estimated_delivery)}")
                st.markdown(f"`{quote.delivery_mode}`")
            with c3:
                st.metric(
                    label="Total Charges",
                    value=f"₹ {quote.total_charges:.2f}",
                    help=(
                        f"Shipping ₹ {quote.shipping_charges:.2f} + RTO ₹ {quote.rto_charges:.2f}"
                    ),
                )
                st.caption("Prices may change according to the package details provided")
                if st.button("Book Now", key=f"book-{idx}"):
                    orch.select_quote(quote)
                    st.rerun()

    if visible:
        with st.expander("Compare providers"):
            st.dataframe(quotes_to_frame(visible), width="stretch")
