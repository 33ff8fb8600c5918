import pytest

from conftest import FakeResponse
from core.models import Address, DraftOrder
from core.request_builder import build
from providers.marketplace_provider import MarketplaceProvider
from providers.mock_provider import MockProvider
from services.errors import NetworkError

RECORD = {
    "name": "ONDC Test Courier Services",
    "domain": "ondc-mock-server-dev.thewitslab.com",
    "company": "ONDC Test Courier Services Inc",
    "distance": "25 kilometer",
    "deliveryType": "Same Day delivery",
    "expectedPickup": "P1D",
    "estimatedDelivery": "P1D",
    "deliveryMode": "Hyperlocal -P2P",
    "shippingCharges": 1.0,
    "rtoCharges": 1.0,
}


@pytest.fixture
def request_obj():
    return build(DraftOrder(delivery_address=Address(city="Bengaluru", pincode="560103")))


def test_search_posts_request_payload(make_client, request_obj):
    client, session = make_client(FakeResponse(200, [RECORD]))
    provider = MarketplaceProvider(client, "/lsp/search")

    quotes = provider.search(request_obj)

    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"].endswith("/lsp/search")
    assert call["json"] == request_obj.to_payload()
    assert call["headers"]["Authorization"] == "Bearer test-token"
    assert [q.name for q in quotes] == ["ONDC Test Courier Services"]
    assert quotes[0].total_charges == 2.0


@pytest.mark.parametrize(
    "body",
    [
        {"data": [RECORD]},
        {"quotes": [RECORD]},
        {"providers": [RECORD]},
        {"data": {"results": [RECORD]}},
        {"message": {"catalog": [RECORD]}},
    ],
)
def test_wrapped_quote_lists_are_unwrapped(make_client, request_obj, body):
    client, _ = make_client(FakeResponse(200, body))

    quotes = MarketplaceProvider(client).search(request_obj)

    assert len(quotes) == 1
    assert quotes[0].delivery_mode == "Hyperlocal -P2P"


@pytest.mark.parametrize("body", [[], {"data": []}, {"message": "No providers"}])
def test_empty_result_is_not_an_error(make_client, request_obj, body):
    client, _ = make_client(FakeResponse(200, body))

    assert MarketplaceProvider(client).search(request_obj) == []


def test_server_error_message_is_kept(make_client, request_obj):
    client, _ = make_client(FakeResponse(504, {"message": "provider timeout"}))

    with pytest.raises(NetworkError) as exc:
        MarketplaceProvider(client).search(request_obj)

    assert exc.value.message == "provider timeout"


def test_server_error_without_message_uses_generic_text(make_client, request_obj):
    client, _ = make_client(FakeResponse(500, text=""))

    with pytest.raises(NetworkError) as exc:
        MarketplaceProvider(client).search(request_obj)

    assert exc.value.message == "search failed"


def test_records_without_identity_are_skipped(make_client, request_obj):
    client, _ = make_client(FakeResponse(200, [RECORD, {"shippingCharges": 3}, "junk"]))

    quotes = MarketplaceProvider(client).search(request_obj)

    assert len(quotes) == 1


def test_unexpected_body_shape_is_a_search_failure(make_client, request_obj):
    client, _ = make_client(FakeResponse(200, "just a string"))

    with pytest.raises(NetworkError) as exc:
        MarketplaceProvider(client).search(request_obj)

    assert exc.value.message == "search failed"


def test_mock_provider_adds_intercity_only_across_area_codes():
    local = build(DraftOrder(
        pickup_address=Address(pincode="560103"),
        delivery_address=Address(pincode="560103"),
    ))
    remote = build(DraftOrder(
        pickup_address=Address(pincode="560103"),
        delivery_address=Address(pincode="400001"),
    ))

    local_quotes = MockProvider().search(local)
    remote_quotes = MockProvider().search(remote)

    assert all("hyperlocal" in q.delivery_mode.lower() for q in local_quotes)
    assert any("intercity" in q.delivery_mode.lower() for q in remote_quotes)
    assert local_quotes[0].name == "ONDC Test Courier Services"
