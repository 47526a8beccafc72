"""Tests for the listings API."""

from unittest.mock import Mock

import pytest
from freezegun import freeze_time

from homepick.errors import StoreUnavailableError
from homepick.main import app
from homepick.services.document_store import get_store
from homepick.services.external.kakao_local import get_kakao_client


def _create(client, headers, payload, **overrides):
    resp = client.post("/api/listings", json={**payload, **overrides}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def monthly_payload(listing_payload):
    return {
        **listing_payload,
        "title": "신촌역 원룸",
        "type": "ONEROOM",
        "trade_type": "MONTHLY",
        "price": None,
        "deposit": 10_000_000,
        "monthly_rent": 550_000,
        "area": 7,
        "location": "서울 서대문구 창천동",
        "features": ["풀옵션"],
    }


@pytest.mark.integration
def test_empty_listing_collection(client):
    resp = client.get("/api/listings")
    assert resp.status_code == 200
    assert resp.json() == {"items": [], "total": 0}


@pytest.mark.integration
def test_admin_creates_listing(client, admin_headers, listing_payload):
    with freeze_time("2024-05-01 09:00:00"):
        created = _create(client, admin_headers, listing_payload)

    assert created["created_by"] == "mock-admin@homepick.kr"
    assert created["created_at"].startswith("2024-05-01T09:00:00")
    assert created["display_price"] == "12억 5,000만원"

    fetched = client.get(f"/api/listings/{created['id']}").json()
    assert fetched["title"] == listing_payload["title"]
    assert fetched["features"] == ["남향", "역세권"]


@pytest.mark.integration
def test_create_requires_admin(client, user_headers, listing_payload):
    assert client.post("/api/listings", json=listing_payload).status_code == 401
    assert client.post("/api/listings", json=listing_payload, headers=user_headers).status_code == 403
    assert client.get("/api/listings").json()["total"] == 0


@pytest.mark.integration
def test_create_rejects_invalid_forms(client, admin_headers, listing_payload, monthly_payload):
    assert client.post("/api/listings", json={**listing_payload, "title": "   "},
                       headers=admin_headers).status_code == 422
    assert client.post("/api/listings", json={**listing_payload, "price": None},
                       headers=admin_headers).status_code == 422
    assert client.post("/api/listings", json={**monthly_payload, "monthly_rent": None},
                       headers=admin_headers).status_code == 422
    assert client.post("/api/listings", json={**listing_payload, "type": "CASTLE"},
                       headers=admin_headers).status_code == 422


@pytest.mark.integration
def test_list_is_newest_first_and_filtered(client, admin_headers, listing_payload, monthly_payload):
    with freeze_time("2024-05-01"):
        sale = _create(client, admin_headers, listing_payload)
    with freeze_time("2024-05-02"):
        monthly = _create(client, admin_headers, monthly_payload)

    everything = client.get("/api/listings").json()
    assert [item["id"] for item in everything["items"]] == [monthly["id"], sale["id"]]
    assert everything["items"][0]["display_price"] == "보증금 1,000만원 / 월 55만원"

    def ids(**params):
        return [item["id"] for item in client.get("/api/listings", params=params).json()["items"]]

    assert ids(category="ONEROOM") == [monthly["id"]]
    assert ids(trade_type="sale") == [sale["id"]]
    assert ids(search="역세권") == [sale["id"]]
    assert ids(search="신촌") == [monthly["id"]]
    # Monthly listings are priced by their deposit
    assert ids(price_max=20_000_000) == [monthly["id"]]
    assert ids(price_min=20_000_000) == [sale["id"]]
    assert ids(area_min=7, area_max=7) == [monthly["id"]]
    assert ids(price_min=0, price_max=0) == [monthly["id"], sale["id"]]


@pytest.mark.integration
def test_invalid_filters_are_rejected(client):
    assert client.get("/api/listings", params={"category": "CASTLE"}).status_code == 422
    assert client.get("/api/listings", params={"trade_type": "LEASE"}).status_code == 422
    assert client.get("/api/listings", params={"price_min": -1}).status_code == 422


@pytest.mark.integration
def test_markers_follow_filters_and_selection(client, admin_headers, listing_payload, monthly_payload):
    sale = _create(client, admin_headers, listing_payload)
    monthly = _create(client, admin_headers, {**monthly_payload, "lat": None, "lng": None})

    body = client.get("/api/listings/markers", params={"selected_id": sale["id"]}).json()
    assert body["level"] == 7
    assert body["selected_id"] == sale["id"]
    by_id = {m["listing_id"]: m for m in body["markers"]}
    assert set(by_id) == {sale["id"], monthly["id"]}
    assert by_id[sale["id"]]["selected"] is True
    assert by_id[sale["id"]]["style"] == "selected"
    assert by_id[monthly["id"]]["style"] == "monthly"
    assert by_id[monthly["id"]]["label"] == "월 55만원"
    # No coordinates and no geocoder: the marker sits at the default center
    assert (by_id[monthly["id"]]["lat"], by_id[monthly["id"]]["lng"]) == (37.5665, 126.9780)

    filtered = client.get("/api/listings/markers", params={"trade_type": "SALE"}).json()
    assert [m["listing_id"] for m in filtered["markers"]] == [sale["id"]]
    assert not filtered["markers"][0]["selected"]


@pytest.mark.integration
def test_missing_coordinates_are_geocoded(client, admin_headers, listing_payload):
    kakao = Mock()
    kakao.geocode.return_value = (37.4979, 127.0276)
    app.dependency_overrides[get_kakao_client] = lambda: kakao

    created = _create(client, admin_headers, listing_payload, lat=None, lng=None)

    kakao.geocode.assert_called_once_with("서울 강남구 역삼동")
    assert (created["lat"], created["lng"]) == (37.4979, 127.0276)


@pytest.mark.integration
def test_update_listing(client, admin_headers, listing_payload):
    created = _create(client, admin_headers, listing_payload)

    resp = client.put(f"/api/listings/{created['id']}", json={"price": 1_100_000_000, "floor": 3},
                      headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["price"] == 1_100_000_000
    assert body["floor"] == 3
    assert body["title"] == listing_payload["title"]
    assert body["display_price"] == "11억"


@pytest.mark.integration
def test_update_revalidates_merged_listing(client, admin_headers, listing_payload):
    created = _create(client, admin_headers, listing_payload)
    url = f"/api/listings/{created['id']}"

    assert client.put(url, json={"trade_type": "MONTHLY"}, headers=admin_headers).status_code == 422
    assert client.put(url, json={"title": ""}, headers=admin_headers).status_code == 422

    switched = client.put(url, json={"trade_type": "MONTHLY", "deposit": 50_000_000, "monthly_rent": 1_200_000},
                          headers=admin_headers)
    assert switched.status_code == 200
    assert switched.json()["display_price"] == "보증금 5,000만원 / 월 120만원"


@pytest.mark.integration
def test_update_location_regeocodes(client, admin_headers, listing_payload):
    created = _create(client, admin_headers, listing_payload)
    kakao = Mock()
    kakao.geocode.return_value = (35.1796, 129.0756)
    app.dependency_overrides[get_kakao_client] = lambda: kakao

    body = client.put(f"/api/listings/{created['id']}", json={"location": "부산 해운대구"},
                      headers=admin_headers).json()

    assert body["location"] == "부산 해운대구"
    assert (body["lat"], body["lng"]) == (35.1796, 129.0756)


@pytest.mark.integration
def test_update_and_delete_permissions_and_404(client, admin_headers, user_headers, listing_payload):
    created = _create(client, admin_headers, listing_payload)
    url = f"/api/listings/{created['id']}"

    assert client.put(url, json={"floor": 2}, headers=user_headers).status_code == 403
    assert client.delete(url).status_code == 401
    assert client.put("/api/listings/missing", json={"floor": 2}, headers=admin_headers).status_code == 404
    assert client.delete("/api/listings/missing", headers=admin_headers).status_code == 404

    resp = client.delete(url, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json() == {"detail": "Deleted", "id": created["id"]}
    assert client.get(url).status_code == 404


@pytest.mark.integration
def test_store_outage_returns_dismissable_503(client):
    broken = Mock()
    broken.list.side_effect = StoreUnavailableError("Could not read properties")
    app.dependency_overrides[get_store] = lambda: broken

    resp = client.get("/api/listings")

    assert resp.status_code == 503
    assert resp.json() == {"detail": "Could not read properties", "dismissable": True}
