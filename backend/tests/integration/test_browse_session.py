"""Tests for the browse session wiring: live listings, auth and map sync."""

from datetime import datetime
from unittest.mock import patch

import pytest

from homepick.errors import StoreUnavailableError
from homepick.services.auth import AuthSession, MockIdentityProvider
from homepick.services.browse import BrowseSession
from homepick.services.map_sync import MapReadyGate, MarkerLayer
from homepick.state import LIST, MAP


def _seed(store):
    store.create("properties", {
        "title": "역삼 아파트", "type": "APARTMENT", "trade_type": "SALE", "price": 900_000_000,
        "location": "서울 강남구 역삼동", "lat": 37.5, "lng": 127.03, "created_at": datetime(2024, 5, 1),
    })
    store.create("properties", {
        "title": "신촌 오피스텔", "type": "OFFICETEL", "trade_type": "MONTHLY",
        "deposit": 10_000_000, "monthly_rent": 600_000,
        "location": "서울 서대문구 창천동", "lat": 37.556, "lng": 126.937, "created_at": datetime(2024, 5, 2),
    })


@pytest.fixture
def gate():
    return MapReadyGate()


@pytest.fixture
def layer(gate):
    return MarkerLayer(gate)


@pytest.mark.integration
def test_snapshot_fills_state_newest_first(store):
    _seed(store)
    with BrowseSession(store) as session:
        assert not session.state.loading
        assert [l.title for l in session.state.listings] == ["신촌 오피스텔", "역삼 아파트"]


@pytest.mark.integration
def test_markers_wait_for_map_then_follow_state(store, gate, layer):
    _seed(store)
    with BrowseSession(store, widget=layer, gate=gate, container="map") as session:
        assert layer.markers == []

        gate.open()
        assert len(layer.markers) == 2
        assert session.map.sync_count == 1

        session.set_criteria(category="OFFICETEL")
        assert [m.label for m in layer.markers] == ["월 60만원"]

        session.set_criteria(category="ALL", price_max=500_000_000)
        # Monthly listings compare their deposit
        assert len(layer.markers) == 1


@pytest.mark.integration
def test_new_documents_appear_on_the_map(store, gate, layer):
    gate.open()
    with BrowseSession(store, widget=layer, gate=gate) as session:
        assert layer.markers == []
        _seed(store)
        assert len(layer.markers) == 2
        assert len(session.state.visible_listings) == 2


@pytest.mark.integration
def test_marker_click_selects_listing(store, gate, layer):
    _seed(store)
    gate.open()
    with BrowseSession(store, widget=layer, gate=gate) as session:
        session.set_view_mode(MAP)
        target = session.state.listings[1]
        marker = next(e.marker for e in session.map.markers if e.listing_id == target.id)

        layer.click(marker)

        assert session.state.selected_id == target.id
        assert session.state.selected_listing == target
        assert [e.listing_id for e in session.map.markers if e.selected] == [target.id]
        assert layer.center == (target.lat, target.lng)


@pytest.mark.integration
def test_leaving_map_view_clears_highlight(store, gate, layer):
    _seed(store)
    gate.open()
    with BrowseSession(store, widget=layer, gate=gate) as session:
        listing_id = session.state.listings[0].id
        session.select(listing_id, show_on_map=True)
        assert session.state.view_mode == MAP

        session.set_view_mode(LIST)
        assert session.state.selected_id is None
        assert not any(e.selected for e in session.map.markers)


@pytest.mark.integration
def test_store_failure_shows_notice_and_keeps_listings(store):
    _seed(store)
    with BrowseSession(store) as session:
        with patch.object(store, "list", side_effect=StoreUnavailableError("offline")):
            session._subscription.deliver()

        assert session.state.notice.startswith("매물 정보를 불러오지 못했습니다")
        assert len(session.state.listings) == 2

        session.dismiss_notice()
        assert session.state.notice is None


@pytest.mark.integration
def test_user_changes_reach_state(store):
    auth = AuthSession(MockIdentityProvider())
    with BrowseSession(store, auth=auth) as session:
        assert session.state.user is None

        auth.sign_in("mock:admin@homepick.kr")
        assert session.state.is_admin

        auth.sign_out()
        assert session.state.user is None


@pytest.mark.integration
def test_exit_releases_subscriptions_and_markers(store, gate, layer):
    _seed(store)
    gate.open()
    auth = AuthSession(MockIdentityProvider())
    session = BrowseSession(store, auth=auth, widget=layer, gate=gate)
    with session:
        assert len(layer.markers) == 2

    assert layer.markers == []
    assert store._subscriptions["properties"] == []
    auth.sign_in("mock:kim@example.com")
    assert session.state.user is None
    session.close()


@pytest.mark.integration
def test_widget_gate_is_used_when_none_is_passed(store):
    _seed(store)
    layer = MarkerLayer()
    with BrowseSession(store, widget=layer) as session:
        assert session.map.gate is layer.gate
        assert layer.markers == []

        layer.gate.open()
        assert len(layer.markers) == 2
