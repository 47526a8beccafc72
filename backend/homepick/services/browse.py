"""
Browse session: wires the live listing subscription, the signed-in user and
the map marker sync around one AppState.

    with BrowseSession(store, auth_session, widget=layer, gate=gate) as session:
        session.set_criteria(category="APARTMENT")
        session.select(listing_id)
"""

import logging
from typing import Optional

from pydantic import ValidationError

from homepick.errors import StoreUnavailableError
from homepick.schemas.listing import FilterCriteria, ListingResponse
from homepick.services.auth import AuthSession
from homepick.services.document_store import DocumentStore
from homepick.services.map_sync import MapReadyGate, MapSyncController, MapWidget
from homepick.state import (
    AppState,
    ClearSelection,
    DismissNotice,
    Navigate,
    ReplaceListings,
    SelectListing,
    SetCriteria,
    SetUser,
    SetViewMode,
    ShowNotice,
    apply,
)

logger = logging.getLogger(__name__)

LISTINGS_COLLECTION = "properties"


class BrowseSession:
    def __init__(
        self,
        store: DocumentStore,
        auth: Optional[AuthSession] = None,
        widget: Optional[MapWidget] = None,
        gate: Optional[MapReadyGate] = None,
        container=None,
    ):
        self.store = store
        self.auth = auth
        self.state = AppState()
        self.map: Optional[MapSyncController] = None
        if widget is not None:
            self.map = MapSyncController(
                widget, gate or getattr(widget, "gate", None) or MapReadyGate(),
                container=container, on_select=self.select,
            )
        self._subscription = None
        self._unwatch_user = None

    # --- Scoped acquisition ---

    def __enter__(self):
        self._subscription = self.store.subscribe(
            LISTINGS_COLLECTION, self._on_snapshot, order_by="-created_at", on_error=self._on_store_error,
        )
        if self.auth is not None:
            self._unwatch_user = self.auth.on_user_changed(lambda user: self.dispatch(SetUser(user)))
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        if self._unwatch_user is not None:
            self._unwatch_user()
            self._unwatch_user = None
        if self.map is not None:
            self.map.teardown()

    # --- State updates ---

    def dispatch(self, action) -> AppState:
        previous = self.state
        self.state = apply(previous, action)
        if (
            previous.listings is not self.state.listings
            or previous.criteria != self.state.criteria
            or previous.selected_id != self.state.selected_id
        ):
            self._sync_map()
        return self.state

    def _sync_map(self) -> None:
        if self.map is not None:
            self.map.request_sync(self.state.visible_listings, self.state.selected_id)

    def _on_snapshot(self, documents) -> None:
        listings = []
        for doc in documents:
            try:
                listings.append(ListingResponse.model_validate(doc))
            except ValidationError as e:
                logger.warning(f"Skipping malformed listing {doc.get('id')}: {e.error_count()} error(s)")
        self.dispatch(ReplaceListings(tuple(listings)))

    def _on_store_error(self, error: StoreUnavailableError) -> None:
        logger.warning(f"Listing snapshot failed, keeping {len(self.state.listings)} cached: {error}")
        self.dispatch(ShowNotice(f"매물 정보를 불러오지 못했습니다: {error}"))

    # --- Convenience ---

    def set_criteria(self, **changes) -> AppState:
        criteria = FilterCriteria(**{**self.state.criteria.model_dump(), **changes})
        return self.dispatch(SetCriteria(criteria))

    def select(self, listing_id: str, show_on_map: bool = False) -> AppState:
        return self.dispatch(SelectListing(listing_id, show_on_map=show_on_map))

    def clear_selection(self) -> AppState:
        return self.dispatch(ClearSelection())

    def set_view_mode(self, view_mode: str) -> AppState:
        return self.dispatch(SetViewMode(view_mode))

    def navigate_away(self) -> AppState:
        return self.dispatch(Navigate())

    def dismiss_notice(self) -> AppState:
        return self.dispatch(DismissNotice())
