"""
Browse state for a single client session.
AppState is immutable; every change goes through apply(state, action).
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from homepick.schemas.listing import FilterCriteria, ListingResponse
from homepick.schemas.user import UserProfile
from homepick.services.auth import is_admin
from homepick.services.filters import compute_visible_listings

LIST = "LIST"
MAP = "MAP"


@dataclass(frozen=True)
class AppState:
    user: Optional[UserProfile] = None
    listings: Tuple[ListingResponse, ...] = ()
    criteria: FilterCriteria = field(default_factory=FilterCriteria)
    selected_id: Optional[str] = None
    view_mode: str = LIST
    notice: Optional[str] = None  # Dismissable error shown to the user
    loading: bool = True

    @property
    def is_admin(self) -> bool:
        return is_admin(self.user)

    @property
    def visible_listings(self):
        return compute_visible_listings(self.listings, self.criteria)

    @property
    def selected_listing(self) -> Optional[ListingResponse]:
        for listing in self.listings:
            if listing.id == self.selected_id:
                return listing
        return None


# --- Actions ---

@dataclass(frozen=True)
class SetUser:
    user: Optional[UserProfile]


@dataclass(frozen=True)
class ReplaceListings:
    listings: Tuple[ListingResponse, ...]


@dataclass(frozen=True)
class SetCriteria:
    criteria: FilterCriteria


@dataclass(frozen=True)
class SelectListing:
    listing_id: str
    show_on_map: bool = False  # List-row clicks jump to the map view


@dataclass(frozen=True)
class ClearSelection:
    pass


@dataclass(frozen=True)
class SetViewMode:
    view_mode: str


@dataclass(frozen=True)
class Navigate:
    """Leaving the browse page: filters and selection go back to defaults."""
    pass


@dataclass(frozen=True)
class ShowNotice:
    message: str


@dataclass(frozen=True)
class DismissNotice:
    pass


def apply(state: AppState, action) -> AppState:
    """Return the state that results from `action`. Never mutates `state`."""
    if isinstance(action, SetUser):
        return replace(state, user=action.user)
    if isinstance(action, ReplaceListings):
        return replace(state, listings=tuple(action.listings), loading=False)
    if isinstance(action, SetCriteria):
        return replace(state, criteria=action.criteria)
    if isinstance(action, SelectListing):
        if action.show_on_map:
            return replace(state, selected_id=action.listing_id, view_mode=MAP)
        return replace(state, selected_id=action.listing_id)
    if isinstance(action, ClearSelection):
        return replace(state, selected_id=None)
    if isinstance(action, SetViewMode):
        if action.view_mode not in (LIST, MAP):
            raise ValueError(f"Unknown view mode: {action.view_mode}")
        if state.view_mode == MAP and action.view_mode != MAP:
            return replace(state, view_mode=action.view_mode, selected_id=None)
        return replace(state, view_mode=action.view_mode)
    if isinstance(action, Navigate):
        return replace(state, criteria=FilterCriteria(), selected_id=None, view_mode=LIST)
    if isinstance(action, ShowNotice):
        return replace(state, notice=action.message, loading=False)
    if isinstance(action, DismissNotice):
        return replace(state, notice=None)
    raise TypeError(f"Unknown action: {action!r}")
