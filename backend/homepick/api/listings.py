import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from homepick.config import settings
from homepick.errors import DocumentNotFoundError
from homepick.schemas.listing import (
    ALL,
    FilterCriteria,
    ListingCreate,
    ListingListResponse,
    ListingResponse,
    ListingUpdate,
    MarkerListResponse,
    MarkerResponse,
)
from homepick.schemas.user import UserProfile
from homepick.services.auth import require_admin
from homepick.services.document_store import DocumentStore, get_store
from homepick.services.external.kakao_local import KakaoLocalClient, get_kakao_client
from homepick.services.filters import compute_visible_listings
from homepick.services.format import format_full_price
from homepick.services.map_sync import MapReadyGate, MarkerLayer, reconcile_markers

logger = logging.getLogger(__name__)

router = APIRouter()

COLLECTION = "properties"


def _errors(e: ValidationError):
    return [{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()]


def get_criteria(
    category: str = ALL,
    search: str = "",
    trade_type: str = ALL,
    price_min: float = Query(0, ge=0),
    price_max: float = Query(0, ge=0),
    area_min: float = Query(0, ge=0),
    area_max: float = Query(0, ge=0),
) -> FilterCriteria:
    """Build FilterCriteria from query parameters (0 = unbounded)."""
    try:
        return FilterCriteria(
            category=category,
            search=search,
            trade_type=trade_type,
            price_min=price_min,
            price_max=price_max,
            area_min=area_min,
            area_max=area_max,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=_errors(e))


def _response(doc) -> ListingResponse:
    data = ListingResponse.model_validate(doc)
    data.display_price = format_full_price(data.trade_type, data.price, data.deposit, data.monthly_rent)
    return data


def _load(store: DocumentStore):
    return [ListingResponse.model_validate(doc) for doc in store.list(COLLECTION, "-created_at")]


def _fill_coordinates(record: dict, kakao: KakaoLocalClient) -> dict:
    """Geocode the location label when the form left the coordinates empty."""
    if record.get("lat") is None or record.get("lng") is None:
        coords = kakao.geocode(record.get("location") or "")
        if coords:
            record["lat"], record["lng"] = coords
            logger.info(f"Geocoded '{record.get('location')}' to {coords}")
    return record


@router.get("", response_model=ListingListResponse)
def get_listings(
    criteria: FilterCriteria = Depends(get_criteria),
    store: DocumentStore = Depends(get_store),
):
    """Get listings matching the browse filters, newest first."""
    visible = compute_visible_listings(_load(store), criteria)
    return ListingListResponse(items=[_response(listing) for listing in visible], total=len(visible))


@router.get("/markers", response_model=MarkerListResponse)
def get_markers(
    selected_id: Optional[str] = None,
    criteria: FilterCriteria = Depends(get_criteria),
    store: DocumentStore = Depends(get_store),
):
    """Map markers for the filtered listings, one per listing, selected one highlighted."""
    visible = compute_visible_listings(_load(store), criteria)

    gate = MapReadyGate()
    gate.open()
    layer = MarkerLayer(gate)
    map_handle = layer.init(None, settings.default_center, settings.map_default_level)
    entries = reconcile_markers(layer, map_handle, [], visible, selected_id)

    markers = [
        MarkerResponse(
            listing_id=entry.listing_id,
            lat=entry.marker.coordinate[0],
            lng=entry.marker.coordinate[1],
            label=entry.marker.label,
            style=entry.marker.style.name,
            selected=entry.selected,
        )
        for entry in entries
    ]
    return MarkerListResponse(
        center=list(layer.center),
        level=layer.level,
        selected_id=selected_id,
        markers=markers,
    )


@router.get("/{listing_id}", response_model=ListingResponse)
def get_listing(listing_id: str, store: DocumentStore = Depends(get_store)):
    """Get a single listing by ID."""
    try:
        return _response(store.get(COLLECTION, listing_id))
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Listing not found")


@router.post("", response_model=ListingResponse, status_code=201)
def create_listing(
    listing: ListingCreate,
    admin: UserProfile = Depends(require_admin),
    store: DocumentStore = Depends(get_store),
    kakao: KakaoLocalClient = Depends(get_kakao_client),
):
    """Register a new listing (admin only)."""
    record = _fill_coordinates(listing.model_dump(), kakao)
    record["created_by"] = admin.uid
    record["created_at"] = datetime.now(timezone.utc)
    return _response(store.create(COLLECTION, record))


@router.put("/{listing_id}", response_model=ListingResponse)
def update_listing(
    listing_id: str,
    update: ListingUpdate,
    admin: UserProfile = Depends(require_admin),
    store: DocumentStore = Depends(get_store),
    kakao: KakaoLocalClient = Depends(get_kakao_client),
):
    """Edit a listing (admin only). The merged record must still be a valid listing."""
    try:
        current = store.get(COLLECTION, listing_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Listing not found")

    update_data = update.model_dump(exclude_unset=True)
    merged = {k: v for k, v in current.items() if k in ListingCreate.model_fields}
    merged.update(update_data)
    try:
        validated = ListingCreate.model_validate(merged)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=_errors(e))

    changes = {k: v for k, v in validated.model_dump().items() if k in update_data}
    if "location" in changes and not {"lat", "lng"} & set(update_data):
        relocated = _fill_coordinates({"location": validated.location}, kakao)
        changes.update({k: relocated[k] for k in ("lat", "lng") if k in relocated})
    if not changes:
        return _response(current)
    return _response(store.update(COLLECTION, listing_id, changes))


@router.delete("/{listing_id}")
def delete_listing(
    listing_id: str,
    admin: UserProfile = Depends(require_admin),
    store: DocumentStore = Depends(get_store),
):
    """Delete a listing (admin only)."""
    try:
        store.delete(COLLECTION, listing_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Listing not found")
    return {"detail": "Deleted", "id": listing_id}
