"""
Map marker synchronization.

Keeps the markers drawn on a map widget equal to one marker per visible
listing, with the selected listing highlighted. Every sync clears the layer
and rebuilds it; listing counts stay in the tens to low hundreds.

The map script loads asynchronously, so all widget calls sit behind a
MapReadyGate. Sync requests made before the gate opens are deferred and run
once it does.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, NamedTuple, Optional, Tuple

from homepick.config import settings
from homepick.errors import MapNotReadyError
from homepick.services.format import marker_label

logger = logging.getLogger(__name__)

Coordinate = Tuple[float, float]  # (lat, lng)


@dataclass(frozen=True)
class MarkerStyle:
    name: str
    fill: str
    scale: float = 1.0
    z_index: int = 10


STYLE_BY_TRADE = {
    "SALE": MarkerStyle("sale", "#2563eb"),
    "JEONSE": MarkerStyle("jeonse", "#16a34a"),
    "MONTHLY": MarkerStyle("monthly", "#f97316"),
}
DEFAULT_STYLE = MarkerStyle("default", "#ffffff")
SELECTED_STYLE = MarkerStyle("selected", "#1d4ed8", scale=1.1, z_index=40)


class MarkerEntry(NamedTuple):
    listing_id: str
    marker: Any
    selected: bool


class MapWidget(ABC):
    """Adapter over an external map widget (Kakao Maps in the browser client)."""

    @abstractmethod
    def is_ready(self) -> bool:
        """True once the widget's script/runtime has finished loading."""

    @abstractmethod
    def init(self, container: Any, center: Coordinate, level: int) -> Any:
        """Create the map in `container` and return its handle."""

    @abstractmethod
    def create_marker(self, map_handle: Any, coordinate: Coordinate, label: str, style: MarkerStyle) -> Any:
        pass

    @abstractmethod
    def remove_marker(self, marker: Any) -> None:
        pass

    @abstractmethod
    def pan_to(self, map_handle: Any, coordinate: Coordinate) -> None:
        pass

    @abstractmethod
    def on_click(self, marker: Any, callback: Callable[[], None]) -> None:
        pass


class MapReadyGate:
    """Poll-or-callback gate that opens once the map runtime is loaded."""

    def __init__(self):
        self._lock = threading.Lock()
        self._open = False
        self._callbacks: List[Callable[[], None]] = []
        self._timer: Optional[threading.Timer] = None

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._open

    def open(self) -> None:
        """Mark the map as ready and run queued callbacks exactly once."""
        with self._lock:
            if self._open:
                return
            self._open = True
            callbacks, self._callbacks = self._callbacks, []
        logger.info(f"Map ready, running {len(callbacks)} deferred callback(s)")
        for callback in callbacks:
            callback()

    def when_ready(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if not self._open:
                self._callbacks.append(callback)
                return
        callback()

    def poll(self, probe: Callable[[], bool]) -> bool:
        """Open the gate if `probe` reports the runtime as loaded."""
        if not self.is_open and probe():
            self.open()
        return self.is_open

    def start_polling(self, probe: Callable[[], bool], interval: float = 0.1) -> Callable[[], None]:
        """Poll `probe` every `interval` seconds until it succeeds. Returns a cancel function."""
        cancelled = threading.Event()

        def _tick():
            if cancelled.is_set() or self.poll(probe):
                return
            with self._lock:
                # cancel() may have run while probing
                if cancelled.is_set():
                    return
                self._timer = threading.Timer(interval, _tick)
                self._timer.daemon = True
                self._timer.start()

        def _cancel():
            with self._lock:
                cancelled.set()
                if self._timer is not None:
                    self._timer.cancel()
                    self._timer = None

        _tick()
        return _cancel


@dataclass(eq=False)
class Marker:
    coordinate: Coordinate
    label: str
    style: MarkerStyle
    handlers: List[Callable[[], None]] = field(default_factory=list)


class MarkerLayer(MapWidget):
    """In-process map widget that records markers instead of drawing them."""

    def __init__(self, gate: Optional[MapReadyGate] = None):
        self.gate = gate or MapReadyGate()
        self.markers: List[Marker] = []
        self.container = None
        self.center: Optional[Coordinate] = None
        self.level: Optional[int] = None

    def is_ready(self) -> bool:
        return self.gate.is_open

    def init(self, container, center, level):
        if not self.is_ready():
            raise MapNotReadyError("map runtime not loaded")
        self.container = container
        self.center = center
        self.level = level
        return self

    def create_marker(self, map_handle, coordinate, label, style):
        marker = Marker(coordinate=coordinate, label=label, style=style)
        self.markers.append(marker)
        return marker

    def remove_marker(self, marker):
        if marker in self.markers:
            self.markers.remove(marker)

    def pan_to(self, map_handle, coordinate):
        self.center = coordinate

    def on_click(self, marker, callback):
        marker.handlers.append(callback)

    def click(self, marker: Marker) -> None:
        for handler in list(marker.handlers):
            handler()


def _coordinate(listing, fallback: Coordinate) -> Coordinate:
    lat, lng = getattr(listing, "lat", None), getattr(listing, "lng", None)
    if lat is None or lng is None:
        logger.warning(f"Listing {listing.id}: no coordinates, placing marker at map center {fallback}")
        return fallback
    return (float(lat), float(lng))


def _style_for(listing, selected: bool) -> MarkerStyle:
    if selected:
        return SELECTED_STYLE
    trade_type = str(getattr(listing.trade_type, "value", listing.trade_type))
    return STYLE_BY_TRADE.get(trade_type, DEFAULT_STYLE)


def reconcile_markers(
    widget: MapWidget,
    map_handle: Any,
    existing: List[MarkerEntry],
    visible: Iterable,
    selected_id: Optional[str],
    on_select: Optional[Callable[[str], None]] = None,
    fallback_center: Optional[Coordinate] = None,
) -> List[MarkerEntry]:
    """
    Rebuild the marker set for `visible`.

    Returns `existing` untouched when the map is not ready yet. Otherwise every
    existing marker is removed and one marker per visible listing is created;
    clicking a marker reports its listing id to `on_select` and pans the map
    to it.
    """
    if map_handle is None or not widget.is_ready():
        logger.debug("Map not ready, marker sync deferred")
        return existing

    for entry in existing:
        widget.remove_marker(entry.marker)

    fallback = fallback_center or settings.default_center
    entries = []
    for listing in visible:
        coordinate = _coordinate(listing, fallback)
        selected = selected_id is not None and listing.id == selected_id
        marker = widget.create_marker(map_handle, coordinate, marker_label(listing), _style_for(listing, selected))
        widget.on_click(marker, _click_handler(widget, map_handle, listing.id, coordinate, on_select))
        entries.append(MarkerEntry(listing.id, marker, selected))

    logger.debug(f"Markers rebuilt: removed {len(existing)}, created {len(entries)}")
    return entries


def _click_handler(widget, map_handle, listing_id, coordinate, on_select):
    def _handle():
        if on_select is not None:
            on_select(listing_id)
        widget.pan_to(map_handle, coordinate)
    return _handle


class MapSyncController:
    """Owns the widget's marker set and runs syncs once the map is ready."""

    def __init__(
        self,
        widget: MapWidget,
        gate: MapReadyGate,
        container: Any = None,
        center: Optional[Coordinate] = None,
        level: Optional[int] = None,
        on_select: Optional[Callable[[str], None]] = None,
    ):
        self.widget = widget
        self.gate = gate
        self.container = container
        self.center = center or settings.default_center
        self.level = level or settings.map_default_level
        self.on_select = on_select
        self.map_handle = None
        self.markers: List[MarkerEntry] = []
        self.sync_count = 0
        self._pending: Optional[Tuple[list, Optional[str]]] = None
        self._closed = False
        # The gate may open on a polling thread while callers request syncs
        self._lock = threading.RLock()
        gate.when_ready(self._on_ready)

    @property
    def ready(self) -> bool:
        return self.map_handle is not None

    def _on_ready(self) -> None:
        with self._lock:
            if self._closed:
                return
            self.map_handle = self.widget.init(self.container, self.center, self.level)
            pending, self._pending = self._pending, None
            if pending is not None:
                self._run(*pending)

    def request_sync(self, visible: Iterable, selected_id: Optional[str]) -> bool:
        """Sync now if the map is ready, else keep only the latest request for later."""
        with self._lock:
            if self._closed:
                return False
            if not self.ready:
                self._pending = (list(visible), selected_id)
                return False
            self._run(visible, selected_id)
            return True

    def pan_to(self, coordinate: Coordinate) -> bool:
        with self._lock:
            if not self.ready:
                return False
            self.widget.pan_to(self.map_handle, coordinate)
            return True

    def _run(self, visible, selected_id) -> None:
        self.markers = reconcile_markers(
            self.widget, self.map_handle, self.markers, visible, selected_id,
            on_select=self.on_select, fallback_center=self.center,
        )
        self.sync_count += 1

    def teardown(self) -> None:
        """Drop all markers and discard the map handle."""
        with self._lock:
            if self.ready:
                for entry in self.markers:
                    self.widget.remove_marker(entry.marker)
            self.markers = []
            self.map_handle = None
            self._pending = None
            self._closed = True
