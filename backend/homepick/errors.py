"""Error types raised by HomePick services."""


class HomePickError(Exception):
    """Base exception for the HomePick backend."""
    pass


class CollaboratorUnavailableError(HomePickError):
    """An external collaborator rejected or failed a request. Transient, never fatal."""
    pass


class StoreUnavailableError(CollaboratorUnavailableError):
    """Document store read or write failed."""
    pass


class MapServiceError(CollaboratorUnavailableError):
    """Map script or Kakao Local API failed."""
    pass


class AuthError(HomePickError):
    """Identity token missing, malformed or rejected."""
    pass


class DocumentNotFoundError(HomePickError):
    """No document with the given id in the collection."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"{collection}/{doc_id} not found")
        self.collection = collection
        self.doc_id = doc_id


class MapNotReadyError(HomePickError):
    """Map widget used before its ready gate opened."""
    pass
