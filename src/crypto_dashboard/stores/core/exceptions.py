"""Error taxonomy shared by the local store, remote client and server repositories."""


class StoreError(Exception):
    """Base class for store-level failures."""


class AlreadyExists(StoreError):
    """The record (e.g. a watchlist coin) is already present for this owner."""


class NotFound(StoreError):
    """The update/remove target does not exist for this owner."""


class Unauthorized(StoreError):
    """A remote call was made without a valid session."""


class NetworkError(StoreError):
    """A remote call failed for transport reasons (connect, timeout, reset)."""


class SerializationError(StoreError):
    """Local storage could not be read or written as JSON."""
