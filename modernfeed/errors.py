"""Error taxonomy for ModernFeed."""


class ModernFeedError(Exception):
    """Base class for all ModernFeed errors."""

    pass


class InvalidSourceError(ModernFeedError):
    """Raised when a URL cannot be fetched or parsed as a feed."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason} ({url})")


class TransientFetchError(InvalidSourceError):
    """Raised on timeouts, connection errors and non-success HTTP status."""

    pass


class ConflictError(ModernFeedError):
    """Raised when adding a feed whose URL is already subscribed."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Feed already exists: {url}")


class NotFoundError(ModernFeedError):
    """Raised when an id does not match any stored record."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} '{record_id}' not found")


class PersistenceError(ModernFeedError):
    """Raised when the storage backend fails."""

    pass
