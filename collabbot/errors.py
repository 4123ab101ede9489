"""Exception types raised across the bot."""


class CollabError(Exception):
    """Base class for bot errors."""


class ContextNotFoundError(CollabError, LookupError):
    """No request context is registered under the given token."""

    def __init__(self, token: str):
        super().__init__(f"No request context registered for token: {token}")
        self.token = token


class SearchProviderError(CollabError):
    """A remote search request failed."""


class CapabilityError(CollabError):
    """A capability is missing or misconfigured."""
