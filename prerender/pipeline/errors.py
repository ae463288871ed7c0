from typing import Optional


class PrerenderError(Exception):
    """Base class for failures raised by the prerender pipeline."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RenderFailure(PrerenderError):
    """The renderer could not produce a result for a URL."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class RenderTimeout(RenderFailure):
    """The renderer gave up waiting for the page to load."""


class CacheStoreFailure(PrerenderError):
    """A cache store get or set raised."""

    def __init__(self, message: str, key: Optional[str] = None, operation: str = ""):
        super().__init__(message)
        self.key = key
        self.operation = operation


class ResolverConfigError(PrerenderError, ValueError):
    """The configured rewrite target could not be turned into a resolver."""
