from .errors import (
    CacheStoreFailure,
    PrerenderError,
    RenderFailure,
    RenderTimeout,
    ResolverConfigError,
)
from .models import (
    CachedResponse,
    Rejected,
    RenderRequest,
    RenderResult,
    RenderURL,
    RequestContext,
    ShortCircuit,
)

__all__ = [
    "CacheStoreFailure",
    "CachedResponse",
    "PrerenderError",
    "Rejected",
    "RenderFailure",
    "RenderRequest",
    "RenderResult",
    "RenderTimeout",
    "RenderURL",
    "RequestContext",
    "ResolverConfigError",
    "ShortCircuit",
]
