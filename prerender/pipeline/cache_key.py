import hashlib
from typing import Optional


def build_cache_key(path_query: str, digest: Optional[str] = None) -> str:
    """
    Derive the cache key for a request.

    Without a digest the key is the raw path+query, which keeps keys readable.
    With a digest (e.g. "sha1") the key is its hex output, which has a fixed
    width and does not expose the path.
    """
    if not digest:
        return path_query
    return hashlib.new(digest, path_query.encode("utf-8")).hexdigest()
