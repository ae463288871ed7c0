import asyncio
from typing import List, Optional, Tuple

from prerender.cache_store.store import CacheStoreBase
from prerender.pipeline.models import CachedResponse, RenderRequest, RenderResult
from prerender.renderer.base import Renderer


class FakeRenderer(Renderer):
    """Renderer double that records requests and returns a canned result."""

    def __init__(
        self,
        result: Optional[RenderResult] = None,
        error: Optional[BaseException] = None,
        delay: float = 0.0,
    ):
        self.result = result or RenderResult(
            status_code=200,
            headers=(("Content-Type", "text/html"),),
            body="<html><body>rendered</body></html>",
        )
        self.error = error
        self.delay = delay
        self.requests: List[RenderRequest] = []
        self.started = 0
        self.resets = 0
        self.closed = False
        self.reset_error: Optional[Exception] = None
        self.active = 0
        self.max_active = 0

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def start(self) -> None:
        self.started += 1

    async def render(self, request: RenderRequest) -> RenderResult:
        self.requests.append(request)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            return self.result
        finally:
            self.active -= 1

    async def reset(self) -> None:
        self.resets += 1
        if self.reset_error is not None:
            raise self.reset_error

    async def close(self) -> None:
        self.closed = True


class RecordingCacheStore(CacheStoreBase):
    """Dict-backed store that records every get and set."""

    def __init__(self, get_error: Optional[Exception] = None, set_error: Optional[Exception] = None):
        self.entries: dict = {}
        self.gets: List[str] = []
        self.sets: List[Tuple[str, CachedResponse, int]] = []
        self.get_error = get_error
        self.set_error = set_error
        self.closed = False

    async def get(self, key: str) -> Optional[CachedResponse]:
        self.gets.append(key)
        if self.get_error is not None:
            raise self.get_error
        return self.entries.get(key)

    async def set(self, key: str, value: CachedResponse, ttl: int) -> None:
        self.sets.append((key, value, ttl))
        if self.set_error is not None:
            raise self.set_error
        self.entries[key] = value

    async def close(self) -> None:
        self.closed = True
