import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, List

from prerender.pipeline.errors import RenderFailure
from prerender.pipeline.models import RenderRequest, RenderResult
from prerender.renderer.base import Renderer
from prerender.utils.exception_logging import log_exception_with_details

logger = logging.getLogger("uvicorn.error")


class RendererPool(Renderer):
    """
    Hands out renderer instances one render at a time.

    With size=1 every render is serialized through a single renderer. An
    instance always goes back to the pool when the caller is done with it;
    after a failure or a cancellation it is reset first, and if the reset
    fails it is closed and replaced with a fresh one from the factory.
    """

    def __init__(self, factory: Callable[[], Renderer], size: int = 1):
        if size < 1:
            raise ValueError(f"Renderer pool size must be at least 1, got {size}")
        self._factory = factory
        self.size = size
        self._idle: asyncio.Queue = asyncio.Queue()
        self._renderers: List[Renderer] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> None:
        if self._renderers or self._closed:
            return
        logger.info(f"[RendererPool] Starting {self.size} renderer(s).")
        for _ in range(self.size):
            renderer = self._factory()
            self._renderers.append(renderer)
            self._idle.put_nowait(renderer)
        for renderer in self._renderers:
            await renderer.start()

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[Renderer]:
        if self._closed:
            raise RenderFailure("Renderer pool is shut down")
        if not self._renderers:
            await self.start()

        renderer = await self._idle.get()
        try:
            await renderer.start()
            yield renderer
        except (Exception, asyncio.CancelledError):
            renderer = await self._recover(renderer)
            raise
        finally:
            self._release(renderer)

    async def render(self, request: RenderRequest) -> RenderResult:
        async with self.acquire() as renderer:
            return await renderer.render(request)

    async def _recover(self, renderer: Renderer) -> Renderer:
        try:
            await renderer.reset()
            return renderer
        except Exception as e:
            log_exception_with_details(
                logger, "[RendererPool] Reset failed, replacing renderer.", e
            )

        await self._close_renderer(renderer)
        replacement = self._factory()
        self._renderers = [
            replacement if r is renderer else r for r in self._renderers
        ]
        return replacement

    def _release(self, renderer: Renderer) -> None:
        if self._closed:
            return
        self._idle.put_nowait(renderer)

    async def _close_renderer(self, renderer: Renderer) -> None:
        try:
            await renderer.close()
        except Exception as e:
            log_exception_with_details(logger, "[RendererPool] Close failed.", e)

    async def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        logger.info(f"[RendererPool] Shutting down {len(self._renderers)} renderer(s).")
        for renderer in self._renderers:
            await self._close_renderer(renderer)
        self._renderers = []

    async def close(self) -> None:
        await self.shutdown()
