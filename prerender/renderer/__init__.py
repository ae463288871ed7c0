from .base import Renderer
from .pool import RendererPool


def build_renderer_pool(size: int = 1) -> RendererPool:
    from .playwright_renderer import PlaywrightRenderer

    return RendererPool(PlaywrightRenderer, size=size)


__all__ = [
    "Renderer",
    "RendererPool",
    "build_renderer_pool",
]
