from abc import ABC, abstractmethod

from prerender.pipeline.models import RenderRequest, RenderResult


class Renderer(ABC):
    """Executes a page and returns its rendered document."""

    async def start(self) -> None:
        return None

    @abstractmethod
    async def render(self, request: RenderRequest) -> RenderResult:
        """Render request.url, raising RenderFailure when no result can be produced."""

    async def reset(self) -> None:
        """Drop any state left over from an abandoned render."""
        return None

    async def close(self) -> None:
        return None
