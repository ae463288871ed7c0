"""
Chromium renderer driven through Playwright.

One browser per renderer; each render gets its own browser context so
cookies and storage never leak from one request into the next.
"""

import asyncio
import logging
from typing import List, Optional, Tuple

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from prerender.pipeline.errors import RenderFailure, RenderTimeout
from prerender.pipeline.headers import get_header
from prerender.pipeline.models import RenderRequest, RenderResult
from prerender.renderer.base import Renderer
from prerender.vars import (
    PRERENDER_HEADLESS,
    PRERENDER_RENDER_TIMEOUT,
    PRERENDER_WAIT_UNTIL,
)

logger = logging.getLogger("uvicorn.error")

# The document is re-serialized from the DOM, so the upstream length and
# transfer encoding no longer describe the body we return.
BODY_DEPENDENT_HEADERS = {"content-length", "content-encoding"}


class PlaywrightRenderer(Renderer):
    def __init__(
        self,
        headless: bool = PRERENDER_HEADLESS,
        timeout: float = PRERENDER_RENDER_TIMEOUT,
        wait_until: str = PRERENDER_WAIT_UNTIL,
    ):
        self.headless = headless
        self.timeout = timeout
        self.wait_until = wait_until
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._start_lock = asyncio.Lock()

    async def start(self) -> None:
        if self._browser is not None:
            return
        async with self._start_lock:
            if self._browser is not None:
                return
            logger.info(f"[Playwright] Launching Chromium (headless={self.headless}).")
            self._playwright = await async_playwright().start()
            try:
                self._browser = await self._playwright.chromium.launch(
                    headless=self.headless
                )
            except PlaywrightError as e:
                await self._playwright.stop()
                self._playwright = None
                raise RenderFailure(f"Could not launch browser: {e}") from e

    async def render(self, request: RenderRequest) -> RenderResult:
        await self.start()
        user_agent = get_header(request.headers, "User-Agent")
        extra_headers = {
            name: value
            for name, value in request.headers
            if name.lower() != "user-agent"
        }

        logger.debug(f"[Playwright] Rendering {request.url}")
        try:
            self._context = await self._browser.new_context(user_agent=user_agent)
            if extra_headers:
                await self._context.set_extra_http_headers(extra_headers)
            page = await self._context.new_page()
            response = await page.goto(
                request.url,
                wait_until=self.wait_until,
                timeout=self.timeout * 1000,
            )
            if response is None:
                raise RenderFailure("Navigation produced no response", url=request.url)
            body = await page.content()
            headers = await response.headers_array()
            status = response.status
        except PlaywrightTimeoutError as e:
            raise RenderTimeout(
                f"Timed out after {self.timeout}s rendering {request.url}",
                url=request.url,
            ) from e
        except PlaywrightError as e:
            raise RenderFailure(f"Render failed: {e}", url=request.url) from e
        finally:
            await self.reset()

        return RenderResult(
            status_code=status,
            headers=self._document_headers(headers, body),
            body=body,
        )

    @staticmethod
    def _document_headers(headers_array: List[dict], body: str) -> Tuple[Tuple[str, str], ...]:
        headers = [
            (h["name"], h["value"])
            for h in headers_array
            if h["name"].lower() not in BODY_DEPENDENT_HEADERS
        ]
        headers.append(("Content-Length", str(len(body.encode("utf-8")))))
        return tuple(headers)

    async def reset(self) -> None:
        context, self._context = self._context, None
        if context is not None:
            await context.close()

    async def close(self) -> None:
        await self.reset()
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        logger.info("[Playwright] Browser closed.")
