import logging
import time

from opentelemetry import trace

from prerender.cache_store.store import CacheStoreBase
from prerender.metrics import CACHE_LOOKUPS, RENDER_SECONDS, RENDERS
from prerender.pipeline.cache_key import build_cache_key
from prerender.pipeline.config import ProxyConfig
from prerender.pipeline.errors import CacheStoreFailure, RenderFailure
from prerender.pipeline.headers import (
    filter_response_headers,
    forward_headers,
    get_header,
)
from prerender.pipeline.models import (
    CachedResponse,
    Rejected,
    RenderRequest,
    RenderResult,
    RequestContext,
    ShortCircuit,
)
from prerender.pipeline.rewrite import RewriteResolver
from prerender.pipeline.ttl import extract_ttl
from prerender.renderer.base import Renderer

logger = logging.getLogger("uvicorn.error")
tracer = trace.get_tracer(__name__)

HTTP_OK = 200
HTTP_BAD_REQUEST = 400
HTTP_METHOD_NOT_ALLOWED = 405


class ProxyOrchestrator:
    """
    Handles one request: method check, rewrite, cache lookup, render, store.

    Only GET is served. A rejected rewrite is a 400 and a short-circuit is
    returned as-is; neither touches the cache. The cache key comes from the
    inbound path+query, not the rewritten URL. Only 200 renders are stored,
    with a TTL taken from the renderer's Cache-Control header.
    """

    def __init__(self, config: ProxyConfig, cache: CacheStoreBase, renderer: Renderer):
        self.config = config
        self.cache = cache
        self.renderer = renderer
        self.resolver = RewriteResolver(config.render_target)

    async def handle(self, context: RequestContext) -> CachedResponse:
        if context.method != "GET":
            logger.debug(f"[Prerender] Method {context.method} not allowed.")
            return CachedResponse.empty(HTTP_METHOD_NOT_ALLOWED)

        with tracer.start_as_current_span("prerender_request") as span:
            span.set_attribute("prerender.path", context.path_query)

            target = await self.resolver.resolve(context.path_query, context)
            if isinstance(target, Rejected):
                logger.debug(
                    f"[Prerender] Rejected {context.path_query}: {target.reason or 'no target'}"
                )
                span.set_attribute("prerender.outcome", "rejected")
                return CachedResponse.empty(HTTP_BAD_REQUEST)
            if isinstance(target, ShortCircuit):
                span.set_attribute("prerender.outcome", "short_circuit")
                return CachedResponse.from_short_circuit(target)

            key = build_cache_key(context.path_query, self.config.cache_key_digest)
            span.set_attribute("prerender.cache_key", key)

            cached = await self._cache_get(key)
            if cached is not None:
                CACHE_LOOKUPS.labels(result="hit").inc()
                span.set_attribute("prerender.cache_hit", True)
                logger.debug(f"[Prerender] Cache hit for {context.path_query}")
                return cached
            CACHE_LOOKUPS.labels(result="miss").inc()
            span.set_attribute("prerender.cache_hit", False)

            render_request = RenderRequest(
                url=target.url,
                headers=forward_headers(context.headers, self.config.request_headers),
            )
            result = await self._render(render_request)
            span.set_attribute("prerender.render_status", result.status_code)

            response = CachedResponse(
                status_code=result.status_code,
                headers=filter_response_headers(
                    result.headers,
                    self.config.response_headers,
                    self.config.renderer_id,
                ),
                body=result.body.encode("utf-8"),
            )

            if result.status_code != HTTP_OK:
                # Error and redirect renders may be transient, never store them
                logger.info(
                    f"[Prerender] Rendered {target.url} with status {result.status_code}, not caching."
                )
                return response

            ttl = extract_ttl(
                get_header(result.headers, "Cache-Control"), self.config.default_ttl
            )
            span.set_attribute("prerender.ttl", ttl)
            await self._cache_set(key, response, ttl)
            logger.info(f"[Prerender] Rendered {target.url}, cached for {ttl}s.")
            return response

    async def _render(self, request: RenderRequest) -> RenderResult:
        started = time.monotonic()
        try:
            result = await self.renderer.render(request)
        except RenderFailure:
            RENDERS.labels(outcome="failure").inc()
            raise
        except Exception as e:
            RENDERS.labels(outcome="failure").inc()
            raise RenderFailure(
                f"Renderer raised {type(e).__name__}: {e}", url=request.url
            ) from e
        finally:
            RENDER_SECONDS.observe(time.monotonic() - started)
        RENDERS.labels(outcome=str(result.status_code)).inc()
        return result

    async def _cache_get(self, key: str):
        try:
            return await self.cache.get(key)
        except Exception as e:
            raise CacheStoreFailure(
                f"Cache get failed: {e}", key=key, operation="get"
            ) from e

    async def _cache_set(self, key: str, value: CachedResponse, ttl: int) -> None:
        try:
            await self.cache.set(key, value, ttl)
        except Exception as e:
            raise CacheStoreFailure(
                f"Cache set failed: {e}", key=key, operation="set"
            ) from e
