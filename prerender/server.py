import logging
from contextlib import asynccontextmanager
from typing import Sequence

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SpanExporter,
    SpanExportResult,
)
from prometheus_client import Info
from prometheus_fastapi_instrumentator import Instrumentator

from prerender.cache_store import cache_store
from prerender.pipeline.config import load_proxy_config
from prerender.pipeline.orchestrator import ProxyOrchestrator
from prerender.renderer import build_renderer_pool
from prerender.routes import router
from prerender.vars import (
    OTLP_ENDPOINT,
    OTLP_HEADERS,
    PRERENDER_CACHE_STORE,
    PRERENDER_POOL_SIZE,
    SERVICE_NAME,
)

logger = logging.getLogger("uvicorn.error")


class FilteringSpanExporter(SpanExporter):
    """
    Wrapper exporter that drops the per-chunk ASGI body spans, which would
    otherwise outnumber the spans of the render itself.
    """

    def __init__(self, exporter: SpanExporter):
        self.exporter = exporter

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        filtered_spans = [
            span
            for span in spans
            if not (
                span.attributes
                and span.attributes.get("asgi.event.type") == "http.response.body"
            )
        ]
        if filtered_spans:
            return self.exporter.export(filtered_spans)
        return SpanExportResult.SUCCESS

    def shutdown(self):
        return self.exporter.shutdown()

    def force_flush(self, timeout_millis: int = 30000):
        return self.exporter.force_flush(timeout_millis)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the pipeline on startup; close the browser and cache on shutdown."""
    config = load_proxy_config()
    cache = cache_store(PRERENDER_CACHE_STORE)
    renderer_pool = build_renderer_pool(PRERENDER_POOL_SIZE)
    app.state.orchestrator = ProxyOrchestrator(config, cache, renderer_pool)
    logger.info(
        f"[Prerender] Starting with {PRERENDER_CACHE_STORE}, "
        f"{PRERENDER_POOL_SIZE} renderer(s), default TTL {config.default_ttl}s."
    )
    try:
        await renderer_pool.start()
        yield
    finally:
        logger.info("[Prerender] Shutting down.")
        await renderer_pool.shutdown()
        await cache.close()


app = FastAPI(lifespan=lifespan)
instrumentator = Instrumentator()

instrumentator.instrument(app).expose(app)

trace.set_tracer_provider(
    TracerProvider(resource=Resource.create({"service.name": SERVICE_NAME}))
)
tracer_provider = trace.get_tracer_provider()
if OTLP_ENDPOINT:
    otlp_exporter = OTLPSpanExporter(
        endpoint=OTLP_ENDPOINT,
        headers=(
            dict(h.split("=", 1) for h in OTLP_HEADERS.split(",") if "=" in h)
            if OTLP_HEADERS
            else None
        ),
    )
    tracer_provider.add_span_processor(
        BatchSpanProcessor(FilteringSpanExporter(otlp_exporter))
    )

FastAPIInstrumentor.instrument_app(app, excluded_urls="/healthz,/metrics")

app_info = Info("fastapi_app_info", "Application Info")
app_info.info({"app_name": SERVICE_NAME})

app.include_router(router)
