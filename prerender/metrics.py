from prometheus_client import Counter, Histogram

CACHE_LOOKUPS = Counter(
    "prerender_cache_lookups_total",
    "Cache lookups by result",
    ["result"],
)
RENDERS = Counter(
    "prerender_renders_total",
    "Render attempts by outcome",
    ["outcome"],
)
RENDER_SECONDS = Histogram(
    "prerender_render_seconds",
    "Time spent waiting for the renderer",
)
