import os

SERVICE_NAME = os.getenv("SERVICE_NAME", "prerender-proxy")

# Either a URL prefix ("https://www.example.com") or "package.module:callable"
PRERENDER_REWRITE = os.environ.get("PRERENDER_REWRITE", "")
PRERENDER_RENDERER_ID = os.environ.get("PRERENDER_RENDERER_ID", "prerender")
PRERENDER_DEFAULT_TTL = int(os.getenv("PRERENDER_DEFAULT_TTL", "3600"))

DEFAULT_REQUEST_HEADERS = (
    "User-Agent",
    "X-Forwarded-For",
    "X-Forwarded-Host",
    "X-Forwarded-Port",
    "X-Forwarded-Proto",
)
DEFAULT_RESPONSE_HEADERS = (
    "Content-Encoding",
    "Content-Length",
    "Content-Type",
    "Expires",
    "Last-Modified",
)

PRERENDER_REQUEST_HEADERS = [
    h.strip()
    for h in os.getenv(
        "PRERENDER_REQUEST_HEADERS", ",".join(DEFAULT_REQUEST_HEADERS)
    ).split(",")
    if h.strip()
]
PRERENDER_RESPONSE_HEADERS = [
    h.strip()
    for h in os.getenv(
        "PRERENDER_RESPONSE_HEADERS", ",".join(DEFAULT_RESPONSE_HEADERS)
    ).split(",")
    if h.strip()
]
PRERENDER_CACHE_KEY_DIGEST = os.getenv("PRERENDER_CACHE_KEY_DIGEST", "").strip().lower()

PRERENDER_CACHE_STORE = os.getenv("PRERENDER_CACHE_STORE", "InMemoryCacheStore")
PRERENDER_CACHE_MAX_ENTRIES = int(os.getenv("PRERENDER_CACHE_MAX_ENTRIES", "10000"))
PRERENDER_CACHE_NAMESPACE = os.getenv("PRERENDER_CACHE_NAMESPACE", "prerender")
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
# Upper bound for a Redis expiry, in seconds
PRERENDER_CACHE_MAX_TTL = int(os.getenv("PRERENDER_CACHE_MAX_TTL", "31536000"))

PRERENDER_POOL_SIZE = int(os.getenv("PRERENDER_POOL_SIZE", "1"))
PRERENDER_RENDER_TIMEOUT = float(os.getenv("PRERENDER_RENDER_TIMEOUT", "30"))
PRERENDER_WAIT_UNTIL = os.getenv("PRERENDER_WAIT_UNTIL", "networkidle")
PRERENDER_HEADLESS = os.getenv("PRERENDER_HEADLESS", "true").lower() == "true"

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")
